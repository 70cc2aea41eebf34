"""K-means clustering of RGB samples into a ranked palette."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from sklearn.metrics import silhouette_score

from .types import ClusterResult, PaletteEntry

CHANGE_THRESHOLD = 1


@dataclass
class ClustererConfig:
    k: int = 5
    max_iter: int = 10
    random_state: Optional[int] = None
    silhouette_sample_size: int = 1000


def _as_samples(samples) -> np.ndarray:
    return np.asarray(samples, dtype=np.int64).reshape(-1, 3)


def squared_distances(samples: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Return the ``(N, K)`` matrix of squared RGB distances."""
    samples = _as_samples(samples)
    centroids = _as_samples(centroids)
    diff = samples[:, None, :] - centroids[None, :, :]
    return np.einsum("nkc,nkc->nk", diff, diff)


def assign(samples: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    # argmin keeps the first minimum, so ties go to the lowest centroid index
    return np.argmin(squared_distances(samples, centroids), axis=1)


def _random_sample(samples: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    return samples[int(rng.integers(samples.shape[0]))].copy()


def init_centroids(samples: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Draw ``k`` sample points uniformly, with replacement."""
    indices = rng.integers(samples.shape[0], size=k)
    return samples[indices].copy()


def lloyd_step(
    samples: np.ndarray,
    centroids: np.ndarray,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray, bool]:
    """Run one assignment + update pass.

    Returns the new centroids, the assignment used to compute them, and
    whether any populated centroid moved by more than a squared distance of 1.
    Empty clusters are re-seeded from a random sample and never count as
    changed.
    """
    samples = _as_samples(samples)
    centroids = _as_samples(centroids)
    k = centroids.shape[0]

    assignments = assign(samples, centroids)
    counts = np.bincount(assignments, minlength=k)
    sums = np.zeros((k, 3), dtype=np.int64)
    np.add.at(sums, assignments, samples)

    updated = centroids.copy()
    populated = counts > 0
    means = sums[populated] // counts[populated, None]
    moved = np.sum((means - centroids[populated]) ** 2, axis=1)
    changed = bool(np.any(moved > CHANGE_THRESHOLD))
    updated[populated] = means

    for index in np.flatnonzero(~populated):
        updated[index] = _random_sample(samples, rng)

    return updated, assignments, changed


def rank_centroids(centroids: np.ndarray, assignments: np.ndarray) -> Tuple[list, np.ndarray]:
    """Order centroids by population, descending; ties keep array order.

    Returns the palette entries and the labels remapped to ranked positions.
    """
    centroids = _as_samples(centroids)
    k = centroids.shape[0]
    counts = np.bincount(assignments, minlength=k)
    order = np.argsort(-counts, kind="stable")
    entries = [
        PaletteEntry(
            r=int(centroids[index, 0]),
            g=int(centroids[index, 1]),
            b=int(centroids[index, 2]),
            count=int(counts[index]),
        )
        for index in order
    ]
    position = np.empty(k, dtype=np.int64)
    position[order] = np.arange(k)
    return entries, position[assignments]


class Clusterer:
    """Abstract clusterer."""

    def cluster(self, samples, initial_centroids=None) -> ClusterResult:
        raise NotImplementedError


class KMeansClusterer(Clusterer):
    """Lloyd's k-means with a fixed iteration budget.

    ``rng`` is the random source used for initialization and for re-seeding
    empty clusters. When it is omitted a fresh generator is created for each
    call, seeded from ``config.random_state`` (``None`` means unseeded).
    """

    def __init__(
        self,
        config: ClustererConfig | None = None,
        rng: np.random.Generator | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config or ClustererConfig()
        self._rng = rng
        self._logger = logger or logging.getLogger(__name__)

    def _generator(self) -> np.random.Generator:
        if self._rng is not None:
            return self._rng
        return np.random.default_rng(self._config.random_state)

    def cluster(self, samples, initial_centroids=None) -> ClusterResult:  # noqa: D401
        points = _as_samples(samples)
        if initial_centroids is not None:
            centroids = _as_samples(initial_centroids)
            if centroids.size and (centroids.min() < 0 or centroids.max() > 255):
                raise ValueError("Initial centroids must be within 0..255")
        else:
            centroids = None
        k = centroids.shape[0] if centroids is not None else max(0, int(self._config.k))

        if points.shape[0] == 0 or k == 0:
            return ClusterResult(entries=[], labels=np.zeros(0, dtype=np.int64))

        rng = self._generator()
        if centroids is None:
            centroids = init_centroids(points, k, rng)

        assignments = np.zeros(points.shape[0], dtype=np.int64)
        iterations = 0
        converged = False
        for _ in range(max(0, int(self._config.max_iter))):
            centroids, assignments, changed = lloyd_step(points, centroids, rng)
            iterations += 1
            if not changed:
                converged = True
                break

        self._logger.debug(
            "Clustered %d samples into k=%d (iterations=%d, converged=%s)",
            points.shape[0],
            k,
            iterations,
            converged,
        )
        entries, labels = rank_centroids(centroids, assignments)
        return ClusterResult(entries=entries, iterations=iterations, converged=converged, labels=labels)

    def silhouette(self, samples, result: ClusterResult) -> float | None:
        """Silhouette score of the final partition, when one is defined."""
        points = _as_samples(samples)
        labels = result.labels
        if labels is None or labels.shape[0] != points.shape[0]:
            return None
        unique_labels = np.unique(labels)
        if unique_labels.size < 2 or unique_labels.size >= points.shape[0]:
            return None
        sample_size = min(self._config.silhouette_sample_size, points.shape[0])
        try:
            kwargs = {"random_state": self._config.random_state}
            if sample_size < points.shape[0]:
                kwargs["sample_size"] = sample_size
            return float(silhouette_score(points, labels, **kwargs))
        except ValueError:
            return None


__all__ = [
    "Clusterer",
    "ClustererConfig",
    "KMeansClusterer",
    "assign",
    "init_centroids",
    "lloyd_step",
    "rank_centroids",
    "squared_distances",
]

from __future__ import annotations

import numpy as np
import pytest

from src.pipeline.clusterer import (
    ClustererConfig,
    KMeansClusterer,
    assign,
    lloyd_step,
    rank_centroids,
)

SEPARATED = [
    (250, 10, 10),
    (240, 20, 0),
    (245, 5, 5),
    (10, 10, 250),
    (0, 20, 240),
    (5, 0, 245),
    (10, 240, 10),
]
SEEDS = [(255, 0, 0), (0, 0, 255), (0, 255, 0)]


class FixedRng:
    """Returns scripted indices in place of random draws."""

    def __init__(self, values: list[int]) -> None:
        self._values = list(values)

    def integers(self, high, size=None):
        if size is None:
            return self._values.pop(0) % high
        return np.array([self._values.pop(0) % high for _ in range(size)])


def _samples(points) -> np.ndarray:
    return np.array(points, dtype=np.uint8)


def test_cluster_returns_k_colors_in_range() -> None:
    rng = np.random.default_rng(3)
    samples = rng.integers(0, 256, size=(500, 3))
    for k in range(1, 9):
        result = KMeansClusterer(ClustererConfig(k=k), rng=np.random.default_rng(k)).cluster(samples)
        assert len(result.colors) == k
        assert all(0 <= channel <= 255 for rgb in result.colors for channel in rgb)
        assert sum(result.counts) == len(samples)
        assert result.counts == sorted(result.counts, reverse=True)


def test_cluster_empty_samples_or_zero_k() -> None:
    clusterer = KMeansClusterer(ClustererConfig(k=4))
    assert clusterer.cluster(np.zeros((0, 3), dtype=np.uint8)).colors == []
    assert KMeansClusterer(ClustererConfig(k=0)).cluster(_samples(SEPARATED)).colors == []


def test_cluster_with_fixed_initial_centroids_is_exact() -> None:
    clusterer = KMeansClusterer(ClustererConfig(k=3, max_iter=10), rng=np.random.default_rng(0))
    result = clusterer.cluster(_samples(SEPARATED), initial_centroids=SEEDS)

    assert result.colors == [(245, 11, 5), (5, 10, 245), (10, 240, 10)]
    assert result.counts == [3, 3, 1]
    assert result.iterations == 2
    assert result.converged is True
    assert result.labels.tolist() == [0, 0, 0, 1, 1, 1, 2]


def test_cluster_is_repeatable_given_initial_centroids() -> None:
    first = KMeansClusterer(ClustererConfig(k=3), rng=np.random.default_rng(1)).cluster(
        _samples(SEPARATED), initial_centroids=SEEDS
    )
    second = KMeansClusterer(ClustererConfig(k=3), rng=np.random.default_rng(99)).cluster(
        _samples(SEPARATED), initial_centroids=SEEDS
    )
    assert first.entries == second.entries


def test_converged_centroids_are_a_fixed_point() -> None:
    result = KMeansClusterer(ClustererConfig(k=3), rng=np.random.default_rng(0)).cluster(
        _samples(SEPARATED), initial_centroids=SEEDS
    )
    centroids = np.array(result.colors)

    updated, _, changed = lloyd_step(_samples(SEPARATED), centroids, np.random.default_rng(0))

    assert changed is False
    np.testing.assert_array_equal(updated, centroids)


def test_assignment_ties_go_to_lowest_index() -> None:
    samples = _samples([(10, 10, 10)])
    centroids = np.array([(0, 10, 10), (20, 10, 10)])
    assert assign(samples, centroids).tolist() == [0]

    centroids = np.array([(20, 10, 10), (20, 10, 10)])
    assert assign(samples, centroids).tolist() == [0]


def test_update_truncates_mean_and_ignores_small_moves() -> None:
    samples = _samples([(1, 2, 3), (2, 3, 5)])
    updated, assignments, changed = lloyd_step(samples, np.array([(1, 2, 3)]), FixedRng([]))

    assert updated.tolist() == [[1, 2, 4]]
    assert assignments.tolist() == [0, 0]
    # squared move of exactly 1 does not count as a change
    assert changed is False


def test_empty_cluster_is_reseeded_from_samples() -> None:
    samples = _samples([(0, 0, 0), (100, 100, 100)])
    centroids = np.array([(0, 0, 0), (1, 1, 1), (255, 255, 255)])

    updated, assignments, changed = lloyd_step(samples, centroids, FixedRng([1]))

    assert assignments.tolist() == [0, 1]
    assert updated.tolist() == [[0, 0, 0], [100, 100, 100], [100, 100, 100]]
    assert changed is True


def test_reseeding_alone_is_not_a_change() -> None:
    samples = _samples([(0, 0, 0)])
    centroids = np.array([(0, 0, 0), (200, 200, 200)])

    updated, _, changed = lloyd_step(samples, centroids, FixedRng([0]))

    assert updated.tolist() == [[0, 0, 0], [0, 0, 0]]
    assert changed is False


def test_k_larger_than_sample_count_is_bounded() -> None:
    samples = _samples([(10, 20, 30), (200, 100, 0)])
    result = KMeansClusterer(ClustererConfig(k=6, max_iter=10), rng=np.random.default_rng(5)).cluster(samples)

    assert len(result.colors) == 6
    assert result.iterations <= 10
    assert sum(result.counts) == 2
    assert result.counts[2:] == [0, 0, 0, 0]


def test_rank_centroids_is_stable_for_ties() -> None:
    centroids = np.array([(1, 1, 1), (2, 2, 2), (3, 3, 3)])
    entries, labels = rank_centroids(centroids, np.array([2, 1, 1, 0, 2]))

    assert [entry.rgb for entry in entries] == [(2, 2, 2), (3, 3, 3), (1, 1, 1)]
    assert [entry.count for entry in entries] == [2, 2, 1]
    assert labels.tolist() == [1, 0, 0, 2, 1]


def test_zero_iterations_keeps_initial_centroids() -> None:
    result = KMeansClusterer(ClustererConfig(k=3, max_iter=0)).cluster(
        _samples(SEPARATED), initial_centroids=SEEDS
    )
    assert result.colors == SEEDS
    assert result.counts == [len(SEPARATED), 0, 0]
    assert result.iterations == 0


def test_initial_centroids_must_be_in_range() -> None:
    with pytest.raises(ValueError):
        KMeansClusterer().cluster(_samples(SEPARATED), initial_centroids=[(0, 0, 256)])


def test_silhouette_reported_for_separated_clusters() -> None:
    clusterer = KMeansClusterer(ClustererConfig(k=3, random_state=0))
    result = clusterer.cluster(_samples(SEPARATED), initial_centroids=SEEDS)

    score = clusterer.silhouette(_samples(SEPARATED), result)
    assert score is not None and score > 0.5

    single = KMeansClusterer(ClustererConfig(k=1)).cluster(_samples(SEPARATED))
    assert clusterer.silhouette(_samples(SEPARATED), single) is None

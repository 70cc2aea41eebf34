#!/usr/bin/env python3
"""Command line runner for palette extraction, local or via the service."""
from __future__ import annotations

import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

import numpy as np
import requests

from src.pipeline import ClustererConfig, ExtractorConfig, ImageDecodeError, PaletteExtractor, SamplerConfig
from src.service.colors import copy_all_text, rgb_to_hex, status_message

SERVICE_URL_ENV = "PALETTE_SERVICE_URL"
RETRY_ATTEMPTS = 3
HTTP_TIMEOUT_DEFAULT = int(os.getenv("PALETTE_HTTP_TIMEOUT", "60"))
K_DEFAULT = int(os.getenv("PALETTE_DEFAULT_K", "5"))


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return response.text


def post_with_retry(url: str, data: bytes, params: dict, timeout_sec: int) -> requests.Response:
    for attempt in range(RETRY_ATTEMPTS):
        try:
            response = requests.post(
                url,
                data=data,
                params=params,
                headers={"Content-Type": "application/octet-stream"},
                timeout=(timeout_sec, timeout_sec),
            )
        except requests.RequestException as error:
            if attempt == RETRY_ATTEMPTS - 1:
                break
            wait_time = 2 ** attempt
            print(f"[WARN] POST failed ({error}); retrying in {wait_time}s", file=sys.stderr)
            time.sleep(wait_time)
            continue
        if 400 <= response.status_code < 500:
            raise RuntimeError(f"Service rejected image ({response.status_code}): {_error_detail(response)}")
        if response.status_code >= 500 and attempt < RETRY_ATTEMPTS - 1:
            wait_time = 2 ** attempt
            print(f"[WARN] Service returned {response.status_code}; retrying in {wait_time}s", file=sys.stderr)
            time.sleep(wait_time)
            continue
        response.raise_for_status()
        return response
    raise RuntimeError("Failed to submit extraction request after retries")


def extract_remote(service_url: str, image: Path, k: int, max_iter: int, sample_step: int, timeout_sec: int) -> dict:
    params = {"k": k, "max_iter": max_iter, "sample_step": sample_step}
    response = post_with_retry(f"{service_url}/palette/image", image.read_bytes(), params, timeout_sec)
    return response.json()


def extract_local(image: Path, k: int, max_iter: int, sample_step: int, seed: Optional[int]) -> dict:
    config = ExtractorConfig(
        sampler=SamplerConfig(sample_step=sample_step),
        cluster=ClustererConfig(k=k, max_iter=max_iter, random_state=seed),
    )
    result = PaletteExtractor(config).extract_file(image)
    return {
        "colors": [
            {"rgb": list(entry.rgb), "hex": rgb_to_hex(entry.rgb), "count": entry.count}
            for entry in result.entries
        ],
        "hex_all": copy_all_text(result.colors),
        "message": status_message(result.colors),
        "summary": result.summary,
    }


def format_swatches(payload: dict) -> List[str]:
    lines = []
    for color in payload.get("colors", []):
        r, g, b = color["rgb"]
        lines.append(f"{color['hex']}  rgb({r},{g},{b})  {color['count']}")
    lines.append(payload.get("message", ""))
    return lines


def _json_default(value):
    if isinstance(value, np.generic):
        return value.item()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract a dominant color palette from an image")
    parser.add_argument("image", type=Path, help="Path to the image file")
    parser.add_argument("--k", type=int, default=K_DEFAULT, help="Number of colors (default: 5)")
    parser.add_argument("--max-iter", type=int, default=10, help="Maximum k-means iterations (default: 10)")
    parser.add_argument("--sample-step", type=int, default=4, help="Take every n-th pixel (default: 4)")
    parser.add_argument("--seed", type=int, default=None, help="Seed the random source for repeatable output")
    parser.add_argument(
        "--service-url",
        type=str,
        default=os.environ.get(SERVICE_URL_ENV),
        help=f"Send the image to a running service instead of extracting locally (env: {SERVICE_URL_ENV})",
    )
    parser.add_argument("--http-timeout", type=int, default=HTTP_TIMEOUT_DEFAULT, help="HTTP timeout in seconds")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print the full JSON payload")
    output.add_argument("--copy-all", action="store_true", help="Print only the space separated hex codes")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if not args.image.exists():
        print(f"[ERROR] Choose an image first: {args.image} does not exist", file=sys.stderr)
        return 2

    try:
        if args.service_url:
            payload = extract_remote(
                args.service_url.rstrip("/"), args.image, args.k, args.max_iter, args.sample_step, args.http_timeout
            )
        else:
            payload = extract_local(args.image, args.k, args.max_iter, args.sample_step, args.seed)
    except ImageDecodeError as error:
        print(f"[ERROR] Could not load image: {error}", file=sys.stderr)
        return 2
    except Exception as error:  # pragma: no cover - integration level logging
        print(f"[ERROR] {error}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(payload, indent=2, default=_json_default))
    elif args.copy_all:
        print(payload.get("hex_all", ""))
    else:
        print("\n".join(format_swatches(payload)))
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
CLI script for estimating face age brackets in image files.

Usage:
    python scripts/estimate.py photo.jpg other.png
    python scripts/estimate.py photo.jpg --gender --json
    python scripts/estimate.py photo.jpg --benchmark
"""

import argparse
import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from face_age import AgeEstimator, Config, FaceAgeError, Image  # noqa: E402
from face_age.config import SELECTION_POLICIES  # noqa: E402
from face_age.log import setup_logging  # noqa: E402


def parse_args():
    parser = argparse.ArgumentParser(
        description="Estimate the age bracket of the face in each image",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("images", nargs="+", help="Image files to process")

    parser.add_argument(
        "--bundle-dir",
        type=str,
        default="./models",
        help="Directory with the bundled model artifacts",
    )

    parser.add_argument(
        "--storage-dir",
        type=str,
        default="./.model_cache",
        help="Directory artifacts are staged into before loading",
    )

    parser.add_argument(
        "--selection",
        type=str,
        default="first",
        choices=list(SELECTION_POLICIES),
        help="Which detected face to classify",
    )

    parser.add_argument("--gender", action="store_true", help="Also classify gender")

    parser.add_argument("--json", action="store_true", help="Print results as JSON lines")

    parser.add_argument(
        "--benchmark", action="store_true", help="Benchmark inference on the first image"
    )

    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    return parser.parse_args()


def main():
    args = parse_args()
    setup_logging(args.log_level)

    config = Config(
        bundle_dir=args.bundle_dir,
        storage_dir=args.storage_dir,
        selection_policy=args.selection,
        enable_gender=args.gender,
    )

    with AgeEstimator(config) as estimator:
        try:
            estimator.load_models()
        except FaceAgeError as e:
            print(f"Could not load models: {e.message}")
            print("Run: python scripts/download_models.py")
            return 1

        exit_code = 0
        for path in args.images:
            try:
                image = Image.from_path(path)
            except (OSError, FaceAgeError) as e:
                print(f"{path}: could not read image ({e})")
                exit_code = 1
                continue

            result = estimator.predict(image)
            record = {"image": path, **result.to_dict()}

            if args.gender and result.region is not None and result.ok:
                try:
                    record["gender"] = estimator.estimate_gender(image, result.region)
                except FaceAgeError as e:
                    record["gender_error"] = e.message

            if args.json:
                print(json.dumps(record))
            elif result.ok:
                extra = f", gender {record['gender']}" if "gender" in record else ""
                print(f"{path}: age {result.label}{extra} (face at {result.region.as_tuple()})")
            elif result.error is not None:
                print(f"{path}: {result.status.value} ({result.error.message})")
            else:
                print(f"{path}: {result.status.value}")

        if args.benchmark:
            image = Image.from_path(args.images[0])
            detection = estimator.detect(image)
            stats = estimator.benchmark(image, detection.selected)
            print("\nBenchmark (preprocess + forward):")
            for key, value in stats.items():
                print(f"  {key}: {value:.2f}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())

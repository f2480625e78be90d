#!/usr/bin/env python3
"""
Download the pretrained Caffe age/gender networks into the model bundle directory.

The networks are the Levi & Hassner (2015) age and gender classifiers, each a
text topology (.prototxt) plus binary weights (.caffemodel).
"""

import argparse
import sys
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlretrieve

DEFAULT_BASE_URL = "https://raw.githubusercontent.com/smahesh29/Gender-and-Age-Detection/master"

# Local artifact name -> file name at the source
MODEL_SOURCES = {
    "deploy_age.prototxt": "age_deploy.prototxt",
    "age_net.caffemodel": "age_net.caffemodel",
    "deploy_gender.prototxt": "gender_deploy.prototxt",
    "gender_net.caffemodel": "gender_net.caffemodel",
}


def download_progress(block_num, block_size, total_size):
    """Display download progress."""
    downloaded = block_num * block_size
    mb_downloaded = downloaded / (1024 * 1024)
    if total_size > 0:
        percent = min(100, downloaded * 100 / total_size)
        mb_total = total_size / (1024 * 1024)
        sys.stdout.write(f"\r  Progress: {percent:.1f}% ({mb_downloaded:.1f}/{mb_total:.1f} MB)")
    else:
        sys.stdout.write(f"\r  Downloaded: {mb_downloaded:.1f} MB")
    sys.stdout.flush()


def download_file(url: str, dest_path: Path, desc: str = "file") -> bool:
    """Download a file with progress indication."""
    print(f"Downloading {desc}...")
    try:
        urlretrieve(url, dest_path, download_progress)
        print()  # New line after progress
        return True
    except URLError as e:
        print(f"\nFailed to download: {e}")
    except OSError as e:
        print(f"\nError: {e}")
    # A partial file would otherwise be skipped as "already exists" next run
    dest_path.unlink(missing_ok=True)
    return False


def main():
    parser = argparse.ArgumentParser(
        description="Download pretrained Caffe age/gender models"
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=str,
        default="./models",
        help="Model bundle directory (default: ./models)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=DEFAULT_BASE_URL,
        help="Base URL the artifacts are fetched from",
    )
    parser.add_argument(
        "--skip-gender",
        action="store_true",
        help="Only download the age network",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-download files that already exist",
    )
    args = parser.parse_args()

    bundle_dir = Path(args.output_dir).resolve()
    bundle_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("Face Age Model Downloader")
    print("=" * 60)
    print(f"Output directory: {bundle_dir}")
    print(f"Source: {args.base_url}")
    print("=" * 60)

    failed = []
    for local_name, remote_name in MODEL_SOURCES.items():
        if args.skip_gender and "gender" in local_name:
            continue

        dest = bundle_dir / local_name
        if dest.exists() and not args.force:
            print(f"{local_name} already exists, skipping download...")
            continue

        if not download_file(f"{args.base_url}/{remote_name}", dest, local_name):
            failed.append(local_name)

    print("\n" + "=" * 60)
    if failed:
        print(f"WARNING: {len(failed)} file(s) failed: {', '.join(failed)}")
        print(f"Place them manually in: {bundle_dir}")
    else:
        print(f"SUCCESS! Models are in {bundle_dir}")
        print("\nYou can now estimate ages with:")
        print(f"  python scripts/estimate.py path/to/photo.jpg --bundle-dir {bundle_dir}")
    print("=" * 60)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

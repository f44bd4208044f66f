#!/usr/bin/env python3
"""Index an event photo or search an event with a selfie.

Usage:
    python scripts/run_image.py index --image photo.jpg --image-id photo-0001 --event 675c4c8c
    python scripts/run_image.py index --s3-key event/42/raw.jpg --image-id photo-0001 --event 675c4c8c
    python scripts/run_image.py search --image selfie.jpg --event 675c4c8c --save-crop face.jpg
    python scripts/run_image.py search --s3-key selfies/me.jpg --event 675c4c8c
    python scripts/run_image.py faces --event 675c4c8c
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from facematch.config import Config
from facematch.errors import FaceMatchError, FaceSearchError
from facematch.factory import create_face_service
from facematch.logging_config import get_logger

logger = get_logger("scripts.run_image")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Index and search faces in per-event Rekognition collections",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Index the faces of an event photo")
    source = index_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", type=str, help="Path to a local image file")
    source.add_argument("--s3-key", type=str, help="Object key in the configured bucket")
    index_parser.add_argument("--image-id", type=str, required=True, help="External image id")
    index_parser.add_argument("--event", type=str, required=True, help="Event (collection) id")

    search_parser = subparsers.add_parser("search", help="Find event photos matching a selfie")
    source = search_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", type=str, help="Path to a local selfie")
    source.add_argument("--s3-key", type=str, help="Selfie object key in the configured bucket")
    search_parser.add_argument("--event", type=str, required=True, help="Event (collection) id")
    search_parser.add_argument(
        "--save-crop",
        type=str,
        default=None,
        help="Where to write the cropped selfie face (local selfies only)",
    )

    faces_parser = subparsers.add_parser("faces", help="List face ids in an event collection")
    faces_parser.add_argument("--event", type=str, required=True, help="Event (collection) id")

    for sub in (index_parser, search_parser):
        sub.add_argument(
            "--bucket",
            type=str,
            default=None,
            help="S3 bucket (overrides .env AWS_BUCKET_NAME)",
        )

    return parser.parse_args()


def print_section(title: str) -> None:
    """Print a section divider."""
    print()
    print("=" * 70)
    print(f"  {title}")
    print("=" * 70)


def read_image(path_str: str) -> bytes | None:
    path = Path(path_str)
    if not path.exists():
        logger.error(f"Image not found: {path}")
        print(f"Error: Image file not found: {path}")
        return None
    return path.read_bytes()


def resolve_bucket(args: argparse.Namespace, config: Config) -> str | None:
    bucket = args.bucket or config.aws_bucket_name
    if bucket is None:
        print("Error: no bucket given (use --bucket or set AWS_BUCKET_NAME)")
    return bucket


def run_index(args: argparse.Namespace, config: Config) -> int:
    service = create_face_service(config)

    if args.image:
        image_bytes = read_image(args.image)
        if image_bytes is None:
            return 1
        faces = service.index_face(image_bytes, args.image_id, args.event)
    else:
        bucket = resolve_bucket(args, config)
        if bucket is None:
            return 1
        faces = service.index_face_from_s3(bucket, args.s3_key, args.image_id, args.event)

    print_section("Indexed Faces")
    if not faces:
        print("No faces indexed")
    for i, face in enumerate(faces, 1):
        print(f"Face {i}: {face.face_id} (confidence {face.confidence})")
    return 0


def run_search(args: argparse.Namespace, config: Config) -> int:
    service = create_face_service(config)

    if args.s3_key:
        bucket = resolve_bucket(args, config)
        if bucket is None:
            return 1
        matches = service.search_from_s3(bucket, args.s3_key, args.event)
        print_section("Matched Images")
        print("\n".join(matches) if matches else "No matches")
        return 0

    selfie = read_image(args.image)
    if selfie is None:
        return 1

    try:
        result = service.search_and_index_selfie(selfie, args.event)
    except FaceSearchError as e:
        print(f"Search failed after indexing selfie face {e.face_id}: {e}")
        return 1

    print_section("Selfie Search Results")
    print(f"Selfie face id: {result.face_id}")
    print(f"Matched images: {len(result.external_image_ids)}")
    for image_id in result.external_image_ids:
        print(f"  {image_id}")

    save_path = Path(args.save_crop or f"cropped_face_{result.face_id}.jpeg")
    save_path.write_bytes(result.cropped_face)
    print(f"Cropped face saved: {save_path}")
    return 0


def run_faces(args: argparse.Namespace, config: Config) -> int:
    service = create_face_service(config)
    face_ids = service.list_faces(args.event)
    print_section(f"Faces in {args.event}")
    print("\n".join(face_ids) if face_ids else "Collection is empty")
    return 0


def main() -> int:
    """Main function."""
    args = parse_args()

    config = Config.from_env()
    logger.info(f"Loaded config: region={config.aws_region}, crop_scale={config.crop_scale}")

    commands = {"index": run_index, "search": run_search, "faces": run_faces}
    try:
        return commands[args.command](args, config)
    except FaceMatchError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        if getattr(e, "face_id", None):
            print(f"Selfie was indexed as face {e.face_id}; delete it if it is not wanted")
        return 1


if __name__ == "__main__":
    sys.exit(main())

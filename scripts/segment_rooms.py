#!/usr/bin/env python3
"""
Floorplan Room Segmentation CLI

Split a pre-cleaned binary floorplan into rooms with a marker-controlled
watershed and output results as JSON.

Usage:
    python scripts/segment_rooms.py --image plan.png --output rooms.json
    python scripts/segment_rooms.py --image plan.png --doors doors.json --output rooms.json --visualize

Examples:
    # Segmentation with door closing
    python scripts/segment_rooms.py \\
        --image floor1_clean.png \\
        --doors floor1_doors.json \\
        --output floor1_rooms.json

    # Keep every intermediate buffer for inspection
    python scripts/segment_rooms.py \\
        --image floor1_clean.png \\
        --output floor1_rooms.json \\
        --history-dir ./history/

The doors file holds a JSON list of [x, y, width, height] boxes.
"""

import argparse
import json
import logging
import re
import sys
from dataclasses import replace
from pathlib import Path

import numpy as np
from PIL import Image


def parse_args():
    parser = argparse.ArgumentParser(
        description="Segment rooms in binary floorplan images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Input options
    parser.add_argument(
        "--image", "-i",
        type=str,
        required=True,
        help="Path to a pre-cleaned floorplan image (floor white, walls black)"
    )
    parser.add_argument(
        "--doors",
        type=str,
        default=None,
        help="JSON file with door boxes (no door closing if not specified)"
    )
    parser.add_argument(
        "--binary-threshold",
        type=int,
        default=128,
        help="Gray level separating walls from floor (default: 128)"
    )

    # Segmentation options
    parser.add_argument(
        "--difference-scalar",
        type=float,
        default=70.0,
        help="Minimum height of a room center above its surroundings (default: 70)"
    )
    parser.add_argument(
        "--geodesic-dilate",
        type=int,
        default=60,
        help="Geodesic dilation iterations (default: 60)"
    )
    parser.add_argument(
        "--sparse-radius",
        type=float,
        default=2.0,
        help="Radius for merging nearby corner points (default: 2)"
    )

    # Output options
    parser.add_argument(
        "--output", "-o",
        type=str,
        required=True,
        help="Path to output JSON file"
    )
    parser.add_argument(
        "--visualize",
        action="store_true",
        help="Save a room overlay next to the output"
    )
    parser.add_argument(
        "--history-dir",
        type=str,
        default=None,
        help="Directory for intermediate buffers (not saved if not specified)"
    )

    return parser.parse_args()


def load_binary(image_path: Path, threshold: int) -> np.ndarray:
    """Load an image as a 0/255 uint8 array."""
    gray = np.array(Image.open(image_path).convert("L"))
    return np.where(gray >= threshold, 255, 0).astype(np.uint8)


def load_doors(doors_path: Path) -> list:
    with open(doors_path, 'r') as f:
        return json.load(f)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def main():
    args = parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from roomseg import RoomSegmenter, SegmentationConfig, history_to_images, visualize_labels
    from roomseg.segmentation import attach_inputs

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Image not found: {image_path}")
        sys.exit(1)

    doors = []
    if args.doors:
        doors_path = Path(args.doors)
        if not doors_path.exists():
            print(f"Doors file not found: {doors_path}")
            sys.exit(1)
        doors = load_doors(doors_path)

    config = replace(
        SegmentationConfig(),
        difference_scalar=args.difference_scalar,
        geodesic_dilate_size=args.geodesic_dilate,
        sparse_radius=args.sparse_radius,
    )
    segmenter = RoomSegmenter(config)

    binary = load_binary(image_path, args.binary_threshold)
    result = segmenter.run(attach_inputs(binary, doors))

    print(f"\n{'='*50}")
    print(f"Segmentation Complete")
    print(f"{'='*50}")
    print(f"Image size: {result.image_width}x{result.image_height}")
    print(f"Doors: {len(doors)} ({len(result.door_rectangles)} frames closed)")
    print(f"Rooms found: {result.total_rooms}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    segmenter.save_json(result, output_path)

    if args.visualize:
        vis = visualize_labels(binary, result.labels, config)
        vis_path = output_path.with_name(f"{image_path.stem}_rooms.png")
        Image.fromarray(np.ascontiguousarray(vis[:, :, ::-1])).save(vis_path)
        print(f"Saved: {vis_path.name}")

    if args.history_dir:
        history_dir = Path(args.history_dir)
        history_dir.mkdir(parents=True, exist_ok=True)

        print(f"\nSaving intermediate buffers in: {history_dir}")
        for index, (name, image) in enumerate(history_to_images(result.history)):
            if image.ndim == 3:
                image = np.ascontiguousarray(image[:, :, ::-1])
            path = history_dir / f"{index:02d}_{slugify(name)}.png"
            Image.fromarray(image).save(path)
            print(f"  Saved: {path.name}")

    print(f"\nDone!")


if __name__ == "__main__":
    main()

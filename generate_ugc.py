#!/usr/bin/env python3
"""
UGC photo generation from the command line using Google Gemini API
Blends a person photo and a product photo into one of the catalog scenes.
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from studio.config import StudioSettings
from studio.errors import StudioError
from studio.generation import GenerationClient
from studio.image_prep import ImageSlot
from studio.prompts import SCENE_CATEGORIES, is_known_scene
from studio.utils import generate_download_filename, format_file_size, guess_content_type


def print_scenes():
    for category in SCENE_CATEGORIES:
        print(f"{category['icon']} {category['label']}")
        for scene in category['scenes']:
            print(f"    {scene}")


def load_slot(slot: ImageSlot, path: str, label: str) -> bool:
    """Read an image file from disk into a slot"""
    if not os.path.exists(path):
        print(f"Error: {label} image '{path}' not found.")
        return False

    content_type = guess_content_type(path)
    with open(path, 'rb') as f:
        data = f.read()

    if not slot.load(data, content_type, filename=os.path.basename(path)):
        print(f"Error: {label} file '{path}' is not an image.")
        return False

    encoded = slot.encoded
    print(f"Loaded {label.lower()} image: {encoded.width}x{encoded.height} ({format_file_size(encoded.size_bytes)})")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="UGC photo generation using Google Gemini API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python generate_ugc.py person.jpg product.png "Café / Coffee shop"
  python generate_ugc.py person.jpg product.png "Rooftop terrace" -o rooftop.png
  python generate_ugc.py --list-scenes
        """
    )

    parser.add_argument("person_image", nargs="?", help="Path to the person / model photo")
    parser.add_argument("product_image", nargs="?", help="Path to the product photo")
    parser.add_argument("scene", nargs="?", help="Scene from the catalog (see --list-scenes)")
    parser.add_argument("-o", "--output",
                        help="Output path for the generated image (default: ugc-gen-<timestamp>.png)")
    parser.add_argument("--list-scenes", action="store_true", help="Print the scene catalog and exit")
    parser.add_argument("--max-dimension", type=int,
                        help="Longest side of uploaded images after resizing (default: 1024)")
    parser.add_argument("--quality", type=int,
                        help="JPEG quality for uploaded images (default: 85)")
    parser.add_argument("--retry-delay", type=float,
                        help="Seconds to wait before the single retry (default: 2.0)")
    return parser


def main(argv=None, client: GenerationClient = None) -> int:
    load_dotenv()
    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'WARNING').upper())

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_scenes:
        print_scenes()
        return 0

    if not (args.person_image and args.product_image and args.scene):
        parser.print_usage()
        print("Error: person_image, product_image and scene are required.")
        return 1

    if not is_known_scene(args.scene):
        print(f"Error: Unknown scene '{args.scene}'. Use --list-scenes to see the options.")
        return 1

    settings = StudioSettings.from_env()
    max_dimension = args.max_dimension if args.max_dimension is not None else settings.max_dimension
    quality = args.quality if args.quality is not None else settings.jpeg_quality

    if max_dimension < 64:
        print("Error: --max-dimension must be at least 64")
        return 1
    if quality < 1 or quality > 95:
        print("Error: --quality must be between 1 and 95")
        return 1

    person = ImageSlot(max_dimension=max_dimension, quality=quality)
    product = ImageSlot(max_dimension=max_dimension, quality=quality)

    print("=== UGC Photo Generation with Gemini API ===\n")
    try:
        if not load_slot(person, args.person_image, "Person"):
            return 1
        if not load_slot(product, args.product_image, "Product"):
            return 1

        if client is None:
            client = GenerationClient.from_settings(settings)
            if args.retry_delay is not None:
                client.retry_delay_s = args.retry_delay

        print(f"Generating scene: '{args.scene}'")
        image_bytes = client.generate(person.encoded, product.encoded, args.scene)
    except StudioError as e:
        print(f"\n❌ {e.message}")
        return 1

    output_path = args.output or generate_download_filename()
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(output_path, 'wb') as f:
        f.write(image_bytes)

    print(f"\n🎉 UGC photo generated successfully!")
    print(f"Output: {output_path} ({format_file_size(len(image_bytes))})")
    return 0


if __name__ == "__main__":
    sys.exit(main())

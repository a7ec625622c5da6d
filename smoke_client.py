#!/usr/bin/env python3
"""Post a local image to a running OCR server and print the response.

Usage: ./smoke_client.py <image-file> [url]
"""
import json
import mimetypes
import sys
from pathlib import Path

import requests

DEFAULT_URL = "http://localhost:8080/"


def main(argv):
    if not argv:
        print("Usage: ./smoke_client.py <image-file> [url]")
        return 1

    image_path = Path(argv[0])
    url = argv[1] if len(argv) > 1 else DEFAULT_URL
    if not image_path.is_file():
        print(f"Error: File '{image_path}' not found")
        return 1

    content_type = mimetypes.guess_type(image_path.name)[0] or "application/octet-stream"
    print(f"Testing OCR API at {url} with {image_path.name}")

    try:
        with image_path.open("rb") as f:
            response = requests.post(url, files={"image": (image_path.name, f, content_type)}, timeout=60)
    except requests.exceptions.ConnectionError:
        print(f"Could not connect to server at {url}. Make sure it's running.")
        return 1

    result = response.json()
    print(json.dumps(result, indent=2, ensure_ascii=False))

    if response.status_code != 200:
        print(f"Error: status code {response.status_code}")
        return 1

    boxes = result.get("bounding_boxes", [])
    print(f"\nFound {len(boxes)} text regions, detected language: {result.get('detected_lang')}")
    for i, box in enumerate(boxes[:5], 1):
        print(f"  {i}. {box['text']} (angle: {box['angle']:.1f})")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

"""Handwriting OCR service: Google Vision text detection with an SVG text overlay."""

__version__ = "0.1.0"

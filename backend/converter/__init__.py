"""Multi-format web image converter: upload images, download a zip of JPEG/WebP/AVIF outputs."""

__version__ = "1.0.0"

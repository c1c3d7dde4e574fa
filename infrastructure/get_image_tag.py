#!/usr/bin/env python3
"""
Print the image tag for the next money tracker deployment.

The tag is a digest over every file that ends up in the Lambda image, so an
unchanged tree keeps its tag and the functions are left alone.
"""

import hashlib
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
IMAGE_FILES = ["Dockerfile", "pyproject.toml", "main.py"]
IMAGE_PACKAGES = ["handlers", "models", "services", "utils"]


def image_sources(root: Path = PROJECT_ROOT):
    for name in IMAGE_FILES:
        path = root / name
        if path.is_file():
            yield path
    for package in IMAGE_PACKAGES:
        yield from sorted((root / package).rglob("*.py"))


def get_content_hash(root: Path = PROJECT_ROOT) -> str:
    digest = hashlib.sha256()
    for path in image_sources(root):
        digest.update(str(path.relative_to(root)).encode())
        digest.update(path.read_bytes())
    return f"src-{digest.hexdigest()[:12]}"


if __name__ == "__main__":
    print(get_content_hash())

# app/core/naming.py
import os
import re

IMAGE_EXTS = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".bmp",
    ".tif",
    ".tiff",
})

_BUCKET_NAME_RE = re.compile(r"[0-9]+")


def is_safe_leaf_name(name) -> bool:
    """True when `name` is a bare file name that cannot escape its folder."""
    return (
        isinstance(name, str)
        and len(name) > 0
        and name == os.path.basename(name)
        and "/" not in name
        and "\\" not in name
        and ".." not in name
        and "\x00" not in name
    )


def is_bucket_name(name) -> bool:
    return isinstance(name, str) and _BUCKET_NAME_RE.fullmatch(name) is not None


def is_image_file_name(name: str) -> bool:
    ext = os.path.splitext(name)[1].lower()
    return ext in IMAGE_EXTS


def is_valid_image_name(name) -> bool:
    return is_safe_leaf_name(name) and is_image_file_name(name)


def format_bytes(num_bytes: int) -> str:
    """Short human-readable size, e.g. 4 GiB or 1.5 MiB."""
    value = float(num_bytes)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            break
        value /= 1024
    if value == int(value):
        return f"{int(value)} {unit}"
    return f"{value:.1f} {unit}"

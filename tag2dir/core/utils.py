"""Utility functions for names and paths."""

import os
import re
import unicodedata
from typing import Collection, Optional

# Word characters (Unicode-aware), hyphen, period and space. Combining
# marks are not word characters for re, so they are checked separately.
_UNSAFE_NAME_CHARS = re.compile(r"[^\w\-. ]")

UNKNOWN_PERSON = "Unknown"


def _keep_marks(match: "re.Match") -> str:
    char = match.group(0)
    return char if unicodedata.category(char).startswith("M") else ""


def sanitize_name(name: Optional[str]) -> str:
    """Turn a person label into a safe single directory name.

    Removes every character that is not a letter, a digit, a combining
    mark, a hyphen, an underscore, a period or a space, then trims
    surrounding whitespace. Non-Latin names, including scripts with vowel
    signs and decomposed accents, survive unchanged.

    Args:
        name: Person label, possibly empty or None.

    Returns:
        Sanitized name, or "Unknown" if nothing usable remains.

    Examples:
        >>> sanitize_name("Alice / Bob")
        'Alice  Bob'
        >>> sanitize_name("张三")
        '张三'
        >>> sanitize_name("???")
        'Unknown'
    """
    result = _UNSAFE_NAME_CHARS.sub(_keep_marks, name or "").strip()
    # "." and ".." are not usable as a folder name
    if not result.strip("."):
        return UNKNOWN_PERSON
    return result


def exists(path: Optional[str]) -> bool:
    """Check if a path exists.

    Args:
        path: Path to check, or None.

    Returns:
        True if path exists, False if path is None or doesn't exist.
    """
    if path:
        return os.path.exists(path)
    return False


def get_unique_path(path: str, reserved: Optional[Collection[str]] = None) -> str:
    """Get a free path by appending a " (n)" suffix if path is taken.

    Only reads the filesystem. Two calls with no change in between return
    the same path.

    Args:
        path: Desired path.
        reserved: Paths already claimed by the caller but not yet created.
                  They are treated as taken.

    Returns:
        Original path if free, or the first free "{stem} (n){ext}" sibling.

    Examples:
        >>> get_unique_path("/dest/Alice/photo.jpg")  # doesn't exist
        '/dest/Alice/photo.jpg'
        >>> get_unique_path("/dest/Alice/photo.jpg")  # exists
        '/dest/Alice/photo (1).jpg'
    """
    reserved = reserved or ()

    def taken(candidate: str) -> bool:
        return os.path.lexists(candidate) or candidate in reserved

    if not taken(path):
        return path

    directory, filename = os.path.split(path)
    stem, ext = os.path.splitext(filename)
    n = 1
    while True:
        candidate = os.path.join(directory, f"{stem} ({n}){ext}")
        if not taken(candidate):
            return candidate
        n += 1


def checkout_dir(path: str) -> str:
    """Ensure a directory exists, creating parents as needed.

    Args:
        path: Directory path.

    Returns:
        The same path.

    Raises:
        ValueError: If path exists as a file (not a directory).
        OSError: If the directory cannot be created.
    """
    if os.path.isfile(path):
        raise ValueError(f"Cannot create directory: {path} exists as a file")

    os.makedirs(path, exist_ok=True)
    return path


def same_path(first: str, second: str) -> bool:
    """Check if two paths point to the same location once made absolute."""
    return os.path.normcase(os.path.abspath(first)) == os.path.normcase(os.path.abspath(second))


def normalize_path(path: str) -> str:
    """Normalize a path for consistent handling.

    Handles:
    - Trailing slashes
    - Mixed forward/backward slashes
    - User home directory (~)
    - Leading/trailing whitespace

    Args:
        path: Path to normalize.

    Returns:
        Normalized path.
    """
    return os.path.normpath(os.path.expanduser(path.strip()))

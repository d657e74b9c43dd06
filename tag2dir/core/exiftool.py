"""ExifTool access for tag2dir.

One ExifTool process is kept alive for a whole scan (pyexiftool's
``-stay_open`` mode) and asked only for the people and keyword fields.
"""

import logging
import os
import shutil
import sys
from typing import Dict, List, Optional, Protocol, Sequence, Set, Tuple

import exiftool

from tag2dir.core.metadata import PEOPLE_FIELDS, TAG_FIELDS, parse_people_and_tags

logger = logging.getLogger(__name__)

# Local fallback location, relative to the project root
EXIFTOOL_DIR = os.path.join("tools", "exiftool")
EXIFTOOL_EXE = "exiftool.exe" if sys.platform == "win32" else "exiftool"

# RegionInfo carries face region names
EXTRACT_TAGS: List[str] = list(PEOPLE_FIELDS) + list(TAG_FIELDS) + ["RegionInfo"]

PeopleAndTags = Tuple[Set[str], Set[str]]


class Extractor(Protocol):
    """Anything that can read the people and tags of image files."""

    def extract(self, path: str) -> PeopleAndTags:
        ...

    def extract_many(self, paths: Sequence[str]) -> Dict[str, PeopleAndTags]:
        ...


def _local_exiftool_path(base_dir: Optional[str] = None) -> str:
    if base_dir is None:
        base_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    return os.path.join(base_dir, EXIFTOOL_DIR, EXIFTOOL_EXE)


def find_exiftool(base_dir: Optional[str] = None) -> Optional[str]:
    """Locate the ExifTool executable.

    PATH wins over a copy in tools/exiftool/ under base_dir (the project
    root by default). Returns None if neither exists.
    """
    if shutil.which("exiftool"):
        return "exiftool"

    local_path = _local_exiftool_path(base_dir)
    if os.path.exists(local_path):
        return local_path
    return None


def is_exiftool_available(base_dir: Optional[str] = None) -> bool:
    return find_exiftool(base_dir) is not None


def get_install_instructions() -> str:
    """Get manual installation instructions."""
    return (
        "ExifTool is required to read people tags. Please install it:\n"
        "  1. Download from https://exiftool.org/\n"
        "  2. Windows: rename exiftool(-k).exe to exiftool.exe\n"
        "  3. Place it in PATH or in ./tools/exiftool/"
    )


class ExifToolExtractor:
    """Reads people and tags through a long-running ExifTool process.

    Never raises for a bad file or a missing ExifTool: such files simply
    have no people and no tags.

    Usage:
        with ExifToolExtractor() as extractor:
            people, tags = extractor.extract("/photos/a.jpg")
            found = extractor.extract_many(["/photos/b.jpg", "/photos/c.jpg"])
    """

    def __init__(self, executable: Optional[str] = None, base_dir: Optional[str] = None):
        """Initialize extractor.

        Args:
            executable: ExifTool to run (default: looked up with find_exiftool).
            base_dir: Base directory for the local tools folder.
        """
        self.executable = executable
        self._base_dir = base_dir
        self._helper: Optional[exiftool.ExifToolHelper] = None

    def start(self) -> bool:
        """Start the ExifTool process if it is not running yet.

        Returns:
            True if ExifTool is running afterwards.
        """
        if self._helper is not None:
            return True

        executable = self.executable or find_exiftool(self._base_dir)
        if executable is None:
            logger.warning("ExifTool not found. Install from https://exiftool.org/")
            return False

        helper = exiftool.ExifToolHelper(executable=executable)
        try:
            helper.run()
        except Exception as e:
            logger.error(f"Failed to start ExifTool ({executable}): {e}")
            return False

        self.executable = executable
        self._helper = helper
        return True

    def stop(self) -> None:
        if self._helper is None:
            return
        try:
            self._helper.terminate()
        except Exception as e:
            logger.debug(f"Error stopping ExifTool: {e}")
        self._helper = None

    @property
    def available(self) -> bool:
        return self._helper is not None

    def read_metadata(self, paths: Sequence[str]) -> List[dict]:
        """Fetch the people/keyword fields of several files in one call.

        If ExifTool rejects the batch (one unreadable file fails the whole
        command), each file is retried on its own.

        Returns:
            One dict per path, in order; empty for files that failed.
        """
        if self._helper is None or not paths:
            return [{} for _ in paths]

        try:
            found = self._helper.get_tags(list(paths), EXTRACT_TAGS)
        except Exception as e:
            logger.debug(f"Failed to read tags from {len(paths)} file(s) starting at {paths[0]}: {e}")
            found = None

        if found is not None and len(found) == len(paths):
            return found
        if len(paths) == 1:
            return [{}]
        return [self.read_metadata([path])[0] for path in paths]

    def extract(self, path: str) -> PeopleAndTags:
        if self._helper is None or not os.path.isfile(path):
            return set(), set()
        return parse_people_and_tags(self.read_metadata([path])[0])

    def extract_many(self, paths: Sequence[str]) -> Dict[str, PeopleAndTags]:
        """Extract people and tags for several files, keyed by path."""
        existing = [path for path in paths if os.path.isfile(path)]
        results = {path: (set(), set()) for path in paths}
        for path, metadata in zip(existing, self.read_metadata(existing)):
            results[path] = parse_people_and_tags(metadata)
        return results

    def __enter__(self) -> "ExifToolExtractor":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

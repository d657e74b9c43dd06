"""Pytest configuration and fixtures."""

import os
import shutil
import tempfile
from typing import Callable, Dict, Generator, List, Set, Tuple

import pytest


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def make_file(temp_dir: str) -> Callable[..., str]:
    """Return a helper creating a file (and its parents) under temp_dir."""

    def _make(relative_path: str, data: bytes = b"fake image data") -> str:
        path = os.path.join(temp_dir, relative_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return path

    return _make


class StubExtractor:
    """Extractor returning canned people/tags by filename."""

    def __init__(self, tags_by_name: Dict[str, Tuple[Set[str], Set[str]]]):
        self.tags_by_name = tags_by_name
        self.calls = []
        self.batches = []
        self.available = True

    def extract(self, path: str) -> Tuple[Set[str], Set[str]]:
        self.calls.append(path)
        return self.tags_by_name.get(os.path.basename(path), (set(), set()))

    def extract_many(self, paths: List[str]) -> Dict[str, Tuple[Set[str], Set[str]]]:
        self.batches.append(list(paths))
        return {path: self.extract(path) for path in paths}


@pytest.fixture
def sample_photos(make_file, temp_dir: str) -> str:
    """Create a sample inbox of photos.

    Structure:
        temp_dir/inbox/
        ├── beach.jpg        (Alice, Bob)
        ├── party.JPG        (Charlie)
        ├── notes.txt        (not an image)
        ├── untagged.png     (no people)
        └── 2023/
            └── hike.heic    (Alice)
    """
    make_file("inbox/beach.jpg", b"beach")
    make_file("inbox/party.JPG", b"party")
    make_file("inbox/notes.txt", b"notes")
    make_file("inbox/untagged.png", b"untagged")
    make_file("inbox/2023/hike.heic", b"hike")
    return os.path.join(temp_dir, "inbox")


@pytest.fixture
def stub_extractor() -> StubExtractor:
    """Extractor matching the sample_photos fixture."""
    return StubExtractor({
        "beach.jpg": ({"Bob", "Alice"}, {"vacation", "sea"}),
        "party.JPG": ({"Charlie"}, {"party"}),
        "hike.heic": ({"Alice"}, set()),
    })


@pytest.fixture
def make_extractor() -> Callable[..., StubExtractor]:
    """Return the StubExtractor class for tests needing custom tags."""
    return StubExtractor

"""Image discovery for tag2dir."""

import logging
import os
import threading
from typing import Dict, Iterator, List, Optional, Tuple

from tag2dir.core.exiftool import Extractor, PeopleAndTags
from tag2dir.core.models import ImageInfo, ProgressCallback, ScanResult

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp",
    ".heic", ".heif", ".raw", ".cr2", ".nef", ".arw", ".dng",
})


def is_allowed_image(path: str) -> bool:
    """Check if a file has a supported image extension (case-insensitive)."""
    return os.path.splitext(path)[1].lower() in ALLOWED_EXTENSIONS


def _fast_walk(path: str) -> Iterator[Tuple[str, List[str], List[str]]]:
    """Directory walker on os.scandir, yielding (dirpath, dirnames, filenames).

    Unreadable entries and directories are logged and skipped.
    """
    try:
        with os.scandir(path) as entries:
            dirs = []
            files = []
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        dirs.append(entry.name)
                    else:
                        files.append(entry.name)
                except OSError as e:
                    logger.debug(f"Cannot access entry {entry.path}: {e}")
                    continue
            dirs.sort()
            files.sort()
            yield path, dirs, files
            for d in dirs:
                yield from _fast_walk(os.path.join(path, d))
    except OSError as e:
        logger.debug(f"Cannot access directory {path}: {e}")


def iter_images(path: str, recursive: bool = True) -> Iterator[str]:
    """Yield paths of supported images under path, in sorted walk order."""
    if not os.path.isdir(path):
        return
    for dirpath, dirnames, filenames in _fast_walk(path):
        for filename in filenames:
            if is_allowed_image(filename):
                yield os.path.join(dirpath, filename)
        if not recursive:
            break


class ImageScanner:
    """Finds images and reads the people tagged in them.

    Metadata is read batch_size files at a time, so one ExifTool call
    covers many images.

    Usage:
        with ExifToolExtractor() as extractor:
            scanner = ImageScanner(extractor)
            result = scanner.scan("/photos/inbox")

        for image in result.images:
            print(image.filename, image.people_display)
    """

    DEFAULT_BATCH_SIZE = 50

    def __init__(
        self,
        extractor: Extractor,
        recursive: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE
    ):
        """Initialize scanner.

        Args:
            extractor: Reads (people, tags) for image files.
            recursive: Whether to descend into subdirectories.
            batch_size: Number of files handed to the extractor at once.
        """
        self.extractor = extractor
        self.recursive = recursive
        self.batch_size = max(1, batch_size)

    def scan(
        self,
        path: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> ScanResult:
        """Scan a directory tree for images and their people.

        Args:
            path: Root directory to scan.
            on_progress: Optional callback. The total is not known in
                         advance, so it is reported as the running count.
            cancel_event: Optional threading.Event for cooperative
                          cancellation. Images found so far are kept.

        Returns:
            ScanResult with one ImageInfo per image found.
        """
        result = ScanResult()

        if not os.path.isdir(path):
            result.errors.append(f"Source folder does not exist: {path}")
            return result

        batch: List[str] = []
        for image_path in iter_images(path, self.recursive):
            batch.append(image_path)
            if len(batch) >= self.batch_size:
                if not self._add_batch(batch, result, on_progress, cancel_event):
                    break
                batch = []
        else:
            if batch:
                self._add_batch(batch, result, on_progress, cancel_event)

        if on_progress:
            total = len(result.images)
            on_progress(total, total, "Scan cancelled" if result.cancelled else "Scan complete")

        logger.info(
            f"Scanned {result.image_count} images in {path}, "
            f"{result.people_count} people found"
        )
        return result

    def _add_batch(
        self,
        paths: List[str],
        result: ScanResult,
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event]
    ) -> bool:
        """Read one batch and append its images.

        Returns:
            False if the scan was cancelled.
        """
        if cancel_event and cancel_event.is_set():
            result.cancelled = True
            return False

        found = self._read_batch(paths)
        for image_path in paths:
            if cancel_event and cancel_event.is_set():
                result.cancelled = True
                return False

            count = len(result.images) + 1
            if on_progress:
                on_progress(count, count, f"Scanning: {os.path.basename(image_path)}")

            people, tags = found.get(image_path, (set(), set()))
            result.images.append(self._make_image(image_path, people, tags, result))
        return True

    def _read_batch(self, paths: List[str]) -> Dict[str, PeopleAndTags]:
        try:
            return self.extractor.extract_many(paths)
        except Exception as e:
            logger.debug(f"Batch extraction failed for {len(paths)} files, reading one by one: {e}")

        found = {}
        for image_path in paths:
            try:
                found[image_path] = self.extractor.extract(image_path)
            except Exception as e:
                logger.debug(f"Metadata extraction failed for {image_path}: {e}")
                found[image_path] = (set(), set())
        return found

    def _make_image(self, image_path: str, people, tags, result: ScanResult) -> ImageInfo:
        people_list = sorted(p for p in people if p and p.strip())
        for person in people_list:
            result.people_counts[person] = result.people_counts.get(person, 0) + 1

        return ImageInfo(
            path=image_path,
            people=people_list,
            tags=sorted(tags),
            is_selected=bool(people_list),
            selected_person=people_list[0] if people_list else None
        )

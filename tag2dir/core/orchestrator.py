"""High-level orchestrator for tag2dir.

Coordinates scanning, previewing, moving and undoing. Used by the CLI.
"""

import logging
import os
import threading
import time
from typing import Dict, List, Optional

from tag2dir.core.exiftool import ExifToolExtractor, Extractor
from tag2dir.core.history import DEFAULT_HISTORY_SIZE
from tag2dir.core.logger import LOG_DIR_NAME, create_move_log
from tag2dir.core.models import (
    ImageInfo, MoveRecord, MoveResult, PersonMoveGroup, ProgressCallback, ScanResult, UndoResult
)
from tag2dir.core.mover import FileMover
from tag2dir.core.scanner import ImageScanner
from tag2dir.core.utils import sanitize_name

logger = logging.getLogger(__name__)


def group_by_person(records: List[MoveRecord], dest_root: str) -> List[PersonMoveGroup]:
    """Group preview records by person, sorted by person name.

    Args:
        records: Planned or executed move records.
        dest_root: Destination root the records were planned for.

    Returns:
        One PersonMoveGroup per person, records in their original order.
    """
    groups: Dict[str, PersonMoveGroup] = {}
    for record in records:
        person = record.person or "Unknown"
        if person not in groups:
            groups[person] = PersonMoveGroup(
                person=person,
                target_folder=os.path.join(dest_root, sanitize_name(person))
            )
        groups[person].records.append(record)
    return [groups[name] for name in sorted(groups)]


class Tag2DirOrchestrator:
    """Coordinates a scan → preview → move → undo session.

    Keeps the list of scanned images; images that were moved are dropped
    from it so a second move does not pick them up again.

    Usage:
        orchestrator = Tag2DirOrchestrator("/photos/inbox", "/photos/people")

        scan = orchestrator.scan(on_progress=my_callback)
        for group in orchestrator.preview_groups():
            print(f"{group.person}: {group.file_count} files")

        result = orchestrator.move()
        if result.has_errors():
            ...
        orchestrator.undo()
    """

    def __init__(
        self,
        source_path: str,
        dest_path: str,
        history_size: int = DEFAULT_HISTORY_SIZE,
        copy_workers: int = FileMover.DEFAULT_COPY_WORKERS,
        verbose: bool = False,
        extractor: Optional[Extractor] = None
    ):
        """Initialize orchestrator.

        Args:
            source_path: Folder to scan for tagged images.
            dest_path: Root folder for per-person folders.
            history_size: Number of batches kept for undo.
            copy_workers: Parallel workers for copy/delete.
            verbose: If True, log every move to _tag2dir/moves.txt in dest_path.
            extractor: Metadata extractor (default: ExifTool).
        """
        self.source_path = source_path
        self.dest_path = dest_path
        self.verbose = verbose
        self.log_dir = os.path.join(dest_path, LOG_DIR_NAME)
        self.images: List[ImageInfo] = []
        self._extractor = extractor
        self._move_log = create_move_log(self.log_dir, enabled=verbose)
        self.mover = FileMover(
            history_size=history_size,
            copy_workers=copy_workers,
            move_log=self._move_log
        )

    @property
    def can_undo(self) -> bool:
        return self.mover.can_undo

    def scan(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> ScanResult:
        """Scan the source folder, replacing the current image list.

        Uses the injected extractor if one was given, otherwise starts
        ExifTool for the duration of the scan.
        """
        if self._extractor is not None:
            result = ImageScanner(self._extractor).scan(self.source_path, on_progress, cancel_event)
            result.exiftool_available = getattr(self._extractor, "available", True)
        else:
            with ExifToolExtractor() as extractor:
                if not extractor.available:
                    logger.warning("ExifTool unavailable, images will have no people")
                result = ImageScanner(extractor).scan(self.source_path, on_progress, cancel_event)
                result.exiftool_available = extractor.available

        self.images = list(result.images)
        return result

    def select(self, path: str, person: Optional[str], included: bool = True) -> bool:
        """Change the target person of one scanned image.

        Returns:
            True if the image was found.
        """
        for image in self.images:
            if image.path == path:
                image.selected_person = person
                image.is_selected = included
                return True
        return False

    def select_by_person(self, person: str) -> int:
        """Send every image tagged with person to that person's folder.

        Images that also carry other people switch to this one. Images
        without the person keep their current selection.

        Returns:
            Number of images now selected for person.
        """
        count = 0
        for image in self.images:
            if person in image.people:
                image.is_selected = True
                image.selected_person = person
                count += 1
        logger.debug(f"Selected {count} images for {person}")
        return count

    def toggle_select_all(self) -> bool:
        """Include every image, or exclude all of them if all were included.

        Returns:
            The new included state.
        """
        include = not all(image.is_selected for image in self.images)
        for image in self.images:
            image.is_selected = include
        return include

    def preview(self) -> List[MoveRecord]:
        """Plan the move of the current selection without changing anything."""
        return self.mover.plan([image.to_move_item() for image in self.images], self.dest_path)

    def preview_groups(self) -> List[PersonMoveGroup]:
        """Plan the move and group it by person folder."""
        return group_by_person(self.preview(), self.dest_path)

    def move(self, on_progress: Optional[ProgressCallback] = None) -> MoveResult:
        """Move the selected images into their person folders."""
        start = time.time()
        items = [image.to_move_item() for image in self.images]
        result = self.mover.execute(items, self.dest_path, on_progress)

        moved_paths = {record.from_path for record in result.moved}
        self.images = [image for image in self.images if image.path not in moved_paths]

        logger.debug(f"Move finished in {time.time() - start:.2f}s")
        return result

    def undo(self, on_progress: Optional[ProgressCallback] = None) -> UndoResult:
        """Undo the most recent move.

        Restored files are not added back to the image list; scan again to
        pick them up.
        """
        return self.mover.undo_last(on_progress)

    def close(self) -> None:
        self._move_log.close()

    def __enter__(self) -> "Tag2DirOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

"""Data models for tag2dir."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class MoveItem:
    """A candidate file to relocate.

    Owned by the caller; the mover only reads it.
    """
    source_path: str
    included: bool = True
    person: Optional[str] = None

    def is_eligible(self) -> bool:
        """Check if this item takes part in a move."""
        return self.included and bool(self.person)


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """One planned or completed move."""
    from_path: str
    to_path: str
    person: str

    @property
    def filename(self) -> str:
        """Get the original filename."""
        return os.path.basename(self.from_path)


@dataclass(frozen=True)
class MoveBatch:
    """Records of one executed move, kept in history for undo."""
    records: Tuple[MoveRecord, ...]
    moved_at: datetime
    destination_root: str

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True, slots=True)
class MoveError:
    """A path that could not be moved, with a readable reason."""
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class MoveResult:
    """Results from executing a batch of moves."""
    moved: List[MoveRecord] = field(default_factory=list)
    errors: List[MoveError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.moved)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def has_errors(self) -> bool:
        return len(self.errors) > 0


@dataclass
class UndoResult:
    """Results from undoing the most recent batch."""
    undone: List[MoveRecord] = field(default_factory=list)
    errors: List[MoveError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.undone)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def has_errors(self) -> bool:
        return len(self.errors) > 0


@dataclass
class ImageInfo:
    """An image found during scanning, with the people tagged in it."""
    path: str
    people: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    is_selected: bool = False
    selected_person: Optional[str] = None

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def people_display(self) -> str:
        return ", ".join(self.people) if self.people else "(no people)"

    @property
    def tags_display(self) -> str:
        return ", ".join(self.tags) if self.tags else "(no tags)"

    def to_move_item(self) -> MoveItem:
        """Snapshot the current selection as an immutable MoveItem."""
        return MoveItem(
            source_path=self.path,
            included=self.is_selected,
            person=self.selected_person
        )


@dataclass
class PersonMoveGroup:
    """Preview records that share one person folder."""
    person: str
    target_folder: str
    records: List[MoveRecord] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.records)


@dataclass
class ScanResult:
    """Results from scanning a source directory."""
    images: List[ImageInfo] = field(default_factory=list)
    people_counts: Dict[str, int] = field(default_factory=dict)
    exiftool_available: bool = False
    cancelled: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def people_count(self) -> int:
        return len(self.people_counts)

    @property
    def tagged_count(self) -> int:
        """Number of images with at least one person."""
        return sum(1 for image in self.images if image.people)


# Type aliases for callbacks
# (current_item, total_items, message) -> None
ProgressCallback = Callable[[int, int, str], None]

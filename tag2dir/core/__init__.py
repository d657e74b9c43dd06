"""Core logic for tag2dir: planning, moving and undoing person-folder moves."""

from tag2dir.core.models import (
    MoveItem,
    MoveRecord,
    MoveBatch,
    MoveError,
    MoveResult,
    UndoResult,
    ImageInfo,
    PersonMoveGroup,
    ScanResult,
    ProgressCallback,
)

from tag2dir.core.utils import (
    sanitize_name,
    get_unique_path,
    checkout_dir,
    exists,
    normalize_path,
)

from tag2dir.core.history import (
    MoveHistory,
    DEFAULT_HISTORY_SIZE,
)

from tag2dir.core.logger import (
    MoveLogFile,
    NullMoveLog,
    create_move_log,
    write_move_summary,
)

from tag2dir.core.metadata import (
    parse_people_and_tags,
    PEOPLE_FIELDS,
    TAG_FIELDS,
)

from tag2dir.core.exiftool import (
    Extractor,
    ExifToolExtractor,
    find_exiftool,
    is_exiftool_available,
)

from tag2dir.core.scanner import (
    ImageScanner,
    iter_images,
    is_allowed_image,
)

from tag2dir.core.mover import (
    FileMover,
    transfer_file,
)

from tag2dir.core.orchestrator import (
    Tag2DirOrchestrator,
    group_by_person,
)

__all__ = [
    # Models
    "MoveItem",
    "MoveRecord",
    "MoveBatch",
    "MoveError",
    "MoveResult",
    "UndoResult",
    "ImageInfo",
    "PersonMoveGroup",
    "ScanResult",
    "ProgressCallback",
    # Utils
    "sanitize_name",
    "get_unique_path",
    "checkout_dir",
    "exists",
    "normalize_path",
    # History
    "MoveHistory",
    "DEFAULT_HISTORY_SIZE",
    # Logger
    "MoveLogFile",
    "NullMoveLog",
    "create_move_log",
    "write_move_summary",
    # Metadata
    "parse_people_and_tags",
    "PEOPLE_FIELDS",
    "TAG_FIELDS",
    # ExifTool
    "Extractor",
    "ExifToolExtractor",
    "find_exiftool",
    "is_exiftool_available",
    # Scanner
    "ImageScanner",
    "iter_images",
    "is_allowed_image",
    # Mover
    "FileMover",
    "transfer_file",
    # Orchestrator
    "Tag2DirOrchestrator",
    "group_by_person",
]

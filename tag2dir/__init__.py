"""tag2dir - Sort photos into per-person folders using their people tags.

High-level API:
    from tag2dir import Tag2DirOrchestrator

    orchestrator = Tag2DirOrchestrator("/photos/inbox", "/photos/people")
    orchestrator.scan()

    # Preview where files would go
    for record in orchestrator.preview():
        print(f"{record.from_path} -> {record.to_path}")

    # Move them, and take it back if needed
    result = orchestrator.move()
    print(f"Moved {result.success_count} files")
    orchestrator.undo()

Lower-level API:
    from tag2dir import FileMover, MoveItem

    mover = FileMover()
    mover.execute([MoveItem("/photos/a.jpg", True, "Alice")], "/photos/people")
"""

__version__ = "1.0.0"

# Public API exports
from tag2dir.core.orchestrator import Tag2DirOrchestrator
from tag2dir.core.mover import FileMover
from tag2dir.core.history import MoveHistory
from tag2dir.core.models import (
    MoveItem,
    MoveRecord,
    MoveBatch,
    MoveError,
    MoveResult,
    UndoResult,
    ImageInfo,
    ScanResult,
)

__all__ = [
    "Tag2DirOrchestrator",
    "FileMover",
    "MoveHistory",
    "MoveItem",
    "MoveRecord",
    "MoveBatch",
    "MoveError",
    "MoveResult",
    "UndoResult",
    "ImageInfo",
    "ScanResult",
    "__version__",
]

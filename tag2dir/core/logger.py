"""File logs written into the destination root.

Two files live in DEST/_tag2dir/: moves.txt, an append-only line per file
touched (only with --verbose), and summary.txt, rewritten after each run.
"""

import os
import time
from typing import Optional, TextIO, Union

from tag2dir.core.models import MoveError, MoveRecord, MoveResult, UndoResult

# Directory created inside the destination root for log files
LOG_DIR_NAME = "_tag2dir"
MOVES_FILENAME = "moves.txt"
SUMMARY_FILENAME = "summary.txt"


class MoveLogFile:
    """Timestamped, append-only record of every move and restore.

    Nothing is created on disk until the first entry is written.

    Usage:
        with MoveLogFile("/dest/_tag2dir") as move_log:
            move_log.begin("move", "/dest")
            move_log.moved(record)
    """

    def __init__(self, output_dir: str, filename: str = MOVES_FILENAME):
        self.output_dir = output_dir
        self.filepath = os.path.join(output_dir, filename)
        self._handle: Optional[TextIO] = None

    def _write(self, kind: str, text: str) -> None:
        if self._handle is None:
            os.makedirs(self.output_dir, exist_ok=True)
            self._handle = open(self.filepath, "a", encoding="utf-8")
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        self._handle.write(f"{timestamp} {kind:<8}{text}\n")

    def begin(self, action: str, dest_root: str) -> None:
        """Mark the start of a move or undo batch."""
        self._write("BEGIN", f"{action} ({dest_root})")

    def moved(self, record: MoveRecord) -> None:
        self._write("MOVE", f"{record.from_path} -> {record.to_path} [{record.person}]")

    def restored(self, record: MoveRecord) -> None:
        self._write("RESTORE", f"{record.from_path} -> {record.to_path}")

    def failed(self, error: MoveError) -> None:
        self._write("ERROR", str(error))

    def flush(self) -> None:
        if self._handle:
            self._handle.flush()

    def close(self) -> None:
        if self._handle:
            self._handle.close()
            self._handle = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def __enter__(self) -> "MoveLogFile":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class NullMoveLog:
    """Stands in for MoveLogFile when detailed logging is off."""

    def begin(self, action: str, dest_root: str) -> None:
        pass

    def moved(self, record: MoveRecord) -> None:
        pass

    def restored(self, record: MoveRecord) -> None:
        pass

    def failed(self, error: MoveError) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "NullMoveLog":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass


MoveLog = Union[MoveLogFile, NullMoveLog]


def create_move_log(output_dir: str, enabled: bool = True) -> MoveLog:
    """Return a MoveLogFile in output_dir, or a NullMoveLog if not enabled."""
    if enabled:
        return MoveLogFile(output_dir)
    return NullMoveLog()


def write_move_summary(
    output_dir: str,
    source_path: str,
    dest_root: str,
    result: MoveResult,
    elapsed_time: float,
    undo: Optional[UndoResult] = None
) -> str:
    """Write summary.txt describing one move run.

    Args:
        output_dir: Directory for the summary file.
        source_path: Scanned source directory.
        dest_root: Destination root of the move.
        result: Result of the executed batch.
        elapsed_time: Seconds spent moving.
        undo: Result of undoing the batch, if it was undone.

    Returns:
        Path to summary file.
    """
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, SUMMARY_FILENAME)

    if elapsed_time >= 60:
        duration = f"{int(elapsed_time // 60)}m {int(elapsed_time % 60)}s"
    else:
        duration = f"{elapsed_time:.1f}s"

    people = sorted({record.person for record in result.moved})

    with open(filepath, "w", encoding="utf-8") as f:
        f.write("tag2dir - Move Summary\n")
        f.write("=" * 40 + "\n\n")
        f.write(f"Source:      {source_path}\n")
        f.write(f"Destination: {dest_root}\n")
        f.write(f"Finished:    {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
        f.write(f"Duration:    {duration}\n\n")

        f.write(f"Files moved:   {result.success_count:,}\n")
        f.write(f"People:        {len(people):,}\n")
        if result.errors:
            f.write(f"Errors:        {result.error_count:,}\n")

        for person in people:
            count = sum(1 for record in result.moved if record.person == person)
            f.write(f"  {person}: {count:,}\n")

        if result.errors:
            f.write("\nFailed files:\n")
            for error in result.errors:
                f.write(f"  {error.path} | {error.message}\n")

        if undo is not None:
            f.write(f"\nUndone: {undo.success_count:,} restored")
            if undo.errors:
                f.write(f", {undo.error_count:,} failed\n")
                for error in undo.errors:
                    f.write(f"  {error.path} | {error.message}\n")
            else:
                f.write("\n")

    return filepath

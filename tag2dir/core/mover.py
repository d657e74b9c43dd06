"""Move planning, execution and undo for tag2dir.

Files are moved with copy-then-delete rather than rename so that moves
across volumes behave the same as moves within one. This is not atomic:
if deleting the source fails, the fresh copy is removed again so the file
ends up in exactly one place, but a crash in between can leave both.
"""

import logging
import os
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Set, Union

import filedate

from tag2dir.core.history import DEFAULT_HISTORY_SIZE, MoveHistory
from tag2dir.core.logger import MoveLog, NullMoveLog
from tag2dir.core.models import (
    MoveBatch, MoveError, MoveItem, MoveRecord, MoveResult, ProgressCallback, UndoResult
)
from tag2dir.core.utils import checkout_dir, get_unique_path, same_path, sanitize_name

logger = logging.getLogger(__name__)

SOURCE_MISSING = "source file missing"
TARGET_MISSING = "target file missing, cannot undo"


@dataclass(frozen=True)
class _PendingMove:
    """A move whose destination is resolved but not yet performed."""
    source: str
    target: str
    person: str

    @property
    def is_noop(self) -> bool:
        return same_path(self.source, self.target)


def _preserve_dates(src_path: str, dest_path: str) -> None:
    """Carry permissions and dates over to a copy (non-fatal)."""
    try:
        shutil.copystat(src_path, dest_path)
        dates = filedate.File(src_path).get()
        filedate.File(dest_path).set(created=dates["created"], modified=dates["modified"])
    except Exception as e:
        logger.debug(f"Could not carry file dates over to {dest_path}: {e}")


def copy_exclusive(src_path: str, dest_path: str) -> None:
    """Copy a file to a path that must not exist yet.

    Raises:
        FileExistsError: If dest_path already exists (nothing is overwritten).
        OSError: If the copy fails; a partial copy is removed first.
    """
    with open(src_path, "rb") as fsrc:
        # "x" mode refuses to open an existing file
        fdst = open(dest_path, "xb")
        try:
            with fdst:
                shutil.copyfileobj(fsrc, fdst)
        except BaseException:
            _remove_quietly(dest_path)
            raise
    _preserve_dates(src_path, dest_path)


def transfer_file(src_path: str, dest_path: str) -> None:
    """Move a file by copying it and deleting the original.

    If the original cannot be deleted, the copy is deleted again and the
    error is re-raised, leaving the file only at src_path. If the original
    vanished after it was copied, the copy is kept: it is the only one left.

    Raises:
        OSError: If the copy or the delete fails.
    """
    copy_exclusive(src_path, dest_path)
    try:
        os.remove(src_path)
    except FileNotFoundError:
        logger.warning(f"{src_path} disappeared after it was copied, keeping {dest_path}")
    except OSError:
        if not _remove_quietly(dest_path):
            logger.error(f"Rollback failed, file now exists twice: {src_path} and {dest_path}")
        raise


def _remove_quietly(path: str) -> bool:
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")
        return False


class FileMover:
    """Plans, executes and undoes batches of person-folder moves.

    Each FileMover owns its own bounded history; execute() and undo_last()
    are serialized so only one of them changes history at a time.

    Usage:
        mover = FileMover(history_size=20)

        preview = mover.plan(items, "/photos/people")   # no changes made
        result = mover.execute(items, "/photos/people")
        print(f"Moved {result.success_count}, failed {result.error_count}")

        if mover.can_undo:
            mover.undo_last()
    """

    # Copy/delete runs one file at a time unless more workers are requested.
    DEFAULT_COPY_WORKERS = 1

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        copy_workers: int = DEFAULT_COPY_WORKERS,
        move_log: Optional[MoveLog] = None,
        history: Optional[MoveHistory] = None
    ):
        """Initialize mover.

        Args:
            history_size: Number of batches kept for undo (default 20).
                          Ignored when history is given.
            copy_workers: Number of parallel workers for copy/delete (default 1).
            move_log: Optional detailed file log.
            history: Existing history to use instead of a new one.
        """
        self.history = history if history is not None else MoveHistory(history_size)
        self.copy_workers = max(1, copy_workers)
        self.move_log = move_log or NullMoveLog()
        self._lock = threading.Lock()

    @property
    def can_undo(self) -> bool:
        """Whether there is a batch to undo."""
        return self.history.has_any()

    def _target_for(
        self,
        source: str,
        person: str,
        dest_root: str,
        reserved: Set[str]
    ) -> str:
        """Resolve the destination of one file inside its person folder."""
        target_dir = os.path.join(dest_root, sanitize_name(person))
        candidate = os.path.join(target_dir, os.path.basename(source))
        if same_path(source, candidate):
            return candidate
        target = get_unique_path(candidate, reserved)
        reserved.add(target)
        return target

    def plan(self, items: Iterable[MoveItem], dest_root: str) -> List[MoveRecord]:
        """Preview the moves for a selection without touching the filesystem.

        Items that are not included or have no person are skipped. Input
        order is preserved.

        Args:
            items: Candidate files.
            dest_root: Root under which person folders are created.

        Returns:
            Planned records. Execution recomputes destinations, so they may
            differ by a numeric suffix if the filesystem changes meanwhile.
        """
        reserved: Set[str] = set()
        records = []
        for item in items:
            if not item.is_eligible():
                continue
            target = self._target_for(item.source_path, item.person, dest_root, reserved)
            records.append(MoveRecord(
                from_path=item.source_path,
                to_path=target,
                person=item.person
            ))
        return records

    def _prepare(
        self,
        item: MoveItem,
        dest_root: str,
        reserved: Set[str]
    ) -> Union[_PendingMove, MoveError]:
        if not os.path.isfile(item.source_path):
            return MoveError(item.source_path, SOURCE_MISSING)
        target = self._target_for(item.source_path, item.person, dest_root, reserved)
        return _PendingMove(source=item.source_path, target=target, person=item.person)

    def _perform(self, pending: _PendingMove) -> Union[MoveRecord, MoveError]:
        """Create the person folder and move one file into it."""
        try:
            checkout_dir(os.path.dirname(pending.target))
            if not pending.is_noop:
                transfer_file(pending.source, pending.target)
        except (OSError, ValueError) as e:
            return MoveError(pending.source, str(e))
        return MoveRecord(from_path=pending.source, to_path=pending.target, person=pending.person)

    def execute(
        self,
        items: Iterable[MoveItem],
        dest_root: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> MoveResult:
        """Move the selected files into per-person folders under dest_root.

        A failing item never stops the others. If at least one file was
        moved, the batch is pushed onto history. A file that already sits
        at DEST/<person>/<name> is left in place and recorded as moved,
        instead of being copied next to itself with a " (1)" suffix.

        Args:
            items: Candidate files. Ineligible items are skipped silently.
            dest_root: Root folder; created if missing.
            on_progress: Optional callback for progress updates.

        Returns:
            MoveResult with moved records (input order) and errors. If
            dest_root cannot be created, errors holds a single entry for it
            and nothing else is attempted.
        """
        with self._lock:
            result = MoveResult()

            try:
                checkout_dir(dest_root)
            except (OSError, ValueError) as e:
                logger.warning(f"Cannot create destination root {dest_root}: {e}")
                result.errors.append(MoveError(dest_root, f"cannot create destination root: {e}"))
                return result

            self.move_log.begin("move", dest_root)
            eligible = [item for item in items if item.is_eligible()]
            total = len(eligible)
            reserved: Set[str] = set()
            outcomes: List[Optional[Union[MoveRecord, MoveError]]] = [None] * total

            if self.copy_workers == 1:
                for i, item in enumerate(eligible):
                    outcome = self._prepare(item, dest_root, reserved)
                    if isinstance(outcome, _PendingMove):
                        outcome = self._perform(outcome)
                    outcomes[i] = outcome
                    self._log_outcome(outcome)
                    if on_progress:
                        on_progress(i + 1, total, f"Moving: {os.path.basename(item.source_path)}")
            else:
                # Destinations are resolved one by one, only copying runs in parallel
                pending = {}
                for i, item in enumerate(eligible):
                    outcome = self._prepare(item, dest_root, reserved)
                    if isinstance(outcome, _PendingMove):
                        pending[i] = outcome
                    else:
                        outcomes[i] = outcome
                        self._log_outcome(outcome)

                completed = total - len(pending)
                with ThreadPoolExecutor(max_workers=self.copy_workers) as executor:
                    future_to_index = {
                        executor.submit(self._perform, move): i
                        for i, move in pending.items()
                    }
                    for future in as_completed(future_to_index):
                        i = future_to_index[future]
                        outcomes[i] = future.result()
                        self._log_outcome(outcomes[i])
                        completed += 1
                        if on_progress:
                            on_progress(completed, total, f"Moving: {os.path.basename(pending[i].source)}")

            for outcome in outcomes:
                if isinstance(outcome, MoveRecord):
                    result.moved.append(outcome)
                else:
                    result.errors.append(outcome)

            if result.moved:
                self.history.push(MoveBatch(
                    records=tuple(result.moved),
                    moved_at=datetime.now(),
                    destination_root=dest_root
                ))

            logger.info(
                f"Moved {result.success_count} files into {dest_root}"
                f" ({result.error_count} failed)"
            )
            self.move_log.flush()
            return result

    def _log_outcome(self, outcome: Union[MoveRecord, MoveError]) -> None:
        if isinstance(outcome, MoveRecord):
            self.move_log.moved(outcome)
        else:
            logger.warning(f"Failed to move {outcome.path}: {outcome.message}")
            self.move_log.failed(outcome)

    def undo_last(self, on_progress: Optional[ProgressCallback] = None) -> UndoResult:
        """Move the files of the most recent batch back where they came from.

        The batch is removed from history even if some files cannot be
        restored; there is no redo. Records are reversed last-moved first.

        Args:
            on_progress: Optional callback for progress updates.

        Returns:
            UndoResult with restored records and errors. Empty if there was
            nothing to undo.
        """
        with self._lock:
            result = UndoResult()
            batch = self.history.pop_last()
            if batch is None:
                return result

            self.move_log.begin("undo", batch.destination_root)
            total = len(batch.records)
            for i, record in enumerate(reversed(batch.records)):
                outcome = self._restore(record)
                if isinstance(outcome, MoveRecord):
                    result.undone.append(outcome)
                    self.move_log.restored(outcome)
                else:
                    result.errors.append(outcome)
                    logger.warning(f"Failed to undo {outcome.path}: {outcome.message}")
                    self.move_log.failed(outcome)
                if on_progress:
                    on_progress(i + 1, total, f"Restoring: {record.filename}")

            logger.info(
                f"Undid {result.success_count} of {total} moves"
                f" from {batch.moved_at:%Y-%m-%d %H:%M:%S}"
            )
            self.move_log.flush()
            return result

    def _restore(self, record: MoveRecord) -> Union[MoveRecord, MoveError]:
        if not os.path.isfile(record.to_path):
            return MoveError(record.to_path, TARGET_MISSING)

        if same_path(record.from_path, record.to_path):
            # File was already in place when the batch ran
            return MoveRecord(from_path=record.to_path, to_path=record.from_path, person=record.person)

        restore_path = get_unique_path(record.from_path)
        try:
            restore_dir = os.path.dirname(restore_path)
            if restore_dir:
                checkout_dir(restore_dir)
            transfer_file(record.to_path, restore_path)
        except (OSError, ValueError) as e:
            return MoveError(record.to_path, str(e))

        return MoveRecord(from_path=record.to_path, to_path=restore_path, person=record.person)

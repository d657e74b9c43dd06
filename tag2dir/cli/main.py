"""Command-line interface for tag2dir."""

import argparse
import os
import shutil
import sys
import time
from typing import List, Optional

from tqdm import tqdm

from tag2dir import __version__
from tag2dir.cli.settings import Settings
from tag2dir.cli.wizard import ask_path, confirm
from tag2dir.core.exiftool import get_install_instructions
from tag2dir.core.logger import write_move_summary
from tag2dir.core.models import MoveError, ScanResult
from tag2dir.core.orchestrator import Tag2DirOrchestrator
from tag2dir.core.utils import exists, normalize_path


DESCRIPTION = """tag2dir

Sorts photos into one folder per person, using the people/face tags stored
in their metadata (read with ExifTool).

Each image goes to DESTINATION/<person>/<filename>. Existing files are never
overwritten: a " (1)", " (2)", ... suffix is added instead. Files are copied
and then deleted, so moving across drives works too.

After a move you are offered to undo it, which puts every file back where
it came from.
"""

# Maximum number of errors printed before summarizing the rest
MAX_ERRORS_SHOWN = 10


def create_progress_callback(desc: str = "Processing"):
    """Create a tqdm-based progress callback.

    Args:
        desc: Description for progress bar.

    Returns:
        Tuple of (callback function, tqdm instance).
    """
    pbar = tqdm(total=100, desc=desc)

    terminal_width = shutil.get_terminal_size().columns
    # Leave room for percentage, bar and counts
    max_desc_width = max(20, min(80, terminal_width - 40))

    def callback(current: int, total: int, message: str):
        pbar.total = total
        pbar.n = current
        if len(message) > max_desc_width:
            message = message[:max_desc_width - 3] + "..."
        pbar.set_description(message)
        pbar.refresh()

    return callback, pbar


def print_errors(errors: List[MoveError]) -> None:
    """Print up to MAX_ERRORS_SHOWN errors."""
    if not errors:
        return
    print("\nErrors:")
    for error in errors[:MAX_ERRORS_SHOWN]:
        print(f"  {error}")
    if len(errors) > MAX_ERRORS_SHOWN:
        print(f"  ... and {len(errors) - MAX_ERRORS_SHOWN} more")


def run_scan(orchestrator: Tag2DirOrchestrator) -> ScanResult:
    """Scan the source folder with a progress bar and print what was found."""
    print(f"\nScanning: {orchestrator.source_path}")
    callback, pbar = create_progress_callback("Scanning")
    try:
        scan = orchestrator.scan(on_progress=callback)
    finally:
        pbar.close()

    for error in scan.errors:
        print(f"Error: {error}")

    if not scan.exiftool_available:
        print("\nExifTool: NOT FOUND")
        print(get_install_instructions())

    print(f"\nFound {scan.image_count} images, {scan.tagged_count} with people")
    for person in sorted(scan.people_counts):
        print(f"  {person}: {scan.people_counts[person]}")
    return scan


def apply_selection(
    orchestrator: Tag2DirOrchestrator,
    people: Optional[List[str]] = None,
    toggle_all: bool = False
) -> None:
    """Apply --toggle-all and --person choices to the scanned images.

    People are applied in order, so for a photo showing several of them
    the last one named wins.
    """
    if toggle_all:
        included = orchestrator.toggle_select_all()
        print(f"\n{'Included' if included else 'Excluded'} all {len(orchestrator.images)} images")

    for person in people or []:
        count = orchestrator.select_by_person(person)
        if count:
            print(f"Selected {count} images for {person}")
        else:
            print(f"Warning: no images tagged with {person}")


def print_preview(orchestrator: Tag2DirOrchestrator) -> int:
    """Print the planned moves grouped by person.

    Returns:
        Number of files that would be moved.
    """
    groups = orchestrator.preview_groups()
    total = sum(group.file_count for group in groups)

    print(f"\nWould move {total} files into {len(groups)} person folders:")
    for group in groups:
        print(f"\n  {group.person} -> {group.target_folder} ({group.file_count} files)")
        for record in group.records:
            print(f"      {record.filename} -> {os.path.basename(record.to_path)}")
    return total


def run_dry_run(
    path: str,
    destination: str,
    history_size: int,
    people: Optional[List[str]] = None,
    toggle_all: bool = False
) -> int:
    """Run preview-only mode.

    Returns:
        Exit code (0 for success).
    """
    print("\n=== DRY RUN MODE ===")
    print("No files will be moved.")

    if not exists(path):
        print(f"Error: Path does not exist: {path}")
        return 1

    print(f"Source:      {path}")
    print(f"Destination: {destination}")

    with Tag2DirOrchestrator(path, destination, history_size=history_size) as orchestrator:
        run_scan(orchestrator)
        apply_selection(orchestrator, people, toggle_all)
        print_preview(orchestrator)

    print("\n=== END DRY RUN ===")
    return 0


def run_move(
    path: str,
    destination: str,
    history_size: int,
    copy_workers: int,
    verbose: bool = False,
    assume_yes: bool = False,
    people: Optional[List[str]] = None,
    toggle_all: bool = False
) -> int:
    """Scan, confirm, move, and offer to undo.

    Args:
        path: Folder to scan.
        destination: Root folder for person folders.
        history_size: Number of batches kept for undo.
        copy_workers: Parallel workers for copy/delete.
        verbose: If True, log every move to a file.
        assume_yes: Skip the confirmation and undo prompts.
        people: People whose photos go to their own folder, in order.
        toggle_all: Toggle the inclusion of every image before that.

    Returns:
        Exit code (0 success, 1 invalid input or cancelled, 2 some files failed).
    """
    if not exists(path):
        print(f"Error: Path does not exist: {path}")
        return 1

    with Tag2DirOrchestrator(
        path,
        destination,
        history_size=history_size,
        copy_workers=copy_workers,
        verbose=verbose
    ) as orchestrator:
        run_scan(orchestrator)
        apply_selection(orchestrator, people, toggle_all)

        total = print_preview(orchestrator)
        if total == 0:
            print("\nNothing to move.")
            return 0

        if not assume_yes and not confirm(f"\nMove {total} files?"):
            print("Cancelled.")
            return 1

        callback, pbar = create_progress_callback("Moving")
        start = time.time()
        try:
            result = orchestrator.move(on_progress=callback)
        finally:
            pbar.close()
        elapsed = round(time.time() - start, 3)

        print_errors(result.errors)
        print("\nFinished!")
        print(f"Moved: {result.success_count} files")
        if result.errors:
            print(f"Failed: {result.error_count} files")
        print(f"Time used: {elapsed} seconds")

        undo = None
        if orchestrator.can_undo and not assume_yes and confirm("\nUndo this move?"):
            undo = orchestrator.undo()
            print_errors(undo.errors)
            print(f"Restored: {undo.success_count} files")
            if undo.errors:
                print(f"Could not restore: {undo.error_count} files")

        if result.moved or result.errors:
            summary = write_move_summary(
                orchestrator.log_dir, path, destination, result, elapsed, undo
            )
            print(f"\nSummary:\n  {summary}")

    if result.errors or (undo is not None and undo.errors):
        return 2
    return 0


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (default: sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="tag2dir",
        description=DESCRIPTION,
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "-p", "--path",
        help="The folder containing the photos to sort",
        type=str,
        default=None
    )

    parser.add_argument(
        "-d", "--destination",
        help="The folder in which per-person folders are created",
        type=str,
        default=None
    )

    parser.add_argument(
        "--dry-run",
        help="Show where files would go without moving anything",
        action="store_true"
    )

    parser.add_argument(
        "--person",
        help="Send every photo tagged with NAME to NAME's folder, even if it\n"
             "shows other people too (repeatable, the last name given wins)",
        metavar="NAME",
        action="append",
        default=None
    )

    parser.add_argument(
        "--toggle-all",
        help="Include every scanned image, or exclude them all if all were\n"
             "already included (applied before --person)",
        action="store_true"
    )

    parser.add_argument(
        "--history-size",
        help="Number of move batches kept for undo (default: 20)",
        type=int,
        default=None
    )

    parser.add_argument(
        "-w", "--workers",
        help="Number of files copied in parallel (default: 1)",
        type=int,
        default=None
    )

    parser.add_argument(
        "-y", "--yes",
        help="Do not ask for confirmation (and do not offer undo)",
        action="store_true"
    )

    parser.add_argument(
        "-v", "--verbose",
        help="Log every move to _tag2dir/moves.txt in the destination",
        action="store_true"
    )

    parsed = parser.parse_args(args)

    if parsed.history_size is not None and parsed.history_size < 1:
        parser.error("--history-size must be at least 1")
    if parsed.workers is not None and parsed.workers < 1:
        parser.error("--workers must be at least 1")

    return parsed


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parsed = parse_args(args)
    settings = Settings()

    path = parsed.path or ask_path("Folder to scan", settings.get("last_source_path", ""))
    if not path:
        return 1
    destination = parsed.destination or ask_path(
        "Destination folder", settings.get("last_dest_path", "")
    )
    if not destination:
        return 1

    path = os.path.abspath(normalize_path(path))
    destination = os.path.abspath(normalize_path(destination))

    history_size = parsed.history_size or settings.get_int("history_size")
    copy_workers = parsed.workers or settings.get_int("copy_workers")

    settings.set("last_source_path", path)
    settings.set("last_dest_path", destination)
    settings.save()

    if parsed.dry_run:
        return run_dry_run(
            path, destination, history_size,
            people=parsed.person,
            toggle_all=parsed.toggle_all
        )

    try:
        return run_move(
            path, destination,
            history_size=history_size,
            copy_workers=copy_workers,
            verbose=parsed.verbose,
            assume_yes=parsed.yes,
            people=parsed.person,
            toggle_all=parsed.toggle_all
        )
    except KeyboardInterrupt:
        print("\n\nInterrupted! Files already moved stay in their person folders.")
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())

"""Interactive prompts for tag2dir."""

from typing import Optional


def ask_path(prompt: str, default: str = "") -> Optional[str]:
    """Ask the user for a folder path.

    Args:
        prompt: Question to show.
        default: Value used when the user just presses Enter.

    Returns:
        Path entered by user, the default, or None if cancelled/empty.
    """
    suffix = f" [{default}]" if default else ""
    try:
        path = input(f"{prompt}{suffix}: ").strip()
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return None
    return path or default or None


def confirm(prompt: str) -> bool:
    """Ask a yes/no question, defaulting to no."""
    try:
        answer = input(f"{prompt} [y/N]: ")
    except (KeyboardInterrupt, EOFError):
        print()
        return False
    return answer.strip().lower() in ("y", "yes")

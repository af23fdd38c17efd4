"""Shared helper functions for CLI command handlers."""

from debapps.domain.types import OperationResult
from debapps.logger import get_logger

logger = get_logger(__name__)

YES_ANSWERS = frozenset({"y", "yes"})


def parse_targets(targets: list[str] | None) -> list[str]:
    """Parse and expand comma-separated target strings into a flat list.

    Args:
        targets: Target strings that may contain comma-separated values

    Returns:
        Flattened list of unique targets in their original order

    Examples:
        >>> parse_targets(["obsidian", "signal,obsidian"])
        ['obsidian', 'signal']

    """
    if not targets:
        return []

    unique_targets: list[str] = []
    for target in targets:
        for part in target.split(","):
            app_id = part.strip()
            if app_id and app_id not in unique_targets:
                unique_targets.append(app_id)
    return unique_targets


def confirm_prompt(prompt: str) -> bool:
    """Ask a yes/no question on the terminal; defaults to no."""
    try:
        answer = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in YES_ANSWERS


def summarize(results: list[OperationResult], action: str) -> int:
    """Log a summary of lifecycle results.

    Returns:
        0 when every operation succeeded or was cancelled, else 1

    """
    failed = [r for r in results if not r.get("success") and not r.get("cancelled")]
    succeeded = [r for r in results if r.get("success")]

    if len(results) > 1:
        logger.info("")
        logger.info(
            "%s: %d succeeded, %d failed", action, len(succeeded), len(failed)
        )
    for result in failed:
        logger.info("❌ %s: %s", result["app_id"], result.get("error", ""))
    return 1 if failed else 0

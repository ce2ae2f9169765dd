"""Parsing of ``git fetch . <upstream>:<local>...`` output."""

from typing import Dict, List, Sequence

RANGE_SEPARATOR = ".."


def _update_token(pieces: List[str]) -> str:
    # Lines may start with a one-character flag such as "+" or "*"
    if len(pieces) > 1 and len(pieces[0]) == 1:
        return pieces[1]
    return pieces[0]


def _branch_token(pieces: List[str]) -> str:
    # Drop a trailing note such as "(forced update)"
    for index, piece in enumerate(pieces):
        if index > 0 and piece.startswith("("):
            return pieces[index - 1]
    return pieces[-1]


def parse_updated_refs(combined_output: str) -> Dict[str, str]:
    """
    Collect the branches git reported as updated, mapped to their new object id.

    Args:
        combined_output: stdout and stderr of the fetch, in arrival order

    Returns:
        Mapping of branch name to new object id, in output order
    """
    lines = combined_output.split("\n")

    # Remove the 'From .' header and the trailing newline
    lines = lines[1:]
    if lines and not lines[-1].strip():
        lines.pop()

    updated = {}
    for line in lines:
        pieces = line.split()
        if not pieces:
            continue

        token = _update_token(pieces)
        if RANGE_SEPARATOR not in token:
            # Omit branches that weren't updated
            continue

        new_id = token.split(RANGE_SEPARATOR, 1)[1].lstrip(".")
        updated[_branch_token(pieces)] = new_id

    return updated


def parse_fast_forward_output(
    combined_output: str, requested: Sequence[str]
) -> Dict[str, str]:
    """
    Find which of the requested branches were fast-forwarded.

    Args:
        combined_output: Output of the fast-forward fetch
        requested: Branch names the caller asked to fast-forward

    Returns:
        Requested branch names that were updated, in the caller's order,
        mapped to their new object id
    """
    updated = parse_updated_refs(combined_output)
    return {name: updated[name] for name in requested if name in updated}

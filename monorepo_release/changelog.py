"""Extract the section of a changelog that belongs to the pending release."""

from __future__ import annotations

from .errors import ChangelogError


def extract_changelog(
    text: str,
    begin_marker: str | None,
    end_marker: str | None,
    *,
    allow_empty: bool = False,
) -> str:
    """Return the lines strictly between the begin and end marker lines.

    A marker matches the first line that contains it. Without markers the
    whole text is returned unchanged.

    Raises:
        ChangelogError: If a marker is missing, the end marker comes before
                        (or on) the begin marker line, or the excerpt is
                        empty and ``allow_empty`` is False.
    """
    if begin_marker is None and end_marker is None:
        return text
    if begin_marker is None or end_marker is None:
        raise ChangelogError(
            "begin_missing" if begin_marker is None else "end_missing",
            "Both changelog begin and end markers must be specified",
        )

    lines = text.splitlines()
    begin = next((i for i, line in enumerate(lines) if begin_marker in line), None)
    end = next((i for i, line in enumerate(lines) if end_marker in line), None)

    if begin is None and end is None:
        raise ChangelogError(
            "both_missing",
            f"Can't find required changelog markers {begin_marker} and {end_marker}",
        )
    if begin is None:
        raise ChangelogError(
            "begin_missing", f"Can't find required changelog begin marker {begin_marker}"
        )
    if end is None:
        raise ChangelogError(
            "end_missing", f"Can't find required changelog end marker {end_marker}"
        )
    if end <= begin:
        raise ChangelogError(
            "end_before_begin",
            "Changelog end marker should be placed after corresponding begin marker",
        )

    if begin + 1 == end:
        if not allow_empty:
            raise ChangelogError("empty", "Changelog is empty")
        print("  WARN: empty changelog")
        return ""
    return "\n".join(lines[begin + 1 : end])

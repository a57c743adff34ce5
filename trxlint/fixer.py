"""Text edits and fix application.

Edits address the UTF-8 byte offsets tree-sitter reports, so they are applied
to the encoded source and decoded once at the end.
"""

from dataclasses import dataclass, field

from trxlint.utils.logging import logger


@dataclass(frozen=True)
class TextEdit:
    """Replace ``source[start:end]`` with ``text`` (an insertion when start == end)."""

    start: int
    end: int
    text: str

    @classmethod
    def insert_at(cls, position: int, text: str) -> "TextEdit":
        return cls(position, position, text)

    @classmethod
    def replace(cls, start: int, end: int, text: str) -> "TextEdit":
        return cls(start, end, text)


@dataclass(frozen=True)
class Fix:
    """All edits for one finding; applied together or not at all."""

    edits: tuple[TextEdit, ...] = field(default_factory=tuple)

    @property
    def range(self) -> tuple[int, int]:
        return (min(e.start for e in self.edits), max(e.end for e in self.edits))

    def to_dict(self) -> dict:
        return {
            "range": list(self.range),
            "edits": [{"start": e.start, "end": e.end, "text": e.text} for e in self.edits],
        }


def apply_fixes(source: str, fixes: list[Fix]) -> tuple[str, int]:
    """Apply non-overlapping fixes to ``source``.

    Fixes are taken in source order; one whose range overlaps (or touches the
    same insertion point as) an already accepted fix is skipped and left for
    the next lint pass.

    Returns:
        Tuple of (new source, number of fixes applied)
    """
    candidates = sorted((f for f in fixes if f.edits), key=lambda f: f.range)

    accepted: list[Fix] = []
    last_end = -1
    for fix in candidates:
        start, end = fix.range
        if start <= last_end:
            logger.debug("Skipping overlapping fix at {start}-{end}", start=start, end=end)
            continue
        accepted.append(fix)
        last_end = end

    if not accepted:
        return source, 0

    buffer = source.encode("utf-8")
    edits = sorted(
        (edit for fix in accepted for edit in fix.edits),
        key=lambda e: (e.start, e.end),
        reverse=True,
    )
    for edit in edits:
        buffer = buffer[: edit.start] + edit.text.encode("utf-8") + buffer[edit.end :]

    return buffer.decode("utf-8"), len(accepted)

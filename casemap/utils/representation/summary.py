from __future__ import annotations

from collections.abc import Iterable, Iterator

# A label paired with either a one-line value or a list of child rows
SummaryRow = tuple[str, "str | list[SummaryRow]"]

INDENT = "  "
ELLIPSIS = "..."


def _clip(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(width - len(ELLIPSIS), 0)] + ELLIPSIS[:width]


def _check_row(row: object) -> SummaryRow:
    if isinstance(row, tuple) and len(row) == 2 and isinstance(row[0], str):
        return row
    msg = f"Invalid SummaryRow: {row!r}"
    raise ValueError(msg)


def _one_line(label: str, children: list[SummaryRow]) -> str | None:
    """Collapse children into `label : [a=1, b]`, or None if any child is nested."""
    if any(isinstance(value, (list, tuple)) for _, value in children):
        return None
    parts = [name if value == "" else f"{name}={value}" for name, value in children]
    return f"{label} : [{', '.join(parts)}]"


def _render(rows: Iterable[object], width: int, depth: int = 0) -> Iterator[str]:
    pad = INDENT * depth
    for row in rows:
        label, value = _check_row(row)

        if isinstance(value, (list, tuple)):
            children = [_check_row(child) for child in value]
            line = _one_line(label, children)
            if line is not None and len(pad + line) <= width:
                yield pad + line
            else:
                yield f"{pad}{label} :"
                yield from _render(children, width, depth + 1)
            continue

        value = str(value)
        if not value:
            yield _clip(pad + label, width)
        elif len(f"{pad}{label} : {value}") <= width:
            yield f"{pad}{label} : {value}"
        else:
            # Value moves below its label and is clipped there
            yield f"{pad}{label} :"
            yield _clip(pad + INDENT + value, width)


def format_summary_box(
    *,
    title: str,
    rows: Iterable[SummaryRow],
    max_width: int = 88,
) -> str:
    """
    Draw summary rows inside a titled box.

    Rows with child rows are folded onto one line when they fit in
    `max_width`, and otherwise listed one child per line, indented under
    their label. Content lines never exceed `max_width`.
    """
    lines = list(_render(rows, max_width)) or ["(empty)"]
    inner = min(max(len(line) for line in lines), max_width)

    top = f"┌─ {title} ".ljust(inner + 3, "─") + "┐"
    body = [f"│ {_clip(line, inner).ljust(inner)} │" for line in lines]
    bottom = "└" + "─" * (inner + 2) + "┘"
    return "\n".join([top, *body, bottom])


def summarize_value(obj: object) -> str | list[SummaryRow]:
    """
    Describe a stored value for a summary row.

    Nested summarizable objects contribute their own rows. Anything else is
    shown by repr, split into numbered rows when the repr spans several lines.
    """
    if isinstance(obj, Summarizable):
        return obj._summary_rows()

    text = repr(obj)
    if "\n" not in text:
        return text
    return [(str(i), line) for i, line in enumerate(text.splitlines())]


class Summarizable:
    """Adds `summary()` to classes that can describe themselves as SummaryRows."""

    def _summary_rows(self) -> list[SummaryRow]:
        raise NotImplementedError

    def summary(self, max_width: int = 88) -> str:
        return format_summary_box(
            title=type(self).__name__,
            rows=self._summary_rows(),
            max_width=max_width,
        )

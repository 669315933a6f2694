"""
gnmidiff.formatting — Human-readable diff output
================================================

    StructuredDiff(-A, +B):
    -------- deletes --------
    - /interfaces/interface[name=eth1]: deleted
    -------- updates --------
    - /system/config/domain-name: "example.com"
    + /system/config/login-banner: "hello"
    m /system/config/hostname:
      - "a"
      + "b"

Sections are printed in a fixed order (common when `full`, then missing,
extra, mismatched), each sorted by path.  The deletes block is left out
entirely when it has nothing to show.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from .values import NString, NVal, to_json_text


@dataclass(frozen=True)
class Format:
    """Output options for StructuredDiff.format."""
    full: bool = False          # also print common deletes/updates
    title: str = "StructuredDiff"
    a_name: str = "A"
    b_name: str = "B"


def format_value(val: NVal) -> str:
    """Strings are quoted; everything else uses its plain rendering."""
    if isinstance(val, NString):
        return to_json_text(val)
    return str(val)


def _delete_lines(paths: Iterable[str], symbol: str) -> list[str]:
    return [f"{symbol} {p}: deleted\n" for p in sorted(paths)]


def _update_lines(updates: Mapping[str, NVal], symbol: str) -> list[str]:
    return [f"{symbol} {p}: {format_value(updates[p])}\n" for p in sorted(updates)]


def render_deletes(diff, fmt: Format) -> str:
    lines: list[str] = []
    if fmt.full:
        lines += _delete_lines(diff.common_deletes, " ")
    lines += _delete_lines(diff.missing_deletes, "-")
    lines += _delete_lines(diff.extra_deletes, "+")
    return "".join(lines)


def render_updates(diff, fmt: Format) -> str:
    lines: list[str] = []
    if fmt.full:
        lines += _update_lines(diff.common_updates, " ")
    lines += _update_lines(diff.missing_updates, "-")
    lines += _update_lines(diff.extra_updates, "+")
    for p in sorted(diff.mismatched_updates):
        m = diff.mismatched_updates[p]
        lines.append(f"m {p}:\n  - {format_value(m.a)}\n  + {format_value(m.b)}\n")
    return "".join(lines)


def render(delete_diff, update_diff, fmt: Format) -> str:
    """Full text of a diff: header, optional deletes block, updates."""
    out = [f"{fmt.title}(-{fmt.a_name}, +{fmt.b_name}):\n"]
    deletes = render_deletes(delete_diff, fmt) if delete_diff is not None else ""
    if deletes:
        out.append("-------- deletes --------\n")
        out.append(deletes)
        out.append("-------- updates --------\n")
    out.append(render_updates(update_diff, fmt))
    return "".join(out)

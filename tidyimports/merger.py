# tidyimports/merger.py
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .model import Declaration, Specifier


def union_specifiers(*lists: Iterable[Specifier]) -> List[Specifier]:
    """First binding of each bound name wins; result sorted by bound name."""
    seen: Dict[str, Specifier] = {}
    for specs in lists:
        for s in specs:
            seen.setdefault(s.bound_name, s)
    return [seen[name] for name in sorted(seen)]


def merge_declarations(declarations: Iterable[Declaration]) -> List[Declaration]:
    """
    Collapse declarations sharing (kind, source) into one record.
    First-seen order and raw span are kept; specifiers are unioned and sorted.
    """
    merged: Dict[Tuple, Declaration] = {}
    for d in declarations:
        key = d.merge_key
        first = merged.get(key)
        if first is None:
            merged[key] = Declaration(
                kind=d.kind, source=d.source, specifiers=union_specifiers(d.specifiers),
                raw=d.raw, span=d.span, group_name=d.group_name, is_priority=d.is_priority,
                is_reexport=d.is_reexport, attributes=d.attributes,
            )
            continue
        first.specifiers = union_specifiers(first.specifiers, d.specifiers)
    return list(merged.values())

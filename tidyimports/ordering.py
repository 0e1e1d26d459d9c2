# tidyimports/ordering.py
from __future__ import annotations

from functools import cmp_to_key
from typing import Dict, Iterable, List

from .config import Config
from .model import Declaration, Group


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_declarations(a: Declaration, b: Declaration, config: Config) -> int:
    # 1) priority first
    if a.is_priority != b.is_priority:
        return -1 if a.is_priority else 1
    # 2) both priority: priority kind order, 3) otherwise normal kind order
    order = config.priority_import_order if a.is_priority else config.import_order
    c = _cmp(order.get(a.kind, 99), order.get(b.kind, 99))
    if c:
        return c
    # 4) source
    c = _cmp(a.source, b.source)
    if c:
        return c
    # tiebreaks so no two records compare equal
    c = _cmp(a.kind.value, b.kind.value)
    if c:
        return c
    c = _cmp(a.bound_names, b.bound_names)
    if c:
        return c
    return _cmp(a.attributes or "", b.attributes or "")


def sort_declarations(declarations: Iterable[Declaration], config: Config) -> List[Declaration]:
    return sorted(declarations, key=cmp_to_key(lambda a, b: compare_declarations(a, b, config)))


def organize_groups(declarations: Iterable[Declaration], config: Config) -> List[Group]:
    """Bucket declarations by group name; groups sorted by (order, name), empty ones dropped."""
    buckets: Dict[str, List[Declaration]] = {}
    for d in declarations:
        buckets.setdefault(d.group_name or config.default_group, []).append(d)
    groups = [Group(name, config.group_order(name), sort_declarations(decls, config))
              for name, decls in buckets.items() if decls]
    groups.sort(key=lambda g: (g.order, g.name))
    return groups

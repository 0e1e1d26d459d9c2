# tidyimports/validator.py
from __future__ import annotations

import re
from typing import Dict, Set, Tuple

from .config import SORT_MODES, TRAILING_COMMA_MODES, Config
from .model import DeclarationKind, ParserResult


class ValidationError(Exception):
    def __init__(self, code: str, msg: str):
        super().__init__(f"{code}: {msg}")
        self.code = code


def validate_config(config: Config) -> None:
    # 1) Group names unique, at most one default
    names = [g.name for g in config.groups]
    if len(set(names)) != len(names):
        raise ValidationError("E.GROUP.DUP", "Duplicate group names found.")
    defaults = [g.name for g in config.groups if g.default]
    if len(defaults) > 1:
        raise ValidationError("E.GROUP.DEFAULT", f"Several default groups: {', '.join(defaults)}.")

    # 2) Patterns compile
    for g in config.groups:
        try:
            g.compile()
        except re.error as e:
            raise ValidationError("E.GROUP.PATTERN", f"Group {g.name}: bad pattern {g.pattern!r} ({e}).") from None
    for p in config.priority_imports:
        try:
            re.compile(p)
        except re.error as e:
            raise ValidationError("E.GROUP.PATTERN", f"Priority pattern {p!r} does not compile ({e}).") from None

    # 3) Kind orders cover every kind
    for label, order in (("importOrder", config.import_order), ("priorityImportOrder", config.priority_import_order)):
        missing = [k.value for k in DeclarationKind if k not in order]
        if missing:
            raise ValidationError("E.ORDER.KIND", f"{label} lacks {', '.join(missing)}.")

    # 4) Format options
    fmt = config.format
    if fmt.indent < 1:
        raise ValidationError("E.FORMAT.INDENT", f"Indent must be positive, got {fmt.indent}.")
    if fmt.trailing_comma not in TRAILING_COMMA_MODES:
        raise ValidationError("E.FORMAT.TRAILING_COMMA", f"Unknown trailing comma mode {fmt.trailing_comma!r}.")
    if fmt.sort_specifiers not in SORT_MODES:
        raise ValidationError("E.FORMAT.SORT", f"Unknown sort mode {fmt.sort_specifiers!r}.")
    if fmt.max_line_width < 0:
        raise ValidationError("E.FORMAT.WIDTH", "maxLineWidth cannot be negative.")
    if fmt.blank_lines_between_groups < 0:
        raise ValidationError("E.FORMAT.BLANK_LINES", "blankLinesBetweenGroups cannot be negative.")


def _specifier_sets(result: ParserResult) -> Dict[Tuple, Set[str]]:
    out: Dict[Tuple, Set[str]] = {}
    for d in result.declarations:
        out.setdefault((d.kind, d.source), set()).update(d.bound_names)
    return out


def validate_output(before: ParserResult, after: ParserResult) -> None:
    """Check a rewrite kept every declaration and bound name."""
    if len(after.invalid_imports) > len(before.invalid_imports):
        first = after.invalid_imports[0]
        raise ValidationError("E.OUTPUT.INVALID", f"Formatting produced an invalid declaration: {first.error}")

    want = _specifier_sets(before)
    got = _specifier_sets(after)
    if want != got:
        changed = {key for key in set(want) | set(got) if want.get(key) != got.get(key)}
        lost = sorted(f"{kind.value} {src}" for kind, src in changed)
        raise ValidationError("E.OUTPUT.SPECIFIERS", f"Specifiers changed for: {', '.join(lost)}")

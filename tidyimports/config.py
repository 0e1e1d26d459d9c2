# tidyimports/config.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .model import DeclarationKind

log = logging.getLogger(__name__)

DEFAULT_GROUP_NAME = "Other"
DEFAULT_GROUP_ORDER = 999

K = DeclarationKind

DEFAULT_IMPORT_ORDER: Dict[DeclarationKind, int] = {
    K.SIDE_EFFECT: 0,
    K.DEFAULT: 1,
    K.NAMED: 2,
    K.TYPE_DEFAULT: 3,
    K.TYPE_NAMED: 4,
}

DEFAULT_PRIORITY_ORDER: Dict[DeclarationKind, int] = {
    K.DEFAULT: 0,
    K.NAMED: 1,
    K.TYPE_DEFAULT: 2,
    K.TYPE_NAMED: 3,
    K.SIDE_EFFECT: 4,
}

TRAILING_COMMA_MODES = ("always", "never")
SORT_MODES = ("length", "alpha", "preserve")


@dataclass(frozen=True)
class GroupRule:
    name: str
    pattern: Optional[str] = None  # original text, e.g. "^react" or "/^@app/i"
    order: int = DEFAULT_GROUP_ORDER
    default: bool = False

    def compile(self) -> Optional["re.Pattern[str]"]:
        if self.pattern is None:
            return None
        return compile_pattern(self.pattern)


@dataclass(frozen=True)
class FormatOptions:
    indent: int = 4
    single_quote: bool = True
    bracket_spacing: bool = True
    trailing_comma: str = "never"
    sort_specifiers: str = "length"
    max_line_width: int = 0  # 0 disables the single-line preference
    blank_lines_between_groups: int = 1
    preserve_comments: bool = True
    enforce_newline_after_imports: bool = True
    organize_reexports: bool = False
    sort_enum_members: bool = False
    sort_exports: bool = False
    sort_class_properties: bool = False
    sort_type_members: bool = False
    sort_destructuring: bool = False

    @property
    def quote(self) -> str:
        return "'" if self.single_quote else '"'

    @property
    def sorts_code_patterns(self) -> bool:
        return any((self.sort_enum_members, self.sort_exports, self.sort_class_properties,
                    self.sort_type_members, self.sort_destructuring))


@dataclass(frozen=True)
class Config:
    groups: Tuple[GroupRule, ...] = (GroupRule(DEFAULT_GROUP_NAME, order=0, default=True),)
    import_order: Dict[DeclarationKind, int] = field(default_factory=lambda: dict(DEFAULT_IMPORT_ORDER))
    priority_import_order: Dict[DeclarationKind, int] = field(default_factory=lambda: dict(DEFAULT_PRIORITY_ORDER))
    priority_imports: Tuple[str, ...] = ()
    format: FormatOptions = field(default_factory=FormatOptions)

    @property
    def default_group(self) -> str:
        for g in self.groups:
            if g.default:
                return g.name
        return DEFAULT_GROUP_NAME

    @property
    def group_names(self) -> Tuple[str, ...]:
        names = tuple(g.name for g in self.groups)
        if self.default_group not in names:
            names += (self.default_group,)
        return names

    def group_order(self, name: str) -> int:
        for g in self.groups:
            if g.name == name:
                return g.order
        return DEFAULT_GROUP_ORDER


# ---------- Patterns ----------
_SLASHED = re.compile(r"^/(.*)/([a-z]*)$", re.S)
_FLAG_BITS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "u": 0, "g": 0, "y": 0}


def compile_pattern(text: str) -> "re.Pattern[str]":
    """Compile `^react` or the slash form `/^react/i`."""
    m = _SLASHED.match(text)
    if not m:
        return re.compile(text)
    flags = 0
    for ch in m.group(2):
        if ch not in _FLAG_BITS:
            raise re.error(f"unsupported regex flag {ch!r}")
        flags |= _FLAG_BITS[ch]
    return re.compile(m.group(1), flags)


# ---------- Loading ----------
_KIND_KEYS = {
    "sideEffect": (K.SIDE_EFFECT,),
    "default": (K.DEFAULT,),
    "named": (K.NAMED,),
    "typeDefault": (K.TYPE_DEFAULT,),
    "typeNamed": (K.TYPE_NAMED,),
    "typeOnly": (K.TYPE_DEFAULT, K.TYPE_NAMED),
}

_FORMAT_KEYS = {
    "indent": "indent",
    "singleQuote": "single_quote",
    "bracketSpacing": "bracket_spacing",
    "trailingComma": "trailing_comma",
    "sortSpecifiers": "sort_specifiers",
    "maxLineWidth": "max_line_width",
    "blankLinesBetweenGroups": "blank_lines_between_groups",
    "preserveComments": "preserve_comments",
    "enforceNewlineAfterImports": "enforce_newline_after_imports",
    "organizeReExports": "organize_reexports",
    "sortEnumMembers": "sort_enum_members",
    "sortExports": "sort_exports",
    "sortClassProperties": "sort_class_properties",
    "sortTypeMembers": "sort_type_members",
    "sortDestructuring": "sort_destructuring",
}


def _kind_order(raw: Optional[Dict[str, Any]], base: Dict[DeclarationKind, int]) -> Dict[DeclarationKind, int]:
    out = dict(base)
    for key, value in (raw or {}).items():
        kinds = _KIND_KEYS.get(key)
        if kinds is None:
            log.warning("Ignoring unknown import kind %r in order settings", key)
            continue
        for kind in kinds:
            out[kind] = int(value)
    return out


def _group_rule(raw: Dict[str, Any]) -> GroupRule:
    default = bool(raw.get("default", False))
    if "isDefault" in raw:
        log.warning("Group %r uses deprecated 'isDefault'; use 'default' instead", raw.get("name"))
        default = default or bool(raw["isDefault"])
    return GroupRule(
        name=str(raw["name"]),
        pattern=raw.get("match"),
        order=int(raw.get("order", DEFAULT_GROUP_ORDER)),
        default=default,
    )


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a Config from the camelCase JSON shape; missing keys keep defaults."""
    kwargs: Dict[str, Any] = {}
    if "groups" in data:
        kwargs["groups"] = tuple(_group_rule(g) for g in data["groups"])
    kwargs["import_order"] = _kind_order(data.get("importOrder"), DEFAULT_IMPORT_ORDER)
    kwargs["priority_import_order"] = _kind_order(data.get("priorityImportOrder"), DEFAULT_PRIORITY_ORDER)
    if "priorityImports" in data:
        kwargs["priority_imports"] = tuple(str(p) for p in data["priorityImports"])
    fmt: Dict[str, Any] = {}
    for key, value in (data.get("format") or {}).items():
        attr = _FORMAT_KEYS.get(key)
        if attr is None:
            log.warning("Ignoring unknown format option %r", key)
            continue
        fmt[attr] = value
    if fmt:
        kwargs["format"] = FormatOptions(**fmt)
    return Config(**kwargs)


def load_config_file(path: str | Path) -> Config:
    text = Path(path).read_text(encoding="utf-8")
    return config_from_dict(json.loads(text))

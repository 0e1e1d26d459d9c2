# tidyimports/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class DeclarationKind(str, Enum):
    SIDE_EFFECT = "sideEffect"
    DEFAULT = "default"
    NAMED = "named"
    TYPE_DEFAULT = "typeDefault"
    TYPE_NAMED = "typeNamed"

    @property
    def is_type(self) -> bool:
        return self in (DeclarationKind.TYPE_DEFAULT, DeclarationKind.TYPE_NAMED)

    @property
    def is_default(self) -> bool:
        return self in (DeclarationKind.DEFAULT, DeclarationKind.TYPE_DEFAULT)


# ---------- Specifiers ----------
@dataclass(frozen=True)
class Plain:
    name: str

    @property
    def bound_name(self) -> str:
        return self.name

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Aliased:
    imported: str
    local: str

    @property
    def bound_name(self) -> str:
        return self.local

    def render(self) -> str:
        return f"{self.imported} as {self.local}"


Specifier = Union[Plain, Aliased]


def normalize_specifier(spec: Specifier) -> Specifier:
    """`{ a as a }` binds the same name as `{ a }`; collapse it."""
    if isinstance(spec, Aliased) and spec.imported == spec.local:
        return Plain(spec.local)
    return spec


def namespace(local: str) -> Aliased:
    return Aliased("*", local)


# ---------- Declarations ----------
@dataclass
class Declaration:
    kind: DeclarationKind
    source: str
    specifiers: List[Specifier] = field(default_factory=list)
    raw: str = ""
    span: Tuple[int, int] = (0, 0)  # character offsets in the scanned text
    group_name: Optional[str] = None
    is_priority: bool = False
    is_reexport: bool = False
    attributes: Optional[str] = None  # normalized `with { ... }` clause

    @property
    def bound_names(self) -> List[str]:
        return [s.bound_name for s in self.specifiers]

    @property
    def merge_key(self) -> Tuple:
        key: Tuple = (self.kind, self.source, self.attributes, self.is_reexport)
        if self.kind.is_default:
            # two default bindings can never share one statement
            key += tuple(self.bound_names)
        return key


@dataclass
class InvalidDeclaration:
    raw: str
    error: str
    span: Tuple[int, int] = (0, 0)


@dataclass
class Group:
    name: str
    order: int
    declarations: List[Declaration] = field(default_factory=list)


@dataclass
class ParserResult:
    groups: List[Group] = field(default_factory=list)
    declarations: List[Declaration] = field(default_factory=list)
    invalid_imports: List[InvalidDeclaration] = field(default_factory=list)
    original_imports: List[str] = field(default_factory=list)
    import_range: Optional[Tuple[int, int]] = None
    comments: List[str] = field(default_factory=list)  # non-section comments found in the block
    stop: int = 0  # offset where block scanning stopped

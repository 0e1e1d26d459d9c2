# tidyimports/ir_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class HardLine:
    pass


@dataclass(frozen=True)
class Indent:
    count: int
    child: "IRNode"


@dataclass(frozen=True)
class Concat:
    children: List["IRNode"] = field(default_factory=list)


@dataclass(frozen=True)
class AlignAnchor:
    group_id: str
    prefix: str
    suffix: str
    ideal_width: Optional[int] = None  # overrides the measured prefix width


@dataclass(frozen=True)
class AlignGroup:
    group_id: str
    children: List["IRNode"] = field(default_factory=list)


@dataclass(frozen=True)
class Document:
    children: List["IRNode"] = field(default_factory=list)


IRNode = Union[Text, HardLine, Indent, Concat, AlignAnchor, AlignGroup, Document]

HARD_LINE = HardLine()

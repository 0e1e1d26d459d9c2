# tidyimports/builders.py
from __future__ import annotations

from typing import Iterable, List, Sequence

from .config import FormatOptions
from .ir_types import HARD_LINE, AlignAnchor, AlignGroup, Document, IRNode, Text
from .model import Declaration, DeclarationKind, Group, Specifier


def quote_source(source: str, fmt: FormatOptions) -> str:
    quote = fmt.quote
    other = '"' if quote == "'" else "'"
    if quote in source and other not in source:
        quote = other
    return f"{quote}{source}{quote}"


def sort_specifiers(specs: Sequence[Specifier], mode: str) -> List[str]:
    """Rendered specifier texts, deduplicated, in the configured order."""
    texts: List[str] = []
    for s in specs:
        t = s.render()
        if t not in texts:
            texts.append(t)
    if mode == "length":
        # stable: equal lengths keep the incoming (alphabetical) order
        return sorted(texts, key=len)
    if mode == "alpha":
        return sorted(texts, key=lambda t: (t.lower(), t))
    return texts


def _head(d: Declaration) -> str:
    keyword = "export" if d.is_reexport else "import"
    return f"{keyword} type " if d.kind.is_type else f"{keyword} "


def build_declaration(d: Declaration, group_id: str, fmt: FormatOptions) -> IRNode:
    source = quote_source(d.source, fmt)
    attributes = f" {d.attributes}" if d.attributes else ""
    if d.kind is DeclarationKind.SIDE_EFFECT:
        return Text(f"import {source}{attributes};")

    suffix = f"from {source}{attributes};"
    if d.kind.is_default:
        return AlignAnchor(group_id, f"{_head(d)}{d.specifiers[0].render()} ", suffix)

    texts = sort_specifiers(d.specifiers, fmt.sort_specifiers)
    opening, closing = ("{ ", " }") if fmt.bracket_spacing else ("{", "}")
    single = f"{_head(d)}{opening}{', '.join(texts)}{closing} "
    fits = fmt.max_line_width > 0 and len(single) + len(suffix) <= fmt.max_line_width
    if len(texts) == 1 or fits:
        return AlignAnchor(group_id, single, suffix)

    pad = " " * fmt.indent
    lines = [f"{_head(d)}{{"]
    for i, t in enumerate(texts):
        comma = "," if i < len(texts) - 1 or fmt.trailing_comma == "always" else ""
        lines.append(f"{pad}{t}{comma}")
    # `from` sits one column past the widest specifier line
    ideal_width = max(len(line) for line in lines[1:]) + 1
    lines.append("} ")
    return AlignAnchor(group_id, "\n".join(lines), suffix, ideal_width)


def build_group(group: Group, fmt: FormatOptions) -> AlignGroup:
    children: List[IRNode] = [Text(f"// {group.name}")]
    for d in group.declarations:
        children.append(HARD_LINE)
        children.append(build_declaration(d, group.name, fmt))
    return AlignGroup(group.name, children)


def build_document(groups: Sequence[Group], fmt: FormatOptions, comments: Iterable[str] = ()) -> Document:
    children: List[IRNode] = []
    for comment in comments:
        children.append(Text(comment))
        children.append(HARD_LINE)
    for i, group in enumerate(groups):
        if i:
            children.extend([HARD_LINE] * (fmt.blank_lines_between_groups + 1))
        children.append(build_group(group, fmt))
    children.append(HARD_LINE)
    return Document(children)

# tidyimports/printer.py
from __future__ import annotations

from typing import Dict, List

from .ir_types import AlignAnchor, AlignGroup, Concat, Document, HardLine, Indent, IRNode, Text


def measure_text_width(text: str) -> int:
    """Width of the last physical line."""
    return len(text.rsplit("\n", 1)[-1])


def _children(node: IRNode) -> List[IRNode]:
    if isinstance(node, (Concat, AlignGroup, Document)):
        return node.children
    if isinstance(node, Indent):
        return [node.child]
    return []


# ---------- Pass 1 ----------
def measure(doc: IRNode) -> Dict[str, int]:
    """Resolved column per alignment group id."""
    widths: Dict[str, int] = {}
    stack = [doc]
    while stack:
        node = stack.pop()
        if isinstance(node, AlignAnchor):
            w = node.ideal_width if node.ideal_width is not None else measure_text_width(node.prefix)
            widths[node.group_id] = max(widths.get(node.group_id, 0), w)
        else:
            stack.extend(_children(node))
    return widths


# ---------- Pass 2 ----------
def pad_prefix(prefix: str, column: int) -> str:
    if "\n" not in prefix:
        return prefix.ljust(column)
    head, last = prefix.rsplit("\n", 1)
    brace = last.rfind("}")
    if brace >= 0:
        upto = last[:brace + 1]
        last = upto.ljust(max(len(upto) + 1, column))
    else:
        last = last.rstrip()
        last = last.ljust(max(len(last) + 1, column))
    return f"{head}\n{last}"


def render(doc: IRNode, widths: Dict[str, int]) -> str:
    out: List[str] = []

    def emit(node: IRNode, indent: int) -> None:
        if isinstance(node, Text):
            out.append(node.value)
        elif isinstance(node, HardLine):
            out.append("\n" + " " * indent)
        elif isinstance(node, Indent):
            emit(node.child, indent + node.count)
        elif isinstance(node, AlignAnchor):
            out.append(pad_prefix(node.prefix, widths.get(node.group_id, 0)))
            out.append(node.suffix)
        else:
            for child in _children(node):
                emit(child, indent)

    emit(doc, 0)
    return "".join(out)


def print_document(doc: IRNode) -> str:
    return render(doc, measure(doc))

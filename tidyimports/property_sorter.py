# tidyimports/property_sorter.py
"""
Range-based sorting of named member lists: destructuring patterns, object
literals, interface and type-literal members, enum bodies, export lists,
runs of class fields and JSX attributes.

Fragments are found on the token tree, sorted, and substituted back as text
replacements. Nested fragments overlap their parents, so each pass applies
only non-overlapping replacements (outermost first) and the text is
re-parsed for the next pass, up to MAX_SORT_PASSES.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple

from .config import Config, FormatOptions
from .syntax import (Item, Leaf, Node, SourceSyntaxError, comments, is_leaf, is_name, is_node,
                     is_punct, iter_nodes, parse_source, significant, split_items)

log = logging.getLogger(__name__)

MAX_SORT_PASSES = 10
DEFAULT_INDENT = "    "


class PatternKind(str, Enum):
    PROPERTY_LIST = "propertyList"
    TYPE_MEMBER_LIST = "typeMemberList"
    ENUM_BODY = "enumBody"
    EXPORT_BLOCK = "exportBlock"
    CLASS_FIELD_RUN = "classFieldRun"
    JSX_ATTRIBUTE_LIST = "jsxAttributeList"


@dataclass
class PropertyInfo:
    name: str
    start: int
    end: int
    is_rest: bool
    text: str
    line: int = 1
    end_line: int = 1
    has_value: bool = True
    leading: List[str] = field(default_factory=list)  # comments that travel with the property


@dataclass
class SortablePattern:
    kind: PatternKind
    start: int
    end: int
    properties: List[PropertyInfo]
    separator: str = ""  # "," when separators are rebuilt, "" when members carry their own
    prefix_cut: Optional[int] = None  # first comment lifted out of the prefix


@dataclass(frozen=True)
class Replacement:
    start: int
    end: int
    new_text: str


@dataclass
class SortPassReport:
    text: str
    passes: int = 0
    applied: int = 0
    deferred: int = 0
    converged: bool = False


class _Unsortable(Exception):
    """The fragment cannot be sorted without risking its content."""


# ---------- Helpers ----------
def _line_start(text: str, i: int) -> int:
    return text.rfind("\n", 0, i) + 1


def _key_name(item: Item) -> str:
    if is_leaf(item, "NAME") or is_leaf(item, "NUMBER"):
        return item.text
    if is_leaf(item, "STRING"):
        return item.text[1:-1]
    raise _Unsortable("computed or unknown key")


def _prop(text: str, nodes: List[Item], name: str, is_rest: bool = False, has_value: bool = True) -> PropertyInfo:
    start, end = nodes[0].start, nodes[-1].end
    return PropertyInfo(name, start, end, is_rest, text[start:end], nodes[0].line, nodes[-1].end_line, has_value)


def _comma_segments(inner: List[Item]) -> List[List[Item]]:
    segments = [significant(s) for s in split_items(inner)]
    if segments and not segments[-1]:
        segments.pop()  # trailing comma
    if any(not s for s in segments):
        raise _Unsortable("empty element")
    return segments


def _require_trailing_rest(props: List[PropertyInfo]) -> None:
    seen_rest = False
    for p in props:
        if p.is_rest:
            seen_rest = True
        elif seen_rest:
            raise _Unsortable("spread before a named member")


# ---------- Member shapes ----------
def _pattern_member(seg: List[Item]) -> Tuple[str, bool, bool]:
    if is_punct(seg[0], "..."):
        if len(seg) != 2 or not is_name(seg[1]):
            raise _Unsortable("unknown rest element")
        return seg[1].text, True, True
    name = _key_name(seg[0])
    if len(seg) > 1 and not is_punct(seg[1], ":", "="):
        raise _Unsortable("unknown pattern member")
    return name, False, len(seg) > 1


def _literal_member(seg: List[Item]) -> Tuple[str, bool, bool]:
    if is_punct(seg[0], "..."):
        return "...", True, True
    i = 0
    if is_name(seg[0], "get", "set", "async") and len(seg) > 1 and not is_punct(seg[1], ":") \
            and not is_node(seg[1], "paren"):
        i = 1
    if i < len(seg) and is_punct(seg[i], "*"):
        i += 1
    if i >= len(seg):
        raise _Unsortable("unknown object member")
    name = _key_name(seg[i])
    rest = seg[i + 1:]
    if rest and not (is_punct(rest[0], ":", "<") or is_node(rest[0], "paren")):
        raise _Unsortable("unknown object member")
    return name, False, True


def _enum_member(seg: List[Item]) -> Tuple[str, bool, bool]:
    name = _key_name(seg[0])
    # implicit values depend on position
    if len(seg) < 3 or not is_punct(seg[1], "="):
        raise _Unsortable("enum member without initializer")
    return name, False, True


def _export_member(seg: List[Item]) -> Tuple[str, bool, bool]:
    nodes = seg
    if is_name(nodes[0], "type") and len(nodes) in (2, 4):
        nodes = nodes[1:]
    if len(nodes) == 1:
        return _key_name(nodes[0]), False, True
    if len(nodes) == 3 and is_name(nodes[1], "as"):
        _key_name(nodes[0])
        return _key_name(nodes[2]), False, True
    raise _Unsortable("unknown export specifier")


_CONTINUE_AFTER = {"|", "&", ":", "=>", "=", "?", "<", ".", "?.", "+", "-", "*", "/", "&&", "||", "??", "@"}
_CONTINUE_BEFORE = {"|", "&", ".", "?.", "=>", "?", ":", "=", ">", "&&", "||", "??"}
_CONTINUE_NAMES = {"extends", "keyof", "typeof", "infer", "is", "as", "in", "new"}
_MODIFIERS = {"public", "private", "protected", "readonly", "declare", "override", "abstract", "accessor", "static"}


def _skip_decorators(nodes: List[Item]) -> int:
    i = 0
    while i < len(nodes) and is_punct(nodes[i], "@"):
        i += 1
        if i < len(nodes) and is_name(nodes[i]):
            i += 1
        while i + 1 < len(nodes) and is_punct(nodes[i], ".") and is_name(nodes[i + 1]):
            i += 2
        if i < len(nodes) and is_node(nodes[i], "paren"):
            i += 1
    return i


def _complete(cur: List[Item], nxt: Item) -> bool:
    last = cur[-1]
    if is_punct(last) and last.text in _CONTINUE_AFTER:
        return False
    if is_name(last) and last.text in _CONTINUE_NAMES:
        return False
    if is_punct(nxt) and nxt.text in _CONTINUE_BEFORE:
        return False
    if is_name(nxt, "extends", "as", "is", "implements"):
        return False
    if is_punct(cur[0], "@") and _skip_decorators(cur) >= len(cur):
        return False
    return True


def _method_body(cur: List[Item]) -> bool:
    """A brace closing a class member (method or static block)."""
    if len(cur) < 2 or not is_node(cur[-1], "brace"):
        return False
    before = cur[-2]
    if is_punct(before) and before.text in _CONTINUE_AFTER:
        return False
    if len(cur) == 2 and is_name(before, "static"):
        return True
    return any(is_node(x, "paren") for x in cur[:-1])


def split_members(sig: List[Item], class_body: bool = False) -> List[List[Item]]:
    """Split a member body on `;`, `,` and line breaks between complete members."""
    members: List[List[Item]] = []
    cur: List[Item] = []
    for i, x in enumerate(sig):
        cur.append(x)
        if is_leaf(x, "SEMI") or is_leaf(x, "COMMA"):
            members.append(cur)
            cur = []
            continue
        if class_body and _method_body(cur):
            members.append(cur)
            cur = []
            continue
        nxt = sig[i + 1] if i + 1 < len(sig) else None
        if nxt is not None and nxt.line > x.end_line and _complete(cur, nxt):
            members.append(cur)
            cur = []
    if cur:
        members.append(cur)
    return members


def _type_member_name(nodes: List[Item]) -> str:
    i = 0
    if is_punct(nodes[0], "+", "-"):
        raise _Unsortable("mapped type modifier")
    if is_name(nodes[0], "readonly") and len(nodes) > 1 and isinstance(nodes[1], Leaf) \
            and nodes[1].type in ("NAME", "STRING", "NUMBER"):
        i = 1
    if is_name(nodes[i], "get", "set") and i + 1 < len(nodes) and is_name(nodes[i + 1]):
        i += 1
    key = nodes[i]
    if is_name(key, "new") and i + 1 < len(nodes) and (is_node(nodes[i + 1], "paren") or is_punct(nodes[i + 1], "<")):
        raise _Unsortable("construct signature")
    name = _key_name(key)
    rest = nodes[i + 1:]
    if rest and not (is_punct(rest[0], "?", ":", "<") or is_node(rest[0], "paren")
                     or is_leaf(rest[0], "SEMI") or is_leaf(rest[0], "COMMA")):
        raise _Unsortable("unknown type member")
    return name


def _class_field_name(nodes: List[Item]) -> Optional[str]:
    """Name of an instance field; None for methods, static members and anything else."""
    i = _skip_decorators(nodes)
    while i + 1 < len(nodes) and is_name(nodes[i]) and nodes[i].text in _MODIFIERS \
            and (isinstance(nodes[i + 1], Leaf) and nodes[i + 1].type in ("NAME", "STRING", "NUMBER")
                 or is_node(nodes[i + 1], "bracket")):
        if nodes[i].text == "static":
            return None
        i += 1
    if i >= len(nodes):
        return None
    key = nodes[i]
    if not (isinstance(key, Leaf) and key.type in ("NAME", "STRING", "NUMBER")):
        return None
    rest = nodes[i + 1:]
    if rest and is_punct(rest[0], "?", "!") and len(rest) > 1 and is_node(rest[1], "paren"):
        return None
    if not rest or is_leaf(rest[0], "SEMI") or is_punct(rest[0], "?", "!", ":", "="):
        return _key_name(key)
    return None


# ---------- Classification ----------
_STATEMENT_STOPS = {"=", "=>", ":", "?", "&&", "||", "??"}


def _declared_by(sig: List[Item], idx: int) -> Optional[str]:
    """`class`, `interface` or `enum` when sig[idx] is that declaration's body."""
    j = idx - 1
    while j >= 0 and idx - j <= 40:
        x = sig[j]
        if is_name(x, "class", "interface", "enum"):
            after = sig[j + 1]
            if is_name(after) or (x.text == "class" and after is sig[idx]):
                return x.text
            return None
        if is_leaf(x, "SEMI") or is_node(x, "brace") or (is_punct(x) and x.text in _STATEMENT_STOPS):
            return None
        j -= 1
    return None


def _type_alias(sig: List[Item], idx: int) -> bool:
    """sig[idx] is a type literal on the right of `type Name<...> =`."""
    j = idx - 1
    while j >= 0 and not is_punct(sig[j], "="):
        if not is_punct(sig[j], "|", "&"):
            return False
        j -= 1
    if j < 0:
        return False
    k = j - 1
    while k >= 0 and not (is_leaf(sig[k], "SEMI") or is_node(sig[k], "brace")):
        k -= 1
    head = sig[k + 1:j]
    for p in range(len(head) - 1):
        if is_name(head[p], "type") and is_name(head[p + 1]) and (p == 0 or is_name(head[p - 1], "export", "declare")):
            return True
    return False


def _is_params(sig: List[Item], idx: int) -> bool:
    nxt = sig[idx + 1] if idx + 1 < len(sig) else None
    prev = sig[idx - 1] if idx else None
    if is_punct(nxt, "=>"):
        return True
    if is_node(nxt, "brace"):
        return not is_name(prev, "if", "while", "for", "switch", "with")
    return False


def _role(sig: List[Item], idx: int, container: Node, container_role: Optional[str]) -> Optional[str]:
    prev = sig[idx - 1] if idx else None
    nxt = sig[idx + 1] if idx + 1 < len(sig) else None
    keyword = _declared_by(sig, idx)
    if keyword == "class":
        return "class"
    if keyword == "interface":
        return "type"
    if keyword == "enum":
        return "enum"
    if _type_alias(sig, idx):
        return "type"
    if is_name(prev, "export") or (is_name(prev, "type") and idx >= 2 and is_name(sig[idx - 2], "export")):
        return "export_from" if is_name(nxt, "from") else "export"
    if container_role == "type" and is_punct(prev, ":", "|", "&", "<", "=>"):
        return "type"
    if container_role == "pattern" and is_punct(prev, ":", "="):
        return "pattern" if is_punct(prev, ":") else "literal"
    if is_name(prev, "const", "let", "var") and (is_punct(nxt, "=") or is_name(nxt, "of", "in")):
        return "pattern"
    if container_role == "literal" and is_punct(prev, ":"):
        return "literal"
    if is_punct(nxt, "="):
        return None  # destructuring assignment target
    if prev is None or is_leaf(prev, "COMMA"):
        return "literal" if container.kind in ("paren", "bracket") else None
    if is_punct(prev, "=", "?", "||", "&&", "??") or is_name(prev, "return", "default", "yield", "await"):
        return "literal"
    return None


_AUTO_ROLES = {
    "sort_destructuring": ("pattern",),
    "sort_type_members": ("type",),
    "sort_enum_members": ("enum",),
    "sort_exports": ("export", "export_from"),
    "sort_class_properties": ("class",),
}
_MANUAL_ROLES = {"pattern", "literal", "type", "jsx"}


def _auto_roles(fmt: FormatOptions) -> Set[str]:
    roles: Set[str] = set()
    for option, names in _AUTO_ROLES.items():
        if getattr(fmt, option):
            roles.update(names)
    if fmt.organize_reexports:
        # the re-export organizer owns `export { ... } from` blocks
        roles.discard("export_from")
    return roles


class _Collector:
    def __init__(self, text: str, roles: Set[str], logger: logging.Logger) -> None:
        self.text = text
        self.enabled = roles
        self.log = logger
        self.roles: Dict[int, str] = {}
        self.patterns: List[SortablePattern] = []

    def run(self, module: Node) -> List[SortablePattern]:
        # pre-order: a container is classified before its children are visited
        for node in iter_nodes(module):
            if node.kind == "jsx_attrs":
                if "jsx" in self.enabled:
                    self._emit(node, "jsx", self._jsx)
                continue
            role = self.roles.get(id(node))
            if role in self.enabled:
                self._emit(node, role, self._builders[role])
            self._classify_children(node, role)
        return self.patterns

    def _classify_children(self, node: Node, role: Optional[str]) -> None:
        sig = significant(node.inner)
        for idx, item in enumerate(sig):
            if is_node(item, "paren") and _is_params(sig, idx):
                for seg in split_items(significant(item.inner)):
                    if seg and is_node(seg[0], "brace"):
                        self.roles.setdefault(id(seg[0]), "pattern")
            elif is_node(item, "brace") and id(item) not in self.roles:
                child_role = _role(sig, idx, node, role)
                if child_role:
                    self.roles[id(item)] = child_role

    def _emit(self, node: Node, role: str, build: Callable[[Node], List[SortablePattern]]) -> None:
        try:
            found = build(node)
        except _Unsortable as e:
            self.log.debug("Skipping %s at line %d: %s", role, node.line, e)
            return
        self.patterns.extend(found)

    @property
    def _builders(self) -> Dict[str, Callable[[Node], List[SortablePattern]]]:
        return {
            "pattern": lambda n: self._comma_list(n, PatternKind.PROPERTY_LIST, _pattern_member),
            "literal": lambda n: self._comma_list(n, PatternKind.PROPERTY_LIST, _literal_member, spreads=True),
            "enum": lambda n: self._comma_list(n, PatternKind.ENUM_BODY, _enum_member),
            "export": lambda n: self._comma_list(n, PatternKind.EXPORT_BLOCK, _export_member),
            "export_from": lambda n: self._comma_list(n, PatternKind.EXPORT_BLOCK, _export_member),
            "type": self._type_members,
            "class": self._class_runs,
        }

    # ----- comments -----
    def _attach(self, pattern: SortablePattern, found: List[Leaf], open_line: int) -> None:
        props = pattern.properties
        for c in found:
            if any(p.start <= c.start < p.end for p in props):
                continue
            prv = None
            nxt = None
            for p in props:
                if p.end <= c.start:
                    prv = p
                elif p.start >= c.end:
                    nxt = p
                    break
            if prv is not None and c.line == prv.end_line:
                raise _Unsortable("trailing comment")
            if nxt is None:
                continue  # after the last member; stays in place
            if prv is None:
                if c.line == open_line:
                    continue
                if pattern.prefix_cut is None:
                    pattern.prefix_cut = c.start
            nxt.leading.append(c.text)

    # ----- builders -----
    def _comma_list(self, brace: Node, kind: PatternKind, member, spreads: bool = False) -> List[SortablePattern]:
        if brace.line == brace.end_line:
            return []
        props = []
        for seg in _comma_segments(brace.inner):
            name, is_rest, has_value = member(seg)
            props.append(_prop(self.text, seg, name, is_rest, has_value))
        if len(props) < 2:
            return []
        if spreads:
            _require_trailing_rest(props)
        pattern = SortablePattern(kind, brace.start, brace.end, props, separator=",")
        self._attach(pattern, comments(brace.inner), brace.line)
        return [pattern]

    def _type_members(self, brace: Node) -> List[SortablePattern]:
        if brace.line == brace.end_line:
            return []
        props = [_prop(self.text, m, _type_member_name(m)) for m in split_members(significant(brace.inner))]
        if len(props) < 2:
            return []
        pattern = SortablePattern(PatternKind.TYPE_MEMBER_LIST, brace.start, brace.end, props)
        self._attach(pattern, comments(brace.inner), brace.line)
        return [pattern]

    def _class_runs(self, brace: Node) -> List[SortablePattern]:
        members = split_members(significant(brace.inner), class_body=True)
        found = comments(brace.inner)
        out: List[SortablePattern] = []
        run: List[PropertyInfo] = []
        boundary = (brace.start + 1, brace.line)  # end offset and line of the member before the run

        def flush(next_boundary):
            nonlocal run, boundary
            if len(run) >= 2:
                try:
                    out.append(self._class_run(run, found, boundary))
                except _Unsortable as e:
                    self.log.debug("Skipping class field run at line %d: %s", run[0].line, e)
            run = []
            boundary = next_boundary

        for m in members:
            name = _class_field_name(m)
            if name is None:
                flush((m[-1].end, m[-1].end_line))
                continue
            p = _prop(self.text, m, name)
            if run and p.line <= run[-1].end_line:
                flush((run[-1].end, run[-1].end_line))
            run.append(p)
        flush(None)
        return out

    def _class_run(self, run: List[PropertyInfo], found: List[Leaf], boundary) -> SortablePattern:
        after, open_line = boundary
        last = run[-1]
        mine = [c for c in found if c.start >= after and (c.start < last.end or c.line == last.end_line)]
        pattern = SortablePattern(PatternKind.CLASS_FIELD_RUN, _line_start(self.text, run[0].start),
                                  run[-1].end, run)
        self._attach(pattern, mine, open_line)
        if pattern.prefix_cut is not None:
            pattern.start = _line_start(self.text, pattern.prefix_cut)
        head = self.text[pattern.start:pattern.prefix_cut if pattern.prefix_cut is not None else run[0].start]
        if head.strip():
            raise _Unsortable("field shares a line with other code")
        return pattern

    def _jsx(self, attrs: Node) -> List[SortablePattern]:
        sig = significant(attrs.children)
        if sig and is_name(sig[0]):
            sig = sig[1:]  # tag name
        props: List[PropertyInfo] = []
        i = 0
        while i < len(sig):
            x = sig[i]
            if is_name(x):
                if i + 1 < len(sig) and is_punct(sig[i + 1], "="):
                    if i + 2 >= len(sig) or not (is_leaf(sig[i + 2], "STRING") or is_node(sig[i + 2], "brace")):
                        raise _Unsortable("unknown attribute value")
                    props.append(_prop(self.text, sig[i:i + 3], x.text))
                    i += 3
                else:
                    props.append(_prop(self.text, [x], x.text, has_value=False))
                    i += 1
            elif is_node(x, "brace") and significant(x.inner) and is_punct(significant(x.inner)[0], "..."):
                props.append(_prop(self.text, [x], "...", is_rest=True))
                i += 1
            else:
                raise _Unsortable("unknown attribute")
        if len(props) < 2 or props[0].line == props[-1].end_line:
            return []
        _require_trailing_rest(props)
        pattern = SortablePattern(PatternKind.JSX_ATTRIBUTE_LIST, props[0].start, props[-1].end, props)
        self._attach(pattern, comments(attrs.children), attrs.line)
        return [pattern]


def find_patterns(module: Node, text: str, roles: Set[str],
                  logger: Optional[logging.Logger] = None) -> List[SortablePattern]:
    return _Collector(text, roles, logger or log).run(module)


# ---------- Rendering ----------
def _sort_key(mode: str, boolean_first: bool):
    def key(p: PropertyInfo):
        if mode == "length":
            base = (len(p.name), p.name.lower(), p.name)
        else:
            base = (p.name.lower(), p.name)
        return ((p.has_value,) + base) if boolean_first else base
    return key


def _detect_indent(text: str, props: List[PropertyInfo]) -> str:
    for p in props:
        head = text[_line_start(text, p.start):p.start]
        if head and not head.strip():
            return head
    return DEFAULT_INDENT


def build_replacement(text: str, pattern: SortablePattern, fmt: FormatOptions) -> Optional[Replacement]:
    """Sorted text for one fragment, or None when nothing would change."""
    if fmt.sort_specifiers == "preserve":
        return None
    props = pattern.properties
    sortable = [p for p in props if not p.is_rest]
    boolean_first = pattern.kind is PatternKind.JSX_ATTRIBUTE_LIST
    ordered = sorted(sortable, key=_sort_key(fmt.sort_specifiers, boolean_first))
    ordered += [p for p in props if p.is_rest]
    indent = _detect_indent(text, props)

    suffix = text[props[-1].end:pattern.end]
    trailing = False
    if pattern.separator:
        m = re.match(r"\s*,", suffix)
        if m:
            trailing = True
            suffix = suffix[:m.end() - 1] + suffix[m.end():]

    lines: List[str] = []
    for i, p in enumerate(ordered):
        if fmt.preserve_comments:
            lines.extend(p.leading)
        sep = pattern.separator if (i < len(ordered) - 1 or trailing) else ""
        lines.append(p.text + sep)

    if pattern.kind is PatternKind.CLASS_FIELD_RUN:
        new_text = "\n".join(indent + line for line in lines)
    else:
        if pattern.prefix_cut is not None:
            prefix = text[pattern.start:_line_start(text, pattern.prefix_cut)] + indent
        else:
            prefix = text[pattern.start:props[0].start]
        body = lines[0] + "".join(f"\n{indent}{line}" for line in lines[1:])
        new_text = prefix + body + suffix

    if new_text == text[pattern.start:pattern.end]:
        return None
    return Replacement(pattern.start, pattern.end, new_text)


# ---------- Applying ----------
def filter_non_overlapping(replacements: List[Replacement]) -> Tuple[List[Replacement], List[Replacement]]:
    """Outer fragments win; overlapping ones are deferred to the next pass."""
    accepted: List[Replacement] = []
    deferred: List[Replacement] = []
    last_end = -1
    for r in sorted(replacements, key=lambda r: (r.start, -(r.end - r.start))):
        if r.start >= last_end:
            accepted.append(r)
            last_end = r.end
        else:
            deferred.append(r)
    return accepted, deferred


def apply_replacements(text: str, replacements: List[Replacement]) -> str:
    """Substitute non-overlapping replacements, last one first, in a single join."""
    pieces: List[str] = []
    cursor = len(text)
    for r in sorted(replacements, key=lambda r: r.start, reverse=True):
        pieces.append(text[r.end:cursor])
        pieces.append(r.new_text)
        cursor = r.start
    pieces.append(text[:cursor])
    return "".join(reversed(pieces))


def run_sort_passes(text: str, roles: Set[str], fmt: FormatOptions,
                    selection: Optional[Tuple[int, int]] = None,
                    max_passes: int = MAX_SORT_PASSES,
                    logger: Optional[logging.Logger] = None) -> SortPassReport:
    """
    Sort fragments until no replacement is left, nothing is deferred, the
    text stops changing, or `max_passes` is reached.
    """
    logger = logger or log
    report = SortPassReport(text)
    current = text
    for n in range(1, max_passes + 1):
        try:
            module = parse_source(current, logger=logger)
        except SourceSyntaxError as e:
            logger.info("Cannot sort properties: %s", e)
            break
        patterns = find_patterns(module, current, roles, logger)
        if selection is not None:
            patterns = [p for p in patterns if p.start < selection[1] and p.end > selection[0]]
        replacements = [r for r in (build_replacement(current, p, fmt) for p in patterns) if r is not None]
        report.passes = n
        if not replacements:
            report.converged = True
            break
        accepted, deferred = filter_non_overlapping(replacements)
        updated = apply_replacements(current, accepted)
        report.applied += len(accepted)
        report.deferred = len(deferred)
        if updated == current:
            report.converged = True
            break
        if selection is not None:
            delta = sum(len(r.new_text) - (r.end - r.start) for r in accepted if r.start < selection[1])
            selection = (selection[0], selection[1] + delta)
        current = updated
        logger.debug("Sort pass %d: applied %d, deferred %d", n, len(accepted), len(deferred))
        if not deferred:
            report.converged = True
            break
    if not report.converged and report.passes >= max_passes:
        logger.warning("Property sorting stopped after %d passes with %d fragments deferred",
                       report.passes, report.deferred)
    report.text = current
    return report


# ---------- Public API ----------
def sort_code_patterns(text: str, config: Optional[Config] = None,
                       logger: Optional[logging.Logger] = None) -> str:
    """Sort the fragment kinds enabled in the format options; unparseable input comes back unchanged."""
    config = config or Config()
    roles = _auto_roles(config.format)
    if not roles:
        return text
    return run_sort_passes(text, roles, config.format, logger=logger).text


def sort_properties_in_selection(text: str, start: int, end: int, config: Optional[Config] = None,
                                 logger: Optional[logging.Logger] = None) -> Optional[str]:
    """
    Sort property lists, type members and JSX attributes overlapping
    [start, end). Returns None when there is nothing to sort.
    """
    config = config or Config()
    report = run_sort_passes(text, set(_MANUAL_ROLES), config.format, selection=(start, end), logger=logger)
    if report.text == text:
        return None
    return report.text

# tidyimports/parser.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedEOF, UnexpectedInput, VisitError

from .config import Config
from .group_matcher import GroupMatcher
from .merger import merge_declarations
from .model import (Aliased, Declaration, DeclarationKind, InvalidDeclaration, ParserResult,
                    Plain, Specifier, namespace, normalize_specifier)
from .ordering import organize_groups

log = logging.getLogger(__name__)

K = DeclarationKind


# ---------- Load grammar ----------
def _load_grammar() -> str:
    # declarations.lark sits next to this file
    path = Path(__file__).with_name("declarations.lark")
    return path.read_text(encoding="utf-8")

_GRAMMAR = _load_grammar()
# Earley: `type`, `as` and `from` are contextual and may also be binding names
_parser = Lark(_GRAMMAR, start="start", parser="earley", propagate_positions=True)


# ---------- Helpers ----------
_TYPE = object()  # marker returned for `type` modifiers


def _unquote(tok: Token) -> str:
    return str(tok)[1:-1]


def _binding(parts: List[Tuple[str, Any]], kind: str) -> List[Any]:
    return [v for k, v in parts if k == kind]


# ---------- Transformer ----------
@v_args(meta=True)  # pass node metadata (line/col) into rule methods
class ToDeclarations(Transformer):
    """Turn one statement tree into a list of Declaration records."""

    def type_marker(self, meta, c):
        return _TYPE

    def alias(self, meta, c):
        return str(c[0])

    def specifier(self, meta, c):
        is_type = c[0] is _TYPE
        if is_type:
            c = c[1:]
        name = str(c[0])
        spec: Specifier = Aliased(name, c[1]) if len(c) > 1 else Plain(name)
        return (is_type, normalize_specifier(spec))

    def named_list(self, meta, c):
        # `[...]` leaves a None placeholder for an empty list
        return [x for x in c if x is not None]

    def default_binding(self, meta, c):
        return ("default", Plain(str(c[0])))

    def namespace_binding(self, meta, c):
        return ("default", namespace(str(c[0])))

    def import_clause(self, meta, c):
        parts: List[Tuple[str, Any]] = []
        for item in c:
            if isinstance(item, list):
                parts.append(("named", item))
            else:
                parts.append(item)
        return parts

    def attribute(self, meta, c):
        return f"{c[0]}: {c[1]}"

    def attributes(self, meta, c):
        keyword = str(c[0])
        pairs = [x for x in c[1:] if x is not None]
        return f"{keyword} {{ {', '.join(pairs)} }}" if pairs else f"{keyword} {{}}"

    # ----- statements -----
    def side_effect(self, meta, c):
        attributes = c[1] if len(c) > 1 else None
        return [Declaration(K.SIDE_EFFECT, _unquote(c[0]), [], attributes=attributes)]

    def import_from(self, meta, c):
        type_only = c[0] is _TYPE
        if type_only:
            c = c[1:]
        parts, source = c[0], _unquote(c[1])
        attributes = c[2] if len(c) > 2 else None
        out: List[Declaration] = []
        default_kind = K.TYPE_DEFAULT if type_only else K.DEFAULT
        for spec in _binding(parts, "default"):
            out.append(Declaration(default_kind, source, [spec], attributes=attributes))
        for named in _binding(parts, "named"):
            out.extend(_split_named(named, source, type_only, attributes, meta))
        return out

    def reexport(self, meta, c):
        type_only = c[0] is _TYPE
        if type_only:
            c = c[1:]
        named, source = c[0], _unquote(c[1])
        attributes = c[2] if len(c) > 2 else None
        out = _split_named(named, source, type_only, attributes, meta)
        for d in out:
            d.is_reexport = True
        return out


def _split_named(named, source: str, type_only: bool, attributes: Optional[str], meta) -> List[Declaration]:
    """Split one braced list into value and type-only records."""
    if not named:
        raise ParseError(f"Empty specifier list for '{source}'", meta.line, meta.column)
    values = [s for is_type, s in named if not (is_type or type_only)]
    types = [s for is_type, s in named if is_type or type_only]
    out = []
    if values:
        out.append(Declaration(K.NAMED, source, values, attributes=attributes))
    if types:
        out.append(Declaration(K.TYPE_NAMED, source, types, attributes=attributes))
    return out


# ---------- Public API ----------
class ParseError(Exception):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column


def _describe(text: str, e: UnexpectedInput) -> str:
    line = getattr(e, 'line', None)
    column = getattr(e, 'column', None)
    expected = sorted(getattr(e, 'expected', None) or getattr(e, 'allowed', None) or [])
    if isinstance(e, UnexpectedEOF) or not line or line < 1:
        return f"Unexpected end of declaration.\nExpected one of: {expected}"
    # Try to show the offending line
    lines = text.splitlines()
    context = ""
    if 1 <= line <= len(lines):
        src_line = lines[line-1]
        caret = " " * (column-1 if column and column > 0 else 0) + "^"
        context = f"\n{src_line}\n{caret}"
    return f"Syntax error at line {line}, column {column}.{context}\nExpected one of: {expected}"


def parse_statement(text: str) -> List[Declaration]:
    """
    Parse one import or re-export statement. Raises ParseError on syntax problems.
    """
    try:
        tree = _parser.parse(text)
    except UnexpectedInput as e:
        line = getattr(e, 'line', None)
        column = getattr(e, 'column', None)
        raise ParseError(_describe(text, e), line, column) from None
    try:
        decls = ToDeclarations().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        raise
    for d in decls:
        d.raw = text
    return decls


# ---------- Import block scanning ----------
_IDENT = re.compile(r"[\w$]")
_NOT_DECLARATION = re.compile(r"import\s*(?:[(.]|(?:type\s+)?[A-Za-z_$][\w$]*\s*=(?!=))")
_COMPLETE = re.compile(
    r"""(?:\bfrom|^import)\s*(['"])(?:(?!\1)[^\\\n]|\\.)*\1"""
    r"""(?:\s*(?:with|assert)\s*\{[^{}]*\})?\s*$"""
)
_DIRECTIVE = re.compile(r"""(['"])(?:(?!\1)[^\\\n]|\\.)*\1[ \t]*;?[ \t]*(?=\n|$|//)""")
_NEXT_IMPORT = re.compile(r"\n[ \t]*import\b")


@dataclass
class ImportBlock:
    statements: List[Tuple[int, int]] = field(default_factory=list)
    comments: List[Tuple[int, int]] = field(default_factory=list)
    stop: int = 0


def _skip_quoted(text: str, i: int) -> int:
    quote = text[i]
    i += 1
    while i < len(text):
        c = text[i]
        if c == '\\':
            i += 2
            continue
        if c == quote:
            return i + 1
        if c == '\n' and quote != '`':
            return i
        i += 1
    return len(text)


def _skip_comment(text: str, i: int) -> int:
    if text.startswith("//", i):
        end = text.find("\n", i)
        return len(text) if end < 0 else end
    end = text.find("*/", i + 2)
    return len(text) if end < 0 else end + 2


def _is_comment_start(text: str, i: int) -> bool:
    return text.startswith("//", i) or text.startswith("/*", i)


def _skip_trivia(text: str, i: int, comments: List[Tuple[int, int]]) -> int:
    while i < len(text):
        if text[i].isspace():
            i += 1
        elif _is_comment_start(text, i):
            end = _skip_comment(text, i)
            comments.append((i, end))
            i = end
        else:
            break
    return i


def _starts_import(text: str, i: int) -> bool:
    if not text.startswith("import", i):
        return False
    after = i + len("import")
    if after < len(text) and _IDENT.match(text[after]):
        return False
    return not _NOT_DECLARATION.match(text, i)


def _read_statement(text: str, start: int, comments: List[Tuple[int, int]]) -> int:
    """Return the end offset of the statement starting at `start`."""
    depth = 0
    code: List[str] = []
    last = start
    i = start
    n = len(text)
    while i < n:
        c = text[i]
        if c in "'\"`":
            end = _skip_quoted(text, i)
            code.append(text[i:end])
            i = last = end
            continue
        if _is_comment_start(text, i):
            end = _skip_comment(text, i)
            comments.append((i, end))
            code.append(" ")
            i = end
            continue
        if c == '\n':
            if depth == 0 and _COMPLETE.search("".join(code).strip()):
                return last
            if depth > 0 and _NEXT_IMPORT.match(text, i):
                # unterminated list; the next line starts a new statement
                return last
        if c == '{':
            depth += 1
        elif c == '}':
            depth = max(0, depth - 1)
        elif c == ';' and depth == 0:
            return i + 1
        if not c.isspace():
            last = i + 1
        code.append(c)
        i += 1
    return last


def scan_import_block(text: str) -> ImportBlock:
    """Locate the leading run of import statements."""
    block = ImportBlock()
    pos = 0
    if text.startswith("#!"):
        end = text.find("\n")
        pos = len(text) if end < 0 else end
    while True:
        pos = _skip_trivia(text, pos, block.comments)
        if pos >= len(text):
            break
        if not block.statements:
            m = _DIRECTIVE.match(text, pos)
            if m and m.group(0).strip():
                pos = m.end()
                continue
        if not _starts_import(text, pos):
            break
        found: List[Tuple[int, int]] = []
        end = _read_statement(text, pos, found)
        # comments past the end are picked up again by _skip_trivia
        block.comments.extend(c for c in found if c[0] < end)
        block.statements.append((pos, end))
        pos = end
    block.stop = pos
    return block


# ---------- Line helpers ----------
def line_start(text: str, i: int) -> int:
    return text.rfind("\n", 0, i) + 1


def line_end(text: str, i: int) -> int:
    end = text.find("\n", i)
    return len(text) if end < 0 else end


def comment_body(text: str) -> str:
    if text.startswith("//"):
        return text[2:].strip()
    return text[2:-2].strip()


def is_section_comment(text: str, group_names) -> bool:
    return text.startswith("//") and comment_body(text) in group_names


# ---------- Public parse ----------
def parse_imports(text: str, config: Optional[Config] = None, matcher: Optional[GroupMatcher] = None,
                  logger: Optional[logging.Logger] = None) -> ParserResult:
    """
    Extract, classify, merge and group the declarations at the top of `text`.
    Statements that do not parse are collected in `invalid_imports`.
    """
    logger = logger or log
    config = config or Config()
    matcher = matcher or GroupMatcher(config, logger=logger)
    block = scan_import_block(text)
    result = ParserResult(stop=block.stop)
    if not block.statements:
        return result

    parsed: List[Declaration] = []
    for start, end in block.statements:
        raw = text[start:end]
        result.original_imports.append(raw)
        try:
            decls = parse_statement(raw)
        except ParseError as e:
            logger.debug("Invalid declaration %r: %s", raw, e)
            result.invalid_imports.append(InvalidDeclaration(raw, str(e), (start, end)))
            continue
        for d in decls:
            d.span = (start, end)
        parsed.extend(decls)

    first, last = block.statements[0][0], block.statements[-1][1]
    names = set(config.group_names)
    range_start = line_start(text, first)
    range_end = line_end(text, last)

    # section comments directly above the block are regenerated, so they belong to it
    preceding = [c for c in block.comments if c[1] <= first]
    for c_start, c_end in reversed(preceding):
        if text[c_end:range_start].strip() or not is_section_comment(text[c_start:c_end], names):
            break
        if text[line_start(text, c_start):c_start].strip():
            break
        range_start = line_start(text, c_start)

    for c_start, c_end in block.comments:
        if c_start < range_start or c_start >= range_end:
            continue
        body = text[c_start:c_end]
        if is_section_comment(body, names):
            continue
        result.comments.append(body)
        range_end = max(range_end, line_end(text, c_end))

    result.import_range = (range_start, range_end)
    merged = merge_declarations(parsed)
    for d in merged:
        matcher.assign(d)
    result.declarations = merged
    result.groups = organize_groups(merged, config)
    logger.debug("Parsed %d declarations (%d invalid) into %d groups",
                 len(merged), len(result.invalid_imports), len(result.groups))
    return result

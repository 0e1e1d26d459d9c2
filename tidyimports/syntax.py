# tidyimports/syntax.py
"""
Bracket-level syntax tree for JavaScript/TypeScript sources.

A hand-written lexer (regex literals, template literals and JSX need
context a regular lexer cannot see) feeds an LALR grammar that balances
brackets and JSX tags. The result is a tree of `Node` groups and `Leaf`
tokens carrying character offsets and line numbers, which is all the
property sorter and the re-export organizer need.
"""
from __future__ import annotations

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

from lark import Lark, Token, Transformer_NonRecursive, v_args
from lark.exceptions import UnexpectedInput
from lark.lexer import Lexer

log = logging.getLogger(__name__)


class SourceSyntaxError(Exception):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column


# ---------- Tree ----------
@dataclass
class Leaf:
    type: str
    text: str
    start: int
    end: int
    line: int
    end_line: int


@dataclass
class Node:
    kind: str  # module | brace | paren | bracket | jsx_element | jsx_attrs
    children: List["Item"] = field(default_factory=list)
    start: int = 0
    end: int = 0
    line: int = 1
    end_line: int = 1

    @property
    def inner(self) -> List["Item"]:
        """Children without the delimiting brackets."""
        if self.kind in ("brace", "paren", "bracket"):
            return self.children[1:-1]
        return self.children


Item = Union[Leaf, Node]


def is_leaf(item, type_: str | None = None, text: str | None = None) -> bool:
    if not isinstance(item, Leaf):
        return False
    return (type_ is None or item.type == type_) and (text is None or item.text == text)


def is_name(item, *names: str) -> bool:
    return is_leaf(item, "NAME") and (not names or item.text in names)


def is_punct(item, *texts: str) -> bool:
    return is_leaf(item, "PUNCT") and (not texts or item.text in texts)


def is_node(item, kind: str | None = None) -> bool:
    return isinstance(item, Node) and (kind is None or item.kind == kind)


def significant(items: List[Item]) -> List[Item]:
    return [x for x in items if not is_leaf(x, "COMMENT")]


def comments(items: List[Item]) -> List[Leaf]:
    return [x for x in items if is_leaf(x, "COMMENT")]


def split_items(items: List[Item], sep: str = "COMMA") -> List[List[Item]]:
    out: List[List[Item]] = [[]]
    for x in items:
        if is_leaf(x, sep):
            out.append([])
        else:
            out[-1].append(x)
    return out


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order walk over every Node."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed([c for c in node.children if isinstance(c, Node)]))


# ---------- Lexer ----------
_NAME = re.compile(r"[A-Za-z_$\u00a0-\uffff][\w$\u00a0-\uffff]*")
_JSX_NAME = re.compile(r"[A-Za-z_$][\w$.:-]*")
_NUMBER = re.compile(
    r"(?:0[xX][\da-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+|(?:\d[\d_]*\.?[\d_]*|\.\d[\d_]*)(?:[eE][+-]?\d+)?)n?"
)
_PUNCTUATORS = sorted([
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--", "+=", "-=",
    "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
    "=", "+", "-", "*", "/", "%", "&", "|", "^", "!", "~", "?", ":", "<", ">", ".", "@", "#",
], key=len, reverse=True)
_SINGLE = {"{": "LBRACE", "}": "RBRACE", "(": "LPAR", ")": "RPAR", "[": "LSQB", "]": "RSQB",
           ",": "COMMA", ";": "SEMI"}

# after these, `/` starts a regex and `<` may start JSX
_EXPR_KEYWORDS = {"return", "typeof", "instanceof", "in", "of", "new", "delete", "void", "throw",
                  "case", "do", "else", "yield", "await", "extends"}
_EXPR_OPENERS = {"LPAR", "LSQB", "LBRACE", "COMMA", "SEMI"}


class _Scanner:
    def __init__(self, text: str, jsx: bool) -> None:
        self.text = text
        self.jsx = jsx
        self.prev: Optional[Token] = None
        self._lines = [0] + [m.end() for m in re.finditer(r"\n", text)]

    # ----- positions -----
    def _where(self, offset: int):
        line = bisect_right(self._lines, offset)
        return line, offset - self._lines[line - 1] + 1

    def error(self, message: str, offset: int) -> SourceSyntaxError:
        line, column = self._where(offset)
        return SourceSyntaxError(f"{message} at line {line}, column {column}", line, column)

    def tok(self, type_: str, start: int, end: int) -> Token:
        line, column = self._where(start)
        end_line, end_column = self._where(end)
        t = Token(type_, self.text[start:end], start_pos=start, line=line, column=column,
                  end_line=end_line, end_column=end_column, end_pos=end)
        if type_ != "COMMENT":
            self.prev = t
        return t

    def _expression_start(self, for_jsx: bool = False) -> bool:
        p = self.prev
        if p is None:
            return True
        if p.type == "PUNCT":
            return p.value not in ("++", "--")
        if p.type in _EXPR_OPENERS:
            return True
        if p.type == "RBRACE":
            return not for_jsx
        if p.type == "NAME":
            return p.value in _EXPR_KEYWORDS
        return False

    # ----- literals -----
    def _string_end(self, i: int) -> int:
        text, quote = self.text, self.text[i]
        j = i + 1
        while j < len(text):
            c = text[j]
            if c == "\\":
                j += 2
            elif c == quote:
                return j + 1
            elif c == "\n":
                break
            else:
                j += 1
        raise self.error("Unterminated string literal", i)

    def _template_end(self, i: int) -> int:
        text = self.text
        j = i + 1
        while j < len(text):
            c = text[j]
            if c == "\\":
                j += 2
            elif c == "`":
                return j + 1
            elif text.startswith("${", j):
                j = self._skip_nested(j + 2) + 1
            else:
                j += 1
        raise self.error("Unterminated template literal", i)

    def _regex_end(self, i: int) -> int:
        text = self.text
        j, in_class = i + 1, False
        while j < len(text):
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if c == "\n":
                break
            if c == "[":
                in_class = True
            elif c == "]":
                in_class = False
            elif c == "/" and not in_class:
                j += 1
                while j < len(text) and (text[j].isalnum() or text[j] == "_"):
                    j += 1
                return j
            j += 1
        raise self.error("Unterminated regular expression", i)

    def _comment_end(self, i: int) -> int:
        text = self.text
        if text.startswith("//", i):
            end = text.find("\n", i)
            return len(text) if end < 0 else end
        end = text.find("*/", i + 2)
        if end < 0:
            raise self.error("Unterminated comment", i)
        return end + 2

    def _skip_nested(self, i: int) -> int:
        """Scan an embedded expression without emitting it; return the offset of its closing brace."""
        saved = self.prev
        self.prev = None
        tokens = self.scan_js(i, nested=True)
        try:
            while True:
                next(tokens)
        except StopIteration as stop:
            end = stop.value
        self.prev = saved
        if end >= len(self.text):
            raise self.error("Unterminated template expression", i)
        return end

    # ----- JS -----
    def scan_js(self, i: int, nested: bool = False):
        """Yield tokens from `i`; with `nested`, stop before an unmatched `}` and return its offset."""
        text, n = self.text, len(self.text)
        depth = 0
        while i < n:
            c = text[i]
            if c.isspace():
                i += 1
            elif text.startswith("//", i) or text.startswith("/*", i):
                end = self._comment_end(i)
                yield self.tok("COMMENT", i, end)
                i = end
            elif c in "'\"":
                end = self._string_end(i)
                yield self.tok("STRING", i, end)
                i = end
            elif c == "`":
                end = self._template_end(i)
                yield self.tok("TEMPLATE", i, end)
                i = end
            elif c.isdigit() or (c == "." and i + 1 < n and text[i + 1].isdigit()):
                m = _NUMBER.match(text, i)
                yield self.tok("NUMBER", i, m.end())
                i = m.end()
            elif _NAME.match(c) or (c == "#" and _NAME.match(text, i + 1)):
                m = _NAME.match(text, i + 1 if c == "#" else i)
                yield self.tok("NAME", i, m.end())
                i = m.end()
            elif c == "{":
                depth += 1
                yield self.tok("LBRACE", i, i + 1)
                i += 1
            elif c == "}":
                if nested and depth == 0:
                    return i
                depth -= 1
                yield self.tok("RBRACE", i, i + 1)
                i += 1
            elif c in _SINGLE:
                yield self.tok(_SINGLE[c], i, i + 1)
                i += 1
            elif c == "/" and self._expression_start():
                end = self._regex_end(i)
                yield self.tok("REGEX", i, end)
                i = end
            elif (c == "<" and self.jsx and self._expression_start(for_jsx=True)
                  and i + 1 < n and (text[i + 1] == ">" or _JSX_NAME.match(text, i + 1))):
                i = yield from self.scan_jsx(i)
            else:
                for p in _PUNCTUATORS:
                    if text.startswith(p, i):
                        yield self.tok("PUNCT", i, i + len(p))
                        i += len(p)
                        break
                else:
                    raise self.error(f"Unexpected character {c!r}", i)
        return n

    # ----- JSX -----
    def _skip_space(self, i: int) -> int:
        while i < len(self.text) and self.text[i].isspace():
            i += 1
        return i

    def _jsx_expression(self, i: int):
        yield self.tok("LBRACE", i, i + 1)
        saved = self.prev
        end = yield from self.scan_js(i + 1, nested=True)
        if end >= len(self.text) or self.text[end] != "}":
            raise self.error("Unterminated JSX expression", i)
        yield self.tok("RBRACE", end, end + 1)
        self.prev = saved
        return end + 1

    def scan_jsx(self, i: int):
        text, n = self.text, len(self.text)
        start = i
        yield self.tok("JSX_OPEN", i, i + 1)
        i = self._skip_space(i + 1)
        m = _JSX_NAME.match(text, i)
        if m:
            yield self.tok("NAME", i, m.end())
            i = m.end()
        # attributes
        while True:
            i = self._skip_space(i)
            if i >= n:
                raise self.error("Unterminated JSX tag", start)
            c = text[i]
            if text.startswith("/>", i):
                yield self.tok("JSX_SELF_CLOSE", i, i + 2)
                return i + 2
            if c == ">":
                yield self.tok("JSX_TAG_END", i, i + 1)
                i += 1
                break
            if text.startswith("//", i) or text.startswith("/*", i):
                end = self._comment_end(i)
                yield self.tok("COMMENT", i, end)
                i = end
            elif c == "{":
                i = yield from self._jsx_expression(i)
            elif c in "'\"":
                end = text.find(c, i + 1)
                if end < 0:
                    raise self.error("Unterminated JSX attribute", i)
                yield self.tok("STRING", i, end + 1)
                i = end + 1
            elif c == "=":
                yield self.tok("PUNCT", i, i + 1)
                i += 1
            else:
                m = _JSX_NAME.match(text, i)
                if not m:
                    raise self.error(f"Unexpected character {c!r} in JSX tag", i)
                yield self.tok("NAME", i, m.end())
                i = m.end()
        # children
        while True:
            if i >= n:
                raise self.error("Unterminated JSX element", start)
            c = text[i]
            if c == "<":
                j = self._skip_space(i + 1)
                if text.startswith("/", j):
                    end = text.find(">", j)
                    if end < 0:
                        raise self.error("Unterminated JSX closing tag", i)
                    yield self.tok("JSX_CLOSE", i, end + 1)
                    return end + 1
                i = yield from self.scan_jsx(i)
            elif c == "{":
                i = yield from self._jsx_expression(i)
            else:
                end = i
                while end < n and text[end] not in "<{":
                    end += 1
                yield self.tok("JSX_TEXT", i, end)
                i = end


class JsLexer(Lexer):
    """lark custom lexer; `jsx` decides whether `<` may open an element."""
    jsx = False

    def __init__(self, lexer_conf) -> None:
        pass

    def lex(self, data: str) -> Iterator[Token]:
        yield from _Scanner(data, self.jsx).scan_js(0)


class JsxLexer(JsLexer):
    jsx = True


# ---------- Load grammar ----------
def _load_grammar() -> str:
    path = Path(__file__).with_name("syntax.lark")
    return path.read_text(encoding="utf-8")

_GRAMMAR = _load_grammar()
_parsers = {}


def _get_parser(jsx: bool) -> Lark:
    parser = _parsers.get(jsx)
    if parser is None:
        lexer = JsxLexer if jsx else JsLexer
        parser = Lark(_GRAMMAR, start="start", parser="lalr", lexer=lexer, propagate_positions=True)
        _parsers[jsx] = parser
    return parser


# ---------- Transformer ----------
def _span(children: List[Item]):
    return children[0].start, children[-1].end, children[0].line, children[-1].end_line


@v_args(meta=True)
class ToTree(Transformer_NonRecursive):
    def __default_token__(self, token: Token) -> Leaf:
        return Leaf(token.type, str(token), token.start_pos, token.end_pos, token.line, token.end_line)

    def _group(self, kind: str, children: List[Item]) -> Node:
        node = Node(kind, list(children))
        if children:
            node.start, node.end, node.line, node.end_line = _span(children)
        return node

    def start(self, meta, children):
        return self._group("module", children)

    def brace(self, meta, children):
        return self._group("brace", children)

    def paren(self, meta, children):
        return self._group("paren", children)

    def bracket(self, meta, children):
        return self._group("bracket", children)

    def jsx_attrs(self, meta, children):
        return self._group("jsx_attrs", children)

    def jsx_element(self, meta, children):
        node = self._group("jsx_element", children)
        attrs = children[1]
        if not attrs.children:
            opener = children[0]
            attrs.start = attrs.end = opener.end
            attrs.line = attrs.end_line = opener.end_line
        return node


# ---------- Public API ----------
def parse_source(text: str, jsx: bool | None = None, logger: Optional[logging.Logger] = None) -> Node:
    """
    Build the token tree for `text`. With `jsx=None`, JSX is tried first and
    plain TypeScript (angle-bracket assertions) second. Raises SourceSyntaxError.
    """
    logger = logger or log
    modes = [True, False] if jsx is None else [jsx]
    error: Optional[SourceSyntaxError] = None
    for mode in modes:
        try:
            tree = _get_parser(mode).parse(text)
        except SourceSyntaxError as e:
            error = e
        except UnexpectedInput as e:
            line = getattr(e, 'line', None)
            column = getattr(e, 'column', None)
            error = SourceSyntaxError(f"Unbalanced brackets at line {line}, column {column}", line, column)
        else:
            module = ToTree().transform(tree)
            module.start, module.end = 0, len(text)
            module.line, module.end_line = 1, text.count("\n") + 1
            return module
        logger.debug("Token tree failed (jsx=%s): %s", mode, error)
    raise error

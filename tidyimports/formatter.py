# tidyimports/formatter.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .builders import build_document
from .config import Config
from .group_matcher import GroupMatcher
from .model import ParserResult
from .parser import parse_imports
from .pragma import has_ignore_pragma
from .printer import print_document
from .property_sorter import sort_code_patterns
from .reexports import organize_reexports
from .syntax import Node, SourceSyntaxError, is_leaf, is_name, is_node, is_punct, iter_nodes, parse_source
from .validator import ValidationError, validate_config, validate_output

log = logging.getLogger(__name__)

_LEADING_BLANK_LINES = re.compile(r"\A(?:[ \t]*\n)+")


class StructuralHazard(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


@dataclass
class FormatResult:
    text: str
    error: Optional[str] = None


# ---------- Hazard detection ----------
def _static_imports(module: Node) -> List[int]:
    """Offsets of top-level `import` keywords that start a static declaration."""
    items = [x for x in module.children if not is_leaf(x, "COMMENT")]
    found = []
    for i, x in enumerate(items):
        if not is_name(x, "import"):
            continue
        if i > 0 and is_punct(items[i - 1], ".", "?."):
            continue
        j = i + 1
        if j >= len(items) or is_node(items[j], "paren") or is_punct(items[j], "."):
            continue
        if is_name(items[j], "type") and j + 1 < len(items):
            j += 1
        if is_name(items[j]) and j + 1 < len(items) and is_punct(items[j + 1], "="):
            continue  # `import x = require(...)`
        found.append(x.start)
    return found


def _dynamic_imports(module: Node) -> List[int]:
    found = []
    for node in iter_nodes(module):
        kids = node.children
        for i, x in enumerate(kids[:-1]):
            if is_name(x, "import") and is_node(kids[i + 1], "paren"):
                found.append(x.start)
    return found


def _line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def check_hazards(text: str, result: ParserResult, module: Node) -> None:
    """Raise StructuralHazard when rewriting the import block could move code."""
    late = [pos for pos in _static_imports(module) if pos >= result.stop]
    if late:
        first_late = late[0]
        if any(pos < first_late for pos in _dynamic_imports(module)):
            raise StructuralHazard("dynamic-import",
                                   f"Dynamic import() before the static import at line {_line_of(text, first_late)}")
        raise StructuralHazard("code-before-imports",
                               f"Code at line {_line_of(text, result.stop)} precedes the import at line "
                               f"{_line_of(text, first_late)}")
    if result.import_range and result.stop < result.import_range[1]:
        raise StructuralHazard("code-before-imports",
                               f"Code shares line {_line_of(text, result.stop)} with an import declaration")


# ---------- Text surgery ----------
def replace_import_lines(text: str, import_range: Tuple[int, int], formatted: str, enforce_newline: bool) -> str:
    start, end = import_range
    before = text[:start]
    after = text[end:]
    if after.startswith("\n"):
        after = after[1:]
    if not after.strip():
        return before + formatted
    if enforce_newline:
        return before + formatted + "\n" + _LEADING_BLANK_LINES.sub("", after)
    return before + formatted + after


# ---------- Formatter ----------
class ImportFormatter:
    """Runs the import pipeline over whole files with one config and one matcher cache."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[logging.Logger] = None):
        self.config = config or Config()
        validate_config(self.config)
        self.log = logger or log
        self.matcher = GroupMatcher(self.config, logger=self.log)

    def _parse(self, text: str) -> ParserResult:
        return parse_imports(text, self.config, self.matcher, self.log)

    def format_import_block(self, text: str, result: ParserResult) -> Optional[str]:
        """Whole-file text with the import block rewritten, or None when there is nothing to do."""
        if not result.declarations or result.import_range is None:
            return None
        fmt = self.config.format
        comments = result.comments if fmt.preserve_comments else ()
        formatted = print_document(build_document(result.groups, fmt, comments))
        out = replace_import_lines(text, result.import_range, formatted, fmt.enforce_newline_after_imports)
        return None if out == text else out

    def format_imports(self, text: str) -> FormatResult:
        if has_ignore_pragma(text):
            self.log.debug("Ignore pragma found, file left untouched")
            return FormatResult(text)

        result = self._parse(text)
        if result.invalid_imports:
            first = result.invalid_imports[0]
            self.log.info("Invalid declaration %r: %s", first.raw, first.error)
            return FormatResult(text, first.error)

        try:
            module = parse_source(text, logger=self.log)
        except SourceSyntaxError as e:
            self.log.info("File left untouched: %s", e)
            return FormatResult(text)

        try:
            check_hazards(text, result, module)
        except StructuralHazard as e:
            self.log.warning("Import block not formatted: %s", e)
            return FormatResult(text, str(e))

        out = self.format_import_block(text, result)
        if out is None:
            return FormatResult(text)

        try:
            validate_output(result, self._parse(out))
        except ValidationError as e:
            self.log.error("Discarding rewrite: %s", e)
            return FormatResult(text, str(e))
        return FormatResult(out)

    def format_source(self, text: str) -> FormatResult:
        """Imports, then re-exports, then the property sorter."""
        res = self.format_imports(text)
        if res.error or has_ignore_pragma(text):
            return res
        out = res.text
        fmt = self.config.format
        if fmt.organize_reexports:
            out = organize_reexports(out, self.config, self.matcher, self.log)
        if fmt.sorts_code_patterns:
            out = sort_code_patterns(out, self.config, self.log)
        return FormatResult(out)


def format_imports(text: str, config: Optional[Config] = None, logger: Optional[logging.Logger] = None) -> FormatResult:
    return ImportFormatter(config, logger).format_imports(text)


def format_source(text: str, config: Optional[Config] = None, logger: Optional[logging.Logger] = None) -> FormatResult:
    return ImportFormatter(config, logger).format_source(text)

# tidyimports/reexports.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .builders import build_document
from .config import Config
from .group_matcher import GroupMatcher
from .merger import merge_declarations
from .model import Declaration
from .ordering import organize_groups
from .parser import ParseError, is_section_comment, line_end, line_start, parse_statement
from .printer import print_document
from .syntax import Item, SourceSyntaxError, comments, is_leaf, is_name, is_node, iter_nodes, parse_source

log = logging.getLogger(__name__)

Span = Tuple[int, int]


def _reexport_end(items: List[Item], i: int) -> Optional[int]:
    """Index just past an `export [type] { ... } from '...'` statement starting at items[i]."""
    n = len(items)
    if not is_name(items[i], "export"):
        return None
    j = i + 1
    if j < n and is_name(items[j], "type"):
        j += 1
    if not (j < n and is_node(items[j], "brace")):
        return None
    j += 1
    if not (j < n and is_name(items[j], "from")):
        return None
    j += 1
    if not (j < n and is_leaf(items[j], "STRING")):
        return None
    j += 1
    if j + 1 < n and is_name(items[j], "with", "assert") and is_node(items[j + 1], "brace"):
        j += 2
    if j < n and is_leaf(items[j], "SEMI"):
        j += 1
    return j


def _own_lines(text: str, start: int, end: int) -> bool:
    return not text[line_start(text, start):start].strip() and not text[end:line_end(text, end)].strip()


def _statement_comments(text: str, logger: logging.Logger) -> List[str]:
    """Comments inside one statement, in source order."""
    module = parse_source(text, logger=logger)
    found = [c for node in iter_nodes(module) for c in comments(node.children)]
    return [c.text for c in sorted(found, key=lambda c: c.start)]


def find_reexport_blocks(text: str, group_names, logger: Optional[logging.Logger] = None) -> List[Tuple[Span, List[Span]]]:
    """
    Runs of two or more re-export statements, each as (replaced range, statement spans).
    Blank lines and group section comments do not break a run.
    """
    logger = logger or log
    module = parse_source(text, logger=logger)
    items = module.children
    blocks: List[Tuple[Span, List[Span]]] = []
    run: List[Span] = []
    first_index = 0

    def flush():
        if len(run) >= 2:
            start = line_start(text, run[0][0])
            k = first_index - 1
            while k >= 0 and is_leaf(items[k], "COMMENT") and is_section_comment(items[k].text, group_names) \
                    and _own_lines(text, items[k].start, items[k].end):
                start = line_start(text, items[k].start)
                k -= 1
            end = line_end(text, run[-1][1])
            if end < len(text):
                end += 1
            blocks.append(((start, end), list(run)))
        run.clear()

    i = 0
    while i < len(items):
        x = items[i]
        j = _reexport_end(items, i)
        if j is not None and _own_lines(text, x.start, items[j - 1].end):
            if not run:
                first_index = i
            run.append((x.start, items[j - 1].end))
            i = j
            continue
        if run and is_leaf(x, "COMMENT") and is_section_comment(x.text, group_names):
            i += 1
            continue
        flush()
        i += 1
    flush()
    return blocks


def organize_reexports(text: str, config: Optional[Config] = None, matcher: Optional[GroupMatcher] = None,
                       logger: Optional[logging.Logger] = None) -> str:
    """Group, merge, sort and align runs of `export { ... } from` statements."""
    logger = logger or log
    config = config or Config()
    matcher = matcher or GroupMatcher(config, logger=logger)
    try:
        blocks = find_reexport_blocks(text, set(config.group_names), logger)
    except SourceSyntaxError as e:
        logger.info("Re-exports left untouched: %s", e)
        return text

    out = text
    for (start, end), spans in reversed(blocks):
        decls: List[Declaration] = []
        kept: List[str] = []
        try:
            for s, e in spans:
                for d in parse_statement(text[s:e]):
                    d.span = (s, e)
                    decls.append(d)
                kept.extend(_statement_comments(text[s:e], logger))
        except (ParseError, SourceSyntaxError) as e:
            logger.info("Re-export block at offset %d left untouched: %s", start, e)
            continue
        merged = merge_declarations(decls)
        for d in merged:
            matcher.assign(d)
        groups = organize_groups(merged, config)
        formatted = print_document(build_document(groups, config.format, kept if config.format.preserve_comments else ()))
        out = out[:start] + formatted + out[end:]
    return out

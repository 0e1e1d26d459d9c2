#!/usr/bin/env python3
"""Tests for merging declarations that share a module"""

import unittest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tidyimports.merger import merge_declarations, union_specifiers
from tidyimports.model import Aliased, Declaration, DeclarationKind, Plain
from tidyimports.parser import parse_statement

K = DeclarationKind


def _decls(*statements):
    out = []
    for s in statements:
        out.extend(parse_statement(s))
    return out


class TestMerger(unittest.TestCase):

    def test_disjoint_sets_merge_into_sorted_union(self):
        merged = merge_declarations(_decls("import { b } from 'm';", "import { a, c } from 'm';"))
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].bound_names, ['a', 'b', 'c'])

    def test_duplicates_collapse(self):
        merged = merge_declarations(_decls("import { a, b } from 'm';", "import { b } from 'm';"))
        self.assertEqual(merged[0].bound_names, ['a', 'b'])

    def test_kinds_stay_apart(self):
        merged = merge_declarations(_decls("import { a } from 'm';", "import type { T } from 'm';"))
        self.assertEqual({d.kind for d in merged}, {K.NAMED, K.TYPE_NAMED})

    def test_distinct_default_bindings_stay_apart(self):
        merged = merge_declarations(_decls("import a from 'm';", "import b from 'm';", "import a from 'm';"))
        self.assertEqual([d.bound_names for d in merged], [['a'], ['b']])

    def test_reexports_do_not_merge_with_imports(self):
        merged = merge_declarations(_decls("import { a } from 'm';", "export { b } from 'm';"))
        self.assertEqual(len(merged), 2)

    def test_first_seen_order_and_span(self):
        first = Declaration(K.NAMED, 'm', [Plain('x')], span=(0, 10))
        second = Declaration(K.NAMED, 'm', [Plain('y')], span=(11, 20))
        other = Declaration(K.NAMED, 'n', [Plain('z')], span=(21, 30))
        merged = merge_declarations([other, first, second])
        self.assertEqual([d.source for d in merged], ['n', 'm'])
        self.assertEqual(merged[1].span, (0, 10))

    def test_first_binding_wins(self):
        specs = union_specifiers([Aliased('x', 'y')], [Plain('y'), Plain('a')])
        self.assertEqual(specs, [Plain('a'), Aliased('x', 'y')])


if __name__ == '__main__':
    unittest.main(verbosity=2)

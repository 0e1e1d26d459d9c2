#!/usr/bin/env python3
"""
Tests for the IR builders and the two-pass printer: specifier order,
single- versus multi-line layout, quoting and `from` alignment.
"""

import unittest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tidyimports.builders import build_declaration, build_document, quote_source, sort_specifiers
from tidyimports.config import FormatOptions
from tidyimports.ir_types import HARD_LINE, AlignAnchor, AlignGroup, Concat, Document, Indent, Text
from tidyimports.model import Aliased, Declaration, DeclarationKind, Group, Plain
from tidyimports.printer import measure, pad_prefix, print_document

K = DeclarationKind


def _named(source, *names, kind=K.NAMED, reexport=False):
    return Declaration(kind, source, [Plain(n) for n in names], is_reexport=reexport)


def _render(decl, **fmt):
    options = FormatOptions(**fmt)
    return print_document(Document([build_declaration(decl, 'g', options)]))


class TestSpecifierOrder(unittest.TestCase):

    def test_length_then_alpha(self):
        specs = [Plain('useEffect'), Plain('useState'), Plain('b'), Plain('a')]
        self.assertEqual(sort_specifiers(sorted(specs, key=lambda s: s.name), 'length'),
                         ['a', 'b', 'useState', 'useEffect'])

    def test_alpha_is_case_insensitive(self):
        specs = [Plain('beta'), Plain('Alpha'), Aliased('x', 'gamma')]
        self.assertEqual(sort_specifiers(specs, 'alpha'), ['Alpha', 'beta', 'x as gamma'])

    def test_preserve_and_dedupe(self):
        specs = [Plain('zeta'), Plain('alpha'), Plain('zeta')]
        self.assertEqual(sort_specifiers(specs, 'preserve'), ['zeta', 'alpha'])


class TestLayout(unittest.TestCase):

    def test_side_effect(self):
        decl = Declaration(K.SIDE_EFFECT, './styles.css')
        self.assertEqual(_render(decl), "import './styles.css';")

    def test_single_specifier_stays_on_one_line(self):
        self.assertEqual(_render(_named('m', 'a')), "import { a } from 'm';")

    def test_low_width_forces_multi_line(self):
        out = _render(_named('module', 'alpha', 'beta'), max_line_width=10)
        self.assertEqual(out, "import {\n    beta,\n    alpha\n}         from 'module';")

    def test_high_width_keeps_single_line(self):
        out = _render(_named('module', 'alpha', 'beta'), max_line_width=200)
        self.assertEqual(out, "import { beta, alpha } from 'module';")

    def test_trailing_comma_and_indent(self):
        out = _render(_named('m', 'a', 'b'), trailing_comma='always', indent=2)
        self.assertEqual(out.split('\n')[:3], ['import {', '  a,', '  b,'])

    def test_bracket_spacing_and_double_quotes(self):
        out = _render(_named('m', 'a', 'b'), max_line_width=80, bracket_spacing=False, single_quote=False)
        self.assertEqual(out, 'import {a, b} from "m";')

    def test_quote_switches_when_source_contains_it(self):
        self.assertEqual(quote_source("it's", FormatOptions()), '"it\'s"')

    def test_type_and_reexport_heads(self):
        self.assertEqual(_render(_named('m', 'T', kind=K.TYPE_NAMED)), "import type { T } from 'm';")
        self.assertEqual(_render(_named('m', 'x', reexport=True)), "export { x } from 'm';")
        default = Declaration(K.TYPE_DEFAULT, 'm', [Plain('Cfg')])
        self.assertEqual(_render(default), "import type Cfg from 'm';")

    def test_attributes_follow_source(self):
        decl = Declaration(K.DEFAULT, './data.json', [Plain('data')], attributes="with { type: 'json' }")
        self.assertEqual(_render(decl), "import data from './data.json' with { type: 'json' };")


class TestAlignment(unittest.TestCase):

    def test_from_keyword_aligned_within_group(self):
        group = Group('Other', 0, [
            Declaration(K.DEFAULT, 'react', [Plain('React')]),
            _named('react', 'useState', 'useEffect'),
            Declaration(K.DEFAULT, 'lodash', [Plain('_')]),
        ])
        out = print_document(build_document([group], FormatOptions()))
        lines = [line for line in out.split('\n') if ' from ' in line]
        self.assertEqual(len(lines), 3)
        self.assertEqual(len({line.index('from') for line in lines}), 1)
        self.assertTrue(out.startswith('// Other\n'))
        self.assertTrue(out.endswith('\n'))

    def test_groups_are_aligned_separately(self):
        fmt = FormatOptions(blank_lines_between_groups=2)
        doc = build_document([
            Group('A', 0, [Declaration(K.DEFAULT, 'a', [Plain('averyveryverylongname')])]),
            Group('B', 1, [Declaration(K.DEFAULT, 'b', [Plain('b')])]),
        ], fmt)
        out = print_document(doc)
        self.assertIn("import b from 'b';", out)
        self.assertIn("\n\n\n// B\n", out)

    def test_measure_uses_widest_anchor(self):
        doc = AlignGroup('g', [
            AlignAnchor('g', 'import a ', "from 'a';"),
            HARD_LINE,
            AlignAnchor('g', 'import {\n    abc\n} ', "from 'b';", ideal_width=8),
            HARD_LINE,
            AlignAnchor('h', 'import x ', "from 'x';"),
        ])
        self.assertEqual(measure(doc), {'g': 9, 'h': 9})

    def test_pad_prefix_closing_brace(self):
        self.assertEqual(pad_prefix('import {\n    a\n} ', 6), 'import {\n    a\n}     ')
        self.assertEqual(pad_prefix('import a ', 4), 'import a ')

    def test_indent_and_concat(self):
        doc = Document([Text('a'), Indent(2, Concat([HARD_LINE, Text('b')])), HARD_LINE, Text('c')])
        self.assertEqual(print_document(doc), 'a\n  b\nc')


if __name__ == '__main__':
    unittest.main(verbosity=2)

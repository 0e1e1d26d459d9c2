#!/usr/bin/env python3
"""
Tests for declaration extraction: the statement grammar, import block
scanning and the grouped ParserResult.
"""

import unittest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tidyimports.config import Config, GroupRule
from tidyimports.model import Aliased, DeclarationKind, Plain
from tidyimports.parser import ParseError, parse_imports, parse_statement, scan_import_block

K = DeclarationKind


class TestParseStatement(unittest.TestCase):
    """One statement in, a list of declarations out"""

    def test_side_effect(self):
        decls = parse_statement("import './polyfills';")
        self.assertEqual(len(decls), 1)
        self.assertEqual(decls[0].kind, K.SIDE_EFFECT)
        self.assertEqual(decls[0].source, './polyfills')
        self.assertEqual(decls[0].specifiers, [])

    def test_mixed_default_named_and_inline_type(self):
        decls = parse_statement("import React, { useState, type FC } from 'react';")
        by_kind = {d.kind: d for d in decls}
        self.assertEqual(set(by_kind), {K.DEFAULT, K.NAMED, K.TYPE_NAMED})
        self.assertEqual(by_kind[K.DEFAULT].bound_names, ['React'])
        self.assertEqual(by_kind[K.NAMED].bound_names, ['useState'])
        self.assertEqual(by_kind[K.TYPE_NAMED].bound_names, ['FC'])
        for d in decls:
            self.assertEqual(d.source, 'react')

    def test_namespace_import(self):
        decls = parse_statement("import * as path from 'path';")
        self.assertEqual(decls[0].kind, K.DEFAULT)
        self.assertEqual(decls[0].specifiers, [Aliased('*', 'path')])
        self.assertEqual(decls[0].specifiers[0].render(), '* as path')

    def test_type_only_without_semicolon(self):
        decls = parse_statement("import type { Props, State } from './types'")
        self.assertEqual(len(decls), 1)
        self.assertEqual(decls[0].kind, K.TYPE_NAMED)
        self.assertEqual(decls[0].bound_names, ['Props', 'State'])

    def test_type_default(self):
        decls = parse_statement("import type Config from './config';")
        self.assertEqual(decls[0].kind, K.TYPE_DEFAULT)
        self.assertEqual(decls[0].bound_names, ['Config'])

    def test_aliases_are_normalized(self):
        decls = parse_statement("import { a as b, c as c } from 'm';")
        self.assertEqual(decls[0].specifiers, [Aliased('a', 'b'), Plain('c')])
        self.assertEqual(decls[0].bound_names, ['b', 'c'])

    def test_reexport(self):
        decls = parse_statement("export { x, y as z } from './x';")
        self.assertEqual(len(decls), 1)
        self.assertTrue(decls[0].is_reexport)
        self.assertEqual(decls[0].kind, K.NAMED)
        self.assertEqual(decls[0].bound_names, ['x', 'z'])

    def test_import_attributes(self):
        decls = parse_statement("import data from './data.json' with { type: 'json' };")
        self.assertEqual(decls[0].attributes, "with { type: 'json' }")

    def test_comments_inside_statement(self):
        decls = parse_statement("import {\n    a, // first\n    b /* second */\n} from 'm';")
        self.assertEqual(decls[0].bound_names, ['a', 'b'])

    def test_error_handling(self):
        """Broken statements raise ParseError with a position"""
        with self.assertRaises(ParseError) as ctx:
            parse_statement("import { a, b from 'x';")
        self.assertTrue(str(ctx.exception))

        with self.assertRaises(ParseError):
            parse_statement("import {} from 'x';")

        with self.assertRaises(ParseError):
            parse_statement("import from 'x';")


class TestImportBlock(unittest.TestCase):
    """Locating the leading run of import statements"""

    def test_stops_at_code(self):
        text = "import a from 'a';\nimport b from 'b';\nconsole.log(a, b);\n"
        block = scan_import_block(text)
        self.assertEqual(len(block.statements), 2)
        self.assertEqual(text[block.stop:].split('\n')[0], 'console.log(a, b);')

    def test_shebang_and_directive(self):
        text = "#!/usr/bin/env node\n'use strict';\nimport a from 'a';\n"
        block = scan_import_block(text)
        self.assertEqual(len(block.statements), 1)
        start, end = block.statements[0]
        self.assertEqual(text[start:end], "import a from 'a';")

    def test_semicolon_free_statements(self):
        text = "import a from 'a'\nimport {\n    b,\n    c\n} from 'bc'\nconst x = 1\n"
        block = scan_import_block(text)
        self.assertEqual(len(block.statements), 2)
        start, end = block.statements[1]
        self.assertTrue(text[start:end].endswith("from 'bc'"))

    def test_trailing_comment_without_semicolon_recorded_once(self):
        text = "import a from 'a' // note\nimport b from 'b'\n\nrun();\n"
        block = scan_import_block(text)
        self.assertEqual([text[s:e] for s, e in block.comments], ["// note"])
        result = parse_imports(text)
        self.assertEqual(result.comments, ["// note"])

    def test_require_and_dynamic_forms_are_not_declarations(self):
        text = "import a from 'a';\nimport fs = require('fs');\n"
        self.assertEqual(len(scan_import_block(text).statements), 1)
        text = "import('lazy').then(run);\n"
        self.assertEqual(scan_import_block(text).statements, [])


class TestParseImports(unittest.TestCase):
    """Extraction, merging and grouping together"""

    def test_unterminated_braces(self):
        """An unterminated list becomes one invalid entry and joins no group"""
        text = "import { a, b from 'x';\nimport c from 'c';\n"
        result = parse_imports(text)
        self.assertEqual(len(result.invalid_imports), 1)
        self.assertEqual(len(result.original_imports), 2)
        self.assertTrue(result.invalid_imports[0].error)
        self.assertEqual([d.source for d in result.declarations], ['c'])
        sources = [d.source for g in result.groups for d in g.declarations]
        self.assertNotIn('x', sources)

    def test_groups_follow_rules(self):
        config = Config(groups=(
            GroupRule('React', '^react', order=1),
            GroupRule('Internal', '^@app/', order=2),
            GroupRule('Other', order=3, default=True),
        ))
        text = (
            "import { api } from '@app/api';\n"
            "import lodash from 'lodash';\n"
            "import React from 'react';\n"
        )
        result = parse_imports(text, config)
        self.assertEqual([g.name for g in result.groups], ['React', 'Internal', 'Other'])
        self.assertEqual(result.groups[1].declarations[0].source, '@app/api')

    def test_section_comments_are_absorbed(self):
        text = "// Other\nimport a from 'a';\n"
        result = parse_imports(text)
        self.assertEqual(result.import_range[0], 0)
        self.assertEqual(result.comments, [])

    def test_other_comments_are_collected(self):
        text = "// License header\n\nimport a from 'a';\n// about b\nimport b from 'b';\n"
        result = parse_imports(text)
        self.assertEqual(result.comments, ['// about b'])
        self.assertEqual(text[result.import_range[0]:].split('\n')[0], "import a from 'a';")

    def test_no_declarations(self):
        result = parse_imports("const x = 1;\n")
        self.assertEqual(result.declarations, [])
        self.assertIsNone(result.import_range)


if __name__ == '__main__':
    unittest.main(verbosity=2)

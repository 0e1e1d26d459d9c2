#!/usr/bin/env python3
"""Tests for intra-group ordering and group ordering"""

import unittest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tidyimports.config import Config, GroupRule
from tidyimports.model import Declaration, DeclarationKind, Plain
from tidyimports.ordering import organize_groups, sort_declarations

K = DeclarationKind


def _d(kind, source, *names, priority=False, group=None):
    return Declaration(kind, source, [Plain(n) for n in names], is_priority=priority, group_name=group)


class TestOrdering(unittest.TestCase):

    def test_kind_then_source(self):
        decls = [
            _d(K.TYPE_NAMED, 'a', 'T'),
            _d(K.NAMED, 'b', 'x'),
            _d(K.NAMED, 'a', 'y'),
            _d(K.DEFAULT, 'z', 'Z'),
            _d(K.SIDE_EFFECT, 'styles.css'),
        ]
        ordered = sort_declarations(decls, Config())
        self.assertEqual([(d.kind, d.source) for d in ordered], [
            (K.SIDE_EFFECT, 'styles.css'),
            (K.DEFAULT, 'z'),
            (K.NAMED, 'a'),
            (K.NAMED, 'b'),
            (K.TYPE_NAMED, 'a'),
        ])

    def test_priority_first_with_its_own_kind_order(self):
        decls = [
            _d(K.DEFAULT, 'lodash', '_'),
            _d(K.SIDE_EFFECT, 'react', priority=True),
            _d(K.NAMED, 'react', 'useState', priority=True),
            _d(K.DEFAULT, 'react', 'React', priority=True),
        ]
        ordered = sort_declarations(decls, Config())
        self.assertEqual([(d.kind, d.source) for d in ordered], [
            (K.DEFAULT, 'react'),
            (K.NAMED, 'react'),
            (K.SIDE_EFFECT, 'react'),
            (K.DEFAULT, 'lodash'),
        ])

    def test_type_default_before_type_named(self):
        """Kind order wins over source: `import type B from 'b'` comes first"""
        decls = [_d(K.TYPE_NAMED, 'a', 'A'), _d(K.TYPE_DEFAULT, 'b', 'B')]
        ordered = sort_declarations(decls, Config())
        self.assertEqual([(d.kind, d.source) for d in ordered], [(K.TYPE_DEFAULT, 'b'), (K.TYPE_NAMED, 'a')])
        self.assertLess(Config().import_order[K.TYPE_DEFAULT], Config().import_order[K.TYPE_NAMED])

    def test_groups_sorted_by_order_then_name(self):
        config = Config(groups=(
            GroupRule('Zeta', '^z', order=1),
            GroupRule('Alpha', '^a', order=1),
            GroupRule('First', '^f', order=0),
            GroupRule('Other', order=5, default=True),
        ))
        decls = [
            _d(K.DEFAULT, 'zz', 'z', group='Zeta'),
            _d(K.DEFAULT, 'x', 'x', group=None),
            _d(K.DEFAULT, 'aa', 'a', group='Alpha'),
            _d(K.DEFAULT, 'ff', 'f', group='First'),
        ]
        groups = organize_groups(decls, config)
        self.assertEqual([g.name for g in groups], ['First', 'Alpha', 'Zeta', 'Other'])
        orders = [g.order for g in groups]
        self.assertEqual(orders, sorted(orders))


if __name__ == '__main__':
    unittest.main(verbosity=2)

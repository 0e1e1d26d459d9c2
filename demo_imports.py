#!/usr/bin/env python3
"""
Demonstration of the import formatter
Shows grouping, merging, alignment and property sorting on realistic files
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from tidyimports.config import config_from_dict
from tidyimports.formatter import ImportFormatter


def demonstrate_file(name, source, formatter):
    """Format one file and display the result"""
    print(f"\n{'=' * 60}")
    print(f"📄 {name.upper()}")
    print('=' * 60)

    result = formatter.format_source(source)
    if result.error:
        print(f"❌ Left untouched: {result.error}")
        return

    if result.text == source:
        print("✅ Already formatted")
    else:
        print("✅ Formatted:")
    print()
    print(result.text)

    stats = formatter.matcher.stats()
    print(f"🗂  Group cache: {stats.size} entries, hit rate {stats.hit_rate:.0%}")


def main():
    """Format a few typical React/TypeScript files"""

    print("🌟 TIDYIMPORTS - IMPORT FORMATTING SHOWCASE")

    config = config_from_dict({
        "groups": [
            {"name": "React", "match": "^react", "order": 1},
            {"name": "Internal", "match": "^@app/", "order": 2},
            {"name": "Styles", "match": "\\.s?css$", "order": 4},
            {"name": "Other", "order": 3, "default": True},
        ],
        "priorityImports": ["^react$"],
        "format": {
            "organizeReExports": True,
            "sortDestructuring": True,
            "sortTypeMembers": True,
        },
    })
    formatter = ImportFormatter(config)

    # 1. Component with scattered imports
    component = """import { Button } from '@app/ui';
import './App.css';
import {useEffect, useState} from 'react';
import type { User } from '@app/types';
import React from 'react';
import { formatDate } from '@app/utils';
import { Card } from '@app/ui';

interface Props {
    user: User;
    compact?: boolean;
}

export function App({ user }: Props) {
    const {
        name,
        email,
        avatar
    } = user;
    return null;
}
"""

    # 2. Barrel file
    barrel = """export { formatDate } from './date';
export { Card } from './Card';
export { Button, IconButton } from './Button';
export type { ButtonProps } from './Button';
"""

    # 3. Unsafe layout
    unsafe = """import a from 'a';
const lazy = import('./lazy');
import b from 'b';
"""

    demonstrate_file("React component", component, formatter)
    demonstrate_file("Barrel file", barrel, formatter)
    demonstrate_file("Dynamic import between declarations", unsafe, formatter)


if __name__ == '__main__':
    main()

# tidyimports/pragma.py
from __future__ import annotations

import re

IGNORE_PRAGMA = "tidyimports-ignore"

_PRAGMA_LINE = re.compile(r"^[ \t]*//[ \t]*tidyimports-ignore[ \t]*$", re.M)


def _inside_template(text: str, offset: int) -> bool:
    ticks = 0
    i = 0
    while i < offset:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == "`":
            ticks += 1
        i += 1
    return ticks % 2 == 1


def has_ignore_pragma(text: str) -> bool:
    """True when `// tidyimports-ignore` sits on its own line outside a template literal."""
    if IGNORE_PRAGMA not in text:
        return False
    return any(not _inside_template(text, m.start()) for m in _PRAGMA_LINE.finditer(text))

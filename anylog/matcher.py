"""Finds the first grammar that recognizes a timestamp at the start of a line.

Grammars are tried in catalog order and the first success wins; see
anylog.grammars for why the order matters. A line nothing recognizes is a
normal outcome and yields None.
"""

from typing import Iterable

from anylog.grammars import CATALOG, Grammar, GrammarMatch


def match_line(
    line: str, catalog: Iterable[Grammar] = CATALOG
) -> tuple[Grammar, GrammarMatch] | None:
    """Return the first matching grammar and its match, or None."""
    if not line:
        return None

    for grammar in catalog:
        result = grammar.try_parse(line)
        if result is not None:
            return grammar, result

    return None

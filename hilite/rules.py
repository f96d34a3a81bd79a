"""Lexer rules: a pattern, what it emits and how it changes lexer state."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, List, Mapping

_REGEX_META = frozenset("\\.+*?()|[]{}^$")


def _quote_meta(word: str) -> str:
    """Escape every regular expression metacharacter in ``word``."""
    return "".join("\\" + ch if ch in _REGEX_META else ch for ch in word)


def words(prefix: str, suffix: str, *args: str) -> str:
    """Build a pattern matching any of the literal words, longest first."""
    ordered = sorted(args, key=len, reverse=True)
    return prefix + "(" + "|".join(_quote_meta(word) for word in ordered) + ")" + suffix


@dataclass
class Rule:
    """The fundamental matching unit of a regex lexer state machine.

    ``type`` is the emitter applied to a match and ``mutator`` the change
    made to the lexer state when the rule matches; either may be None.
    """

    pattern: str = ""
    type: Any = None
    mutator: Any = None


class Rules(dict):
    """A mapping from state name to the sequence of rules in that state."""

    def clone(self) -> "Rules":
        """A copy whose lists and rules can be changed independently."""
        return Rules({key: [copy.copy(rule) for rule in rules] for key, rules in self.items()})

    def rename(self, old_rule: str, new_rule: str) -> "Rules":
        """A clone with the state ``old_rule`` renamed to ``new_rule``."""
        out = self.clone()
        out[new_rule] = out.get(old_rule, [])
        out.pop(old_rule, None)
        return out

    def merge(self, rules: Mapping[str, List[Rule]]) -> "Rules":
        """A clone of these rules with the states of ``rules`` merged over it."""
        out = self.clone()
        out.update(Rules(rules).clone())
        return out
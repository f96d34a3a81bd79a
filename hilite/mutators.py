"""Mutators change the lexer state machine when a rule matches."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Tuple

from hilite.rules import Rule
from hilite.tokentype import Token


class Mutator(ABC):
    """Modifies the lexer state as it is processing."""

    kind: ClassVar[str] = ""

    @abstractmethod
    def mutate(self, state: Any) -> None:
        """Apply this mutation to the lexer state."""


@dataclass(frozen=True)
class MultiMutator(Mutator):
    """Applies several mutators in order."""

    kind: ClassVar[str] = "mutators"
    mutators: Tuple[Mutator, ...] = ()

    def mutate(self, state: Any) -> None:
        for modifier in self.mutators:
            modifier.mutate(state)


@dataclass(frozen=True)
class IncludeMutator(Mutator):
    """Splices the rules of another state in place of the rule holding it."""

    kind: ClassVar[str] = "include"
    state: str = ""

    def mutate(self, state: Any) -> None:
        raise RuntimeError(f"should never reach here Include({self.state!r})")

    def mutate_lexer(self, rules: Dict[str, List[Any]], state: str, rule: int) -> None:
        """Replace rule ``rule`` of ``state`` with the included state's rules."""
        if self.state not in rules:
            raise ValueError(f"invalid include state {self.state!r}")
        current = rules[state]
        rules[state] = current[:rule] + list(rules[self.state]) + current[rule + 1 :]


@dataclass(frozen=True)
class CombinedMutator(Mutator):
    """Pushes an anonymous state built from several states."""

    kind: ClassVar[str] = "combined"
    states: Tuple[str, ...] = ()

    def mutate(self, state: Any) -> None:
        raise RuntimeError(f"should never reach here Combined({list(self.states)})")

    def mutate_lexer(self, rules: Dict[str, List[Any]], state: str, rule: int) -> None:
        """Create the combined state if needed and make the rule push it."""
        name = "__combined_" + "__".join(self.states)
        if name not in rules:
            combined_rules: List[Any] = []
            for included in self.states:
                if included not in rules:
                    raise ValueError(f"invalid combine state {included!r}")
                combined_rules.extend(rules[included])
            rules[name] = combined_rules
        rules[state][rule].mutator = push(name)


@dataclass(frozen=True)
class PushMutator(Mutator):
    """Pushes states onto the stack; ``#pop`` pops one instead."""

    kind: ClassVar[str] = "push"
    states: Tuple[str, ...] = ()

    def mutate(self, state: Any) -> None:
        if not self.states:
            state.stack.append(state.state)
            return
        for name in self.states:
            if name == "#pop":
                if not state.stack:
                    raise ValueError("nothing to pop")
                state.stack.pop()
            else:
                state.stack.append(name)


@dataclass(frozen=True)
class PopMutator(Mutator):
    """Pops ``depth`` states from the stack."""

    kind: ClassVar[str] = "pop"
    depth: int = 1

    def mutate(self, state: Any) -> None:
        if not state.stack:
            raise ValueError("nothing to pop")
        if not 0 <= self.depth <= len(state.stack):
            raise ValueError(
                f"cannot pop {self.depth} states from a stack of {len(state.stack)}"
            )
        del state.stack[len(state.stack) - self.depth :]


def mutators(*args: Mutator) -> MultiMutator:
    """A mutator applying each of ``args`` in order."""
    return MultiMutator(tuple(args))


def include(state: str) -> Rule:
    """A rule including the rules of ``state``."""
    return Rule(mutator=IncludeMutator(state))


def combined(*args: str) -> CombinedMutator:
    """A mutator pushing a new anonymous state combining ``args``."""
    return CombinedMutator(tuple(args))


def push(*args: str) -> PushMutator:
    """A mutator pushing states; with none, the current state is pushed again."""
    return PushMutator(tuple(args))


def pop(n: int) -> PopMutator:
    """A mutator popping ``n`` states when the rule matches."""
    return PopMutator(n)


def default(*args: Mutator) -> Rule:
    """A rule matching nothing that applies the given mutators."""
    return Rule(mutator=mutators(*args))


def stringify(*args: Token) -> str:
    """The raw text covered by a sequence of tokens."""
    return "".join(token.value for token in args)
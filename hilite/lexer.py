"""The regex-driven lexer state machine."""

from __future__ import annotations

import functools
import re
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

import regex

from hilite.rules import Rule, Rules
from hilite.tokentype import EOF, Token, TokenType

_MATCH_TIMEOUT = 0.25


@dataclass
class Config:
    """Describes a lexer: its names, the files it handles and matching flags."""

    name: str = ""
    aliases: List[str] = field(default_factory=list)
    filenames: List[str] = field(default_factory=list)
    alias_filenames: List[str] = field(default_factory=list)
    mime_types: List[str] = field(default_factory=list)
    case_insensitive: bool = False
    dot_all: bool = False
    not_multiline: bool = False
    ensure_nl: bool = False
    priority: float = 0.0


@dataclass(frozen=True)
class TokeniseOptions:
    """Options controlling a single tokenisation."""

    state: str = "root"
    nested: bool = False
    ensure_lf: bool = True


DEFAULT_OPTIONS = TokeniseOptions()


@dataclass
class CompiledRule(Rule):
    """A rule together with its compiled regular expression."""

    regexp: Any = None
    flags: int = 0


def _glob_escape(glob: str, i: int) -> Tuple[str, int]:
    if i >= len(glob) or glob[i] in "-]":
        raise ValueError("syntax error in pattern")
    if glob[i] == "\\":
        i += 1
        if i >= len(glob):
            raise ValueError("syntax error in pattern")
    return glob[i], i + 1


def _glob_class(glob: str, i: int) -> Tuple[str, int]:
    negated = i < len(glob) and glob[i] == "^"
    if negated:
        i += 1
    ranges: List[Tuple[str, str]] = []
    while True:
        if i < len(glob) and glob[i] == "]" and ranges:
            i += 1
            break
        lo, i = _glob_escape(glob, i)
        hi = lo
        if i < len(glob) and glob[i] == "-":
            hi, i = _glob_escape(glob, i + 1)
        ranges.append((lo, hi))
    items = "".join(f"{re.escape(lo)}-{re.escape(hi)}" for lo, hi in ranges if lo <= hi)
    if negated:
        return f"[^/{items}]", i
    return (f"[{items}]" if items else "(?!)"), i


@functools.lru_cache(maxsize=None)
def _compile_glob(glob: str) -> "re.Pattern[str]":
    """Compile a shell glob with path-style semantics; ValueError if malformed."""
    out: List[str] = []
    i = 0
    while i < len(glob):
        ch = glob[i]
        if ch == "*":
            out.append("[^/]*")
            i += 1
        elif ch == "?":
            out.append("[^/]")
            i += 1
        elif ch == "\\":
            if i + 1 >= len(glob):
                raise ValueError("syntax error in pattern")
            out.append(re.escape(glob[i + 1]))
            i += 2
        elif ch == "[":
            part, i = _glob_class(glob, i + 1)
            out.append(part)
        else:
            out.append(re.escape(ch))
            i += 1
    return re.compile("".join(out), re.DOTALL)


def _glob_matches(glob: str, name: str) -> bool:
    return _compile_glob(glob).fullmatch(name) is not None


def ensure_lf(text: str) -> str:
    """Replace ``\\r\\n`` and lone ``\\r`` with ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _match_rules(
    text: str, pos: int, rules: List[CompiledRule]
) -> Optional[Tuple[int, CompiledRule, List[str], Dict[str, str]]]:
    for index, rule in enumerate(rules):
        try:
            match = rule.regexp.match(text, pos, timeout=_MATCH_TIMEOUT)
        except TimeoutError:
            continue
        if match is None:
            continue
        names = {number: name for name, number in rule.regexp.groupindex.items()}
        groups = [match.group(0)] + [g if g is not None else "" for g in match.groups()]
        named = {names.get(number, str(number)): value for number, value in enumerate(groups)}
        return index, rule, groups, named
    return None


class LexerState:
    """The state of a single lex; iterating it yields tokens."""

    def __init__(
        self,
        lexer: "RegexLexer",
        text: str,
        options: TokeniseOptions,
        newline_added: bool = False,
    ) -> None:
        self.lexer = lexer
        self.registry = lexer.registry
        self.text = text
        self.pos = 0
        self.rules: Dict[str, List[CompiledRule]] = lexer._compiled_rules
        self.stack: List[str] = [options.state]
        self.state = ""
        self.rule = 0
        self.groups: List[str] = []
        self.named_groups: Dict[str, str] = {}
        self.mutator_context: Dict[Any, Any] = {}
        self.options = options
        self._iterators: List[Iterator[Token]] = []
        self._newline_added = newline_added

    def set(self, key: Any, value: Any) -> None:
        """Store a value in the mutator context."""
        self.mutator_context[key] = value

    def get(self, key: Any) -> Any:
        """Fetch a value from the mutator context, or None."""
        return self.mutator_context.get(key)

    def tokens(self) -> List[Token]:
        """All remaining tokens."""
        return list(self)

    def __iter__(self) -> "LexerState":
        return self

    def _drain(self) -> Optional[Token]:
        while self._iterators:
            try:
                token = next(self._iterators[-1])
            except StopIteration:
                self._iterators.pop()
                continue
            if token == EOF:
                self._iterators.pop()
                continue
            return token
        return None

    def __next__(self) -> Token:
        end = len(self.text) - (1 if self._newline_added else 0)
        while self.pos < end and self.stack:
            token = self._drain()
            if token is not None:
                return token
            self.state = self.stack[-1]
            if self.lexer.trace:
                print(
                    f"{self.state}: pos={self.pos}, text={self.text[self.pos:]!r}",
                    file=sys.stderr,
                )
            selected = self.rules.get(self.state)
            if selected is None:
                raise ValueError(f"unknown state {self.state}")
            found = _match_rules(self.text, self.pos, selected)
            if found is None:
                # An unmatched newline resets the stack so lexing recovers.
                if self.text[self.pos] == "\n" and self.state != self.options.state:
                    self.stack = [self.options.state]
                    continue
                self.pos += 1
                return Token(TokenType.Error, self.text[self.pos - 1])
            self.rule, rule, self.groups, self.named_groups = found
            self.pos += len(self.groups[0])
            if rule.mutator is not None:
                rule.mutator.mutate(self)
            if rule.type is not None:
                self._iterators.append(iter(rule.type.emit(self.groups, self)))
        token = self._drain()
        if token is not None:
            return token
        if self.pos != len(self.text) and not self.stack:
            value = self.text[self.pos:]
            self.pos = len(self.text)
            return Token(TokenType.Error, value)
        raise StopIteration


class RegexLexer:
    """A lexer driven by a state machine of regular expression rules.

    Rules are fetched and compiled lazily, on first use.
    """

    def __init__(
        self,
        config: Optional[Config],
        rules_func: Callable[[], Mapping[str, List[Rule]]],
        *,
        trace: bool = False,
    ) -> None:
        config = config if config is not None else Config()
        for glob in [*config.filenames, *config.alias_filenames]:
            try:
                _compile_glob(glob)
            except ValueError as exc:
                raise ValueError(f"{config.name}: {glob!r} is not a valid glob: {exc}") from exc
        self.config = config
        self.registry: Any = None
        self.trace = trace
        self._analyser: Optional[Callable[[str], float]] = None
        self._rules_func = rules_func
        self._lock = threading.RLock()
        self._fetched = False
        self._fetch_error: Optional[Exception] = None
        self._compiled = False
        self._raw_rules: Rules = Rules()
        self._compiled_rules: Dict[str, List[CompiledRule]] = {}

    def __str__(self) -> str:
        return self.config.name

    def __repr__(self) -> str:
        return f"RegexLexer({self.config.name!r})"

    def rules(self) -> Rules:
        """The raw rules of this lexer."""
        self._need_rules()
        return self._raw_rules

    def set_registry(self, registry: Any) -> "RegexLexer":
        """Set the registry used to look up other lexers."""
        self.registry = registry
        return self

    def set_analyser(self, analyser: Callable[[str], float]) -> "RegexLexer":
        """Set the function scoring how well text suits this lexer."""
        self._analyser = analyser
        return self

    def analyse_text(self, text: str) -> float:
        """Score from 0.0 to 1.0 how likely ``text`` is meant for this lexer."""
        if self._analyser is not None:
            return self._analyser(text)
        return 0.0

    def tokenise(self, options: Optional[TokeniseOptions], text: str) -> LexerState:
        """Start tokenising ``text``; the returned state yields tokens."""
        self._need_rules()
        if options is None:
            options = DEFAULT_OPTIONS
        if options.ensure_lf:
            text = ensure_lf(text)
        newline_added = False
        if not options.nested and self.config.ensure_nl and not text.endswith("\n"):
            text += "\n"
            newline_added = True
        return LexerState(self, text, options, newline_added)

    def _need_rules(self) -> None:
        with self._lock:
            if not self._fetched:
                self._fetched = True
                try:
                    self._fetch_rules()
                except ValueError as exc:
                    self._fetch_error = exc
                    raise
            elif self._fetch_error is not None:
                raise self._fetch_error
            self._maybe_compile()

    def _fetch_rules(self) -> None:
        raw = self._rules_func()
        if "root" not in raw:
            raise ValueError('no "root" state')
        flags = 0
        if not self.config.not_multiline:
            flags |= regex.MULTILINE
        if self.config.case_insensitive:
            flags |= regex.IGNORECASE
        if self.config.dot_all:
            flags |= regex.DOTALL
        self._compiled_rules = {
            state: [
                CompiledRule(pattern=rule.pattern, type=rule.type, mutator=rule.mutator, flags=flags)
                for rule in rules
            ]
            for state, rules in raw.items()
        }
        self._raw_rules = raw if isinstance(raw, Rules) else Rules(raw)

    def _maybe_compile(self) -> None:
        if self._compiled:
            return
        for state, rules in self._compiled_rules.items():
            for index, rule in enumerate(rules):
                if rule.regexp is None:
                    try:
                        rule.regexp = regex.compile("(?:" + rule.pattern + ")", rule.flags)
                    except regex.error as exc:
                        raise ValueError(f"failed to compile rule {state}.{index}: {exc}") from exc
        seen = set()
        while self._apply_lexer_mutator(seen):
            pass
        self._compiled = True

    def _apply_lexer_mutator(self, seen: set) -> bool:
        for state in list(self._compiled_rules):
            for index, rule in enumerate(self._compiled_rules[state]):
                mutate_lexer = getattr(rule.mutator, "mutate_lexer", None)
                if mutate_lexer is None:
                    continue
                key = (state, id(rule.mutator))
                if key in seen:
                    raise ValueError(
                        f"saw mutator {type(rule.mutator).__name__} twice; this should not happen"
                    )
                seen.add(key)
                mutate_lexer(self._compiled_rules, state, index)
                return True
        return False


def tokenise(lexer: Any, options: Optional[TokeniseOptions], text: str) -> List[Token]:
    """Tokenise ``text`` with ``lexer`` and return all tokens as a list."""
    return list(lexer.tokenise(options, text))
"""Lexers that rewrite the tokens produced by another lexer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from hilite.tokentype import Token, TokenType


class RemappingLexer:
    """Wraps a lexer, mapping each token to a (possibly empty) list of tokens."""

    def __init__(self, lexer: Any, mapper: Callable[[Token], List[Token]]) -> None:
        self.lexer = lexer
        self.mapper = mapper

    @property
    def config(self) -> Any:
        """The wrapped lexer's configuration."""
        return self.lexer.config

    def analyse_text(self, text: str) -> float:
        return self.lexer.analyse_text(text)

    def set_analyser(self, analyser: Callable[[str], float]) -> "RemappingLexer":
        self.lexer.set_analyser(analyser)
        return self

    def set_registry(self, registry: Any) -> "RemappingLexer":
        self.lexer.set_registry(registry)
        return self

    def tokenise(self, options: Optional[Any], text: str) -> Iterator[Token]:
        """Tokenise with the wrapped lexer and remap every token."""
        tokens = self.lexer.tokenise(options, text)
        return self._remap(tokens)

    def _remap(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            yield from self.mapper(token)


@dataclass(frozen=True)
class TypeMapping:
    """Maps tokens of ``from_type`` to ``to_type``; only ``words`` if any are given."""

    from_type: TokenType
    to_type: TokenType
    words: Tuple[str, ...] = ()


def type_remapping_lexer(lexer: Any, mapping: Iterable[TypeMapping]) -> RemappingLexer:
    """Wrap ``lexer`` so token types are rewritten according to ``mapping``."""
    lookup: Dict[TokenType, Dict[str, TokenType]] = {}
    for entry in mapping:
        by_word = lookup.setdefault(entry.from_type, {})
        if not entry.words:
            by_word[""] = entry.to_type
        else:
            for word in entry.words:
                by_word[word] = entry.to_type

    def mapper(token: Token) -> List[Token]:
        by_word = lookup.get(token.type)
        if by_word is not None:
            if token.value in by_word:
                token = Token(by_word[token.value], token.value)
            elif "" in by_word:
                token = Token(by_word[""], token.value)
        return [token]

    return RemappingLexer(lexer, mapper)
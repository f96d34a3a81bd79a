from hilite.lexer import Config, RegexLexer
from hilite.registry import LexerRegistry
from hilite.remap import RemappingLexer, TypeMapping, type_remapping_lexer
from hilite.rules import Rule
from hilite.tokentype import Token, TokenType

T = TokenType


def _words_lexer(name=""):
    return RegexLexer(
        Config(name=name),
        lambda: {"root": [Rule(r"\s+", T.Whitespace), Rule(r"\w+", T.Name)]},
    )


def test_remapping_lexer():
    lexer = type_remapping_lexer(_words_lexer(), [TypeMapping(T.Name, T.Keyword, ("if", "else"))])
    actual = list(lexer.tokenise(None, "if true then print else end"))
    assert actual == [
        Token(T.Keyword, "if"),
        Token(T.TextWhitespace, " "),
        Token(T.Name, "true"),
        Token(T.TextWhitespace, " "),
        Token(T.Name, "then"),
        Token(T.TextWhitespace, " "),
        Token(T.Name, "print"),
        Token(T.TextWhitespace, " "),
        Token(T.Keyword, "else"),
        Token(T.TextWhitespace, " "),
        Token(T.Name, "end"),
    ]


def test_mapping_without_words_applies_to_all():
    lexer = type_remapping_lexer(
        _words_lexer(),
        [TypeMapping(T.Name, T.NameFunction), TypeMapping(T.Name, T.Keyword, ("if",))],
    )
    assert list(lexer.tokenise(None, "if x")) == [
        Token(T.Keyword, "if"),
        Token(T.Whitespace, " "),
        Token(T.NameFunction, "x"),
    ]


def test_mapper_may_drop_or_split_tokens():
    def mapper(token):
        if token.type == T.Whitespace:
            return []
        return [Token(token.type, ch) for ch in token.value]

    lexer = RemappingLexer(_words_lexer(), mapper)
    assert list(lexer.tokenise(None, "ab c")) == [
        Token(T.Name, "a"),
        Token(T.Name, "b"),
        Token(T.Name, "c"),
    ]


def test_delegates_config_analyser_and_registry():
    inner = _words_lexer("Words")
    lexer = RemappingLexer(inner, lambda token: [token])
    assert lexer.config.name == "Words"
    assert lexer.set_analyser(lambda text: 0.75) is lexer
    assert lexer.analyse_text("anything") == 0.75
    registry = LexerRegistry()
    assert registry.register(lexer) is lexer
    assert inner.registry is registry
    assert registry.get("Words") is lexer
"""Token types and tokens produced by lexers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Sequence, Union


def _truncated_multiple(value: int, step: int) -> int:
    """Round ``value`` towards zero to a multiple of ``step``."""
    quotient = abs(value) // step
    return quotient * step if value >= 0 else -quotient * step


class TokenType(IntEnum):
    """The type of a token to highlight.

    Categories are grouped in ranges of 1000 and sub-categories in ranges
    of 100; the literal category spans 3000-3999 and literal strings
    3100-3199, for example.
    """

    # Meta token types.
    Background = -1
    PreWrapper = -2
    Line = -3
    LineNumbers = -4
    LineNumbersTable = -5
    LineHighlight = -6
    LineTable = -7
    LineTableTD = -8
    LineLink = -9
    CodeLine = -10
    Error = -11
    Other = -12
    None_ = -13
    EOFType = 0

    # Keywords.
    Keyword = 1000
    KeywordConstant = 1001
    KeywordDeclaration = 1002
    KeywordNamespace = 1003
    KeywordPseudo = 1004
    KeywordReserved = 1005
    KeywordType = 1006

    # Names.
    Name = 2000
    NameAttribute = 2001
    NameBuiltin = 2002
    NameBuiltinPseudo = 2003
    NameClass = 2004
    NameConstant = 2005
    NameDecorator = 2006
    NameEntity = 2007
    NameException = 2008
    NameFunction = 2009
    NameFunctionMagic = 2010
    NameKeyword = 2011
    NameLabel = 2012
    NameNamespace = 2013
    NameOperator = 2014
    NameOther = 2015
    NamePseudo = 2016
    NameProperty = 2017
    NameTag = 2018
    NameVariable = 2019
    NameVariableAnonymous = 2020
    NameVariableClass = 2021
    NameVariableGlobal = 2022
    NameVariableInstance = 2023
    NameVariableMagic = 2024

    # Literals.
    Literal = 3000
    LiteralDate = 3001
    LiteralOther = 3002

    # Strings.
    LiteralString = 3100
    LiteralStringAffix = 3101
    LiteralStringAtom = 3102
    LiteralStringBacktick = 3103
    LiteralStringBoolean = 3104
    LiteralStringChar = 3105
    LiteralStringDelimiter = 3106
    LiteralStringDoc = 3107
    LiteralStringDouble = 3108
    LiteralStringEscape = 3109
    LiteralStringHeredoc = 3110
    LiteralStringInterpol = 3111
    LiteralStringName = 3112
    LiteralStringOther = 3113
    LiteralStringRegex = 3114
    LiteralStringSingle = 3115
    LiteralStringSymbol = 3116

    # Numbers.
    LiteralNumber = 3200
    LiteralNumberBin = 3201
    LiteralNumberFloat = 3202
    LiteralNumberHex = 3203
    LiteralNumberInteger = 3204
    LiteralNumberIntegerLong = 3205
    LiteralNumberOct = 3206

    # Operators.
    Operator = 4000
    OperatorWord = 4001

    # Punctuation.
    Punctuation = 5000

    # Comments.
    Comment = 6000
    CommentHashbang = 6001
    CommentMultiline = 6002
    CommentSingle = 6003
    CommentSpecial = 6004

    # Preprocessor "comments".
    CommentPreproc = 6100
    CommentPreprocFile = 6101

    # Generic tokens.
    Generic = 7000
    GenericDeleted = 7001
    GenericEmph = 7002
    GenericError = 7003
    GenericHeading = 7004
    GenericInserted = 7005
    GenericOutput = 7006
    GenericPrompt = 7007
    GenericStrong = 7008
    GenericSubheading = 7009
    GenericTraceback = 7010
    GenericUnderline = 7011

    # Text.
    Text = 8000
    TextWhitespace = 8001
    TextSymbol = 8002
    TextPunctuation = 8003

    # Aliases.
    Whitespace = 8001
    Date = 3001
    String = 3100
    StringAffix = 3101
    StringBacktick = 3103
    StringChar = 3105
    StringDelimiter = 3106
    StringDoc = 3107
    StringDouble = 3108
    StringEscape = 3109
    StringHeredoc = 3110
    StringInterpol = 3111
    StringOther = 3113
    StringRegex = 3114
    StringSingle = 3115
    StringSymbol = 3116
    Number = 3200
    NumberBin = 3201
    NumberFloat = 3202
    NumberHex = 3203
    NumberInteger = 3204
    NumberIntegerLong = 3205
    NumberOct = 3206

    @property
    def label(self) -> str:
        """The canonical name of this type, e.g. ``NameVariable``."""
        return "None" if self is TokenType.None_ else self.name

    def __str__(self) -> str:
        return self.label

    def parent(self) -> Union["TokenType", int]:
        """The sub-category, category or root above this type."""
        value = int(self)
        if value % 100 != 0:
            return _to_type(_truncated_multiple(value, 100))
        if value % 1000 != 0:
            return _to_type(_truncated_multiple(value, 1000))
        return TokenType.EOFType

    def category(self) -> Union["TokenType", int]:
        """The category (multiple of 1000) this type belongs to."""
        return _to_type(_truncated_multiple(int(self), 1000))

    def sub_category(self) -> Union["TokenType", int]:
        """The sub-category (multiple of 100) this type belongs to."""
        return _to_type(_truncated_multiple(int(self), 100))

    def in_category(self, other: int) -> bool:
        """Whether this type shares its category with ``other``."""
        return _truncated_multiple(int(self), 1000) == _truncated_multiple(int(other), 1000)

    def in_sub_category(self, other: int) -> bool:
        """Whether this type shares its sub-category with ``other``."""
        return _truncated_multiple(int(self), 100) == _truncated_multiple(int(other), 100)

    def emit(self, groups: Sequence[str], state: object = None) -> Iterator["Token"]:
        """Emit a single token of this type holding the whole match."""
        yield Token(self, groups[0])

    @classmethod
    def from_string(cls, s: str) -> "TokenType":
        """Look up a type by its name, ignoring case."""
        found = _BY_NAME.get(s.lower())
        if found is None:
            raise ValueError(f"{s} does not belong to TokenType values")
        return found


def _to_type(value: int) -> Union[TokenType, int]:
    try:
        return TokenType(value)
    except ValueError:
        return value


_BY_NAME = {member.label.lower(): member for member in TokenType}


@dataclass(frozen=True)
class Token:
    """A single token: its type and the text it covers."""

    type: TokenType
    value: str

    def __str__(self) -> str:
        return self.value


EOF = Token(TokenType.EOFType, "")
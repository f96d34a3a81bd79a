"""Enumeration helpers and CSS class names for token types."""

from __future__ import annotations

from typing import Dict, List, Optional

from hilite.tokentype import TokenType

T = TokenType

STANDARD_TYPES: Dict[TokenType, str] = {
    T.Background: "bg",
    T.PreWrapper: "chroma",
    T.Line: "line",
    T.LineNumbers: "ln",
    T.LineNumbersTable: "lnt",
    T.LineHighlight: "hl",
    T.LineTable: "lntable",
    T.LineTableTD: "lntd",
    T.LineLink: "lnlinks",
    T.CodeLine: "cl",
    T.Text: "",
    T.Whitespace: "w",
    T.Error: "err",
    T.Other: "x",
    T.Keyword: "k",
    T.KeywordConstant: "kc",
    T.KeywordDeclaration: "kd",
    T.KeywordNamespace: "kn",
    T.KeywordPseudo: "kp",
    T.KeywordReserved: "kr",
    T.KeywordType: "kt",
    T.Name: "n",
    T.NameAttribute: "na",
    T.NameBuiltin: "nb",
    T.NameBuiltinPseudo: "bp",
    T.NameClass: "nc",
    T.NameConstant: "no",
    T.NameDecorator: "nd",
    T.NameEntity: "ni",
    T.NameException: "ne",
    T.NameFunction: "nf",
    T.NameFunctionMagic: "fm",
    T.NameProperty: "py",
    T.NameLabel: "nl",
    T.NameNamespace: "nn",
    T.NameOther: "nx",
    T.NameTag: "nt",
    T.NameVariable: "nv",
    T.NameVariableClass: "vc",
    T.NameVariableGlobal: "vg",
    T.NameVariableInstance: "vi",
    T.NameVariableMagic: "vm",
    T.Literal: "l",
    T.LiteralDate: "ld",
    T.String: "s",
    T.StringAffix: "sa",
    T.StringBacktick: "sb",
    T.StringChar: "sc",
    T.StringDelimiter: "dl",
    T.StringDoc: "sd",
    T.StringDouble: "s2",
    T.StringEscape: "se",
    T.StringHeredoc: "sh",
    T.StringInterpol: "si",
    T.StringOther: "sx",
    T.StringRegex: "sr",
    T.StringSingle: "s1",
    T.StringSymbol: "ss",
    T.Number: "m",
    T.NumberBin: "mb",
    T.NumberFloat: "mf",
    T.NumberHex: "mh",
    T.NumberInteger: "mi",
    T.NumberIntegerLong: "il",
    T.NumberOct: "mo",
    T.Operator: "o",
    T.OperatorWord: "ow",
    T.Punctuation: "p",
    T.Comment: "c",
    T.CommentHashbang: "ch",
    T.CommentMultiline: "cm",
    T.CommentPreproc: "cp",
    T.CommentPreprocFile: "cpf",
    T.CommentSingle: "c1",
    T.CommentSpecial: "cs",
    T.Generic: "g",
    T.GenericDeleted: "gd",
    T.GenericEmph: "ge",
    T.GenericError: "gr",
    T.GenericHeading: "gh",
    T.GenericInserted: "gi",
    T.GenericOutput: "go",
    T.GenericPrompt: "gp",
    T.GenericStrong: "gs",
    T.GenericSubheading: "gu",
    T.GenericTraceback: "gt",
    T.GenericUnderline: "gl",
}

del T

_VALUES: tuple = tuple(sorted(TokenType))
_KNOWN = frozenset(int(member) for member in _VALUES)


def token_type_values() -> List[TokenType]:
    """All token types, ordered by value; aliases are not repeated."""
    return list(_VALUES)


def token_type_strings() -> List[str]:
    """The canonical names of all token types, in value order."""
    return [member.label for member in _VALUES]


def is_token_type(value: int) -> bool:
    """Whether ``value`` is the value of a defined token type."""
    return int(value) in _KNOWN


def css_class(ttype: int) -> Optional[str]:
    """The short CSS class for a token type, or None if it has none."""
    return STANDARD_TYPES.get(ttype)
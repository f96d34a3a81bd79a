# hilite

Building blocks for syntax highlighting. hilite provides:

- token types
- lexers that run a state machine of regular expression rules
- a registry that finds lexers
- lexers that remap tokens
- colour styles in the Pygments manner

## Installation

```
pip install hilite
```

To install what the test suite needs as well:

```
pip install "hilite[test]"
```

## Token types

`hilite.tokentype.TokenType` is an `IntEnum` of every kind of token: keywords, names, literals, comments and more. The types form a hierarchy:

- Categories are grouped in blocks of 1000.
- Sub-categories are grouped in blocks of 100.

```python
from hilite.tokentype import TokenType

TokenType.LiteralStringDouble.category()      # TokenType.Literal
TokenType.LiteralStringDouble.sub_category()  # TokenType.LiteralString
TokenType.LiteralStringDouble.parent()        # TokenType.LiteralString
TokenType.from_string("keywordtype")          # TokenType.KeywordType
```

Short aliases exist alongside the full names. For example, `TokenType.String` is `LiteralString` and `TokenType.Whitespace` is `TextWhitespace`. A `Token` is a frozen dataclass with a `type` and a `value`.

`hilite.names` provides these helpers:

- `token_type_values()` lists every type in value order.
- `token_type_strings()` lists the canonical names.
- `is_token_type(value)` reports whether a value is a known type.
- `css_class(ttype)` gives the short CSS class name for a type, such as `"k"` for `Keyword`. It returns `None` for a type that has no class.

## Writing a lexer

A lexer is a set of named states. Each state holds an ordered list of rules. A `Rule` has three parts:

- a pattern
- an emitter (its `type`), such as a `TokenType`
- an optional mutator, which changes the state stack when the rule matches

```python
from hilite.lexer import RegexLexer, Config, tokenise
from hilite.rules import Rule, Rules
from hilite.mutators import push, pop, include
from hilite.tokentype import TokenType

rules = Rules({
    "root": [
        Rule(r"\s+", TokenType.TextWhitespace),
        Rule(r'"', TokenType.LiteralString, push("string")),
        include("words"),
    ],
    "words": [
        Rule(r"\w+", TokenType.Name),
    ],
    "string": [
        Rule(r'[^"]+', TokenType.LiteralString),
        Rule(r'"', TokenType.LiteralString, pop(1)),
    ],
})

lexer = RegexLexer(Config(name="Demo"), lambda: rules)
for token in tokenise(lexer, None, 'hello "world"'):
    print(token.type, repr(token.value))
```

How lexing works:

- Rules are fetched and compiled the first time the lexer is used. A missing `"root"` state raises `ValueError`, and so does a pattern that will not compile.
- `RegexLexer.tokenise(options, text)` returns a `LexerState`. Iterating it yields tokens, and `LexerState.tokens()` returns them all as a list.
- Text that no rule matches comes out as `TokenType.Error` tokens.
- If a newline is not matched while the lexer is outside the start state, the stack is reset to the start state.

`Config` holds the lexer's settings:

- its name, aliases, file name globs, alias file name globs and MIME types
- a `priority`
- the flags `case_insensitive`, `dot_all` and `not_multiline`
- `ensure_nl`, which appends a final newline before lexing

`TokeniseOptions` selects three things:

- the start `state` (default `"root"`)
- whether the lexing is `nested`
- whether `\r\n` and `\r` are converted to `\n` (`ensure_lf`, on by default). The same conversion is available as `ensure_lf(text)`.

Mutators, in `hilite.mutators`:

- `push(*states)` pushes states onto the stack. With no arguments it pushes the current state again, and the state name `"#pop"` pops instead of pushing.
- `pop(n)` pops `n` states.
- `include(state)` returns a rule that splices in the rules of another state.
- `combined(*states)` pushes an anonymous state made from several states.
- `mutators(...)` applies several mutators in order.
- `default(...)` returns a rule that applies mutators.
- `stringify(*tokens)` joins the text of the given tokens.

A lexer can also score text. Set a scoring function with `set_analyser`, and `analyse_text` then returns a score between 0.0 and 1.0.

`Rules` is a dict of state name to rule list. It has `clone()`, `rename(old, new)` and `merge(other)`. `words(prefix, suffix, *words)` builds a pattern that matches any of the given literal words, trying the longest words first.

## Registries

`hilite.registry.LexerRegistry` collects lexers. Registering a lexer whose name is already registered replaces the earlier one.

```python
from hilite.registry import LexerRegistry

registry = LexerRegistry()
registry.register(RegexLexer(Config(name="Demo", aliases=["demo"], filenames=["*.demo"]), lambda: rules))

registry.get("Demo")                      # by name, alias, extension or file name
registry.match("notes.demo.bak")          # backup and template suffixes are ignored
registry.match_mime_type("text/x-demo")   # None: no lexer claims this type
registry.analyse("some text")             # lexer whose analyser scores highest
registry.names(with_aliases=True)
```

When several lexers match, the one with the highest `Config.priority` wins. An unset priority counts as 1.

## Remapping tokens

`hilite.remap.RemappingLexer` wraps a lexer. It maps each token to a list of tokens, which may be empty. `type_remapping_lexer` builds one from a list of `TypeMapping` entries. An entry with no words remaps every token of its type.

```python
from hilite.remap import TypeMapping, type_remapping_lexer

remapped = type_remapping_lexer(lexer, [
    TypeMapping(TokenType.Name, TokenType.Keyword, ("if", "else")),
])
tokenise(remapped, None, "if x else y")
```

## Styles

A style maps token types to Pygments-style entries, such as `"bold #f00"` or `"bg:#ffffff"`:

```python
from hilite.style import new_style
from hilite.tokentype import TokenType

style = new_style("demo", {
    TokenType.Background: "bg:#ffffff",
    TokenType.Name: "bold #f00",
})
print(style.get(TokenType.NameVariable))   # bold #ff0000 bg:#ffffff
xml = style.to_xml()
```

How styles behave:

- Entries inherit from their sub-category, their category, `Text` and `Background`.
- Line highlight and line number entries are synthesised from the background when a style does not define them.
- An invalid entry raises `ValueError`.

The supporting classes:

- `Style.builder()` derives a `StyleBuilder` from a style. `StyleBuilder.transform` applies a function to every entry, for example to clamp brightness with `Colour.clamp_brightness`.
- `Colour` parses `#rgb`, `#rrggbb` and ANSI colour names. It also offers brightness helpers.
- `Style.to_xml()` writes a style as XML, but not a style derived from a parent. `Style.from_xml()` reads the XML back.

## What is not included

hilite has no lexers for any particular language and no built-in styles. It has no formatters that render tokens as HTML or terminal output, and it has no command-line program. It gives you the parts for building these yourself.

## Running the tests

```
pytest
```
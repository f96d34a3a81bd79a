"""A registry of lexers, searchable by name, alias, filename and MIME type."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from hilite.lexer import _glob_matches

IGNORED_SUFFIXES = (
    # Editor backups
    "~", ".bak", ".old", ".orig",
    # apt/dpkg/ucf backups
    ".dpkg-dist", ".dpkg-old", ".ucf-dist", ".ucf-new", ".ucf-old",
    # rpm backups
    ".rpmnew", ".rpmorig", ".rpmsave",
    # Build system input/template files
    ".in",
)


def _base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _prioritised(lexers: Iterable[Any]) -> List[Any]:
    """Lexers by descending priority; an unset priority counts as 1."""
    return sorted(lexers, key=lambda lexer: -(lexer.config.priority or 1.0))


class LexerRegistry:
    """A collection of lexers."""

    def __init__(self) -> None:
        self.lexers: List[Any] = []
        self._by_name: Dict[str, Any] = {}
        self._by_alias: Dict[str, Any] = {}

    def names(self, with_aliases: bool) -> List[str]:
        """Sorted names of all lexers, optionally with their aliases."""
        out: List[str] = []
        for lexer in self.lexers:
            out.append(lexer.config.name)
            if with_aliases:
                out.extend(lexer.config.aliases)
        return sorted(out)

    def get(self, name: str) -> Optional[Any]:
        """A lexer by name, alias, file extension or filename, or None."""
        lowered = name.lower()
        for table, key in (
            (self._by_name, name),
            (self._by_alias, name),
            (self._by_name, lowered),
            (self._by_alias, lowered),
        ):
            lexer = table.get(key)
            if lexer is not None:
                return lexer
        candidates = [
            lexer
            for lexer in (self.match("filename." + name), self.match(name))
            if lexer is not None
        ]
        if not candidates:
            return None
        return _prioritised(candidates)[0]

    def match_mime_type(self, mime_type: str) -> Optional[Any]:
        """The highest priority lexer for ``mime_type``, or None."""
        matched = [
            lexer
            for lexer in self.lexers
            for candidate in lexer.config.mime_types
            if candidate == mime_type
        ]
        return _prioritised(matched)[0] if matched else None

    def _match_globs(self, filename: str, attribute: str) -> List[Any]:
        matched = []
        for lexer in self.lexers:
            for glob in getattr(lexer.config, attribute):
                if _glob_matches(glob, filename) or any(
                    _glob_matches(glob + suffix, filename) for suffix in IGNORED_SUFFIXES
                ):
                    matched.append(lexer)
        return matched

    def match(self, filename: str) -> Optional[Any]:
        """The best lexer for ``filename``, trying primary globs before alias globs."""
        filename = _base(filename)
        for attribute in ("filenames", "alias_filenames"):
            matched = self._match_globs(filename, attribute)
            if matched:
                return _prioritised(matched)[0]
        return None

    def analyse(self, text: str) -> Optional[Any]:
        """The lexer whose analyser scores ``text`` highest, or None."""
        picked = None
        highest = 0.0
        for lexer in self.lexers:
            analyse_text = getattr(lexer, "analyse_text", None)
            if analyse_text is None:
                continue
            weight = analyse_text(text)
            if weight > highest:
                picked = lexer
                highest = weight
        return picked

    def register(self, lexer: Any) -> Any:
        """Add ``lexer``, replacing any registered lexer with the same name."""
        lexer.set_registry(self)
        config = lexer.config
        self._by_name[config.name] = lexer
        self._by_name[config.name.lower()] = lexer
        for alias in config.aliases:
            self._by_alias[alias] = lexer
            self._by_alias[alias.lower()] = lexer
        for index, existing in enumerate(self.lexers):
            if existing is not None and existing.config.name == config.name:
                self.lexers[index] = lexer
                break
        else:
            self.lexers.append(lexer)
        return lexer
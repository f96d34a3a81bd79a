"""Colours, style entries and styles mapping token types to appearance."""

from __future__ import annotations

import dataclasses
import re
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Union

from hilite.tokentype import TokenType

_ANSI_TO_RGB = {
    "#ansiblack": "000000",
    "#ansidarkred": "7f0000",
    "#ansidarkgreen": "007f00",
    "#ansibrown": "7f7fe0",
    "#ansidarkblue": "00007f",
    "#ansipurple": "7f007f",
    "#ansiteal": "007f7f",
    "#ansilightgray": "e5e5e5",
    "#ansidarkgray": "555555",
    "#ansired": "ff0000",
    "#ansigreen": "00ff00",
    "#ansiyellow": "ffff00",
    "#ansiblue": "0000ff",
    "#ansifuchsia": "ff00ff",
    "#ansiturquoise": "00ffff",
    "#ansiwhite": "ffffff",
    "#black": "000000",
    "#darkred": "7f0000",
    "#darkgreen": "007f00",
    "#brown": "7f7fe0",
    "#darkblue": "00007f",
    "#purple": "7f007f",
    "#teal": "007f7f",
    "#lightgray": "e5e5e5",
    "#darkgray": "555555",
    "#red": "ff0000",
    "#green": "00ff00",
    "#yellow": "ffff00",
    "#blue": "0000ff",
    "#fuchsia": "ff00ff",
    "#turquoise": "00ffff",
    "#white": "ffffff",
}

_HEX = re.compile(r"[0-9a-fA-F]+")


class Trilean(IntEnum):
    """A three-way flag used for style attribute inheritance."""

    Pass = 0
    Yes = 1
    No = 2

    def __str__(self) -> str:
        return self.name

    def prefix(self, s: str) -> str:
        """``s`` when Yes, ``"no" + s`` when No, empty otherwise."""
        if self is Trilean.Yes:
            return s
        if self is Trilean.No:
            return "no" + s
        return ""


def _u8(value: float) -> int:
    return max(0, min(255, int(value)))


class Colour(int):
    """An RGB colour stored as value + 1, so that zero means "unset"."""

    @classmethod
    def parse(cls, text: str) -> "Colour":
        """Parse ``#rgb``, ``#rrggbb`` or an ANSI colour name; unset on failure."""
        colour = _ANSI_TO_RGB.get(text)
        if colour is None:
            colour = text
            if colour.startswith("#"):
                colour = colour[1:]
                if len(colour) == 3:
                    colour = "".join(ch * 2 for ch in colour)
        if not _HEX.fullmatch(colour):
            return cls(0)
        n = int(colour, 16)
        if n > 0xFFFFFFFF:
            return cls(0)
        return cls(n + 1)

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> "Colour":
        """Build a set colour from its three channels."""
        return cls(((red & 0xFF) << 16 | (green & 0xFF) << 8 | (blue & 0xFF)) + 1)

    @property
    def red(self) -> int:
        return ((int(self) - 1) >> 16) & 0xFF

    @property
    def green(self) -> int:
        return ((int(self) - 1) >> 8) & 0xFF

    @property
    def blue(self) -> int:
        return (int(self) - 1) & 0xFF

    def is_set(self) -> bool:
        """Whether a colour has been assigned."""
        return int(self) != 0

    def brightness(self) -> float:
        """Average channel intensity, from 0.0 to 1.0."""
        return (self.red + self.green + self.blue) / 255.0 / 3.0

    def brighten(self, factor: float) -> "Colour":
        """Brighten towards white (factor > 0) or darken towards black (factor < 0)."""
        r, g, b = float(self.red), float(self.green), float(self.blue)
        if factor < 0:
            factor += 1
            r, g, b = r * factor, g * factor, b * factor
        else:
            r = (255 - r) * factor + r
            g = (255 - g) * factor + g
            b = (255 - b) * factor + b
        return Colour.from_rgb(_u8(r), _u8(g), _u8(b))

    def brighten_or_darken(self, factor: float) -> "Colour":
        """Brighten dark colours and darken light ones by ``factor``."""
        if self.brightness() < 0.5:
            return self.brighten(factor)
        return self.brighten(-factor)

    def clamp_brightness(self, lo: float, hi: float) -> "Colour":
        """Adjust the colour so its brightness falls within ``[lo, hi]``."""
        if not self.is_set():
            return self
        lo = max(lo, 0.0)
        hi = min(hi, 1.0)
        current = self.brightness()
        target = min(max(current, lo), hi)
        if current == target:
            return self
        total = float(self.red + self.green + self.blue)
        if target > current:
            return self.brighten((target * 255 * 3 - total) / (255 * 3 - total))
        return self.brighten((target * 255 * 3) / total - 1)

    def __str__(self) -> str:
        return "#%06x" % (int(self) - 1)

    def __repr__(self) -> str:
        return f"Colour({str(self)!r})" if self.is_set() else "Colour()"


_UNSET = Colour(0)


@dataclass(frozen=True)
class StyleEntry:
    """How a single token type is drawn."""

    colour: Colour = _UNSET
    background: Colour = _UNSET
    border: Colour = _UNSET
    bold: Trilean = Trilean.Pass
    italic: Trilean = Trilean.Pass
    underline: Trilean = Trilean.Pass
    no_inherit: bool = False

    def __str__(self) -> str:
        out: List[str] = []
        if self.bold is not Trilean.Pass:
            out.append(self.bold.prefix("bold"))
        if self.italic is not Trilean.Pass:
            out.append(self.italic.prefix("italic"))
        if self.underline is not Trilean.Pass:
            out.append(self.underline.prefix("underline"))
        if self.no_inherit:
            out.append("noinherit")
        if self.colour.is_set():
            out.append(str(self.colour))
        if self.background.is_set():
            out.append("bg:" + str(self.background))
        if self.border.is_set():
            out.append("border:" + str(self.border))
        return " ".join(out)

    def sub(self, e: "StyleEntry") -> "StyleEntry":
        """Keep only the attributes of this entry that differ from ``e``."""
        return StyleEntry(
            colour=self.colour if e.colour != self.colour else _UNSET,
            background=self.background if e.background != self.background else _UNSET,
            border=self.border if e.border != self.border else _UNSET,
            bold=self.bold if e.bold != self.bold else Trilean.Pass,
            italic=self.italic if e.italic != self.italic else Trilean.Pass,
            underline=self.underline if e.underline != self.underline else Trilean.Pass,
        )

    def inherit(self, *ancestors: "StyleEntry") -> "StyleEntry":
        """Fill unset attributes from ancestors, given oldest to newest."""
        out = self
        for ancestor in reversed(ancestors):
            if out.no_inherit:
                return out
            out = dataclasses.replace(
                out,
                colour=out.colour if out.colour.is_set() else ancestor.colour,
                background=out.background if out.background.is_set() else ancestor.background,
                border=out.border if out.border.is_set() else ancestor.border,
                bold=ancestor.bold if out.bold is Trilean.Pass else out.bold,
                italic=ancestor.italic if out.italic is Trilean.Pass else out.italic,
                underline=ancestor.underline if out.underline is Trilean.Pass else out.underline,
            )
        return out

    def is_zero(self) -> bool:
        """Whether nothing at all is set."""
        return self == _ZERO_ENTRY


_ZERO_ENTRY = StyleEntry()


def parse_style_entry(entry: str) -> StyleEntry:
    """Parse a style entry such as ``"bold #f00 bg:#000"``."""
    values: Dict[str, object] = {}
    for part in entry.split():
        if part == "italic":
            values["italic"] = Trilean.Yes
        elif part == "noitalic":
            values["italic"] = Trilean.No
        elif part == "bold":
            values["bold"] = Trilean.Yes
        elif part == "nobold":
            values["bold"] = Trilean.No
        elif part == "underline":
            values["underline"] = Trilean.Yes
        elif part == "nounderline":
            values["underline"] = Trilean.No
        elif part == "inherit":
            values["no_inherit"] = False
        elif part == "noinherit":
            values["no_inherit"] = True
        elif part == "bg:":
            values["background"] = _UNSET
        elif part.startswith("bg:#"):
            colour = Colour.parse(part[3:])
            if not colour.is_set():
                raise ValueError(f"invalid background colour {part!r}")
            values["background"] = colour
        elif part.startswith("border:#"):
            colour = Colour.parse(part[7:])
            if not colour.is_set():
                raise ValueError(f"invalid border colour {part!r}")
            values["border"] = colour
        elif part.startswith("#"):
            colour = Colour.parse(part)
            if not colour.is_set():
                raise ValueError(f"invalid colour {part!r}")
            values["colour"] = colour
        else:
            raise ValueError(f"unknown style element {part!r}")
    return StyleEntry(**values)


def _lenient_parse(entry: str) -> StyleEntry:
    try:
        return parse_style_entry(entry)
    except ValueError:
        return StyleEntry()


_SYNTHESISABLE = frozenset(
    {TokenType.LineHighlight, TokenType.LineNumbers, TokenType.LineNumbersTable}
)


def _xml_attr(value: str) -> str:
    replacements = {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
        "'": "&#39;",
        "\t": "&#x9;",
        "\n": "&#xA;",
        "\r": "&#xD;",
    }
    return "".join(replacements.get(ch, ch) for ch in value)


class Style:
    """An immutable mapping from token types to style entries."""

    def __init__(
        self,
        name: str,
        entries: Optional[Mapping[int, StyleEntry]] = None,
        parent: Optional["Style"] = None,
    ) -> None:
        self.name = name
        self._entries: Dict[int, StyleEntry] = dict(entries or {})
        self._parent = parent

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Style):
            return NotImplemented
        return (
            self.name == other.name
            and self._entries == other._entries
            and self._parent == other._parent
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Style({self.name!r})"

    def types(self) -> List[TokenType]:
        """Token types styled here or by a parent."""
        found = set(self._entries)
        if self._parent is not None:
            found.update(self._parent.types())
        return list(found)

    def builder(self) -> "StyleBuilder":
        """A mutable builder deriving from this style."""
        return StyleBuilder(self.name, parent=self)

    def has(self, ttype: TokenType) -> bool:
        """Whether an exact entry exists (or can be synthesised) for ``ttype``."""
        return not self._get(ttype).is_zero() or ttype in _SYNTHESISABLE

    def get(self, ttype: TokenType) -> StyleEntry:
        """The effective entry for ``ttype``, inheriting from broader types."""
        ttype = TokenType(ttype)
        return self._get(ttype).inherit(
            self._get(TokenType.Background),
            self._get(TokenType.Text),
            self._get(ttype.category()),
            self._get(ttype.sub_category()),
        )

    def _get(self, ttype: int) -> StyleEntry:
        out = self._entries.get(ttype, _ZERO_ENTRY)
        if out.is_zero() and self._parent is not None:
            return self._parent._get(ttype)
        if out.is_zero() and ttype in _SYNTHESISABLE:
            out = self._synthesise(ttype)
        return out

    def _synthesise(self, ttype: int) -> StyleEntry:
        bg = self._get(TokenType.Background)
        if ttype == TokenType.LineHighlight:
            return StyleEntry(background=bg.background.brighten_or_darken(0.1))
        if ttype in (TokenType.LineNumbers, TokenType.LineNumbersTable):
            return StyleEntry(colour=bg.colour.brighten_or_darken(0.5))
        return StyleEntry()

    def to_xml(self) -> str:
        """Serialise this style as indented XML."""
        if self._parent is not None:
            raise ValueError("cannot marshal style with parent")
        lines = [f'<style name="{_xml_attr(self.name)}">']
        for ttype in sorted(self._entries):
            entry = self._entries[ttype]
            label = str(TokenType(ttype)) if ttype in TokenType._value2member_map_ else f"TokenType({int(ttype)})"
            lines.append(
                f'  <entry type="{_xml_attr(label)}" style="{_xml_attr(str(entry))}"></entry>'
            )
        if len(lines) == 1:
            return lines[0] + "</style>"
        lines.append("</style>")
        return "\n".join(lines)

    @classmethod
    def from_xml(cls, data: Union[str, bytes]) -> "Style":
        """Parse a style from its XML form."""
        try:
            root = ElementTree.fromstring(data)
        except ElementTree.ParseError as exc:
            raise ValueError(f"invalid style XML: {exc}") from exc
        name = ""
        for attr, value in root.attrib.items():
            if attr != "name":
                raise ValueError(f"unexpected attribute {attr}")
            name = value
        if not name:
            raise ValueError("missing style name attribute")
        entries: Dict[int, StyleEntry] = {}
        for element in root.iter():
            if element is root:
                continue
            if element.tag != "entry":
                raise ValueError(f"unexpected element {element.tag}")
            ttype: int = TokenType.EOFType
            entry = StyleEntry()
            for attr, value in element.attrib.items():
                if attr == "type":
                    ttype = TokenType.from_string(value)
                elif attr == "style":
                    entry = parse_style_entry(value)
                else:
                    raise ValueError(f"unexpected attribute {attr}")
            entries[ttype] = entry
        return cls(name, entries)


class StyleBuilder:
    """A mutable structure for building styles."""

    def __init__(self, name: str, parent: Optional[Style] = None) -> None:
        self.name = name
        self.parent = parent
        self._entries: Dict[int, str] = {}

    def add_all(self, entries: Mapping[int, str]) -> "StyleBuilder":
        """Add every descriptor in ``entries``."""
        self._entries.update(entries)
        return self

    def get(self, ttype: TokenType) -> StyleEntry:
        """The entry for ``ttype``, inheriting from the parent if any."""
        entry = _lenient_parse(self._entries.get(ttype, ""))
        if self.parent is not None:
            entry = entry.inherit(self.parent.get(ttype))
        return entry

    def add(self, ttype: TokenType, entry: str) -> "StyleBuilder":
        """Set the descriptor for ``ttype``."""
        self._entries[ttype] = entry
        return self

    def add_entry(self, ttype: TokenType, entry: StyleEntry) -> "StyleBuilder":
        """Set ``ttype`` from a parsed entry."""
        self._entries[ttype] = str(entry)
        return self

    def transform(self, transform: Callable[[StyleEntry], StyleEntry]) -> "StyleBuilder":
        """Replace every known entry with ``transform`` applied to it."""
        known = set(self._entries)
        if self.parent is not None:
            known.update(self.parent.types())
        for ttype in known:
            self.add_entry(ttype, transform(self.get(ttype)))
        return self

    def build(self) -> Style:
        """Parse all descriptors into an immutable Style."""
        entries: Dict[int, StyleEntry] = {}
        for ttype, descriptor in self._entries.items():
            try:
                entries[ttype] = parse_style_entry(descriptor)
            except ValueError as exc:
                raise ValueError(f"invalid entry for {ttype}: {exc}") from exc
        return Style(self.name, entries, self.parent)


def new_style(name: str, entries: Mapping[int, str]) -> Style:
    """Build a style from a mapping of token types to descriptors."""
    return StyleBuilder(name).add_all(entries).build()


def _types(values: Iterable[int]) -> List[TokenType]:
    return [TokenType(v) for v in values]
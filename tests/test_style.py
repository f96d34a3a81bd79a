import dataclasses

import pytest

from hilite.style import (
    Colour,
    Style,
    StyleEntry,
    Trilean,
    new_style,
    parse_style_entry,
)
from hilite.tokentype import TokenType as T


def test_style_inherit():
    s = new_style("test", {T.Name: "bold #f00", T.NameVariable: "#fff"})
    assert s.get(T.NameVariable) == StyleEntry(colour=Colour(0x1000000), bold=Trilean.Yes)


def test_style_colours():
    s = new_style("test", {T.Name: "#f00 bg:#001 border:#ansiblue"})
    assert s.get(T.Name) == StyleEntry(
        colour=Colour(0xFF0001), background=Colour(0x000012), border=Colour(0x000100)
    )


def test_style_clone():
    parent = new_style("test", {T.Background: "bg:#ffffff"})
    clone = parent.builder().add(T.Comment, "#0f0").build()
    assert str(clone.get(T.Background)) == "bg:#ffffff"
    assert str(clone.get(T.Comment)) == "#00ff00 bg:#ffffff"
    assert str(parent.get(T.Comment)) == "bg:#ffffff"


def test_synthesised_style_entries():
    style = new_style("test", {T.Background: "bg:#ffffff"})
    assert style.has(T.LineHighlight)
    assert style.has(T.LineNumbersTable)
    assert style.has(T.LineNumbers)
    assert str(style.get(T.LineHighlight)) == "bg:#e5e5e5"
    assert str(style.get(T.LineNumbers)) == "#7f7f7f bg:#ffffff"
    assert str(style.get(T.LineNumbersTable)) == "#7f7f7f bg:#ffffff"


def test_synthesised_style_clone():
    style = new_style(
        "test",
        {
            T.Background: "bg:#ffffff",
            T.LineHighlight: "bg:#ffffff",
            T.LineNumbers: "bg:#fffff1",
        },
    )
    style = style.builder().build()
    assert style.has(T.LineHighlight)
    assert style.has(T.LineNumbers)
    assert str(style.get(T.LineHighlight)) == "bg:#ffffff"
    assert str(style.get(T.LineNumbers)) == "bg:#fffff1"


def test_style_builder_transform():
    orig = new_style("test", {T.Name: "#000", T.NameVariable: "bold #f00"})
    builder = orig.builder()
    builder.add(T.NameVariableGlobal, "#f30")
    deriv = builder.build()

    light = deriv.builder().transform(
        lambda se: dataclasses.replace(se, colour=se.colour.clamp_brightness(0.9, 1))
    ).build()
    assert light.get(T.Name).colour.brightness() >= 0.89
    assert light.get(T.NameVariable).colour.brightness() >= 0.89
    assert light.get(T.NameVariableGlobal).colour.brightness() >= 0.89

    dark = deriv.builder().transform(
        lambda se: dataclasses.replace(se, colour=se.colour.clamp_brightness(0, 0.1))
    ).build()
    assert dark.get(T.Name).colour.brightness() <= 0.11
    assert dark.get(T.NameVariable).colour.brightness() <= 0.11
    assert dark.get(T.NameVariableGlobal).colour.brightness() <= 0.11

    assert str(orig.get(T.Name).colour) == "#000000"
    assert str(orig.get(T.NameVariable).colour) == "#ff0000"
    assert str(deriv.get(T.NameVariableGlobal).colour) == "#ff3300"


def test_style_marshaller():
    expected = new_style("test", {T.Whitespace: "bg:#ffffff", T.Text: "#000000 underline"})
    data = expected.to_xml()
    assert data == (
        '<style name="test">\n'
        '  <entry type="Text" style="underline #000000"></entry>\n'
        '  <entry type="TextWhitespace" style="bg:#ffffff"></entry>\n'
        "</style>"
    )
    actual = Style.from_xml(data)
    assert actual == expected


def test_marshal_with_parent_fails():
    child = new_style("test", {T.Name: "#fff"}).builder().build()
    with pytest.raises(ValueError):
        child.to_xml()


@pytest.mark.parametrize(
    "data",
    [
        '<style><entry type="Text" style="#000"/></style>',
        '<style name="x" other="y"></style>',
        '<style name="x"><item type="Text"/></style>',
        '<style name="x"><entry type="Bogus" style="#000"/></style>',
        '<style name="x"><entry type="Text" colour="#000"/></style>',
        '<style name="x"><entry type="Text" style="wobbly"/></style>',
        "<style name=",
    ],
)
def test_from_xml_errors(data):
    with pytest.raises(ValueError):
        Style.from_xml(data)


def test_parse_style_entry_full():
    entry = parse_style_entry("bold noitalic underline noinherit #123 bg:#456 border:#789")
    assert entry == StyleEntry(
        colour=Colour(0x112233 + 1),
        background=Colour(0x445566 + 1),
        border=Colour(0x778899 + 1),
        bold=Trilean.Yes,
        italic=Trilean.No,
        underline=Trilean.Yes,
        no_inherit=True,
    )
    assert str(entry) == "bold noitalic underline noinherit #112233 bg:#445566 border:#778899"


@pytest.mark.parametrize("text", ["#zzz", "bg:#xyz", "border:#nope", "purple", "bold #"])
def test_parse_style_entry_errors(text):
    with pytest.raises(ValueError):
        parse_style_entry(text)


def test_build_reports_invalid_entry():
    with pytest.raises(ValueError, match="invalid entry"):
        new_style("bad", {T.Name: "#qqq"})


def test_trilean_prefix():
    assert Trilean.Yes.prefix("bold") == "bold"
    assert Trilean.No.prefix("bold") == "nobold"
    assert Trilean.Pass.prefix("bold") == ""
    assert str(Trilean.Pass) == "Pass"


def test_colour_parse():
    assert Colour.parse("#fff") == Colour(0x1000000)
    assert Colour.parse("#ansired") == Colour(0xFF0001)
    assert str(Colour.parse("#abcdef")) == "#abcdef"
    assert not Colour.parse("#ggg").is_set()
    red = Colour.parse("#ff8000")
    assert (red.red, red.green, red.blue) == (255, 128, 0)


def test_colour_brighten_or_darken():
    assert str(Colour.parse("#ffffff").brighten_or_darken(0.1)) == "#e5e5e5"
    assert str(Colour.parse("#000000").brighten_or_darken(0.5)) == "#7f7f7f"


def test_clamp_brightness_unset_and_in_range():
    assert Colour(0).clamp_brightness(0.5, 1) == Colour(0)
    grey = Colour.parse("#808080")
    assert grey.clamp_brightness(0, 1) == grey


def test_entry_sub():
    a = parse_style_entry("bold #f00 bg:#000")
    b = parse_style_entry("bold #0f0 bg:#000")
    assert a.sub(b) == StyleEntry(colour=Colour.parse("#f00"))


def test_entry_inherit_stops_at_noinherit():
    entry = parse_style_entry("noinherit #fff")
    ancestor = parse_style_entry("bold bg:#000")
    assert entry.inherit(ancestor) == entry
    plain = parse_style_entry("#fff")
    assert plain.inherit(ancestor) == StyleEntry(
        colour=Colour.parse("#fff"), background=Colour.parse("#000"), bold=Trilean.Yes
    )


def test_inherit_newest_ancestor_wins():
    old = parse_style_entry("#111")
    new = parse_style_entry("#222")
    assert StyleEntry().inherit(old, new).colour == Colour.parse("#222")


def test_is_zero():
    assert StyleEntry().is_zero()
    assert not parse_style_entry("bold").is_zero()


def test_types_include_parent():
    parent = new_style("p", {T.Name: "#fff"})
    child = parent.builder().add(T.Comment, "#000").build()
    assert sorted(child.types()) == [T.Name, T.Comment]


def test_has_exact_only():
    style = new_style("s", {T.Name: "#fff"})
    assert style.has(T.Name)
    assert not style.has(T.NameVariable)


def test_builder_get_ignores_bad_descriptor():
    builder = new_style("p", {T.Name: "bold"}).builder().add(T.Name, "garbage")
    assert builder.get(T.Name) == StyleEntry(bold=Trilean.Yes)
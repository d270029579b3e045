import pytest

from maps.colors import Color, parse_color


@pytest.mark.parametrize(
    "text, expected",
    [
        ("#7dabff", (0x7D, 0xAB, 0xFF, 0xFF)),
        ("#7DABFF", (0x7D, 0xAB, 0xFF, 0xFF)),
        ("#fff", (0xFF, 0xFF, 0xFF, 0xFF)),
        ("#f008", (0xFF, 0x00, 0x00, 0x88)),
        ("#10203040", (0x10, 0x20, 0x30, 0x40)),
        ("0x102030", (0x10, 0x20, 0x30, 0xFF)),
        ("0x80102030", (0x10, 0x20, 0x30, 0x80)),
        ("rgb(16, 32, 48)", (16, 32, 48, 255)),
        ("rgba(16 32 48 / 0.5)", (16, 32, 48, 128)),
        ("rgb(100%, 0%, 50%)", (255, 0, 128, 255)),
        ("  Red ", (255, 0, 0, 255)),
        ("skyblue", (0x87, 0xCE, 0xEB, 0xFF)),
        ("4278190335", (0, 0, 255, 255)),
    ],
)
def test_parse_color_formats(text, expected):
    assert parse_color(text) == Color.from_rgb_bytes(*expected)


def test_channels_are_normalized_floats():
    color = parse_color("#ff0080")

    assert color.r == 1.0
    assert color.g == 0.0
    assert color.b == pytest.approx(128 / 255)
    assert color.a == 1.0


@pytest.mark.parametrize(
    "text",
    ["", "   ", "#12", "#ggg", "0x12345", "rgb(1, 2)", "rgb(300, 0, 0)", "bluish", "#+fff", None],
)
def test_parse_color_rejects_invalid_input(text):
    with pytest.raises(ValueError):
        parse_color(text)


@pytest.mark.parametrize("text", ["rgb(1e400, 0, 0)", "rgb(0, 0, 0, 1e400)", "rgb(1e400%, 0, 0)"])
def test_overflowing_components_raise_value_error(text):
    with pytest.raises(ValueError, match="Invalid colour"):
        parse_color(text)


@pytest.mark.parametrize("value", [0x7DABFF, 1.5, ["#fff"]])
def test_non_string_colours_raise_value_error(value):
    with pytest.raises(ValueError, match="must be a string"):
        parse_color(value)

import pytest

from morse.symbol_table import SymbolTable, MORSE, text_to_morse, morse_to_text


def test_examples():
    assert text_to_morse("SOS") == "... --- ..."
    assert morse_to_text("... --- ...") == "SOS"
    assert morse_to_text(".... . .-.. .-.. --- / .-- --- .-. .-.. -..") == "HELLO WORLD"


def test_encode_is_case_insensitive():
    table = SymbolTable()
    assert table.encode_char("a") == table.encode_char("A") == ".-"
    assert table.encode_char(" ") == "/"
    assert table.encode_char("#") is None
    assert table.encode_char("") is None


def test_decode_symbol():
    table = SymbolTable()
    assert table.decode_symbol("...") == "S"
    assert table.decode_symbol("/") == " "
    assert table.decode_symbol("-..-.") == "/"
    assert table.decode_symbol("........") is None


def test_unknown_characters_are_dropped():
    assert text_to_morse("S#O~S") == "... --- ..."
    assert text_to_morse("###") == ""


def test_unknown_groups_dropped_or_placeholder():
    assert morse_to_text("... ........ ...") == "SS"
    assert morse_to_text("... ........ ...", placeholder="?") == "S?S"


def test_typography_normalised():
    # phone keyboards turn "..." into an ellipsis and "--" into a dash
    assert morse_to_text("… — …") == "SMS"
    assert morse_to_text("–-") == "0"


@pytest.mark.parametrize("text", [
    "SOS", "hello world", "CQ DE IZ6ABC", "1234567890",
    "a.b,c?d'e!f/g(h)i&j:k;l=m+n-o_p\"q$r@s", "two  spaces", " lead",
])
def test_round_trip(text):
    assert morse_to_text(text_to_morse(text)) == text.upper()


def test_every_symbol_is_unique():
    symbols = [s for c, s in MORSE.items() if c != " "]
    assert len(symbols) == len(set(symbols))


def test_custom_table():
    table = SymbolTable({"a": ".-", "b": "-..."})
    assert table.text_to_morse("abc") == ".- -..."
    assert table.morse_to_text(".- -...") == "AB"
    assert set(table.supported()) == {"A", "B"}

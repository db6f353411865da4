# morse/symbol_table.py
"""
SymbolTable
-----------
Bidirectional char <-> Morse symbol lookup (ITU letters, digits, punctuation).

Text grammar for Morse strings:
  - one symbol group per character, groups separated by a single space
  - "/" is the word separator token
  - "." and "-" are the only element characters

Unknown characters / groups are dropped silently (no error, no placeholder)
unless the caller explicitly asks for a placeholder.
"""

WORD_SEP = "/"

MORSE = {
    "A":".-", "B":"-...", "C":"-.-.", "D":"-..", "E":".", "F":"..-.",
    "G":"--.", "H":"....", "I":"..", "J":".---", "K":"-.-", "L":".-..",
    "M":"--", "N":"-.", "O":"---", "P":".--.", "Q":"--.-", "R":".-.",
    "S":"...", "T":"-", "U":"..-", "V":"...-", "W":".--", "X":"-..-",
    "Y":"-.--", "Z":"--..",
    "0":"-----", "1":".----", "2":"..---", "3":"...--", "4":"....-",
    "5":".....", "6":"-....", "7":"--...", "8":"---..", "9":"----.",
    ".":".-.-.-", ",":"--..--", "?":"..--..", "'":".----.", "!":"-.-.--",
    "/":"-..-.", "(":"-.--.", ")":"-.--.-", "&":".-...", ":":"---...",
    ";":"-.-.-.", "=":"-...-", "+":".-.-.", "-":"-....-", "_":"..--.-",
    "\"":".-..-.", "$":"...-..-", "@":".--.-.",
    " ":WORD_SEP,
}

# Smart punctuation inserted by phone keyboards while typing dots/dashes
TYPOGRAPHY = (
    ("…", "..."),    # ellipsis
    ("—", "--"),     # em dash
    ("–", "----"),   # en dash
)


class SymbolTable:
    def __init__(self, table: dict = None):
        self._encode = {str(k).upper(): v for k, v in (table or MORSE).items()}
        # reverse table built once, here
        self._decode = {}
        for ch, sym in self._encode.items():
            self._decode.setdefault(sym, ch)

    def encode_char(self, c: str):
        """Symbol for one character (case-insensitive) or None."""
        if not c:
            return None
        return self._encode.get(c.upper())

    def decode_symbol(self, s: str):
        """Character for a dot/dash group ("/" -> " ") or None."""
        if not s:
            return None
        return self._decode.get(s)

    def supported(self) -> str:
        return "".join(self._encode.keys())

    # ---------- string helpers ----------
    def text_to_morse(self, text: str) -> str:
        groups = []
        for c in text or "":
            sym = self.encode_char(c)
            if sym is not None:
                groups.append(sym)
        return " ".join(groups)

    def morse_to_text(self, morse: str, placeholder: str = None) -> str:
        """
        Decodes the space-delimited grammar. Groups that are not in the table
        are dropped, or replaced by `placeholder` when one is given.
        """
        morse = normalize_typography(morse or "")
        out = []
        for group in morse.split():
            ch = self.decode_symbol(group)
            if ch is not None:
                out.append(ch)
            elif placeholder:
                out.append(placeholder)
        return "".join(out)


def normalize_typography(morse: str) -> str:
    for src, dst in TYPOGRAPHY:
        morse = morse.replace(src, dst)
    return morse


DEFAULT_TABLE = SymbolTable()

def text_to_morse(text: str) -> str:
    return DEFAULT_TABLE.text_to_morse(text)

def morse_to_text(morse: str, placeholder: str = None) -> str:
    return DEFAULT_TABLE.morse_to_text(morse, placeholder)

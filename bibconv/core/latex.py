"""LaTeX encoding and decoding for BibTeX field values.

Accented letters are handled through Unicode combining marks, so every
letter a combining accent applies to is covered without a per-letter
table. Symbols and ligatures use explicit tables.
"""

import re
import unicodedata

# Accent command -> combining character
ACCENTS = {
    "`": "\u0300",
    "'": "\u0301",
    "^": "\u0302",
    "~": "\u0303",
    "=": "\u0304",
    "u": "\u0306",
    ".": "\u0307",
    '"': "\u0308",
    "r": "\u030a",
    "H": "\u030b",
    "v": "\u030c",
    "d": "\u0323",
    "c": "\u0327",
    "k": "\u0328",
    "b": "\u0331",
}

COMBINING_TO_ACCENT = {mark: cmd for cmd, mark in ACCENTS.items()}

# Control words without arguments
SYMBOLS = {
    "i": "\u0131",
    "j": "\u0237",
    "l": "ł",
    "L": "Ł",
    "o": "ø",
    "O": "Ø",
    "ae": "æ",
    "AE": "Æ",
    "oe": "œ",
    "OE": "Œ",
    "aa": "å",
    "AA": "Å",
    "ss": "ß",
    "textregistered": "®",
    "texttrademark": "™",
    "textcopyright": "©",
    "pounds": "£",
    "euro": "€",
    "dots": "…",
    "ldots": "…",
    "textendash": "–",
    "textemdash": "—",
    "alpha": "α",
    "beta": "β",
    "gamma": "γ",
    "delta": "δ",
    "epsilon": "ε",
    "theta": "θ",
    "lambda": "λ",
    "mu": "μ",
    "pi": "π",
    "sigma": "σ",
    "tau": "τ",
    "phi": "φ",
    "omega": "ω",
}

# Preferred encoding of each symbol; the decode-only aliases are left out
SYMBOL_TO_LATEX = {
    char: name
    for name, char in SYMBOLS.items()
    if name not in {"i", "j", "aa", "AA", "dots", "textendash", "textemdash"}
}

SPECIAL_CHARS = "&%$#_"

PUNCTUATION = [
    ("---", "—"),
    ("--", "–"),
    ("``", "\u201c"),
    ("''", "\u201d"),
]

_ACCENT_CMDS = re.escape("`'^~=.\"")
_LETTER_ACCENT_CMDS = "uvHrdckb"

# \"{o}, \"o, \" o, \'{\i}
_SYMBOL_ACCENT = re.compile(
    rf"\\([{_ACCENT_CMDS}])\s*"
    r"(?:\{\s*(\\[ij]|[A-Za-z])\s*\}|(\\[ij](?![A-Za-z])|[A-Za-z]))"
)
# \c{c}, \c c, \v{s}
_LETTER_ACCENT = re.compile(
    rf"\\([{_LETTER_ACCENT_CMDS}])(?:\s*\{{\s*(\\[ij]|[A-Za-z])\s*\}}|\s+([A-Za-z]))"
)
_CONTROL_WORD = re.compile(r"\\([A-Za-z]+)(?:\{\}|\s(?=\w)|(?![A-Za-z]))")
_ESCAPED = re.compile(r"\\([&%$#_{}])")
_TIE = re.compile(r"(?<!\\)~")
_BRACED_CHAR = re.compile(r"\{([^\x00-\x7f])\}")
_COMMAND = re.compile(r"\\[a-zA-Z]+|\\[^a-zA-Z]")


def _apply_accent(command: str, letter: str) -> str:
    if letter in ("\\i", "\\j"):
        letter = letter[1]
    return unicodedata.normalize("NFC", letter + ACCENTS[command])


def _accent_sub(match: re.Match) -> str:
    return _apply_accent(match.group(1), match.group(2) or match.group(3))


def _symbol_sub(match: re.Match) -> str:
    name = match.group(1)
    if name in SYMBOLS:
        return SYMBOLS[name]
    return match.group(0)


def decode_latex(text: str) -> str:
    """Decode LaTeX commands to Unicode.

    Unknown commands and grouping braces are kept, so ``{The {RNA} World}``
    content survives unchanged apart from known commands.
    """
    if not text:
        return text

    result = _TIE.sub(" ", text)
    result = _SYMBOL_ACCENT.sub(_accent_sub, result)
    result = _LETTER_ACCENT.sub(_accent_sub, result)
    result = result.replace("\\~{}", "~").replace("\\^{}", "^")
    result = _CONTROL_WORD.sub(_symbol_sub, result)
    result = _ESCAPED.sub(r"\1", result)
    for latex, char in PUNCTUATION:
        result = result.replace(latex, char)
    return _BRACED_CHAR.sub(r"\1", result)


def decode_verbatim(text: str) -> str:
    """Undo special-character escaping only (URLs, DOIs)."""
    if not text:
        return text
    return _ESCAPED.sub(r"\1", text)


def _encode_char(char: str) -> str:
    if char in SYMBOL_TO_LATEX:
        return f"{{\\{SYMBOL_TO_LATEX[char]}}}"

    decomposed = unicodedata.normalize("NFD", char)
    if len(decomposed) == 2 and decomposed[1] in COMBINING_TO_ACCENT:
        base = decomposed[0]
        if base in "ij" and decomposed[1] != ACCENTS["c"]:
            base = f"\\{base}"
        return f"\\{COMBINING_TO_ACCENT[decomposed[1]]}{{{base}}}"

    return char


def escape_stray_braces(text: str) -> str:
    """Escape braces that have no partner as ``\\{`` and ``\\}``.

    Balanced groups are kept since they carry meaning in BibTeX values.
    Characters after a backslash are never counted.
    """
    stray = set()
    opened = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            opened.append(i)
        elif char == "}":
            if opened:
                opened.pop()
            else:
                stray.add(i)
        i += 1
    stray.update(opened)
    if not stray:
        return text
    return "".join(f"\\{c}" if pos in stray else c for pos, c in enumerate(text))


def encode_latex(text: str) -> str:
    """Encode Unicode text as LaTeX.

    Special characters are escaped first. Balanced braces and backslashes
    are left alone since they carry meaning in BibTeX values, while stray
    braces are escaped so the value stays one group. Characters without a
    LaTeX form pass through as UTF-8.
    """
    if not text:
        return text

    result = re.sub(rf"(?<!\\)([{re.escape(SPECIAL_CHARS)}])", r"\\\1", text)
    for latex, char in PUNCTUATION:
        result = result.replace(char, latex)
    result = result.replace("\u00a0", "~")
    result = "".join(_encode_char(c) if ord(c) > 127 else c for c in result)
    return escape_stray_braces(result)


def encode_verbatim(text: str) -> str:
    """Escape only what would break a braced value (URLs, DOIs)."""
    if not text:
        return text
    return escape_stray_braces(re.sub(r"(?<!\\)([%#])", r"\\\1", text))


def has_latex_commands(text: str) -> bool:
    """Check if text contains LaTeX commands."""
    if not text:
        return False
    return bool(_COMMAND.search(text))


def strip_latex(text: str) -> str:
    """Reduce LaTeX markup to plain text.

    Known commands are decoded, unknown ``\\cmd{arg}`` wrappers keep their
    argument, and remaining commands are dropped.
    """
    if not text:
        return text

    result = decode_latex(text)

    previous = None
    while previous != result:
        previous = result
        result = re.sub(r"\\[a-zA-Z]+\{([^{}]*)\}", r"\1", result)

    result = re.sub(r"\\[a-zA-Z]+", "", result)
    result = re.sub(r"\\(.)", r"\1", result)
    result = result.replace("{", "").replace("}", "")
    return re.sub(r"\s+", " ", result).strip()


def protect_text(text: str) -> str:
    """Brace acronyms so BibTeX styles keep their capitalization."""
    if not text:
        return text
    return re.sub(r"(?<!\{)\b([A-Z]{2,})\b(?!\})", r"{\1}", text)


def unprotect_text(text: str) -> str:
    """Remove one level of protective braces."""
    if not text:
        return text
    return re.sub(r"\{([^{}]+)\}", r"\1", text)

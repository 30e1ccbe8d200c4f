"""Hand-rolled JSON string escaping and targeted field extraction.

Provider responses are not parsed as whole documents. ``extract_json_field``
finds the first occurrence of a quoted field name and reads the string value
that follows it, which tolerates truncated or otherwise irregular bodies
around the field we care about.
"""

from __future__ import annotations

import string

_ESCAPES: dict[str, str] = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

_UNESCAPES: dict[str, str] = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
}

_HEX_DIGITS = frozenset(string.hexdigits)


def escape_json_string(text: str) -> str:
    """Escape ``text`` for embedding inside a JSON string literal.

    Quote, backslash and the named whitespace controls get their short
    escapes; any other character below 0x20 becomes ``\\u00xx``. Everything
    else, including non-ASCII, passes through unchanged.
    """
    if not text:
        return ""

    parts: list[str] = []
    for ch in text:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
        elif ord(ch) < 0x20:
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(ch)
    return "".join(parts)


def _read_hex4(text: str, pos: int) -> int | None:
    """Return the code unit encoded by the four hex digits at ``pos``."""
    digits = text[pos:pos + 4]
    if len(digits) != 4 or not all(c in _HEX_DIGITS for c in digits):
        return None
    return int(digits, 16)


def extract_json_string(text: str, start: int) -> str | None:
    """Read a JSON string body beginning at ``start`` (just past the quote).

    Returns the unescaped value, or None when the closing quote is never
    found. Unknown escapes are kept verbatim (backslash included) and an
    invalid ``\\u`` escape is kept as a literal ``\\u``.
    """
    out: list[str] = []
    i = start
    length = len(text)

    while i < length:
        ch = text[i]

        if ch == '"':
            return "".join(out)

        if ch != "\\" or i + 1 >= length:
            out.append(ch)
            i += 1
            continue

        i += 1
        escaped = text[i]
        simple = _UNESCAPES.get(escaped)
        if simple is not None:
            out.append(simple)
        elif escaped == "u":
            # Require at least one character after the digits, i.e. the closing quote
            code = _read_hex4(text, i + 1) if i + 4 < length else None
            if code is None:
                out.append("\\u")
            else:
                i += 4
                if 0xD800 <= code <= 0xDBFF and text[i + 1:i + 3] == "\\u" and i + 6 < length:
                    low = _read_hex4(text, i + 3)
                    if low is not None and 0xDC00 <= low <= 0xDFFF:
                        code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                        i += 6
                out.append(chr(code))
        else:
            out.append("\\")
            out.append(escaped)
        i += 1

    return None


def unescape_json_string(body: str) -> str:
    """Unescape the complete body of a JSON string literal (without quotes)."""
    # A well-formed body has no bare quote, so the appended one closes it.
    result = extract_json_string(body + '"', 0)
    return result if result is not None else body


def extract_json_field(text: str, field: str) -> str | None:
    """Return the string value of the first ``"field"`` in ``text``.

    Returns None if the field is absent, not followed by a colon, its value
    is not a string, or the string is never closed.
    """
    if not text or not field:
        return None

    pattern = f'"{field}"'
    field_index = text.find(pattern)
    if field_index < 0:
        return None

    colon_index = text.find(":", field_index + len(pattern))
    if colon_index < 0:
        return None

    value_start = colon_index + 1
    while value_start < len(text) and text[value_start].isspace():
        value_start += 1

    if value_start >= len(text) or text[value_start] != '"':
        return None

    return extract_json_string(text, value_start + 1)

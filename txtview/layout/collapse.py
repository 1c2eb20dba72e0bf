"""Derive the "ignore linebreaks" text from a document.

The derived buffer has exactly the length of the source and maps byte for
byte, so line records built over it can be rendered without any offset
translation. Line terminators are single ASCII bytes in UTF-8, so rewriting
them never touches a multi-byte sequence.
"""

from __future__ import annotations

_TERMINATORS = frozenset(b"\r\n")
_LF = 0x0A
_SPACE = 0x20


def collapse(text: bytes) -> bytes:
    """Turn single line breaks into spaces while keeping paragraph breaks.

    Scanning left to right:

    * a terminator followed by another terminator emits ``\\n``;
    * a lone terminator emits ``\\n`` if the previously emitted byte was
      ``\\n`` and a space otherwise;
    * any other byte is copied.

    A run of two or more terminators therefore becomes the same number of
    ``\\n`` bytes, and ``\\r\\n`` counts as such a run.
    """
    out = bytearray(text)
    last = 0
    end = len(text)
    for idx, byte in enumerate(text):
        if byte in _TERMINATORS:
            if idx + 1 < end and text[idx + 1] in _TERMINATORS:
                byte = _LF
            elif last != _LF:
                byte = _SPACE
            else:
                byte = _LF
        out[idx] = byte
        last = byte
    return bytes(out)

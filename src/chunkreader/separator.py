"""Byte separator presets and the scanning primitives used to split chunks.

These functions are pure: they look only at their arguments and perform no I/O.
"""

from enum import Enum

from chunkreader.types import ByteSequence


class Separator(bytes, Enum):
    """Common byte patterns that mark the end of a logical chunk.

    Members are ``bytes`` instances and can be passed directly as the
    ``separator`` option of a reader.

    Values:
        CR: Carriage return (0x0D)
        LF: Line feed (0x0A)
        CRLF: Carriage return followed by line feed (0x0D 0x0A)
        NULL_TERMINATOR: NUL byte (0x00)

    Example:
        >>> Separator.CRLF == b"\\r\\n"
        True
        >>> Separator.from_name("nul") is Separator.NULL_TERMINATOR
        True
    """

    CR = b"\r"
    LF = b"\n"
    CRLF = b"\r\n"
    NULL_TERMINATOR = b"\x00"

    @classmethod
    def from_name(cls, name: str) -> "Separator":
        """Look up a preset by its command-line name.

        Args:
            name: One of ``cr``, ``lf``, ``crlf`` or ``nul`` (case-insensitive).

        Returns:
            The matching preset.

        Raises:
            ValueError: If the name does not denote a preset.
        """
        aliases = {
            "cr": cls.CR,
            "lf": cls.LF,
            "crlf": cls.CRLF,
            "nul": cls.NULL_TERMINATOR,
            "null": cls.NULL_TERMINATOR,
        }
        try:
            return aliases[name.lower()]
        except KeyError:
            raise ValueError(f"Unknown separator '{name}'. Must be one of: cr, lf, crlf, nul") from None


def find_separator(buffer: ByteSequence, separator: ByteSequence, start: int = 0) -> int:
    """Locate the first occurrence of a separator in a buffer.

    The search is an exact byte comparison. When several occurrences exist, the
    one with the lowest starting index wins, including overlapping candidates
    (searching ``b"\\r\\r\\n"`` for ``b"\\r\\n"`` reports index 1).

    Args:
        buffer: The bytes to search.
        separator: The non-empty pattern to look for.
        start: Index in ``buffer`` at which the search begins.

    Returns:
        The index of the first byte of the leftmost match, or -1 if the pattern does
        not occur at or after ``start``.

    Raises:
        ValueError: If ``separator`` is empty.

    Example:
        >>> find_separator(b"abc\\r\\ndef", b"\\r\\n")
        3
        >>> find_separator(b"abc", b"\\n")
        -1
    """
    if len(separator) == 0:
        raise ValueError("Separator must not be empty")
    return bytes(buffer).find(bytes(separator), start)


def ends_with_separator(buffer: ByteSequence, separator: ByteSequence) -> bool:
    """Check whether the final bytes of a buffer equal the separator exactly.

    A buffer shorter than the separator never matches.
    """
    size = len(separator)
    if size == 0 or len(buffer) < size:
        return False
    offset = len(buffer) - size
    for i in range(size - 1, -1, -1):
        if buffer[offset + i] != separator[i]:
            return False
    return True


def trim_separator(buffer: ByteSequence, separator: ByteSequence) -> bytes:
    """Remove a trailing separator from a buffer.

    The buffer is returned unmodified when its tail does not match the separator
    byte for byte.

    Example:
        >>> trim_separator(b"abc\\r\\n", b"\\r\\n")
        b'abc'
        >>> trim_separator(b"abc\\r", b"\\r\\n")
        b'abc\\r'
    """
    if ends_with_separator(buffer, separator):
        return bytes(buffer[: len(buffer) - len(separator)])
    return bytes(buffer)

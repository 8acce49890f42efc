"""
Fixed-width hex identifiers.

Attestation types and source ids travel as 32-byte values: the UTF-8 bytes
of a short label, left-justified and zero-padded on the right, e.g.::

    "Payment" -> 0x5061796d656e7400000000000000000000000000000000000000000000000000

XRPL memos that carry a standard payment reference use the same padding.
"""

IDENTIFIER_BYTES = 32
IDENTIFIER_HEX_DIGITS = IDENTIFIER_BYTES * 2


def pad_hex(hex_digits: str) -> str:
    """Right-pad raw hex digits (no ``0x``) with zeros to 32 bytes.

    Raises:
        ValueError: If the digits already exceed 32 bytes.
    """
    if len(hex_digits) > IDENTIFIER_HEX_DIGITS:
        raise ValueError(
            f"Hex value is {len(hex_digits) // 2} bytes, "
            f"limit is {IDENTIFIER_BYTES}"
        )
    return hex_digits.ljust(IDENTIFIER_HEX_DIGITS, "0")


def encode(text: str) -> str:
    """Encode *text* as a ``0x``-prefixed 32-byte hex identifier.

    The result is always 66 characters long.

    Raises:
        ValueError: If the UTF-8 encoding of *text* is longer than 32 bytes.
    """
    return "0x" + pad_hex(text.encode("utf-8").hex())


def decode(value: str) -> str:
    """Decode a hex identifier back to text.

    Accepts an optional ``0x``/``0X`` prefix and hex digits in either case.
    Trailing zero padding is removed.

    Raises:
        ValueError: If *value* is not valid hex or not valid UTF-8.
    """
    digits = value[2:] if value[:2].lower() == "0x" else value
    raw = bytes.fromhex(digits)
    return raw.rstrip(b"\x00").decode("utf-8")

"""
Helpers for reinterpreting fixed-width signed integers as unsigned.

Frame decoders for unsigned types read the value as signed first (like a C cast or a Java primitive read would) and then
pass it through one of these. Since Python ints are arbitrary precision, the result for every width, 64-bit included,
is a plain `int` in the range ``[0, 2**n_bits - 1]``.
"""


def to_unsigned(value: int, n_bits: int) -> int:
    """
    Reinterprets a signed `n_bits`-wide integer as unsigned, e.g. ``to_unsigned(-1, 16) == 65535``.

    Non-negative values within range are returned unchanged. Values outside the signed range of the width are rejected,
    as they cannot have come from a read of that width.
    """
    if n_bits < 1:
        raise ValueError(f"Bit width must be at least 1 (is: {n_bits})")

    half_range = 1 << (n_bits - 1)

    if not (-half_range <= value < half_range):
        raise ValueError(f"Value {value} does not fit in a signed {n_bits}-bit integer")

    return value & ((1 << n_bits) - 1)


def byte_to_ubyte(value: int) -> int:
    return to_unsigned(value, 8)


def short_to_ushort(value: int) -> int:
    return to_unsigned(value, 16)


def int_to_uint(value: int) -> int:
    return to_unsigned(value, 32)


def long_to_ulong(value: int) -> int:
    """
    Converts a signed 64-bit value to unsigned. The result may exceed the range of any native 64-bit signed type, so
    consumers that hand it off to fixed-width APIs must be prepared for values up to ``2**64 - 1``.
    """
    return to_unsigned(value, 64)

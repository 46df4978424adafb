"""Fixed-width integers for letcalc. Values behave like a machine word of `bits` bits: literals must fit in the word,
and arithmetic wraps around on overflow using two's complement rules instead of failing.

Source: https://en.wikipedia.org/wiki/Two%27s_complement
"""

from letcalc.lang.error import GenericException

WORD_BITS = 32


def check_bits(bits):
    """Raises an internal GenericException if bits is not a usable word width."""
    if isinstance(bits, bool) or not isinstance(bits, int) or bits < 1:
        raise GenericException("word width must be a positive integer, got '{}'", str(bits), internal=True)


def bounds(bits=WORD_BITS):
    """Returns (smallest, largest) representable value."""
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def wrap(value, bits=WORD_BITS):
    """Truncates value to bits bits and reinterprets it as a signed integer."""
    modulus = 1 << bits
    value &= modulus - 1
    return value - modulus if value >= modulus >> 1 else value


def number(literal, bits=WORD_BITS):
    """Returns the int value of an Integer token's text. Raises ValueError if literal is not a decimal integer or does
    not fit in bits bits (literals are never wrapped).
    """
    value = int(literal)
    smallest, largest = bounds(bits)
    if not smallest <= value <= largest:
        raise ValueError(f"{literal} out of range for {bits}-bit integers")
    return value

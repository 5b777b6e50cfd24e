"""
Conversion between byte values and the two digit, upper case hex text used on the wire.
"""


def h2b(h):
    """
    :param h: The hex digit to convert to binary, as a character
    :return: A binary value from 0-15, or None if the character is not 0-9 or A-F.
    Lower case digits are not part of the protocol.

    >>> h2b('0')
    0
    >>> h2b('9')
    9
    >>> h2b('A')
    10
    >>> h2b('F')
    15
    >>> h2b('f') is None
    True
    """
    if '0' <= h <= '9':
        return ord(h) - ord('0')
    if 'A' <= h <= 'F':
        return ord(h) - ord('A') + 10
    return None


def b2h(b):
    """ Converts a binary nibble (0-15) to a hex digit
    :param b: the binary value to convert to a hex digit
    :return: the corresponding hex digit
    >>> b2h(0)
    '0'
    >>> b2h(9)
    '9'
    >>> b2h(10)
    'A'
    >>> b2h(15)
    'F'
    """
    return chr(b + (ord('0') if b <= 9 else ord('A') - 10))


def byte2h(b):
    """
    >>> byte2h(0x1A)
    '1A'
    >>> byte2h(3)
    '03'
    """
    return b2h((b >> 4) & 0xF) + b2h(b & 0xF)


def hex2(s, offset=0):
    """
    Decodes the two hex digits at offset into a byte value.

    Decoding is lenient: each position shifts the value left by a nibble, and the first
    character that is not a hex digit (or is past the end of the text) stops the decode,
    leaving the value built so far.

    >>> hex2('1A')
    26
    >>> hex2('RS0112', 2)
    1
    >>> hex2('1G')
    16
    >>> hex2('G1')
    0
    >>> hex2('7')
    112
    """
    result = 0
    for i in range(offset, offset + 2):
        result = (result << 4) & 0xFF
        value = h2b(s[i]) if i < len(s) else None
        if value is None:
            break
        result |= value
    return result

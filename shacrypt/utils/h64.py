"""shacrypt.utils.h64 - hash64 encoding helpers"""
#=================================================================================
#imports
#=================================================================================
#core
from base64 import b64encode
import logging; log = logging.getLogger(__name__)
#site
#pkg
from shacrypt.utils import BASE64_CHARS, HASH64_CHARS
#local
__all__ = [
    "transpose_bytes",
    "encode_bytes",
    "encode_transposed_bytes",
]

#=================================================================================
#char mapping
#=================================================================================
#: translation table, standard base64 alphabet -> hash64 alphabet (by position)
_B64_TO_H64 = bytes.maketrans(BASE64_CHARS.encode("ascii"),
                              HASH64_CHARS.encode("ascii"))

#=================================================================================
#encoding
#=================================================================================
def transpose_bytes(source, offsets):
    "reorder bytes of <source>: result[i] = source[offsets[i]]"
    if len(offsets) != len(source):
        raise ValueError("offsets must have same length as source (%d != %d)" %
                         (len(offsets), len(source)))
    return bytes(source[off] for off in offsets)

def encode_bytes(source, pad_size=0):
    """encode byte string to hash64 format.

    the hash64 flavour used by sha-crypt is little-endian, which is
    the same as running standard base64 over the byte-reversed input,
    translating the alphabet, and reversing the output.
    this function expects <source> to already be in reversed order
    (the sha-crypt transpose maps are laid out that way).
    ``pad_size`` leading NUL bytes fill out the last 24 bit group;
    those (always zero) chars are dropped from the result.

    :arg source: bytes to encode
    :param pad_size: number of NUL bytes to prepend before encoding (and chars to drop after)

    :returns: encoded ascii str
    """
    data = b"\x00" * pad_size + source
    if len(data) % 3:
        raise ValueError("padded source must be multiple of 3 bytes")
    out = b64encode(data).translate(_B64_TO_H64)[pad_size:]
    return out[::-1].decode("ascii")

def encode_transposed_bytes(source, offsets, pad_size=0):
    "encode byte string to hash64 format, first transposing bytes using offset list"
    return encode_bytes(transpose_bytes(source, offsets), pad_size)

#=================================================================================
#eof
#=================================================================================

"""shacrypt utility functions"""
#=================================================================================
#imports
#=================================================================================
#core
from base64 import b64encode
from hmac import compare_digest
import logging; log = logging.getLogger(__name__)
import os
import random
#site
#pkg
from shacrypt.exc import ExpectedStringError, PasswordSizeError, \
                         RandomSourceError
#local
__all__ = [
    #decorators
    "classproperty",

    #bytes<->str
    'to_bytes',
    'to_native_str',

    #string manipulation
    'consteq',
    'repeat_bytes',

    #validation
    'MAX_PASSWORD_SIZE',
    'validate_secret',

    #base64 helpers
    "BASE64_CHARS", "HASH64_CHARS",
    "ab64_encode",

    #random
    'rng',
    'getrandbytes',
]

#=================================================================================
#constants
#=================================================================================

#: maximum password size (in bytes) which will be accepted by the handlers.
# both sha-crypt variants have a step that costs O(len(secret)**2),
# so this needs to stay small.
MAX_PASSWORD_SIZE = int(os.environ.get("SHACRYPT_MAX_PASSWORD_SIZE") or 1024)

BEMPTY = b''

#=================================================================================
#decorators
#=================================================================================
class classproperty(object):
    """Function decorator which acts like a combination of classmethod+property (limited to read-only properties)"""

    def __init__(self, func):
        self.im_func = func

    def __get__(self, obj, cls):
        return self.im_func(cls)

#==========================================================
#bytes <-> str conversion helpers
#==========================================================
def to_bytes(source, encoding="utf-8", errname="value"):
    """helper to encode str -> bytes

    if ``source`` is a str, encodes it using the specified ``encoding``.
    if bytes, returns unchanged.
    all other types result in a :exc:`TypeError`.

    :arg source: source bytes/str to process
    :arg encoding: target character encoding
    :param errname: optional name of variable/noun to reference when raising errors

    :returns: bytes object
    """
    if isinstance(source, bytes):
        return source
    elif isinstance(source, str):
        return source.encode(encoding)
    else:
        raise ExpectedStringError(source, errname)

def to_native_str(source, encoding="utf-8", errname="value"):
    "take in str or bytes, return str (decoding bytes using ``encoding``)"
    if isinstance(source, bytes):
        return source.decode(encoding)
    elif isinstance(source, str):
        return source
    else:
        raise ExpectedStringError(source, errname)

#=================================================================================
#string helpers
#=================================================================================

#: constant-time comparison of two str or two bytes objects.
# runtime depends only on the length of the inputs, not their contents.
consteq = compare_digest

def repeat_bytes(source, size):
    """repeat or truncate <source> so that it's exactly <size> bytes long.

    e.g. ``repeat_bytes(b"abc", 7) == b"abcabca"``
    """
    if not source:
        if size:
            raise ValueError("can't repeat empty source to non-zero size")
        return BEMPTY
    mult = 1 + (size - 1) // len(source)
    return (source * mult)[:size]

def validate_secret(secret, max_size=None):
    """normalize secret to bytes, and enforce :data:`MAX_PASSWORD_SIZE`.

    str secrets are encoded as utf-8.

    :raises TypeError: if secret isn't str or bytes.
    :raises shacrypt.exc.PasswordSizeError: if secret is too large.

    :returns: secret as bytes
    """
    secret = to_bytes(secret, errname="secret")
    if max_size is None:
        max_size = MAX_PASSWORD_SIZE
    if len(secret) > max_size:
        raise PasswordSizeError(max_size)
    return secret

#=================================================================================
#base64 helpers
#=================================================================================
BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
HASH64_CHARS = "./0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

_A64_ALTCHARS = b"./"
_A64_STRIP = b"=\n"

def ab64_encode(data):
    """encode using variant of base64

    the output of this function is identical to b64_encode,
    except that it uses ``.`` instead of ``+``,
    and omits trailing padding ``=`` and whitepsace.

    it is used to turn raw salt bytes into a salt string;
    12 bytes encode to exactly 16 chars.
    """
    return b64encode(data, _A64_ALTCHARS).strip(_A64_STRIP)

#=================================================================================
#randomness
#=================================================================================

#NOTE: salts need to be unpredictable, so the os-backed rng is used;
# there's no fallback to a seeded prng.
rng = random.SystemRandom()

def getrandbytes(rng, count):
    """return byte-string containing *count* number of randomly generated bytes, using specified rng

    :raises shacrypt.exc.RandomSourceError:
        if the rng can't provide random data.
    """
    if not count:
        return BEMPTY
    try:
        value = rng.getrandbits(count << 3)
    except (NotImplementedError, OSError) as err:
        raise RandomSourceError("random source failed: %s" % (err,)) from err
    return value.to_bytes(count, "little")

#=================================================================================
#eof
#=================================================================================

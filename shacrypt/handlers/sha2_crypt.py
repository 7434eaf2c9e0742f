"""shacrypt.handlers.sha2_crypt - SHA256-Crypt / SHA512-Crypt"""
#=========================================================
#imports
#=========================================================
#core
from collections import namedtuple
from hashlib import sha256, sha512
import re
import logging; log = logging.getLogger(__name__)
#site
#libs
from shacrypt.exc import InvalidHashError, MalformedHashError, \
                         ZeroPaddedRoundsError
from shacrypt.utils import repeat_bytes, to_native_str
from shacrypt.utils import h64
import shacrypt.utils.handlers as uh
#pkg
#local
__all__ = [
    "ShaCryptVariant",
    "SHA256_VARIANT",
    "SHA512_VARIANT",
    "raw_sha_crypt",
    "sha256_crypt",
    "sha512_crypt",
]

#=========================================================
#variant configuration
#=========================================================

#: everything that differs between sha256-crypt and sha512-crypt.
#:
#: * digest - hashlib constructor
#: * digest_size - size of raw digest in bytes
#: * ident - hash prefix
#: * pad_size - number of NUL bytes needed to make digest_size a multiple of 3
#: * transpose_map - order bytes of final digest are written out in
#: * min_desired_rounds - lowest rounds used for new hashes
#: * default_rounds - rounds used for new hashes if none requested
#: * checksum_size - size of encoded checksum
ShaCryptVariant = namedtuple("ShaCryptVariant", [
    "name", "digest", "digest_size", "ident", "pad_size", "transpose_map",
    "min_desired_rounds", "default_rounds", "checksum_size",
])

# NOTE: min_desired_rounds keeps a current gpu (rtx 3080 class) under
# 25k guesses/sec; revise as hardware improves.
SHA256_VARIANT = ShaCryptVariant(
    name="sha256_crypt",
    digest=sha256,
    digest_size=32,
    ident="$5$",
    pad_size=1,
    transpose_map=(
        31, 30,
         9, 19, 29, 18, 28,  8, 27,  7, 17,
         6, 16, 26, 15, 25,  5, 24,  4, 14,
         3, 13, 23, 12, 22,  2, 21,  1, 11,
         0, 10, 20,
    ),
    min_desired_rounds=140000,
    default_rounds=330000,
    checksum_size=43,
)

SHA512_VARIANT = ShaCryptVariant(
    name="sha512_crypt",
    digest=sha512,
    digest_size=64,
    ident="$6$",
    pad_size=2,
    transpose_map=(
        63,
        62, 20, 41, 40, 61, 19, 18, 39, 60,
        59, 17, 38, 37, 58, 16, 15, 36, 57,
        56, 14, 35, 34, 55, 13, 12, 33, 54,
        53, 11, 32, 31, 52, 10,  9, 30, 51,
        50,  8, 29, 28, 49,  7,  6, 27, 48,
        47,  5, 26, 25, 46,  4,  3, 24, 45,
        44,  2, 23, 22, 43,  1,  0, 21, 42,
    ),
    min_desired_rounds=75000,
    default_rounds=190000,
    checksum_size=86,
)

#=========================================================
#pure-python implementation (shared between sha256-crypt & sha512-crypt)
#=========================================================

#: max bytes fed to the digest per update() call when hashing
#: the password repeated len(password) times.
_DOS_CHUNK_SIZE = 2048

#: the 42-round pattern of the C digest, one entry per round,
#: as (left operand, right operand). "h" is the running digest;
#: the other keys name the combinations built by _derive_strings().
#: lcm(2,3,7) == 42, so round i uses the same data as round i % 42;
#: see _tail_round_data() for the rule this table was generated from.
_GROUP_STEPS = (
    ("h", "p"),   ("psp", "h"), ("h", "spp"), ("pp", "h"),  ("h", "spp"), ("psp", "h"),
    ("h", "pp"),  ("ps", "h"),  ("h", "spp"), ("pp", "h"),  ("h", "spp"), ("psp", "h"),
    ("h", "pp"),  ("psp", "h"), ("h", "sp"),  ("pp", "h"),  ("h", "spp"), ("psp", "h"),
    ("h", "pp"),  ("psp", "h"), ("h", "spp"), ("p", "h"),   ("h", "spp"), ("psp", "h"),
    ("h", "pp"),  ("psp", "h"), ("h", "spp"), ("pp", "h"),  ("h", "sp"),  ("psp", "h"),
    ("h", "pp"),  ("psp", "h"), ("h", "spp"), ("pp", "h"),  ("h", "spp"), ("ps", "h"),
    ("h", "pp"),  ("psp", "h"), ("h", "spp"), ("pp", "h"),  ("h", "spp"), ("psp", "h"),
)

def _iter_bits(value):
    "yield bits of non-negative int <value>, least significant first"
    for shift in range(value.bit_length()):
        yield (value >> shift) & 1

def _initial_digest(secret, salt, digest):
    "calc digest B: H(secret + salt + secret)"
    return digest(secret + salt + secret).digest()

def _mixed_digest(secret, salt, db, digest):
    "calc digest A from secret, salt & digest B"
    ctx = digest(secret + salt)
    ctx.update(repeat_bytes(db, len(secret)))
    #for each bit in len(secret), add B or SECRET
    for bit in _iter_bits(len(secret)):
        if bit:
            ctx.update(db)
        else:
            ctx.update(secret)
    return ctx.digest()

def _dos_digest(secret, digest):
    """calc H(secret * len(secret)) without building the whole string.

    cost is O(len(secret)**2), which is why the password size is capped.
    """
    size = len(secret)
    ctx = digest()
    if size:
        count = max(1, min(_DOS_CHUNK_SIZE // size, size))
        chunk = secret * count
        blocks, tail = divmod(size, count)
        for _ in range(blocks):
            ctx.update(chunk)
        if tail:
            ctx.update(secret * tail)
    return ctx.digest()

def _derive_strings(secret, salt, da, digest):
    """calc DP & DS, and the combinations of them used by the C digest.

    :returns: dict mapping operand keys (as used in _GROUP_STEPS) to bytes
    """
    dp = repeat_bytes(_dos_digest(secret, digest), len(secret))
    ds = digest(salt * (16 + da[0])).digest()[:len(salt)]
    return dict(
        p=dp,
        pp=dp + dp,
        ps=dp + ds,
        sp=ds + dp,
        psp=dp + ds + dp,
        spp=ds + dp + dp,
        s=ds,
    )

def _tail_round_data(i):
    """return (left, right) operand keys for round <i> of the C digest

    round i hashes:
    (DP if i is odd else C) + (DS if i % 3) + (DP if i % 7) + (C if i is odd else DP)
    """
    middle = ("s" if i % 3 else "") + ("p" if i % 7 else "")
    if i & 1:
        return "p" + middle, "h"
    return "h", middle + "p"

def _mix_rounds(da, data, rounds, hashfunc):
    """calc digest C, performing exactly <rounds> calls to <hashfunc>.

    :arg da: digest A (starting value)
    :arg data: dict returned by _derive_strings()
    :arg rounds: number of rounds (>= 1)
    :arg hashfunc: function mapping bytes -> raw digest bytes
    """
    # resolve the fixed 42-round pattern once; each entry is
    # (digest goes first?, other operand).
    steps = [(left == "h", data[right] if left == "h" else data[left])
             for left, right in _GROUP_STEPS]

    c = da
    groups = (rounds - 1) // 42
    for _ in range(groups):
        for c_first, other in steps:
            if c_first:
                c = hashfunc(c + other)
            else:
                c = hashfunc(other + c)

    # leftover rounds (1..42 of them)
    for i in range(42 * groups, rounds):
        left, right = _tail_round_data(i)
        if left == "h":
            c = hashfunc(c + data[right])
        else:
            c = hashfunc(data[left] + c)
    return c

def raw_sha_crypt(secret, salt, rounds, variant):
    """perform raw sha256-crypt / sha512-crypt

    :arg secret: password, as bytes
    :arg salt: salt string, as ascii bytes (0-16 chars, normally 16)
    :arg rounds: number of rounds (no clamping is done here)
    :arg variant: :class:`ShaCryptVariant` to use

    :returns: encoded checksum (43 / 86 char str)
    """
    if not isinstance(secret, bytes):
        raise TypeError("secret must be encoded as bytes")
    if not isinstance(salt, bytes):
        raise TypeError("salt must be encoded as bytes")
    if rounds < 1:
        raise ValueError("rounds must be >= 1")
    digest = variant.digest

    db = _initial_digest(secret, salt, digest)
    da = _mixed_digest(secret, salt, db, digest)
    data = _derive_strings(secret, salt, da, digest)

    def hashfunc(value):
        return digest(value).digest()
    dc = _mix_rounds(da, data, rounds, hashfunc)

    out = h64.encode_transposed_bytes(dc, variant.transpose_map,
                                      variant.pad_size)
    assert len(out) == variant.checksum_size, "wrong length: %r" % (out,)
    return out

#=========================================================
#handler
#=========================================================
class _ShaCryptCommon(uh.HasRounds, uh.HasSalt, uh.GenericHandler):
    "class containing common code shared by sha256_crypt & sha512_crypt"
    #=========================================================
    #class attrs
    #=========================================================
    #--variant--
    variant = None # required - ShaCryptVariant

    #--GenericHandler--
    setting_kwds = ("salt", "rounds", "implicit_rounds")
    checksum_chars = uh.HASH64_CHARS

    #--HasSalt--
    min_salt_size = 0
    max_salt_size = 16
    salt_chars = uh.HASH64_CHARS

    #--HasRounds--
    min_rounds = 1000 # bounds set by format
    max_rounds = 999999999 # bounds set by format

    #: rounds value implied when a hash omits the rounds field
    implicit_rounds_value = 5000

    #=========================================================
    #init
    #=========================================================
    def __init__(self, implicit_rounds=False, **kwds):
        self.implicit_rounds = implicit_rounds
        super(_ShaCryptCommon, self).__init__(**kwds)

    #=========================================================
    #parsing
    #=========================================================

    #: regexp used to parse hashes, after the ident has been stripped
    _hash_regex = re.compile(r"""
        ^
        (rounds=(?P<rounds>\d+)\$)?
        (?P<salt>[^:$\n]*)
        (\$(?P<chk>[^:$\n]*))?
        \Z
        """, re.X)

    @classmethod
    def from_string(cls, hash):
        hash = to_native_str(hash, "ascii", errname="hash")
        ident = cls.ident
        if not hash.startswith(ident):
            raise InvalidHashError(cls)
        m = cls._hash_regex.match(hash[len(ident):])
        if not m:
            raise MalformedHashError(cls)
        rounds, salt, chk = m.group("rounds", "salt", "chk")
        if rounds and rounds.startswith("0"):
            raise ZeroPaddedRoundsError(cls)
        return cls(
            implicit_rounds=not rounds,
            rounds=int(rounds) if rounds else cls.implicit_rounds_value,
            salt=salt,
            checksum=chk or None,
            relaxed=not chk, # NOTE: relaxing parsing for config strings,
                             # since the reference implementation treats them this
                             # way (at least for the rounds value)
        )

    def to_string(self):
        if self.rounds == self.implicit_rounds_value and self.implicit_rounds:
            hash = "%s%s" % (self.ident, self.salt)
        else:
            hash = "%srounds=%d$%s" % (self.ident, self.rounds, self.salt)
        if self.checksum:
            hash = "%s$%s" % (hash, self.checksum)
        return hash

    #=========================================================
    #backend
    #=========================================================
    def calc_checksum(self, secret):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        return raw_sha_crypt(secret, self.salt.encode("ascii"), self.rounds,
                             self.variant)

    #=========================================================
    #eoc
    #=========================================================

#=========================================================
#sha 256 crypt
#=========================================================
class sha256_crypt(_ShaCryptCommon):
    """This class implements the SHA256-Crypt password hash.

    It supports a variable-length salt, and a variable number of rounds.

    The :meth:`encrypt()` and :meth:`genconfig` methods accept the following optional keywords:

    :param salt:
        Optional salt string.
        If not specified, a 16 character one will be autogenerated (this is recommended).
        If specified, it must be 0-16 characters, drawn from the regexp range ``[./0-9A-Za-z]``.

    :param rounds:
        Optional number of rounds to use.
        Defaults to 330000. Values below 140000 are raised to 140000,
        values above 999999999 are lowered to 999999999.

    Existing hashes with any rounds value from 1000 to 999999999 can be verified,
    including ones using the implicit ``rounds=5000`` form.

    .. warning::

        This hash is only provided so existing hashes can be checked
        and migrated. bcrypt or argon2 should be used for new applications.
    """
    #=========================================================
    #algorithm information
    #=========================================================
    variant = SHA256_VARIANT

    name = variant.name
    ident = variant.ident
    checksum_size = variant.checksum_size

    default_rounds = variant.default_rounds
    min_desired_rounds = variant.min_desired_rounds

#=========================================================
#sha 512 crypt
#=========================================================
class sha512_crypt(_ShaCryptCommon):
    """This class implements the SHA512-Crypt password hash.

    It supports a variable-length salt, and a variable number of rounds.

    The :meth:`encrypt()` and :meth:`genconfig` methods accept the following optional keywords:

    :param salt:
        Optional salt string.
        If not specified, a 16 character one will be autogenerated (this is recommended).
        If specified, it must be 0-16 characters, drawn from the regexp range ``[./0-9A-Za-z]``.

    :param rounds:
        Optional number of rounds to use.
        Defaults to 190000. Values below 75000 are raised to 75000,
        values above 999999999 are lowered to 999999999.

    Existing hashes with any rounds value from 1000 to 999999999 can be verified,
    including ones using the implicit ``rounds=5000`` form.
    """
    variant = SHA512_VARIANT

    name = variant.name
    ident = variant.ident
    checksum_size = variant.checksum_size

    default_rounds = variant.default_rounds
    min_desired_rounds = variant.min_desired_rounds

#=========================================================
#eof
#=========================================================

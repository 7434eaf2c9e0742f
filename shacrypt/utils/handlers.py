"""shacrypt.utils.handlers - framework for implementing password hash handlers"""
#=========================================================
#imports
#=========================================================
#core
import logging; log = logging.getLogger(__name__)
from warnings import warn
#site
#libs
from shacrypt.exc import ChecksumSizeError, ExpectedTypeError, \
                         MissingDigestError, ShacryptHashWarning
from shacrypt.utils import ab64_encode, classproperty, consteq, \
                           getrandbytes, rng, to_native_str, validate_secret, \
                           HASH64_CHARS
#pkg
#local
__all__ = [
    #framework for implementing handlers
    'GenericHandler',
        'HasSalt',
        'HasRounds',

    #helpers
    'identify_prefix',
    'HASH64_CHARS',
]

#=========================================================
#identify helpers
#=========================================================
def identify_prefix(hash, prefix):
    "identify() helper for matching against prefixes"
    #NOTE: prefix may be a tuple of strings (since startswith supports that)
    if not hash:
        return False
    if isinstance(hash, bytes):
        try:
            hash = hash.decode("ascii")
        except UnicodeDecodeError:
            return False
    elif not isinstance(hash, str):
        return False
    return hash.startswith(prefix)

#=====================================================
#GenericHandler
#=====================================================
class GenericHandler(object):
    """helper class for implementing hash handlers.

    :param checksum:
        this should contain the digest portion of a
        parsed hash (mainly provided when the constructor is called
        by :meth:`from_string()`).
        defaults to ``None``.

    :param use_defaults:
        If ``False`` (the default), a :exc:`TypeError` should be thrown
        if any settings required by the handler were not explicitly provided.

        If ``True``, the handler should attempt to provide a default for any
        missing values. This means generate missing salts, fill in default
        cost parameters, etc.

        This is typically only set to ``True`` when the constructor
        is called by :meth:`encrypt`, allowing user-provided values
        to be handled in a more permissive manner.

    :param relaxed:
        If ``False`` (the default), a :exc:`ValueError` should be thrown
        if any settings are out of bounds or otherwise invalid.

        If ``True``, they should be corrected if possible, and a warning
        issued. If not possible, only then should an error be raised.

        This is mainly used when parsing config strings,
        whose reference implementation is tolerant
        of incorrect values.

    Class Attributes
    ================

    .. attribute:: ident

        If this attribute is filled in, the default :meth:`identify` method will use
        it as a identifying prefix that can be used to recognize instances of this handler's
        hash.

    .. attribute:: checksum_size

        [optional]
        Specifies the number of characters that should be expected in the checksum string.
        If omitted, no check will be performed.

    .. attribute:: checksum_chars

        [optional]
        A string listing all the characters allowed in the checksum string.
        If omitted, no check will be performed.

    .. attribute:: max_password_size

        [optional]
        Largest secret (in bytes) accepted by :meth:`encrypt`, :meth:`genhash`
        and :meth:`verify`. Defaults to :data:`shacrypt.utils.MAX_PASSWORD_SIZE`.

    Required Methods
    ================
    The following methods must be provided by handler subclass:

    .. automethod:: from_string
    .. automethod:: to_string
    .. automethod:: calc_checksum
    """

    #=====================================================
    #class attr
    #=====================================================
    name = None #required - handler name
    setting_kwds = ()

    ident = None #identifier prefix if known

    checksum_size = None #if specified, _norm_checksum will require this length
    checksum_chars = None #if specified, _norm_checksum() will validate this

    max_password_size = None

    #=====================================================
    #instance attrs
    #=====================================================
    checksum = None # stores checksum

    #=====================================================
    #init
    #=====================================================
    def __init__(self, checksum=None, use_defaults=False, relaxed=False,
                 **kwds):
        self.use_defaults = use_defaults
        self.relaxed = relaxed
        super(GenericHandler, self).__init__(**kwds)
        self.checksum = self._norm_checksum(checksum)

    def _norm_checksum(self, checksum):
        """validates checksum keyword against class requirements,
        returns normalized version of checksum.
        """
        if checksum is None:
            return None

        # normalize to str
        if isinstance(checksum, bytes):
            checksum = checksum.decode('ascii')
        elif not isinstance(checksum, str):
            raise ExpectedTypeError(checksum, "str", "checksum")

        # check size
        cc = self.checksum_size
        if cc and len(checksum) != cc:
            raise ChecksumSizeError(self)

        # check charset
        cs = self.checksum_chars
        if cs:
            bad = set(checksum)
            bad.difference_update(cs)
            if bad:
                raise ValueError("invalid characters in %s checksum: %r" %
                                 (self.name, "".join(sorted(bad))))

        return checksum

    @classmethod
    def _validate_secret(cls, secret):
        "normalize secret to bytes, enforcing password size limit"
        return validate_secret(secret, cls.max_password_size)

    #=====================================================
    #password hash api - formatting interface
    #=====================================================
    @classmethod
    def identify(cls, hash):
        assert cls.ident, "class must define ident"
        return identify_prefix(hash, cls.ident)

    @classmethod
    def from_string(cls, hash): #pragma: no cover
        """return parsed instance from hash/configuration string

        :raises ValueError: if hash is incorrectly formatted

        :returns:
            hash parsed into components,
            for formatting / calculating checksum.
        """
        raise NotImplementedError("%s must implement from_string()" % (cls,))

    def to_string(self): #pragma: no cover
        """render instance to hash or configuration string

        :returns:
            if :attr:`checksum` is set, should return full hash string.
            if not, should return abbreviated configuration string.
        """
        raise NotImplementedError("%s must implement to_string()" % (type(self),))

    #=========================================================
    #'crypt-style' interface (default implementation)
    #=========================================================
    @classmethod
    def genconfig(cls, **settings):
        return cls(use_defaults=True, **settings).to_string()

    @classmethod
    def genhash(cls, secret, config):
        secret = cls._validate_secret(secret)
        self = cls.from_string(config)
        self.checksum = self.calc_checksum(secret)
        return self.to_string()

    def calc_checksum(self, secret): #pragma: no cover
        "given secret; calcuate and return encoded checksum portion of hash string, taking config from object state"
        raise NotImplementedError("%s must implement calc_checksum()" % (self.__class__,))

    #=========================================================
    #'application' interface (default implementation)
    #=========================================================
    @classmethod
    def encrypt(cls, secret, **settings):
        secret = cls._validate_secret(secret)
        self = cls(use_defaults=True, **settings)
        self.checksum = self.calc_checksum(secret)
        return self.to_string()

    @classmethod
    def verify(cls, secret, hash):
        secret = cls._validate_secret(secret)
        self = cls.from_string(hash)
        chk = self.checksum
        if chk is None:
            raise MissingDigestError(cls)
        return consteq(self.calc_checksum(secret), chk)

    #=========================================================
    #eoc
    #=========================================================

#=====================================================
#GenericHandler mixin classes
#=====================================================
class HasSalt(GenericHandler):
    """mixin for validating salts.

    This :class:`GenericHandler` mixin adds a ``salt`` keyword to the class constuctor;
    any value provided is passed through the :meth:`_norm_salt` method,
    which takes care of validating salt length and content,
    as well as generating new salts if one it not provided.

    :param salt: optional salt string

    Class Attributes
    ================

    .. attribute:: min_salt_size

        The minimum number of characters allowed in a salt string.

    .. attribute:: max_salt_size

        The maximum number of characters allowed in a salt string.
        When ``relaxed=False`` (such as when parsing a hash),
        an :exc:`ValueError` will be throw if the salt is too large.
        When ``relaxed=True`` (such as when parsing a config string),
        the salt will be trimmed to this length, and a warning issued.

    .. attribute:: default_salt_size

        size of the salt generated by :meth:`_generate_salt`.
        defaults to :attr:`max_salt_size`.

    .. attribute:: salt_chars

        A string containing all the characters which are allowed in the salt string.
    """

    #=========================================================
    #class attrs
    #=========================================================
    min_salt_size = 0
    max_salt_size = None
    salt_chars = HASH64_CHARS

    @classproperty
    def default_salt_size(cls):
        "default salt size (defaults to max_salt_size if not specified by subclass)"
        return cls.max_salt_size

    #=========================================================
    #instance attrs
    #=========================================================
    salt = None

    #=========================================================
    #init
    #=========================================================
    def __init__(self, salt=None, **kwds):
        super(HasSalt, self).__init__(**kwds)
        self.salt = self._norm_salt(salt)

    def _norm_salt(self, salt):
        """helper to normalize & validate user-provided salt string

        If no salt provided, a random salt is generated
        using :attr:`default_salt_size`.

        :raises TypeError:
            If salt not provided and ``use_defaults=False``.

        :raises ValueError:

            * if salt contains chars that aren't in :attr:`salt_chars`.
            * if salt contains less than :attr:`min_salt_size` characters.
            * if ``relaxed=False`` and salt has more than :attr:`max_salt_size`
              characters (if ``relaxed=True``, the salt is truncated
              and a warning is issued instead).

        :returns:
            normalized or generated salt
        """
        # generate new salt if none provided
        if salt is None:
            if not self.use_defaults:
                raise TypeError("no salt specified")
            salt = self._generate_salt(self.default_salt_size)

        # check type
        salt = to_native_str(salt, "ascii", errname="salt")

        # check charset
        sc = self.salt_chars
        if sc is not None:
            bad = set(salt)
            bad.difference_update(sc)
            if bad:
                raise ValueError("invalid characters in %s salt: %r" %
                                 (self.name, "".join(sorted(bad))))

        # check min size
        mn = self.min_salt_size
        if mn and len(salt) < mn:
            msg = "salt too small (%s requires %s %d chars)" % (self.name,
                        "exactly" if mn == self.max_salt_size else ">=", mn)
            raise ValueError(msg)

        # check max size
        mx = self.max_salt_size
        if mx and len(salt) > mx:
            msg = "salt too large (%s requires %s %d chars)" % (self.name,
                        "exactly" if mx == mn else "<=", mx)
            if self.relaxed:
                warn(msg, ShacryptHashWarning)
                salt = salt[:mx]
            else:
                raise ValueError(msg)

        return salt

    @classmethod
    def _generate_salt(cls, salt_size):
        """helper method for _norm_salt(); generates a new random salt string.

        draws ``ceil(3 * salt_size / 4)`` bytes from the rng and
        base64-encodes them (``+`` replaced by ``.``), so a 16 char salt
        carries 96 bits. output chars are always within :data:`HASH64_CHARS`.

        :raises shacrypt.exc.RandomSourceError: if the rng fails.
        """
        raw = getrandbytes(rng, (3 * salt_size + 3) // 4)
        salt = ab64_encode(raw)[:salt_size].decode("ascii")
        log.debug("generated %d char salt for %s", len(salt), cls.name)
        return salt

    #=========================================================
    #eoc
    #=========================================================

class HasRounds(GenericHandler):
    """mixin for validating rounds parameter

    This :class:`GenericHandler` mixin adds a ``rounds`` keyword to the class constuctor;
    any value provided is passed through the :meth:`_norm_rounds` method,
    which takes care of validating the number of rounds.

    :param rounds: optional number of rounds hash should use

    Class Attributes
    ================

    .. attribute:: min_rounds

        The minimum number of rounds the *format* allows.
        Parsed hashes below this are rejected
        (or clamped and warned about, under ``relaxed=True``).

    .. attribute:: max_rounds

        The maximum number of rounds the format allows; same handling
        as :attr:`min_rounds`.

    .. attribute:: min_desired_rounds

        [optional]
        The minimum number of rounds used for *new* hashes
        (``use_defaults=True``). Requested values below it are silently
        raised to it; this is policy, not a format limit, and
        is expected to go up as hardware gets faster.
        Defaults to :attr:`min_rounds`.

    .. attribute:: default_rounds

        If no rounds value is provided to constructor, this value will be used.
    """
    #=========================================================
    #class attrs
    #=========================================================
    min_rounds = 0
    max_rounds = None
    min_desired_rounds = None
    default_rounds = None

    #=========================================================
    #instance attrs
    #=========================================================
    rounds = None

    #=========================================================
    #init
    #=========================================================
    def __init__(self, rounds=None, **kwds):
        super(HasRounds, self).__init__(**kwds)
        self.rounds = self._norm_rounds(rounds)

    def _norm_rounds(self, rounds):
        """helper routine for normalizing rounds

        :arg rounds: rounds integer or ``None``

        :raises TypeError:

            * if rounds is ``None`` and ``use_defaults=False``.
            * if rounds isn't an integer.

        :raises ValueError:
            if parsed rounds are outside :attr:`min_rounds` / :attr:`max_rounds`,
            and ``relaxed=False``.

        for new hashes (``use_defaults=True``) the value is clipped to
        :attr:`min_desired_rounds` / :attr:`max_rounds`, without warning.

        :returns:
            normalized rounds value
        """
        # fill in default
        if rounds is None:
            if not self.use_defaults:
                raise TypeError("no rounds specified")
            rounds = self.default_rounds
            if rounds is None:
                raise TypeError("%s rounds value must be specified explicitly"
                                 % (self.name,))

        # check type
        if isinstance(rounds, bool) or not isinstance(rounds, int):
            raise ExpectedTypeError(rounds, "an integer", "rounds")

        mx = self.max_rounds

        # new hash - clamp to policy limits
        if self.use_defaults:
            mn = self.min_desired_rounds
            if mn is None:
                mn = self.min_rounds
            if rounds < mn:
                log.debug("%s: raising rounds from %d to %d",
                          self.name, rounds, mn)
                rounds = mn
            elif mx and rounds > mx:
                log.debug("%s: lowering rounds from %d to %d",
                          self.name, rounds, mx)
                rounds = mx
            return rounds

        # parsed hash - check format limits
        mn = self.min_rounds
        if rounds < mn:
            msg = "rounds too low (%s requires >= %d rounds)"  % (self.name, mn)
            if self.relaxed:
                warn(msg, ShacryptHashWarning)
                rounds = mn
            else:
                raise ValueError(msg)

        if mx and rounds > mx:
            msg = "rounds too high (%s requires <= %d rounds)"  % (self.name, mx)
            if self.relaxed:
                warn(msg, ShacryptHashWarning)
                rounds = mx
            else:
                raise ValueError(msg)

        return rounds

    #=========================================================
    #eoc
    #=========================================================

#=========================================================
#eof
#=========================================================

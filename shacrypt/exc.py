"""shacrypt.exc -- exceptions raised by shacrypt"""
#==========================================================================
# exceptions
#==========================================================================
class PasswordSizeError(ValueError):
    """Error raised if the password provided exceeds the limit set by shacrypt.

    Both SHA-crypt variants contain a step whose cost grows with the
    *square* of the password length, so a maliciously large password
    could be used to tie up the server (CVE-2016-20013).

    Because of this, shacrypt enforces a maximum of 1024 bytes.
    This error will be thrown if a larger password is provided
    to :meth:`encrypt`, :meth:`genhash` or :meth:`verify` of either handler.

    Applications wishing to use a different limit should set the
    ``SHACRYPT_MAX_PASSWORD_SIZE`` environmental variable before shacrypt
    is loaded.
    """
    def __init__(self, max_size=None):
        msg = "password exceeds maximum allowed size"
        if max_size is not None:
            msg = "%s (%d bytes)" % (msg, max_size)
        ValueError.__init__(self, msg)

class RandomSourceError(RuntimeError):
    """Error raised if the random source could not provide bytes for a salt.

    :exc:`!RandomSourceError` derives from :exc:`RuntimeError`,
    since this usually indicates a problem with the host OS
    (e.g. no ``os.urandom`` implementation available).
    The original error is chained as ``__cause__``.
    """

#==========================================================================
# warnings
#==========================================================================
class ShacryptWarning(UserWarning):
    """base class for shacrypt's user warnings"""

class ShacryptHashWarning(ShacryptWarning):
    """Warning issued when non-fatal issue is found with parameters
    or hash string passed to a shacrypt handler.

    This occurs primarily when a configuration string is parsed
    whose salt or rounds value exceeds the format's limits;
    the value is corrected (truncated / clamped) instead of rejected,
    since that's how the format's reference implementation behaves.
    """

#==========================================================================
# error constructors
#
# note: these functions are used by the handlers to raise common
# error messages. They return ValueError / TypeError instances rather
# than subclasses, since the specificity isn't needed; catching
# ValueError will do.
#==========================================================================

def _get_name(handler):
    return handler.name if handler else "<unnamed>"

#----------------------------------------------------------------
# encrypt/verify parameter errors
#----------------------------------------------------------------
def type_name(value):
    "return pretty-printed string containing name of value's type"
    cls = value.__class__
    if cls.__module__ and cls.__module__ != "builtins":
        return "%s.%s" % (cls.__module__, cls.__name__)
    elif value is None:
        return 'None'
    else:
        return cls.__name__

def ExpectedTypeError(value, expected, param):
    "error message when param was supposed to be one type, but found another"
    # NOTE: value is never displayed, since it may sometimes be a password.
    name = type_name(value)
    return TypeError("%s must be %s, not %s" % (param, expected, name))

def ExpectedStringError(value, param):
    "error message when param was supposed to be str or bytes"
    return ExpectedTypeError(value, "str or bytes", param)

def MissingDigestError(handler=None):
    "raised when verify() method gets passed config string instead of hash"
    name = _get_name(handler)
    return ValueError("expected %s hash, got %s config string instead" %
                     (name, name))

#----------------------------------------------------------------
# errors when parsing hashes
#----------------------------------------------------------------
def InvalidHashError(handler=None):
    "error raised if unrecognized hash provided to handler"
    return ValueError("not a valid %s hash" % _get_name(handler))

def MalformedHashError(handler=None, reason=None):
    "error raised if recognized-but-malformed hash provided to handler"
    text = "malformed %s hash" % _get_name(handler)
    if reason:
        text = "%s (%s)" % (text, reason)
    return ValueError(text)

def ZeroPaddedRoundsError(handler=None):
    "error raised if hash was recognized but contained zero-padded rounds field"
    return MalformedHashError(handler, "zero-padded rounds")

#----------------------------------------------------------------
# settings / hash component errors
#----------------------------------------------------------------
def ChecksumSizeError(handler):
    "error raised if hash was recognized, but checksum was wrong size"
    return ValueError("checksum wrong size (%s checksum must be "
                     "exactly %d chars)" % (handler.name, handler.checksum_size))

#==========================================================================
# eof
#==========================================================================

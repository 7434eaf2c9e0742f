"""shacrypt - create & verify legacy sha256-crypt / sha512-crypt password hashes

.. warning::

    These hashes are only supported so applications can keep verifying
    existing hashes while migrating users to bcrypt or argon2.
    bcrypt at cost 9 is faster for the server and slower for an attacker
    than sha-crypt at the default rounds used here.
"""
#=========================================================
#imports
#=========================================================
#core
import logging; log = logging.getLogger(__name__)
#pkg
from shacrypt import utils
from shacrypt.handlers.sha2_crypt import sha256_crypt, sha512_crypt
from shacrypt.utils import to_bytes
#local
__all__ = [
    "sha256crypt_create",
    "sha512crypt_create",
    "shacrypt_verify",
    "identify",
]

__version__ = "1.0"

#: handlers consulted by identify() & shacrypt_verify()
_handlers = (sha256_crypt, sha512_crypt)

#=========================================================
#quickstart interface
#=========================================================
def sha256crypt_create(secret, rounds=sha256_crypt.default_rounds):
    """Create a sha256-crypt hash.

    :type secret: bytes or str
    :arg secret:
        password to hash (str is encoded as utf-8).
        may be empty; must not be larger than 1024 bytes.

    :type rounds: int
    :param rounds:
        number of rounds, defaults to 330000.
        silently clamped to the range 140000 - 999999999.

    :raises shacrypt.exc.PasswordSizeError: if the password is too large.
    :raises shacrypt.exc.RandomSourceError: if a salt couldn't be generated.

    :returns:
        hash string of the form ``$5$rounds=<rounds>$<salt>$<checksum>``.
    """
    return sha256_crypt.encrypt(secret, rounds=rounds)

def sha512crypt_create(secret, rounds=sha512_crypt.default_rounds):
    """Create a sha512-crypt hash.

    same as :func:`sha256crypt_create`, except rounds default to 190000,
    and are clamped to the range 75000 - 999999999.

    :returns:
        hash string of the form ``$6$rounds=<rounds>$<salt>$<checksum>``.
    """
    return sha512_crypt.encrypt(secret, rounds=rounds)

def identify(hash):
    """Identify algorithm which generated a password hash.

    :returns:
        ``"sha256_crypt"``, ``"sha512_crypt"``,
        or ``None`` if the hash could not be identified.
    """
    for handler in _handlers:
        if handler.identify(hash):
            return handler.name
    return None

def shacrypt_verify(secret, hash):
    """verify a secret against an existing sha256-crypt or sha512-crypt hash.

    passwords larger than 1024 bytes are rejected before any hashing is done;
    so are hashes which aren't recognized as sha-crypt.
    malformed sha-crypt hashes (and config strings) never match.
    use the handler's :meth:`verify` to have those raise :exc:`ValueError`.

    :type secret: bytes or str
    :arg secret: password to check

    :type hash: str
    :arg hash: hash string to check against

    :raises TypeError: if the secret isn't str or bytes.

    :returns:
        ``True`` if the secret matches, otherwise ``False``.
    """
    secret = to_bytes(secret, errname="secret")
    if len(secret) > utils.MAX_PASSWORD_SIZE:
        log.debug("rejecting oversized password (%d bytes)", len(secret))
        return False
    for handler in _handlers:
        if handler.identify(hash):
            try:
                return handler.verify(secret, hash)
            except ValueError as err:
                log.debug("rejecting malformed %s hash: %s", handler.name, err)
                return False
    log.debug("hash not recognized as sha-crypt")
    return False

#=========================================================
#eof
#=========================================================

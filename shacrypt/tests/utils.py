"""helpers for shacrypt unittests"""
#=========================================================
#imports
#=========================================================
#core
import logging; log = logging.getLogger(__name__)
import re
import unittest
import warnings
#site
#pkg
from shacrypt.exc import PasswordSizeError, ShacryptHashWarning
from shacrypt import utils
from shacrypt.utils import classproperty, rng
#local
__all__ = [
    #util funcs
    'tonn',

    #unit testing
    'TestCase',
    'HandlerCase',
]

#=========================================================
#misc utility funcs
#=========================================================
def tonn(source):
    "convert native string to non-native string (str -> bytes)"
    if not isinstance(source, str):
        return source
    return source.encode("utf-8")

#=========================================================
#custom test base
#=========================================================
class TestCase(unittest.TestCase):
    """shacrypt-specific test case class

    this class adds a number of features to the standard TestCase...
    * common prefix for all test descriptions
    * resets warnings filter for every test
    * tweaks to message formatting
    * helper for matching against warnings
    """
    #----------------------------------------------------------------
    # make it easy for test cases to add common prefix to shortDescription
    #----------------------------------------------------------------

    # string prepended to all tests in TestCase
    descriptionPrefix = None

    def shortDescription(self):
        "wrap shortDescription() method to prepend descriptionPrefix"
        desc = super(TestCase, self).shortDescription()
        prefix = self.descriptionPrefix
        if prefix:
            desc = "%s: %s" % (prefix, desc or str(self))
        return desc

    #----------------------------------------------------------------
    # hack things so pytest and unittest both skip subclasses who have
    # "__unittest_skip=True" set, or whose names start with "_"
    #----------------------------------------------------------------
    @classproperty
    def __unittest_skip__(cls):
        name = cls.__name__
        return name.startswith("_") or \
               getattr(cls, "_%s__unittest_skip" % name, False)

    @classproperty
    def __test__(cls):
        # make pytest just proxy __unittest_skip__
        return not cls.__unittest_skip__

    # flag to skip *this* class
    __unittest_skip = True

    #----------------------------------------------------------------
    # reset warning filters before each test
    #----------------------------------------------------------------

    # flag to enable this feature
    resetWarningState = True

    def setUp(self):
        super(TestCase, self).setUp()
        self.setUpWarnings()

    def setUpWarnings(self):
        if self.resetWarningState:
            ctx = warnings.catch_warnings()
            ctx.__enter__()
            self.addCleanup(ctx.__exit__, None, None, None)
            warnings.resetwarnings()

    #----------------------------------------------------------------
    # tweak message formatting so longMessage mode is only enabled
    # if msg ends with ":", and turn on longMessage by default.
    #----------------------------------------------------------------
    longMessage = True

    def _formatMessage(self, msg, std):
        if self.longMessage and msg and msg.rstrip().endswith(":"):
            return '%s %s' % (msg.rstrip(), std)
        else:
            return msg or std

    #============================================================
    # custom methods for matching warnings
    #============================================================
    def assertWarningList(self, wlist, category=None, message_re=None,
                          count=1, msg=None):
        """check that warning list (e.g. from catch_warnings) contains
        exactly <count> warnings, each matching category & message regexp"""
        std = "expected %d warnings, found %d: %r" % \
              (count, len(wlist), [str(w.message) for w in wlist])
        if len(wlist) != count:
            raise self.failureException(self._formatMessage(msg, std))
        for entry in wlist:
            if category:
                self.assertIsInstance(entry.message, category, msg)
            if message_re:
                self.assertRegex(str(entry.message), message_re, msg)

#=========================================================
#handler test base
#=========================================================
class HandlerCase(TestCase):
    """base class for testing password hash handlers (esp shacrypt.utils.handlers subclasses)

    In order to use this to test a handler,
    create a subclass will all the appropriate attributes
    filled as listed below, and run the subclass via unittest.
    """
    #=========================================================
    # attrs to be filled in by subclass for testing specific handler
    #=========================================================

    # specify handler object here (required)
    handler = None

    # list of (secret, hash) tuples which are known to be correct
    known_correct_hashes = []

    # list of (config, secret, hash) tuples are known to be correct
    known_correct_configs = []

    # hashes which are identifiable but malformed - they should identify()
    # as True, but cause an error when passed to genhash/verify.
    known_malformed_hashes = []

    # list of (handler name, hash) pairs for other algorithm's hashes that
    # handler shouldn't identify as belonging to it
    # (if handler name in list, that entry will be checked as its own).
    known_other_hashes = [
        ('des_crypt', '6f8c114b58f2c'),
        ('md5_crypt', '$1$dOHYPKoP$tnxS1T8Q6VVn3kpV8cN6o.'),
        ('bcrypt', '$2a$05$c92SVSfjeiCD6F2nAD6y0uBpJDjdRkt0EgeC4/31Rf2LUZbDRDE.O'),
        ('sha256_crypt', "$5$rounds=1400$anotherlongsalts$Rx.j8H.h8HjEDGomFU8bDkXm3XIUnzyxf12"
         "oP84Bnq1"),
        ('sha512_crypt', "$6$rounds=1400$anotherlongsalts$POfYwTEok97VWcjxIiSOjiykti.o/pQs.wP"
         "vMxQ6Fm7I6IoYN3CmLs66x9t0oSwbtEW7o7UmJEiDwGqd8p4ur1"),
    ]

    # passwords used to test basic encrypt behavior - generally
    # don't need to be overidden.
    stock_passwords = [
        "test",
        b'\xe2\x82\xac\xc2\xa5$',
    ]

    # regexp every encrypt() result must match (optional)
    hash_regex = None

    # flag to skip *this* class
    __unittest_skip = True

    #=========================================================
    # alg interface helpers - allows subclass to overide how
    # default tests invoke the handler
    #=========================================================
    def do_encrypt(self, secret, **kwds):
        "call handler's encrypt method with specified options"
        return self.handler.encrypt(secret, **kwds)

    def do_verify(self, secret, hash):
        "call handler's verify method"
        return self.handler.verify(secret, hash)

    def do_identify(self, hash):
        "call handler's identify method"
        return self.handler.identify(hash)

    def do_genconfig(self, **kwds):
        "call handler's genconfig method with specified options"
        return self.handler.genconfig(**kwds)

    def do_genhash(self, secret, config):
        "call handler's genhash method"
        return self.handler.genhash(secret, config)

    #=========================================================
    # support
    #=========================================================
    @classmethod
    def iter_known_hashes(cls):
        "iterate through known (secret, hash) pairs"
        for secret, hash in cls.known_correct_hashes:
            yield secret, hash
        for config, secret, hash in cls.known_correct_configs:
            yield secret, hash

    def get_sample_hash(self):
        "test random sample secret/hash pair"
        known = list(self.iter_known_hashes())
        return rng.choice(known)

    def check_verify(self, secret, hash, msg=None, negate=False):
        "helper to check verify() outcome"
        result = self.do_verify(secret, hash)
        self.assertTrue(result is True or result is False,
                        "verify() returned non-boolean value: %r" % (result,))
        if negate:
            if not result:
                return
            if not msg:
                msg = ("verify incorrectly returned True: secret=%r, hash=%r" %
                       (secret, hash))
            raise self.failureException(msg)
        else:
            if result:
                return
            if not msg:
                msg = "verify failed: secret=%r, hash=%r" % (secret, hash)
            raise self.failureException(msg)

    def check_returned_native_str(self, result, func_name):
        self.assertIsInstance(result, str,
            "%s() failed to return native string: %r" % (func_name, result,))

    @property
    def descriptionPrefix(self):
        return self.handler.name

    #=========================================================
    # basic tests
    #=========================================================
    def test_01_required_attributes(self):
        "validate required attributes"
        handler = self.handler
        def ga(name):
            return getattr(handler, name, None)

        name = ga("name")
        self.assertTrue(name, "name not defined:")
        self.assertIsInstance(name, str, "name must be native str")
        self.assertTrue(re.match("^[a-z0-9_]+$", name),
                        "name must be alphanum + underscore: %r" % (name,))

        settings = ga("setting_kwds")
        self.assertIsInstance(settings, tuple, "setting_kwds must be a tuple:")

        ident = ga("ident")
        self.assertIsInstance(ident, str, "ident must be native str")

    def test_02_config_workflow(self):
        """test basic config-string workflow

        this tests that genconfig() returns the expected types,
        and that identify() and genhash() handle the result correctly.
        """
        config = self.do_genconfig()
        self.check_returned_native_str(config, "genconfig")

        # genhash() should always accept genconfig()'s output
        result = self.do_genhash('stub', config)
        self.check_returned_native_str(result, "genhash")

        # verify() should never accept config strings
        self.assertRaises(ValueError, self.do_verify, 'stub', config)

        # identify() should positively identify config strings
        self.assertTrue(self.do_identify(config),
            "identify() failed to identify genconfig() output: %r" %
            (config,))

    def test_03_hash_workflow(self):
        """test basic hash-string workflow.

        this tests that encrypt()'s hashes are accepted
        by verify() and identify(), and regenerated correctly by genhash().
        the test is run against a couple of different stock passwords.
        """
        wrong_secret = 'stub'
        for secret in self.stock_passwords:

            # encrypt() should generate native str hash
            result = self.do_encrypt(secret)
            self.check_returned_native_str(result, "encrypt")
            if self.hash_regex:
                self.assertRegex(result, self.hash_regex)

            # verify() should work only against secret
            self.check_verify(secret, result)
            self.check_verify(wrong_secret, result, negate=True)

            # genhash() should reproduce original hash
            other = self.do_genhash(secret, result)
            self.assertEqual(other, result, "genhash() failed to reproduce "
                             "hash: secret=%r hash=%r: result=%r" %
                             (secret, result, other))

            # identify() should positively identify hash
            self.assertTrue(self.do_identify(result))

    def test_04_hash_types(self):
        "test hashes can be str or bytes"
        result = self.do_encrypt(tonn('stub'))
        self.check_returned_native_str(result, "encrypt")

        # verify using non-native hash AND secret
        self.check_verify('stub', tonn(result))
        self.check_verify(tonn('stub'), tonn(result))

        # genhash using non-native hash
        other = self.do_genhash('stub', tonn(result))
        self.check_returned_native_str(other, "genhash")
        self.assertEqual(other, result)

        # identify using non-native hash
        self.assertTrue(self.do_identify(tonn(result)))

    #==============================================================
    # salts
    #==============================================================
    def test_10_salt_attributes(self):
        "validate salt attributes"
        cls = self.handler
        self.assertGreaterEqual(cls.max_salt_size, 1)
        self.assertGreaterEqual(cls.min_salt_size, 0)
        self.assertLessEqual(cls.min_salt_size, cls.max_salt_size)
        self.assertLessEqual(cls.default_salt_size, cls.max_salt_size)
        self.assertGreaterEqual(cls.default_salt_size, cls.min_salt_size)

    def test_11_unique_salt(self):
        "test genconfig() creates new salt each time"
        seen = set(self.handler.from_string(self.do_genconfig()).salt
                   for _ in range(5))
        self.assertEqual(len(seen), 5)

    def test_12_salt_chars(self):
        "test generated salts use hash64 charset, and bad chars are rejected"
        cls = self.handler
        for _ in range(10):
            salt = cls.from_string(self.do_genconfig()).salt
            self.assertEqual(len(salt), cls.default_salt_size)
            self.assertTrue(set(salt).issubset(cls.salt_chars),
                            "salt contains invalid chars: %r" % (salt,))
        self.assertRaises(ValueError, self.do_genconfig, salt="bad$salt")
        self.assertRaises(ValueError, self.do_genconfig, salt="bad:salt")

    def test_13_max_salt_size(self):
        "test salts larger than max_salt_size are rejected"
        cls = self.handler
        mx = cls.max_salt_size
        self.do_genconfig(salt="s" * mx)
        self.assertRaises(ValueError, self.do_genconfig, salt="s" * (mx+1))

    #==============================================================
    # rounds
    #==============================================================
    def test_20_rounds_attributes(self):
        "validate rounds attributes"
        cls = self.handler
        self.assertGreaterEqual(cls.max_rounds, 1)
        self.assertGreaterEqual(cls.min_rounds, 0)
        self.assertLessEqual(cls.min_rounds, cls.min_desired_rounds)
        self.assertLessEqual(cls.min_desired_rounds, cls.default_rounds)
        self.assertLessEqual(cls.default_rounds, cls.max_rounds)

    def test_21_rounds_limits(self):
        "test genconfig() clamps rounds, parsing rejects them"
        handler = self.handler
        mn = handler.min_desired_rounds
        mx = handler.max_rounds

        def get_rounds(**kwds):
            return handler.from_string(self.do_genconfig(**kwds)).rounds

        # new hashes are clipped to policy limits, silently
        with warnings.catch_warnings(record=True) as wlog:
            warnings.simplefilter("always")
            self.assertEqual(get_rounds(rounds=mn), mn)
            self.assertEqual(get_rounds(rounds=mn-1), mn)
            self.assertEqual(get_rounds(rounds=1), mn)
            self.assertEqual(get_rounds(rounds=0), mn)
            self.assertEqual(get_rounds(rounds=mx), mx)
            self.assertEqual(get_rounds(rounds=mx+1), mx)
            self.assertEqual(get_rounds(), handler.default_rounds)
        self.assertWarningList(wlog, count=0)

        # non-integers are rejected
        self.assertRaises(TypeError, self.do_genconfig, rounds="1000")
        self.assertRaises(TypeError, self.do_genconfig, rounds=1000.0)
        self.assertRaises(TypeError, self.do_genconfig, rounds=True)

        # hashes with out of range rounds are rejected
        hash = self.get_sample_hash()[1]
        chk = hash.rsplit("$", 1)[1]
        for rounds in (handler.min_rounds - 1, mx + 1):
            bad = "%srounds=%d$salt$%s" % (handler.ident, rounds, chk)
            self.assertRaises(ValueError, handler.from_string, bad)

    #==============================================================
    # password size
    #==============================================================
    def test_60_secret_border(self):
        "test non-string passwords are rejected"
        hash = self.get_sample_hash()[1]

        # secret=None
        self.assertRaises(TypeError, self.do_encrypt, None)
        self.assertRaises(TypeError, self.do_genhash, None, hash)
        self.assertRaises(TypeError, self.do_verify, None, hash)

        # secret=int (picked as example of entirely wrong class)
        self.assertRaises(TypeError, self.do_encrypt, 1)
        self.assertRaises(TypeError, self.do_genhash, 1, hash)
        self.assertRaises(TypeError, self.do_verify, 1, hash)

    def test_63_large_secret(self):
        "test MAX_PASSWORD_SIZE is enforced"
        secret = b'.' * (1+utils.MAX_PASSWORD_SIZE)
        hash = self.get_sample_hash()[1]
        self.assertRaises(PasswordSizeError, self.do_genhash, secret, hash)
        self.assertRaises(PasswordSizeError, self.do_encrypt, secret)
        self.assertRaises(PasswordSizeError, self.do_verify, secret, hash)

        # multi-byte chars count as bytes, not chars
        usecret = "€" * (utils.MAX_PASSWORD_SIZE // 3 + 1)
        self.assertRaises(PasswordSizeError, self.do_verify, usecret, hash)

    #==============================================================
    # check identify(), verify(), genhash() against test vectors
    #==============================================================
    def test_70_hashes(self):
        "test known hashes"
        self.assertTrue(self.known_correct_hashes or self.known_correct_configs,
                        "test must set at least one of 'known_correct_hashes' "
                        "or 'known_correct_configs'")

        for secret, hash in self.iter_known_hashes():

            # hash should be positively identified by handler
            self.assertTrue(self.do_identify(hash),
                "identify() failed to identify hash: %r" % (hash,))

            # secret should verify successfully against hash
            self.check_verify(secret, hash, "verify() of known hash failed: "
                              "secret=%r, hash=%r" % (secret, hash))

            # genhash() should reproduce same hash
            result = self.do_genhash(secret, hash)
            self.check_returned_native_str(result, "genhash")
            self.assertEqual(result, hash,  "genhash() failed to reproduce "
                "known hash: secret=%r, hash=%r: result=%r" %
                (secret, hash, result))

    def test_72_configs(self):
        "test known config strings"
        if not self.known_correct_configs:
            raise self.skipTest("no config strings provided")

        warnings.filterwarnings("ignore", category=ShacryptHashWarning)
        for config, secret, hash in self.known_correct_configs:

            # config should be positively identified by handler
            self.assertTrue(self.do_identify(config),
                "identify() failed to identify known config string: %r" %
                (config,))

            # verify() should throw error for config strings.
            self.assertRaises(ValueError, self.do_verify, secret, config)

            # genhash() should reproduce hash from config.
            result = self.do_genhash(secret, config)
            self.check_returned_native_str(result, "genhash")
            self.assertEqual(result, hash,  "genhash() failed to reproduce "
                "known hash from config: secret=%r, config=%r, hash=%r: "
                "result=%r" % (secret, config, hash, result))

    def test_74_malformed(self):
        "test known identifiable-but-malformed strings"
        if not self.known_malformed_hashes:
            raise self.skipTest("no malformed hashes provided")
        for hash in self.known_malformed_hashes:

            # identify() should accept these
            self.assertTrue(self.do_identify(hash),
                "identify() failed to identify known malformed "
                "hash: %r" % (hash,))

            # verify() should throw error
            self.assertRaises(ValueError, self.do_verify, 'stub', hash)

            # genhash() should throw error
            self.assertRaises(ValueError, self.do_genhash, 'stub', hash)

    def test_75_foreign(self):
        "test known foreign hashes"
        for name, hash in self.known_other_hashes:
            if name == self.handler.name:
                # identify should accept these
                self.assertTrue(self.do_identify(hash),
                    "identify() failed to identify known hash: %r" % (hash,))

                # verify & genhash should NOT throw error
                self.do_verify('stub', hash)
                result = self.do_genhash('stub', hash)
                self.check_returned_native_str(result, "genhash")

            else:
                # identify should reject these
                self.assertFalse(self.do_identify(hash),
                    "identify() incorrectly identified hash belonging to "
                    "%s: %r" % (name, hash))

                # verify & genhash should throw error
                self.assertRaises(ValueError, self.do_verify, 'stub', hash)
                self.assertRaises(ValueError, self.do_genhash, 'stub', hash)

    def test_76_hash_border(self):
        "test non-string hashes are rejected"
        # identify() returns False, verify() & genhash() raise TypeError
        for hash in (None, 1):
            self.assertFalse(self.do_identify(hash))
            self.assertRaises(TypeError, self.do_verify, 'stub', hash)
            self.assertRaises(TypeError, self.do_genhash, 'stub', hash)

        # empty string
        self.assertFalse(self.do_identify(''))
        self.assertRaises(ValueError, self.do_verify, 'stub', '')

    #=========================================================
    #eoc
    #=========================================================

#=========================================================
#EOF
#=========================================================

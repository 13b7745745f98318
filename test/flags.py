"""
Flag specification tests (metadata validation, conversion, values mapping).

Scope
- Validate construction errors for malformed names, shorthands, types and defaults.
- Validate string/int/bool conversion, base prefixes and choices.
- Validate the read-only Values mapping handed to callbacks.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from seqkit.flags import *


class ParseTest(TestCase):
    """Command-line spellings of booleans and integers."""

    def testBooleanSpellings(self):
        for raw in ("1", "t", "T", "TRUE", "true", "True"):
            self.assertIs(parse_bool(raw), True)
        for raw in ("0", "f", "F", "FALSE", "false", "False"):
            self.assertIs(parse_bool(raw), False)

    def testBooleanRejectsOtherSpellings(self):
        for raw in ("yes", "no", "", "tRUE"):
            with self.assertRaises(ValueError):
                parse_bool(raw)

    def testIntegers(self):
        self.assertEqual(parse_int("42"), 42)
        self.assertEqual(parse_int("-5"), -5)
        self.assertEqual(parse_int("+7"), 7)
        self.assertEqual(parse_int("0x1f"), 31)
        self.assertEqual(parse_int("0o17"), 15)
        self.assertEqual(parse_int("0b11"), 3)
        self.assertEqual(parse_int("1_000"), 1000)
        self.assertEqual(parse_int("0"), 0)

    def testLeadingZeroIsOctal(self):
        self.assertEqual(parse_int("010"), 8)
        self.assertEqual(parse_int("-017"), -15)
        with self.assertRaises(ValueError):
            parse_int("08")

    def testSixtyFourBitRange(self):
        self.assertEqual(parse_int("9223372036854775807"), 2**63 - 1)
        self.assertEqual(parse_int("-9223372036854775808"), -2**63)
        for raw in ("9223372036854775808", "9999999999999999999", "0x8000000000000000", "1" * 5000):
            with self.assertRaises(ValueError) as context:
                parse_int(raw)
            self.assertTrue(str(context.exception).endswith(": value out of range"))

    def testIntegerErrorMessage(self):
        with self.assertRaises(ValueError) as context:
            parse_int("1.5")
        self.assertEqual(str(context.exception), 'parsing "1.5": invalid syntax')
        for raw in (" 5", "", "٣", "1__0"):
            with self.assertRaises(ValueError):
                parse_int(raw)


class FlagTest(TestCase):
    """Flag metadata and conversion."""

    def testDefaultsToZeroValue(self):
        self.assertEqual(Flag("name").default, "")
        self.assertEqual(Flag("count", type=int).default, 0)
        self.assertIs(Flag("quiet", type=bool).default, False)

    def testIntrospection(self):
        flag = Flag("threads", "j", int, 4, "number of CPUs", persistent=True)
        self.assertEqual(flag.name, "threads")
        self.assertEqual(flag.shorthand, "j")
        self.assertIs(flag.type, int)
        self.assertEqual(flag.default, 4)
        self.assertEqual(flag.descr, "number of CPUs")
        self.assertTrue(flag.persistent)
        self.assertFalse(flag.hidden)
        self.assertIn("name='threads'", repr(flag))

    def testLabelAndVarname(self):
        self.assertEqual(Flag("threads", "j", int).label, "-j, --threads")
        self.assertEqual(Flag("id-ncbi", type=bool).label, "--id-ncbi")
        self.assertEqual(Flag("threads", "j", int).varname, "int")
        self.assertEqual(Flag("out-file", "o").varname, "string")
        self.assertEqual(Flag("quiet", type=bool).varname, "")

    def testMalformedNames(self):
        for name in ("--threads", "-j", "two words", "1st", ""):
            with self.assertRaises(ValueError):
                Flag(name)
        with self.assertRaises(TypeError):
            Flag(1)

    def testMalformedShorthands(self):
        for shorthand in ("ab", "-", ""):
            with self.assertRaises(ValueError):
                Flag("threads", shorthand)

    def testUnsupportedType(self):
        with self.assertRaises(TypeError):
            Flag("ratio", type=float)

    def testDefaultMustMatchType(self):
        with self.assertRaises(TypeError):
            Flag("threads", type=int, default="4")
        with self.assertRaises(TypeError):
            Flag("threads", type=int, default=True)

    def testBlankDescription(self):
        with self.assertRaises(ValueError):
            Flag("threads", descr="  ")

    def testChoices(self):
        flag = Flag("seq-type", "t", str, "auto", choices=("dna", "rna", "auto"))
        self.assertEqual(flag.choices, ("dna", "rna", "auto"))
        self.assertEqual(flag.convert("rna"), "rna")
        with self.assertRaises(ValueError) as context:
            flag.convert("xyz")
        self.assertEqual(str(context.exception), "must be one of dna, rna, auto")

    def testInvalidChoices(self):
        with self.assertRaises(ValueError):
            Flag("seq-type", default="auto", choices=("dna", "rna"))
        with self.assertRaises(ValueError):
            Flag("seq-type", choices=("dna", "dna"))
        with self.assertRaises(TypeError):
            Flag("level", type=int, choices=("1", "2"))
        with self.assertRaises(TypeError):
            Flag("seq-type", choices="dna")

    def testConvert(self):
        self.assertEqual(Flag("threads", type=int).convert("0x10"), 16)
        self.assertIs(Flag("quiet", type=bool).convert("false"), False)
        self.assertEqual(Flag("out-file").convert("out.fa.gz"), "out.fa.gz")


class ValuesTest(TestCase):
    """The mapping handed to command callbacks."""

    def testMapping(self):
        values = Values({"threads": 4, "quiet": False}, changed=("threads",))
        self.assertEqual(values["threads"], 4)
        self.assertEqual(len(values), 2)
        self.assertEqual(set(values), {"threads", "quiet"})
        self.assertEqual(values.get("missing", "x"), "x")
        self.assertEqual(values.changed, frozenset({"threads"}))

    def testReadOnly(self):
        values = Values({"threads": 4})
        with self.assertRaises(TypeError):
            values["threads"] = 8
        with self.assertRaises(AttributeError):
            values.changed = frozenset()


if __name__ == "__main__":
    unittest.main()

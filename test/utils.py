"""
Tests for the internal helpers.

This module verifies:
- The `Unset` sentinel: singleton identity, falsy semantics, representation, finality.
- coalesce(): only Unset is replaced.
- rename(): function and decorator forms.
- mirror(): read-only properties returning copies of container fields.
"""
import copy
import unittest
from unittest import TestCase

from seqkit.utils import *


class UnsetTest(TestCase):
    """Semantic guarantees of the `Unset` sentinel."""

    def testSingleton(self) -> None:
        self.assertIs(Unset, UnsetType())
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyPreservesIdentity(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})


class HelpersTest(TestCase):
    """coalesce(), rename() and mirror()."""

    def testCoalesceReplacesOnlyUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameFunctionForm(self) -> None:
        def original():
            pass

        renamed = rename(original, "renamed")
        self.assertIs(renamed, original)
        self.assertEqual(renamed.__name__, "renamed")
        self.assertEqual(renamed.__qualname__, "renamed")

    def testRenameDecoratorForm(self) -> None:
        @rename("decorated")
        def original():
            pass

        self.assertEqual(original.__name__, "decorated")

    def testRenameRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename("not callable", "name")
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorReturnsCopies(self) -> None:
        class Holder:
            items = mirror("items")
            mapping = mirror("mapping")
            scalar = mirror("scalar")

            def __init__(self):
                self._items = ["a", ["b"]]
                self._mapping = {"k": ["v"]}
                self._scalar = 3

        holder = Holder()
        self.assertEqual(holder.items, ("a", ("b",)))
        self.assertEqual(holder.mapping, {"k": ("v",)})
        self.assertEqual(holder.scalar, 3)

        holder.mapping["other"] = 1
        self.assertNotIn("other", holder._mapping)
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == "__main__":
    unittest.main()

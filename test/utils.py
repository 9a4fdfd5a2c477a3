"""
Tests for the internal helpers (Unset sentinel, coalesce, rename, mirror, tokenize).
"""
import unittest
from unittest import TestCase

from argverb.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel and its helpers.
    """

    def testSingleton(self) -> None:
        self.assertIs(Unset, UnsetType())

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testNotEqualToNone(self) -> None:
        self.assertNotEqual(Unset, None)

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce((), "fallback"), ())
        self.assertIsNone(coalesce(Unset))


class RenameTest(TestCase):

    def testFunctionForm(self) -> None:
        def work():
            pass

        self.assertIs(rename(work, "do_work"), work)
        self.assertEqual(work.__name__, "do_work")
        self.assertEqual(work.__qualname__, "do_work")

    def testDecoratorForm(self) -> None:
        @rename("do_work")
        def work():
            pass

        self.assertEqual(work.__name__, "do_work")

    def testWrongArity(self) -> None:
        with self.assertRaises(TypeError):
            rename()

    def testNonCallable(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "name")


class MirrorTest(TestCase):

    def testMirrorFreezesContainers(self) -> None:
        class Holder:
            items = mirror("items")
            mapping = mirror("mapping")
            names = mirror("names")

            def __init__(self):
                self._items = [1, 2]
                self._mapping = {"a": 1}
                self._names = {"x"}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.names, frozenset)
        with self.assertRaises(TypeError):
            holder.mapping["b"] = 2

    def testMirrorIsReadOnly(self) -> None:
        class Holder:
            value = mirror("value")
            _value = "x"

        with self.assertRaises(AttributeError):
            Holder().value = "y"

    def testMirrorRejectsNonStrings(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)


class TokenizeTest(TestCase):

    def testMaterializesIterables(self) -> None:
        self.assertEqual(tokenize(iter(["copy", "--source"])), ("copy", "--source"))
        self.assertEqual(tokenize([]), ())

    def testRejectsBareString(self) -> None:
        with self.assertRaises(TypeError):
            tokenize("copy --source")

    def testRejectsNonIterables(self) -> None:
        with self.assertRaises(TypeError):
            tokenize(1)

    def testRejectsNonStringTokens(self) -> None:
        with self.assertRaises(TypeError):
            tokenize(["copy", 1])


if __name__ == '__main__':
    unittest.main()

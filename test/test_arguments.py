"""
Arguments module behavioral tests (scanner, faults, usage).

Scope
- Validate the end-to-end parse of a realistic switch set.
- Validate every fault raised by build() and its position-first message.
- Validate positional collection, arity checking and repeated switches.
- Validate key collisions (last declaration wins, with a warning).
- Validate the usage block (plain and printed).

Conventions
- Test method names follow CamelCase per project convention.
- Handlers are created fresh per test (setUp) so values never leak.
"""

from __future__ import annotations

import io
import sys
import unittest
import warnings
from contextlib import redirect_stdout
from unittest import TestCase
from unittest.mock import patch

from switchyard import (
    Arguments,
    Switch,
    IntegerHandler,
    SizeHandler,
    StringHandler,
    ChoiceHandler,
    FlagHandler,
    InvalidInputError,
    MalformedSwitchError,
    UnknownSwitchError,
    InvalidValueError,
    MissingValueError,
    ArgumentCountError,
    DuplicatedSwitchWarning,
    FaultCode,
)


class ServerCase(TestCase):
    """Shared fixture: the switch set of a small server program."""

    def setUp(self):
        self.port = IntegerHandler(6379)
        self.memory = SizeHandler(1024 ** 3)
        self.threads = IntegerHandler(4, validator=lambda x: x > 0)
        self.verbose = FlagHandler()
        self.string = StringHandler("init")
        self.mode = ChoiceHandler("init", ("value",))
        self.switches = [
            Switch("port", "p", "port", self.port),
            Switch("max memory", "m", handler=self.memory),
            Switch("threads", "t", handler=self.threads),
            Switch("verbose", "v", handler=self.verbose),
            Switch("string", ext_switch="ss", handler=self.string),
            Switch("mode", "e", handler=self.mode),
        ]

    def arguments(self, names=None):
        return Arguments("server", self.switches, names)


class TestBuild(ServerCase):
    """Successful parses."""

    def testEndToEnd(self):
        arguments = self.arguments(["arg1", "arg2"])
        arguments.build("-p 3333 -m 1M -t 12 -v --ss test -e value arg1 arg2".split())
        self.assertEqual(self.port.value, 3333)
        self.assertEqual(self.memory.value, 1048576)
        self.assertEqual(self.threads.value, 12)
        self.assertIs(self.verbose.value, True)
        self.assertEqual(self.string.value, "test")
        self.assertEqual(self.mode.value, "value")
        self.assertEqual(arguments.get_other_arguments(), ["arg1", "arg2"])

    def testDefaultsWithoutTokens(self):
        arguments = self.arguments()
        arguments.build([])
        self.assertEqual(self.port.value, 6379)
        self.assertEqual(self.memory.value, 1024 ** 3)
        self.assertIs(self.verbose.value, False)
        self.assertEqual(arguments.get_other_arguments(), [])

    def testLongAndShortKeysReachSameSwitch(self):
        self.arguments().build(["--port", "80"])
        self.assertEqual(self.port.value, 80)
        self.arguments().build(["-p", "81"])
        self.assertEqual(self.port.value, 81)

    def testPositionalsKeepOrderAroundSwitches(self):
        arguments = self.arguments()
        arguments.build(["a", "-p", "1", "b", "-v", "c", "--ss", "x", "d"])
        self.assertEqual(arguments.get_other_arguments(), ["a", "b", "c", "d"])
        self.assertEqual(arguments.others, ["a", "b", "c", "d"])

    def testFlagDoesNotConsumeNextToken(self):
        arguments = self.arguments()
        arguments.build(["-v", "true"])
        self.assertIs(self.verbose.value, True)
        self.assertEqual(arguments.get_other_arguments(), ["true"])

    def testLastOccurrenceWins(self):
        self.arguments().build(["-p", "1", "--port", "2", "-p", "3"])
        self.assertEqual(self.port.value, 3)

    def testValueMayStartWithDash(self):
        self.arguments().build(["-p", "-5", "--ss", "--port"])
        self.assertEqual(self.port.value, -5)
        self.assertEqual(self.string.value, "--port")

    def testReturnedListIsACopy(self):
        arguments = self.arguments()
        arguments.build(["a"])
        arguments.get_other_arguments().append("b")
        self.assertEqual(arguments.get_other_arguments(), ["a"])

    def testRepeatedBuildAppends(self):
        arguments = self.arguments()
        arguments.build(["a", "-p", "1"])
        arguments.build(["b"])
        self.assertEqual(arguments.get_other_arguments(), ["a", "b"])
        self.assertEqual(self.port.value, 1)

    def testDefaultsToSysArgv(self):
        with patch.object(sys, "argv", ["server", "-t", "8", "file"]):
            arguments = self.arguments(["file"])
            arguments.build()
        self.assertEqual(self.threads.value, 8)
        self.assertEqual(arguments.get_other_arguments(), ["file"])

    def testProgramNameDefaultsToArgv0(self):
        with patch.object(sys, "argv", ["/usr/bin/server-tool"]):
            self.assertEqual(Arguments(switches=self.switches).program_name, "server-tool")


class TestFaults(ServerCase):
    """Every failure surfaces as an InvalidInputError subclass."""

    def testMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            self.arguments().build(["-p"])
        self.assertIsInstance(context.exception, InvalidInputError)
        self.assertIn("switch value expected", str(context.exception))
        self.assertEqual(context.exception.options["code"], FaultCode.MISSING_VALUE)
        self.assertEqual(context.exception.options["index"], 1)

    def testMissingValueAfterOtherTokens(self):
        with self.assertRaises(MissingValueError) as context:
            self.arguments().build(["a", "-t", "2", "--port"])
        self.assertIn("'--port' at fourth position", str(context.exception))

    def testInvalidEnumKeepsDefault(self):
        with self.assertRaises(InvalidValueError) as context:
            self.arguments().build(["-e", "bogus"])
        self.assertEqual(self.mode.value, "init")
        self.assertIn("'-e'", str(context.exception))
        self.assertIn("second position", str(context.exception))

    def testInvalidInteger(self):
        with self.assertRaises(InvalidValueError):
            self.arguments().build(["-p", "abc"])
        self.assertEqual(self.port.value, 6379)

    def testValidatorRejection(self):
        with self.assertRaises(InvalidValueError):
            self.arguments().build(["-t", "0"])
        self.assertEqual(self.threads.value, 4)

    def testInvalidSize(self):
        with self.assertRaises(InvalidValueError):
            self.arguments().build(["-m", "1.5G"])
        self.assertEqual(self.memory.value, 1024 ** 3)

    def testEarlierValuesAreKept(self):
        with self.assertRaises(InvalidValueError):
            self.arguments().build(["-p", "1", "-t", "x", "-v"])
        self.assertEqual(self.port.value, 1)
        self.assertIs(self.verbose.value, False)

    def testValidatorFailureIsReportedAsInvalidValue(self):
        handler = IntegerHandler(1, validator=lambda x: 100 // x > 1)
        arguments = Arguments("tool", [Switch("ratio", "n", handler=handler)])
        with self.assertRaises(InvalidValueError) as context:
            arguments.build(["-n", "0"])
        self.assertIsInstance(context.exception.__cause__, ZeroDivisionError)
        self.assertIn("'-n'", str(context.exception))
        self.assertEqual(handler.value, 1)

    def testRejectedValueHasNoCause(self):
        with self.assertRaises(InvalidValueError) as context:
            self.arguments().build(["-p", "abc"])
        self.assertIsNone(context.exception.__cause__)

    def testBareDoubleDash(self):
        with self.assertRaises(MalformedSwitchError) as context:
            self.arguments().build(["--"])
        self.assertEqual(context.exception.options["code"], FaultCode.MALFORMED_SWITCH)

    def testShortTokenWrongLength(self):
        for token in ("-", "-pv", "-port"):
            with self.assertRaises(MalformedSwitchError):
                self.arguments().build([token])

    def testUnknownLongSwitch(self):
        with self.assertRaises(UnknownSwitchError) as context:
            self.arguments().build(["--prot", "1"])
        self.assertIn("--port", context.exception.options["suggestions"])
        self.assertIn("did you mean '--port'", context.exception.options["hint"])

    def testUnknownShortSwitch(self):
        with self.assertRaises(UnknownSwitchError):
            self.arguments().build(["-x"])

    def testLongKeyDoesNotMatchShortTable(self):
        with self.assertRaises(UnknownSwitchError):
            self.arguments().build(["--v"])

    def testShortKeyDoesNotMatchLongTable(self):
        with self.assertRaises(MalformedSwitchError):
            self.arguments().build(["-ss", "x"])

    def testTooFewPositionals(self):
        with self.assertRaises(ArgumentCountError) as context:
            self.arguments(["arg1", "arg2"]).build(["arg1"])
        self.assertIn("incorrect number of arguments", str(context.exception))
        self.assertEqual(context.exception.options["expected"], 2)
        self.assertEqual(context.exception.options["received"], 1)

    def testTooManyPositionals(self):
        with self.assertRaises(ArgumentCountError):
            self.arguments(["only"]).build(["a", "b"])

    def testEmptyNamesRequireNoPositionals(self):
        self.arguments([]).build(["-v"])
        with self.assertRaises(ArgumentCountError):
            self.arguments([]).build(["a"])

    def testWithoutNamesAnyCountIsAccepted(self):
        arguments = self.arguments()
        arguments.build(["a", "b", "c"])
        self.assertEqual(len(arguments.get_other_arguments()), 3)

    def testFaultCarriesProgramName(self):
        with self.assertRaises(InvalidInputError) as context:
            self.arguments().build(["-x"])
        self.assertEqual(context.exception.options["program"], "server")


class TestConstruction(ServerCase):
    """Lookup-table construction and its edge cases."""

    def testCollisionLastDeclarationWins(self):
        first = IntegerHandler(0)
        second = IntegerHandler(0)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            arguments = Arguments("tool", [
                Switch("first", "x", handler=first),
                Switch("second", "x", handler=second),
            ])
        self.assertEqual(len(caught), 1)
        self.assertIs(caught[0].category, DuplicatedSwitchWarning)
        self.assertIn("'-x'", str(caught[0].message))

        arguments.build(["-x", "5"])
        self.assertEqual(first.value, 0)
        self.assertEqual(second.value, 5)
        self.assertNotIn("first", arguments.format_usage())

    def testCollisionCanBePromotedToError(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DuplicatedSwitchWarning)
            with self.assertRaises(DuplicatedSwitchWarning):
                Arguments("tool", [
                    Switch("first", ext_switch="name", handler=StringHandler()),
                    Switch("second", ext_switch="name", handler=StringHandler()),
                ])

    def testSameSwitchTwiceDoesNotWarn(self):
        switch = Switch("port", "p", handler=IntegerHandler())
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            Arguments("tool", [switch, switch])
        self.assertEqual(caught, [])

    def testDeclarationsFromIterators(self):
        arguments = Arguments("tool", iter(self.switches), (name for name in ("arg1",)))
        self.assertEqual(arguments.switches, self.switches)
        self.assertEqual(arguments.names, ["arg1"])
        arguments.build(["-p", "80", "value"])
        self.assertEqual(self.port.value, 80)

    def testCollisionKeepsDeclarationOrder(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DuplicatedSwitchWarning)
            arguments = Arguments("tool", [
                Switch("a", "x", handler=IntegerHandler()),
                Switch("b", "y", handler=IntegerHandler()),
                Switch("c", "x", handler=IntegerHandler()),
            ])
        self.assertEqual(arguments.format_usage().splitlines(), [
            "Usage: tool",
            "  -y int - b",
            "  -x int - c",
        ])

    def testShadowedKeyIsNotAdvertised(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DuplicatedSwitchWarning)
            arguments = Arguments("tool", [
                Switch("a", "x", "alpha", IntegerHandler()),
                Switch("b", "x", handler=IntegerHandler()),
            ])
        self.assertEqual(arguments.format_usage().splitlines(), [
            "Usage: tool",
            "  -x int - b",
            "  --alpha int - a",
        ])

    def testInvalidDeclarations(self):
        with self.assertRaises(TypeError):
            Arguments("tool", ["-p"])
        with self.assertRaises(TypeError):
            Arguments("tool", [], "arg1")
        with self.assertRaises(TypeError):
            Arguments("tool", [], [1])
        with self.assertRaises(TypeError):
            Arguments(5, [])

    def testIntrospection(self):
        arguments = self.arguments(["arg1"])
        self.assertEqual(arguments.program_name, "server")
        self.assertEqual(arguments.names, ["arg1"])
        self.assertEqual(arguments.switches, self.switches)
        self.assertFalse(arguments.colorful)
        self.assertTrue(repr(arguments).startswith("arguments(program_name='server'"))


class TestUsage(ServerCase):
    """Usage block rendering."""

    expected = "\n".join([
        "Usage: server <arg1> <arg2>",
        "  -p (or --port) int - port",
        "  -m size - max memory",
        "  -t int - threads",
        "  -v - verbose",
        "  -e value - mode",
        "  --ss string - string",
    ])

    def testFormatUsage(self):
        self.assertEqual(self.arguments(["arg1", "arg2"]).format_usage(), self.expected)

    def testFormatUsageWithoutNames(self):
        self.assertEqual(self.arguments().format_usage().splitlines()[0], "Usage: server")

    def testUsagePrintsToStdout(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.arguments(["arg1", "arg2"]).usage()
        self.assertEqual(buffer.getvalue().splitlines(), self.expected.splitlines())

    def testColorfulUsageKeepsText(self):
        arguments = Arguments("server", self.switches, ["arg1", "arg2"], colorful=True)
        self.assertEqual(arguments.format_usage(), self.expected)
        self.assertTrue(arguments.__rich__().spans)

    def testUsageIsStable(self):
        arguments = self.arguments(["arg1", "arg2"])
        self.assertEqual(arguments.format_usage(), arguments.format_usage())


if __name__ == "__main__":
    unittest.main()

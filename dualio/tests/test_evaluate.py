from dualio.errors import ProtocolError, ExpectedStartError, ExpectedSuspendError
from dualio.evaluate import evaluate_sync, evaluate_async, ResumeToken
from dualio.protocol import Signal
from dualio.routine import Routine
from dualio.tests.utils import Deferred, MyException, count_up
import dualio
import unittest

class Results:
    def __init__(self) -> None:
        self.values: list = []
        self.errors: list = []

    def on_value(self, value) -> None:
        self.values.append(value)

    def on_error(self, exn) -> None:
        self.errors.append(exn)

    def drive(self, routine: Routine) -> None:
        evaluate_async(routine, self.on_value, self.on_error)

class TestEvaluateSync(unittest.TestCase):
    def test_value(self) -> None:
        deferred = Deferred()
        self.assertEqual(evaluate_sync(deferred.lookup("a")), "sync:a")
        self.assertEqual(deferred.sync_calls, ["a"])
        self.assertEqual(deferred.started, [])

    def test_domain_failure(self) -> None:
        def fail_sync():
            raise MyException("nope")
        op = dualio.operation(fail_sync)
        with self.assertRaises(MyException):
            evaluate_sync(op())

    def test_bare_yield(self) -> None:
        @dualio.dual
        def sloppy():
            yield 5
        with self.assertRaises(ExpectedStartError):
            evaluate_sync(sloppy())

    def test_composed(self) -> None:
        self.assertEqual(evaluate_sync(count_up(100)), 100)

class TestEvaluateAsync(unittest.TestCase):
    def test_inline_completion(self) -> None:
        "A handler with its result already available settles before evaluate_async returns."
        results = Results()
        results.drive(count_up(3))
        self.assertEqual(results.values, [3])
        self.assertEqual(results.errors, [])

    def test_no_stack_growth(self) -> None:
        results = Results()
        results.drive(count_up(10000))
        self.assertEqual(results.values, [10000])

    def test_later_completion(self) -> None:
        deferred = Deferred()
        @dualio.dual
        def both():
            a = yield from deferred.lookup("a")
            b = yield from deferred.lookup("b")
            return a + b
        results = Results()
        results.drive(both())
        self.assertEqual(deferred.started, ["a"])
        self.assertEqual(results.values, [])
        deferred.succeed("a", "x")
        self.assertEqual(deferred.started, ["a", "b"])
        self.assertEqual(results.values, [])
        deferred.succeed("b", "y")
        self.assertEqual(results.values, ["xy"])
        self.assertEqual(results.errors, [])

    def test_later_failure(self) -> None:
        deferred = Deferred()
        results = Results()
        results.drive(deferred.lookup("a"))
        exn = MyException("late")
        deferred.fail("a", exn)
        self.assertEqual(results.errors, [exn])
        self.assertEqual(results.values, [])

    def test_failure_caught_in_body(self) -> None:
        "Domain failures are raised at the yield from, so routine bodies can handle them."
        deferred = Deferred()
        @dualio.dual
        def recovering():
            try:
                return (yield from deferred.lookup("a"))
            except MyException:
                return "recovered"
        results = Results()
        results.drive(recovering())
        deferred.fail("a", MyException())
        self.assertEqual(results.values, ["recovered"])

    def test_bare_yield(self) -> None:
        @dualio.dual
        def sloppy():
            yield 5
        results = Results()
        results.drive(sloppy())
        self.assertEqual(len(results.errors), 1)
        self.assertIsInstance(results.errors[0], ExpectedStartError)

    def test_completes_without_suspending(self) -> None:
        def body():
            yield Signal.START
            return 1
        results = Results()
        results.drive(Routine(body()))
        self.assertEqual(len(results.errors), 1)
        self.assertIsInstance(results.errors[0], ExpectedSuspendError)
        self.assertEqual(results.values, [])

    def test_wrong_suspend_value(self) -> None:
        seen = []
        def body():
            yield Signal.START
            try:
                yield "not suspend"
            except ProtocolError as e:
                seen.append(e)
                raise
        results = Results()
        results.drive(Routine(body()))
        self.assertIsInstance(results.errors[0], ExpectedSuspendError)
        self.assertEqual(seen, results.errors)

    def test_protocol_error_is_not_domain_error(self) -> None:
        deferred = Deferred()
        @dualio.dual
        def sloppy():
            yield from deferred.lookup("a")
            yield "oops"
        results = Results()
        results.drive(sloppy())
        deferred.fail("a", MyException())
        self.assertIsInstance(results.errors[0], MyException)
        results = Results()
        results.drive(sloppy())
        deferred.succeed("a", "fine")
        self.assertIsInstance(results.errors[0], ProtocolError)
        self.assertNotIsInstance(results.errors[0], MyException)

class TestResumeToken(unittest.TestCase):
    def test_inline(self) -> None:
        steps = []
        token = ResumeToken(lambda: steps.append(True))
        self.assertTrue(token)
        token()
        self.assertTrue(token.resumed_inline)
        self.assertEqual(steps, [])

    def test_later(self) -> None:
        steps = []
        token = ResumeToken(lambda: steps.append(True))
        token.on_stack = False
        token()
        self.assertFalse(token.resumed_inline)
        self.assertEqual(steps, [True])

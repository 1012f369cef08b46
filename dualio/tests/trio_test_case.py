"A variant of unittest.TestCase whose async test methods each run under trio.run"
import functools
import trio
import unittest

class TrioTestCase(unittest.TestCase):
    """Each `async def test_*` runs in its own trio.run, with a nursery available as `self.nursery`.

    The nursery is cancelled once the test body and asyncTearDown finish, so
    background tasks started in it don't need to be cleaned up by hand.

    """
    nursery: trio.Nursery

    async def asyncSetUp(self) -> None:
        pass

    async def asyncTearDown(self) -> None:
        pass

    def __init__(self, methodName: str='runTest') -> None:
        test = getattr(type(self), methodName, None)
        if test is None:
            # collectors build instances with the default 'runTest' name
            super().__init__(methodName)
            return
        @functools.wraps(test)
        async def test_with_setup() -> None:
            async with trio.open_nursery() as nursery:
                self.nursery = nursery
                await self.asyncSetUp()
                try:
                    await test(self)
                finally:
                    await self.asyncTearDown()
                nursery.cancel_scope.cancel()
        @functools.wraps(test_with_setup)
        def sync_test_with_setup() -> None:
            trio.run(test_with_setup)
        setattr(self, methodName, sync_test_with_setup)
        super().__init__(methodName)

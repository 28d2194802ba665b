# Para Rodar o Script:
# pytest authguard/test/unit/test_revocation_cleanup.py -v

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from authguard.adapters.outbound.security.revocation import InMemoryRevocationGate
from authguard.domain.exceptions import DatabaseOperationException
from authguard.main import create_app, revocation_cleanup_loop
from authguard.test.helpers import FIXED_NOW, FakeClock


class RecordingRevocationGate(InMemoryRevocationGate):
    """Records the result of every cleanup pass; fails the first ``failures`` passes."""

    def __init__(self, failures: int = 0, **kwargs):
        super().__init__(**kwargs)
        self.failures = failures
        self.passes = []

    def cleanup_expired(self) -> int:
        if self.failures > 0:
            self.failures -= 1
            self.passes.append(None)
            raise DatabaseOperationException("cleanup failed")
        removed = super().cleanup_expired()
        self.passes.append(removed)
        return removed


async def wait_for_passes(gate, count: int, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while len(gate.passes) < count:
        assert loop.time() < deadline, "cleanup loop did not run"
        await asyncio.sleep(0.01)


async def stop(task: asyncio.Task) -> None:
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_cleanup_loop_purges_expired_entries():
    clock = FakeClock()
    gate = RecordingRevocationGate(clock=clock)
    gate.revoke("expired", datetime.fromtimestamp(FIXED_NOW + 5, tz=timezone.utc))
    gate.revoke("live", datetime.fromtimestamp(FIXED_NOW + 500, tz=timezone.utc))
    clock.advance(10)

    task = asyncio.create_task(revocation_cleanup_loop(gate, 0.01))
    await wait_for_passes(gate, 1)
    await stop(task)

    assert gate.passes[0] == 1
    assert gate.is_revoked("live") is True


@pytest.mark.asyncio
async def test_cleanup_loop_keeps_running_after_database_error(caplog):
    gate = RecordingRevocationGate(failures=1, clock=FakeClock())

    with caplog.at_level(logging.ERROR):
        task = asyncio.create_task(revocation_cleanup_loop(gate, 0.01))
        await wait_for_passes(gate, 2)
        await stop(task)

    assert gate.passes[:2] == [None, 0]
    assert "Error cleaning up revoked tokens" in caplog.text


@pytest.mark.asyncio
async def test_lifespan_starts_and_cancels_cleanup_task(settings, clock):
    app = create_app(settings, clock=clock)

    async with app.router.lifespan_context(app):
        task = app.state.revocation_cleanup_task
        assert not task.done()

    assert task.cancelled()

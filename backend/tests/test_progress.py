"""Tests for the scan progress broadcaster."""

import pytest

from fileindex.schemas.files import ScanProgress
from fileindex.services.progress import ProgressBroadcaster


def _event(n: int) -> ScanProgress:
    return ScanProgress(current_path=f"/d/f{n}", count=n)


@pytest.mark.asyncio
async def test_fan_out_to_all_subscribers(progress):
    async with progress.subscribe() as q1, progress.subscribe() as q2:
        assert progress.subscriber_count == 2
        progress.publish(_event(1))
        progress.publish(_event(2))

        assert [q1.get_nowait().count, q1.get_nowait().count] == [1, 2]
        assert [q2.get_nowait().count, q2.get_nowait().count] == [1, 2]

    assert progress.subscriber_count == 0


@pytest.mark.asyncio
async def test_publish_without_subscribers_keeps_latest(progress):
    assert progress.latest is None
    progress.publish(_event(7))
    assert progress.latest.count == 7


@pytest.mark.asyncio
async def test_slow_subscriber_drops_oldest():
    broadcaster = ProgressBroadcaster(queue_size=2)
    async with broadcaster.subscribe() as queue:
        for n in range(1, 5):
            broadcaster.publish(_event(n))

        assert queue.qsize() == 2
        assert [queue.get_nowait().count, queue.get_nowait().count] == [3, 4]


@pytest.mark.asyncio
async def test_subscriber_removed_on_error(progress):
    with pytest.raises(RuntimeError):
        async with progress.subscribe():
            raise RuntimeError("client went away")
    assert progress.subscriber_count == 0

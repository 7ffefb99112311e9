import asyncio

from services.sync_loop import SyncLoop
from services.sync_service import SyncService


MILK = {"name": "Milk", "listId": "L1"}


class ExplodingService:
    def __init__(self):
        self.calls = 0

    def sync_pending(self):
        self.calls += 1
        raise RuntimeError("store gone")


def test_loop_ticks_until_stopped(queue, api):
    queue.enqueue("create_item", MILK)
    loop = SyncLoop(SyncService(queue, api), interval_sec=0.01)

    async def scenario():
        async with loop:
            for _ in range(200):
                if loop.ticks >= 3:
                    break
                await asyncio.sleep(0.01)
        return loop.ticks

    ticks = asyncio.run(scenario())

    assert ticks >= 3
    assert loop.running is False
    assert queue.count_pending() == 0
    # the action is replayed once, later ticks find nothing pending
    assert len(api.calls) == 1


def test_first_tick_runs_immediately(queue, api):
    queue.enqueue("create_item", MILK)
    loop = SyncLoop(SyncService(queue, api), interval_sec=60)

    async def scenario():
        async with loop:
            for _ in range(200):
                if loop.ticks:
                    break
                await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert loop.ticks == 1
    assert queue.count_pending() == 0


def test_crashing_tick_keeps_loop_alive():
    service = ExplodingService()
    loop = SyncLoop(service, interval_sec=0.01)

    async def scenario():
        async with loop:
            for _ in range(200):
                if service.calls >= 2:
                    break
                await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert service.calls >= 2


def test_tick_returns_report(queue, api):
    loop = SyncLoop(SyncService(queue, api), interval_sec=1)
    api.online = False
    report = asyncio.run(loop.tick())
    assert report.skipped_offline is True


def test_start_with_host_runner(queue, api):
    started = []

    class FakeFuture:
        cancelled = False

        def cancel(self):
            self.cancelled = True

    future = FakeFuture()

    def run_task(handler):
        started.append(handler)
        return future

    loop = SyncLoop(SyncService(queue, api), interval_sec=1)
    loop.start(run_task)
    loop.start(run_task)

    assert len(started) == 1
    assert loop.running is True

    loop.stop()
    assert future.cancelled is True
    assert loop.running is False

from __future__ import annotations

import asyncio
from datetime import timedelta

from sleepwatch.scheduler import APSchedulerTimers, build_scheduler


def test_schedule_cancel_and_pending() -> None:
    timers = APSchedulerTimers(build_scheduler())

    timers.schedule("checkup:s1:1", timedelta(minutes=10), lambda: None)
    timers.schedule("checkup:s2:2", timedelta(minutes=10), lambda: None)

    assert sorted(timers.pending()) == ["checkup:s1:1", "checkup:s2:2"]
    timers.cancel("checkup:s1:1")
    timers.cancel("checkup:missing:9")
    assert timers.pending() == ["checkup:s2:2"]


def test_job_runs_callback_on_the_loop() -> None:
    fired = []

    async def scenario():
        timers = APSchedulerTimers(build_scheduler())
        timers.start()
        timers.schedule("checkup:s1:1", timedelta(milliseconds=50), lambda: fired.append("s1"))
        for _ in range(40):
            if fired:
                break
            await asyncio.sleep(0.05)
        timers.shutdown()

    asyncio.run(scenario())

    assert fired == ["s1"]

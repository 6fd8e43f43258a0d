import asyncio
import logging

from pairdraw.server.reaper import reap_once, reaper_loop


def test_reap_once_logs_evictions(store, clock, caplog):
    rid, _ = store.create_room()
    clock.now += 7_200

    with caplog.at_level(logging.INFO):
        evicted = reap_once(store, max_age_s=3_600)

    assert evicted == [rid]
    assert f"cleaned up inactive room {rid}" in caplog.text


def test_reap_once_leaves_occupied_rooms(store, clock):
    rid, _ = store.create_room()
    store.add_member(rid, "c1", "Alice")
    clock.now += 7_200
    assert reap_once(store, max_age_s=3_600) == []
    assert rid in store


def test_loop_sweeps_until_cancelled(store, clock):
    rid, _ = store.create_room()
    clock.now += 10

    async def run():
        task = asyncio.create_task(reaper_loop(store, interval_s=0.01, max_age_s=5))
        for _ in range(100):
            if rid not in store:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return task

    task = asyncio.run(run())
    assert rid not in store
    assert task.cancelled()


def test_loop_survives_sweep_failure(store, monkeypatch, caplog):
    calls = []

    def flaky(max_age_s, now=None):
        calls.append(max_age_s)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return []

    monkeypatch.setattr(store, "reap", flaky)

    async def run():
        task = asyncio.create_task(reaper_loop(store, interval_s=0.01, max_age_s=5))
        for _ in range(100):
            if len(calls) >= 2:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    with caplog.at_level(logging.ERROR):
        asyncio.run(run())
    assert len(calls) >= 2
    assert "reaper sweep failed" in caplog.text

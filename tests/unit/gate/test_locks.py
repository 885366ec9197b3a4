"""Tests for UserLockArena."""

import asyncio

import pytest

from threadwarden.gate.locks import UserLockArena


class TestUserLockArena:
    @pytest.mark.asyncio
    async def test_same_user_is_serialized(self) -> None:
        arena = UserLockArena()
        inside = 0
        peak = 0

        async def worker() -> None:
            nonlocal inside, peak
            async with arena.acquire("u1"):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0.01)
                inside -= 1

        await asyncio.gather(*(worker() for _ in range(5)))

        assert peak == 1

    @pytest.mark.asyncio
    async def test_different_users_run_concurrently(self) -> None:
        arena = UserLockArena()
        both_inside = asyncio.Event()
        entered: set[str] = set()

        async def worker(user_id: str) -> None:
            async with arena.acquire(user_id):
                entered.add(user_id)
                if len(entered) == 2:
                    both_inside.set()
                await asyncio.wait_for(both_inside.wait(), timeout=1)

        await asyncio.gather(worker("u1"), worker("u2"))

        assert entered == {"u1", "u2"}

    @pytest.mark.asyncio
    async def test_slots_are_reclaimed(self) -> None:
        arena = UserLockArena()

        async with arena.acquire("u1"):
            assert len(arena) == 1
            assert arena.is_locked("u1")

        assert len(arena) == 0
        assert not arena.is_locked("u1")

    @pytest.mark.asyncio
    async def test_slot_released_when_block_raises(self) -> None:
        arena = UserLockArena()

        with pytest.raises(RuntimeError):
            async with arena.acquire("u1"):
                raise RuntimeError("boom")

        assert len(arena) == 0
        async with arena.acquire("u1"):
            pass

    @pytest.mark.asyncio
    async def test_waiter_keeps_slot_alive(self) -> None:
        arena = UserLockArena()
        release = asyncio.Event()

        async def holder() -> None:
            async with arena.acquire("u1"):
                await release.wait()

        first = asyncio.create_task(holder())
        await asyncio.sleep(0)
        second = asyncio.create_task(holder())
        await asyncio.sleep(0)
        assert len(arena) == 1

        release.set()
        await asyncio.gather(first, second)
        assert len(arena) == 0

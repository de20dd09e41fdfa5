import unittest
from datetime import timedelta

from support import NOON, StoreTestCase
from xpot_draw.db.models import User
from xpot_draw.errors import NotFound
from xpot_draw.services import hub_service


class MissionTests(unittest.TestCase):
    def test_same_day_same_mission(self):
        morning = hub_service.mission_of_the_day(NOON.replace(hour=1))
        evening = hub_service.mission_of_the_day(NOON.replace(hour=23))
        self.assertEqual(morning, evening)
        self.assertEqual(morning["ymd"], "2025-03-14")
        self.assertEqual(morning["source"], "seeded")

    def test_mission_comes_from_catalogue(self):
        titles = {title for title, _ in hub_service.MISSIONS}
        for days in range(14):
            mission = hub_service.mission_of_the_day(NOON + timedelta(days=days))
            self.assertIn(mission["title"], titles)

    def test_fnv1a_reference_values(self):
        self.assertEqual(hub_service._fnv1a(""), 2166136261)
        self.assertEqual(hub_service._fnv1a("a"), 0xE40C292C)


class StreakTests(StoreTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        async with self.Session.begin() as session:
            session.add(User(external_id="holder-1", x_handle="holder"))

    async def _mark(self, now):
        async with self.Session.begin() as session:
            return await hub_service.mark_streak_done(session, "holder-1", now)

    async def test_new_streak(self):
        async with self.Session.begin() as session:
            streak = await hub_service.get_streak(session, "holder-1", NOON)
        self.assertEqual(streak, {"days": 0, "todayDone": False, "lastDoneYmd": None})

    async def test_consecutive_days_increment(self):
        await self._mark(NOON)
        streak = await self._mark(NOON + timedelta(days=1))
        self.assertEqual(streak["days"], 2)
        self.assertTrue(streak["todayDone"])
        self.assertEqual(streak["lastDoneYmd"], "2025-03-15")

    async def test_same_day_counts_once(self):
        await self._mark(NOON)
        streak = await self._mark(NOON + timedelta(hours=3))
        self.assertEqual(streak["days"], 1)

    async def test_gap_restarts(self):
        await self._mark(NOON)
        await self._mark(NOON + timedelta(days=1))
        streak = await self._mark(NOON + timedelta(days=3))
        self.assertEqual(streak["days"], 1)

    async def test_unknown_user(self):
        async with self.Session() as session:
            with self.assertRaises(NotFound) as ctx:
                await hub_service.get_streak(session, "nobody", NOON)
        self.assertEqual(ctx.exception.code, "USER_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()

import unittest
from unittest.mock import AsyncMock, patch

import httpx
from sqlalchemy.exc import SQLAlchemyError

from support import StoreTestCase
from xpot_draw.api.deps import get_db
from xpot_draw.config import settings
from xpot_draw.main import app

ADMIN_TOKEN = "test-admin-token"
ADMIN = {"x-admin-token": ADMIN_TOKEN}
WALLETS = [
    "7Xq4pPz9Ut3kLmN8bVcR2sD5fG6hJ1wWtZx",
    "9Fh2KsD8aQ3mNpL6rT5vW1yZ4cB7eG0jHuX",
    "3Ab5Cd7Ef9Gh1Jk3Lm5Np7Qr9St1Uv3Wx5Yz",
]


class ApiTestCase(StoreTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()

        async def override_get_db():
            async with self.Session() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)

        token_patch = patch.object(settings, "ADMIN_TOKEN", ADMIN_TOKEN)
        token_patch.start()
        self.addCleanup(token_patch.stop)

        self.client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test",
        )

    async def asyncTearDown(self) -> None:
        await self.client.aclose()
        await super().asyncTearDown()

    async def claim(self, wallet: str) -> dict:
        resp = await self.client.post("/api/tickets/claim", json={"walletAddress": wallet})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()


class DrawFlowTests(ApiTestCase):
    async def test_claim_pick_and_publish(self):
        claimed = [await self.claim(w) for w in WALLETS]
        self.assertTrue(all(c["created"] for c in claimed))
        self.assertEqual(len({c["drawId"] for c in claimed}), 1)

        again = await self.claim(WALLETS[0])
        self.assertFalse(again["created"])
        self.assertEqual(again["ticket"]["id"], claimed[0]["ticket"]["id"])

        resp = await self.client.post("/api/admin/pick-winner", headers=ADMIN)
        self.assertEqual(resp.status_code, 200, resp.text)
        winner = resp.json()["winner"]
        self.assertIn(winner["walletAddress"], WALLETS)
        self.assertEqual(winner["kind"], "MAIN")

        today = (await self.client.get("/api/draw/today")).json()
        self.assertTrue(today["ok"])
        self.assertEqual(today["draw"]["status"], "completed")
        self.assertEqual(today["draw"]["ticketsCount"], 3)
        self.assertEqual(today["draw"]["winnerTicketId"], winner["ticketId"])

        # A second pick returns the same winner
        resp = await self.client.post("/api/admin/pick-winner", headers=ADMIN)
        self.assertEqual(resp.json()["winner"]["id"], winner["id"])

        public = (await self.client.get("/api/public/winners")).json()
        self.assertEqual(len(public["winners"]), 1)
        card = public["winners"][0]
        address = winner["walletAddress"]
        self.assertEqual(card["walletAddress"], f"{address[:4]}...{address[-4:]}")
        self.assertEqual(card["amountXpot"], settings.DAILY_XPOT)

        latest = (await self.client.get("/api/public/winners/latest")).json()
        self.assertEqual(latest["winner"]["id"], winner["id"])

    async def test_pick_without_tickets(self):
        resp = await self.client.post("/api/admin/create-today-draw", headers=ADMIN)
        self.assertEqual(resp.status_code, 200, resp.text)

        resp = await self.client.post("/api/admin/pick-winner", headers=ADMIN)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"ok": False, "error": "NO_TICKETS_IN_DRAW"})

        today = (await self.client.get("/api/draw/today")).json()
        self.assertEqual(today["draw"]["status"], "open")

    async def test_create_today_draw_twice(self):
        await self.client.post("/api/admin/create-today-draw", headers=ADMIN)
        resp = await self.client.post("/api/admin/create-today-draw", headers=ADMIN)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "DRAW_ALREADY_EXISTS")

    async def test_reopen_after_pick(self):
        for w in WALLETS[:2]:
            await self.claim(w)
        first = (await self.client.post("/api/admin/pick-winner", headers=ADMIN)).json()["winner"]

        resp = await self.client.post("/api/admin/draw/reopen", headers=ADMIN)
        self.assertEqual(resp.json(), {"ok": True, "message": "DRAW_REOPENED", "drawId": first["drawId"]})

        self.assertEqual((await self.client.get("/api/draw/today")).json()["draw"]["status"], "open")
        public = (await self.client.get("/api/public/winners")).json()
        self.assertEqual(public["winners"], [])

        audit = (await self.client.get("/api/admin/winners", headers=ADMIN)).json()
        self.assertEqual([w["isVoided"] for w in audit["winners"]], [True])

    async def test_reopen_unknown_draw(self):
        resp = await self.client.post("/api/admin/draw/reopen", headers=ADMIN, json={"drawId": 77})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "NO_DRAW_FOUND")

    async def test_today_tickets_are_masked(self):
        await self.claim(WALLETS[0])
        tickets = (await self.client.get("/api/tickets/today")).json()["tickets"]
        self.assertEqual(tickets[0]["walletAddress"], "7Xq4...WtZx")
        self.assertEqual(tickets[0]["status"], "in-draw")

        admin_view = (await self.client.get("/api/admin/tickets", headers=ADMIN)).json()
        self.assertEqual(admin_view["tickets"][0]["walletAddress"], WALLETS[0])

    async def test_history(self):
        await self.claim(WALLETS[0])
        resp = await self.client.get("/api/tickets/history", params={"walletAddress": WALLETS[0]})
        self.assertEqual(len(resp.json()["tickets"]), 1)

        resp = await self.client.get("/api/tickets/history")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "MISSING_WALLET_ADDRESS")

    async def test_claim_validation(self):
        resp = await self.client.post("/api/tickets/claim", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"ok": False, "error": "MISSING_WALLET_ADDRESS"})


class AdminAuthTests(ApiTestCase):
    async def test_missing_header(self):
        resp = await self.client.get("/api/admin/health")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"ok": False, "error": "UNAUTHORIZED"})

    async def test_wrong_token(self):
        resp = await self.client.get("/api/admin/health", headers={"x-admin-token": "nope"})
        self.assertEqual(resp.status_code, 401)

    async def test_bearer_token(self):
        resp = await self.client.get(
            "/api/admin/health", headers={"Authorization": f"Bearer {ADMIN_TOKEN}"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["ok"])

    async def test_unset_token_denies_everyone(self):
        with patch.object(settings, "ADMIN_TOKEN", None):
            resp = await self.client.get("/api/admin/health", headers=ADMIN)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"ok": False, "error": "ADMIN_TOKEN_NOT_CONFIGURED"})

    async def test_every_admin_route_is_guarded(self):
        routes = [
            ("GET", "/api/admin/dashboard"),
            ("GET", "/api/admin/tickets"),
            ("GET", "/api/admin/winners"),
            ("POST", "/api/admin/pick-winner"),
            ("POST", "/api/admin/draw/reopen"),
            ("POST", "/api/admin/panic/close-today"),
        ]
        for method, path in routes:
            with self.subTest(path=path):
                resp = await self.client.request(method, path)
                self.assertEqual(resp.status_code, 401)


class PublicWinnersTests(ApiTestCase):
    async def test_limit_is_clamped(self):
        cases = {"999": 50, "0": 1, "-4": 1, "abc": 20, "7.9": 7, "1e400": 50, "inf": 50}
        for raw, expected in cases.items():
            with self.subTest(limit=raw):
                resp = await self.client.get("/api/public/winners", params={"limit": raw})
                self.assertEqual(resp.json()["limit"], expected)

        resp = await self.client.get("/api/public/winners")
        self.assertEqual(resp.json(), {"ok": True, "limit": 20, "winners": []})

    async def test_admin_limit_is_clamped_higher(self):
        for raw in ("999", "1e400"):
            with self.subTest(limit=raw):
                resp = await self.client.get("/api/admin/winners", params={"limit": raw}, headers=ADMIN)
                self.assertEqual(resp.status_code, 200)
                self.assertEqual(resp.json()["limit"], 80)

    async def test_store_failure(self):
        failing = AsyncMock(side_effect=SQLAlchemyError("connection reset"))
        with patch("xpot_draw.db.crud.winner.list_recent", failing):
            public = await self.client.get("/api/public/winners")
            admin = await self.client.get("/api/admin/winners", headers=ADMIN)

        self.assertEqual(public.status_code, 500)
        self.assertEqual(public.json(), {"ok": False, "error": "INTERNAL_ERROR"})
        self.assertEqual(admin.status_code, 500)
        self.assertIn("connection reset", admin.json()["message"])


class BonusApiTests(ApiTestCase):
    async def test_schedule_and_live(self):
        await self.claim(WALLETS[0])
        resp = await self.client.post(
            "/api/admin/bonus-schedule",
            headers=ADMIN,
            json={"amountXpot": 100000, "label": "Lunch drop", "delayMinutes": 15},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["drop"]["status"], "SCHEDULED")

        live = await self.client.get("/api/bonus/live")
        self.assertEqual(live.headers["cache-control"], "no-store, max-age=0")
        self.assertEqual([b["status"] for b in live.json()["bonus"]], ["UPCOMING"])

        upcoming = (await self.client.get("/api/admin/bonus-schedule", headers=ADMIN)).json()
        self.assertTrue(upcoming["drawExists"])
        self.assertEqual(len(upcoming["upcoming"]), 1)

    async def test_legacy_minutes_from_now(self):
        resp = await self.client.post(
            "/api/admin/bonus-schedule",
            headers=ADMIN,
            json={"amountXpot": 100000, "minutesFromNow": 5},
        )
        self.assertEqual(resp.status_code, 200, resp.text)

    async def test_bonus_pick_below_minimum(self):
        await self.claim(WALLETS[0])
        resp = await self.client.post(
            "/api/admin/pick-bonus-winner", headers=ADMIN, json={"amountXpot": 5},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "INVALID_AMOUNT")

    async def test_malformed_body(self):
        resp = await self.client.post(
            "/api/admin/pick-bonus-winner", headers=ADMIN, json={"amountXpot": "lots"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"ok": False, "error": "INVALID_REQUEST"})

    async def test_internal_run_requires_key(self):
        with patch.object(settings, "INTERNAL_CRON_KEY", "cron-key"):
            denied = await self.client.post("/api/internal/bonus-run")
            allowed = await self.client.post(
                "/api/internal/bonus-run", headers={"x-xpot-internal-key": "cron-key"},
            )
        self.assertEqual(denied.status_code, 401)
        self.assertEqual(allowed.status_code, 200)
        self.assertEqual(allowed.json()["fired"], [])


class DevResetTests(ApiTestCase):
    async def test_disabled_outside_development(self):
        with patch.object(settings, "APP_ENV", "production"), \
                patch.object(settings, "DEV_RESET_SECRET", "s3cret"):
            resp = await self.client.post("/api/dev/reset-db", params={"secret": "s3cret"})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "RESET_DISABLED_IN_PROD")

    async def test_bad_secret(self):
        with patch.object(settings, "APP_ENV", "development"), \
                patch.object(settings, "DEV_RESET_SECRET", "s3cret"):
            resp = await self.client.post("/api/dev/reset-db", params={"secret": "guess"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "BAD_SECRET")

    async def test_reset_seeds_open_draw(self):
        await self.claim(WALLETS[0])
        with patch.object(settings, "APP_ENV", "development"), \
                patch.object(settings, "DEV_RESET_SECRET", "s3cret"):
            resp = await self.client.post("/api/dev/reset-db", params={"secret": "s3cret"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["tickets"], 3)

        tickets = (await self.client.get("/api/tickets/today")).json()["tickets"]
        self.assertEqual(len(tickets), 3)
        self.assertNotIn(WALLETS[0], [t["walletAddress"] for t in tickets])


class HubApiTests(ApiTestCase):
    async def test_mission(self):
        body = (await self.client.get("/api/hub/mission/today", params={"seed": "abc"})).json()
        self.assertTrue(body["ok"])
        self.assertIn("title", body["mission"])

    async def test_streak_requires_user(self):
        resp = await self.client.get("/api/hub/streak")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "UNAUTHENTICATED")

    async def test_ping(self):
        body = (await self.client.get("/api/ops/ping")).json()
        self.assertTrue(body["ok"])
        self.assertTrue(body["now"].endswith("Z"))


if __name__ == "__main__":
    unittest.main()

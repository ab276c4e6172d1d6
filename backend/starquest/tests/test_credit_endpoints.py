"""Tests for credit settings and interest tier endpoints."""

import asyncio
import pathlib
import sys

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from starquest.main import app
from starquest.database import get_session


async def _setup_test_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    TestSession = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_session():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return TestSession


async def _parent_and_child(client):
    await client.post(
        "/register",
        json={"name": "Lin", "email": "lin@example.com", "password": "pass"},
    )
    resp = await client.post(
        "/login", json={"email": "lin@example.com", "password": "pass"}
    )
    headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
    resp = await client.post(
        "/children/",
        headers=headers,
        json={"name": "Bo", "email": "bo@example.com", "password": "pass", "locale": "zh-CN"},
    )
    return headers, resp.json()["id"]


def test_credit_settings_round_trip():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            headers, child_id = await _parent_and_child(client)

            resp = await client.get(f"/credit/children/{child_id}", headers=headers)
            assert resp.status_code == 200
            assert resp.json()["credit_enabled"] is False
            assert resp.json()["credit_limit"] == 0

            resp = await client.put(
                f"/credit/children/{child_id}",
                headers=headers,
                json={"credit_enabled": True, "credit_limit": 40},
            )
            assert resp.status_code == 200
            assert resp.json()["original_credit_limit"] == 40

            resp = await client.put(
                f"/credit/children/{child_id}",
                headers=headers,
                json={"credit_enabled": False, "credit_limit": 40},
            )
            assert resp.json()["original_credit_limit"] == 0

            resp = await client.put(
                f"/credit/children/{child_id}",
                headers=headers,
                json={"credit_enabled": True, "credit_limit": -5},
            )
            assert resp.status_code == 422

            resp = await client.get("/credit/children/nobody", headers=headers)
            assert resp.status_code == 404

    asyncio.run(run())


def test_interest_tier_editing():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            headers, _ = await _parent_and_child(client)

            resp = await client.get("/credit/tiers", headers=headers)
            assert resp.json() == []

            resp = await client.post("/credit/tiers/defaults", headers=headers)
            assert resp.status_code == 200
            tiers = resp.json()
            assert [t["rate_display"] for t in tiers] == ["5%", "10%", "15%"]
            assert [t["range_display"] for t in tiers] == ["0-19", "20-49", "50+"]

            resp = await client.post("/credit/tiers/defaults", headers=headers)
            assert resp.status_code == 400

            resp = await client.post(
                "/credit/tiers",
                headers=headers,
                json={"min_debt": 100, "max_debt": None, "interest_rate": 0.2},
            )
            assert resp.status_code == 200
            tiers = resp.json()
            assert [t["range_display"] for t in tiers] == ["0-19", "20-49", "50-99", "100+"]
            top_id = tiers[3]["id"]

            resp = await client.put(
                f"/credit/tiers/{tiers[1]['id']}",
                headers=headers,
                json={"interest_rate": 0.5},
            )
            assert resp.status_code == 400

            resp = await client.put(
                f"/credit/tiers/{tiers[1]['id']}",
                headers=headers,
                json={"interest_rate": 0.12},
            )
            assert resp.status_code == 200
            assert resp.json()[1]["rate_display"] == "12%"

            resp = await client.delete(f"/credit/tiers/{top_id}", headers=headers)
            assert resp.status_code == 200
            tiers = resp.json()
            assert [t["range_display"] for t in tiers] == ["0-19", "20-49", "50+"]

            resp = await client.put(
                "/credit/tiers",
                headers=headers,
                json=[
                    {"min_debt": 0, "max_debt": 9, "interest_rate": 0.0},
                    {"min_debt": 10, "max_debt": None, "interest_rate": 1.0},
                ],
            )
            assert resp.status_code == 200
            assert [t["rate_display"] for t in resp.json()] == ["0%", "100%"]

            resp = await client.put(
                "/credit/tiers",
                headers=headers,
                json=[{"min_debt": 0, "max_debt": 9, "interest_rate": 0.05}],
            )
            assert resp.status_code == 400

    asyncio.run(run())


def test_tier_changes_require_parent():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await _parent_and_child(client)
            resp = await client.post(
                "/login", json={"email": "bo@example.com", "password": "pass"}
            )
            child_headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

            resp = await client.get("/credit/tiers", headers=child_headers)
            assert resp.status_code == 200

            resp = await client.post("/credit/tiers/defaults", headers=child_headers)
            assert resp.status_code == 403

    asyncio.run(run())

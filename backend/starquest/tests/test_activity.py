"""Tests for star requests, parent records and batch review."""

import asyncio
import pathlib
import sys

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from starquest.main import app
from starquest.database import get_session
from starquest.models import StarTransaction


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


async def _login(client, email, password="pass"):
    resp = await client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


async def _family(client, suffix=""):
    resp = await client.post(
        "/register",
        json={"name": "Mum", "email": f"mum{suffix}@example.com", "password": "pass"},
    )
    assert resp.status_code == 200
    parent_headers = await _login(client, f"mum{suffix}@example.com")
    resp = await client.post(
        "/children/",
        headers=parent_headers,
        json={"name": "Kid", "email": f"kid{suffix}@example.com", "password": "pass"},
    )
    assert resp.status_code == 200
    child_id = resp.json()["id"]
    child_headers = await _login(client, f"kid{suffix}@example.com")
    return parent_headers, child_headers, child_id


async def _request(client, child_headers, stars, note="done"):
    resp = await client.post(
        "/activity/request",
        headers=child_headers,
        json={"stars": stars, "custom_description": "Tidy room", "child_note": note},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"
    return resp.json()["id"]


def test_parent_record_is_approved_and_counted():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            parent_headers, child_headers, child_id = await _family(client)

            resp = await client.post(
                "/activity/record",
                headers=parent_headers,
                json={"child_id": child_id, "stars": 10, "custom_description": "Homework"},
            )
            assert resp.status_code == 200
            data = resp.json()
            assert data["status"] == "approved"
            assert data["reviewed_at"].endswith("Z")

            resp = await client.post(
                "/activity/record",
                headers=parent_headers,
                json={"child_id": child_id, "stars": -3, "custom_description": "Rude"},
            )
            assert resp.status_code == 200

            resp = await client.get("/children/me/balance", headers=child_headers)
            assert resp.status_code == 200
            balance = resp.json()
            assert balance["current_stars"] == 7
            assert balance["lifetime_stars"] == 10

            # Children cannot record stars for themselves
            resp = await client.post(
                "/activity/record",
                headers=child_headers,
                json={"child_id": child_id, "stars": 50, "custom_description": "x"},
            )
            assert resp.status_code == 403

    asyncio.run(run())


def test_batch_approve_updates_balance():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            parent_headers, child_headers, child_id = await _family(client)
            first = await _request(client, child_headers, 5)
            second = await _request(client, child_headers, 7)
            await _request(client, child_headers, 100)

            resp = await client.post(
                "/activity/batch-approve",
                headers=parent_headers,
                json={"ids": [first, second, first]},
            )
            assert resp.status_code == 200
            assert resp.json() == {"processed": 2}

            resp = await client.get(
                "/activity/", headers=parent_headers, params={"status": "approved"}
            )
            approved = resp.json()
            assert {tx["id"] for tx in approved} == {first, second}
            for tx in approved:
                assert tx["reviewed_by"] is not None
                assert tx["reviewed_at"] is not None

            resp = await client.get(f"/children/{child_id}/balance", headers=parent_headers)
            assert resp.json()["current_stars"] == 12

    asyncio.run(run())


def test_batch_reject_requires_reason():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            parent_headers, child_headers, _ = await _family(client)
            tx_id = await _request(client, child_headers, 5)

            resp = await client.post(
                "/activity/batch-reject",
                headers=parent_headers,
                json={"ids": [tx_id], "reason": "   "},
            )
            assert resp.status_code == 200
            assert resp.json() == {"processed": 0}

            resp = await client.get("/activity/mine", headers=child_headers)
            assert resp.json()[0]["status"] == "pending"

            resp = await client.post(
                "/activity/batch-reject",
                headers=parent_headers,
                json={"ids": [tx_id], "reason": "  Room still messy "},
            )
            assert resp.json() == {"processed": 1}

            resp = await client.get("/activity/mine", headers=child_headers)
            tx = resp.json()[0]
            assert tx["status"] == "rejected"
            assert tx["parent_response"] == "Room still messy"

    asyncio.run(run())


def test_batch_review_is_scoped_to_family():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            _, child_headers, _ = await _family(client, "1")
            other_parent, _, _ = await _family(client, "2")
            tx_id = await _request(client, child_headers, 5)

            resp = await client.post(
                "/activity/batch-approve",
                headers=other_parent,
                json={"ids": [tx_id]},
            )
            assert resp.status_code == 404

    asyncio.run(run())


def test_delete_transaction():
    async def run():
        TestSession = await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            parent_headers, _, child_id = await _family(client)
            resp = await client.post(
                "/activity/record",
                headers=parent_headers,
                json={"child_id": child_id, "stars": 4, "custom_description": "Dishes"},
            )
            tx_id = resp.json()["id"]

            resp = await client.delete(f"/activity/{tx_id}", headers=parent_headers)
            assert resp.status_code == 204

            async with TestSession() as session:
                assert await session.get(StarTransaction, tx_id) is None

            resp = await client.get(f"/children/{child_id}/balance", headers=parent_headers)
            assert resp.json()["current_stars"] == 0

            resp = await client.delete(f"/activity/{tx_id}", headers=parent_headers)
            assert resp.status_code == 404

    asyncio.run(run())


def test_batch_review_skips_already_reviewed_entries():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            parent_headers, child_headers, child_id = await _family(client)
            resp = await client.post(
                "/activity/record",
                headers=parent_headers,
                json={"child_id": child_id, "stars": 6, "custom_description": "Laundry"},
            )
            recorded_id = resp.json()["id"]

            resp = await client.post(
                "/activity/batch-reject",
                headers=parent_headers,
                json={"ids": [recorded_id], "reason": "Changed my mind"},
            )
            assert resp.status_code == 404

            resp = await client.get(f"/children/{child_id}/balance", headers=parent_headers)
            assert resp.json()["current_stars"] == 6

    asyncio.run(run())

"""Integration tests for referral claims, replay safety and the bot webhook."""

import asyncio
import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _uid() -> str:
    return f"it_{uuid.uuid4().hex[:12]}"


async def _balance(client: AsyncClient, account_id: str) -> int:
    return int((await client.get(f"/api/v1/accounts/{account_id}")).json()["data"]["balance"])


class TestClaimReferral:
    async def test_success_then_replay(self, client: AsyncClient) -> None:
        inviter, invitee = _uid(), _uid()
        await client.post("/api/v1/accounts", json={"id": inviter})

        first = await client.post(
            "/api/v1/referrals",
            json={"referrer_id": inviter, "referred_id": invitee, "referred_username": "bob"},
        )
        assert first.status_code == 200
        assert first.json()["data"]["outcome"] == "success"
        assert first.json()["data"]["created"] is True
        assert await _balance(client, inviter) == 200

        replay = await client.post(
            "/api/v1/referrals", json={"referrer_id": inviter, "referred_id": invitee}
        )
        assert replay.status_code == 200
        assert replay.json()["data"]["outcome"] == "already_applied"
        assert await _balance(client, inviter) == 200

        referred = (await client.get(f"/api/v1/accounts/{invitee}")).json()["data"]
        assert referred["referred_by"] == inviter
        assert referred["balance"] == 100

    async def test_concurrent_replays_credit_once(self, client: AsyncClient) -> None:
        inviter, invitee = _uid(), _uid()
        await client.post("/api/v1/accounts", json={"id": inviter})

        responses = await asyncio.gather(*(
            client.post(
                "/api/v1/referrals", json={"referrer_id": inviter, "referred_id": invitee}
            )
            for _ in range(5)
        ))

        outcomes = sorted(r.json()["data"]["outcome"] for r in responses)
        assert outcomes == ["already_applied"] * 4 + ["success"]
        assert await _balance(client, inviter) == 200

    async def test_second_inviter_rejected(self, client: AsyncClient) -> None:
        first, second, invitee = _uid(), _uid(), _uid()
        for account_id in (first, second):
            await client.post("/api/v1/accounts", json={"id": account_id})
        await client.post("/api/v1/referrals", json={"referrer_id": first, "referred_id": invitee})

        resp = await client.post(
            "/api/v1/referrals", json={"referrer_id": second, "referred_id": invitee}
        )

        assert resp.status_code == 409
        assert resp.json()["error"] == "already_referred"
        assert await _balance(client, second) == 100

    async def test_self_referral(self, client: AsyncClient) -> None:
        account_id = _uid()
        await client.post("/api/v1/accounts", json={"id": account_id})
        resp = await client.post(
            "/api/v1/referrals", json={"referrer_id": account_id, "referred_id": account_id}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "self_referral"
        assert await _balance(client, account_id) == 100

    async def test_inviter_not_found_then_retry(self, client: AsyncClient) -> None:
        inviter, invitee = _uid(), _uid()
        missing = await client.post(
            "/api/v1/referrals", json={"referrer_id": inviter, "referred_id": invitee}
        )
        assert missing.status_code == 404
        assert missing.json()["error"] == "inviter_not_found"
        assert (await client.get(f"/api/v1/accounts/{invitee}")).status_code == 404

        await client.post("/api/v1/accounts", json={"id": inviter})
        retry = await client.post(
            "/api/v1/referrals", json={"referrer_id": inviter, "referred_id": invitee}
        )
        assert retry.json()["data"]["outcome"] == "success"

    async def test_blank_referred_id_rejected(self, client: AsyncClient) -> None:
        inviter = _uid()
        await client.post("/api/v1/accounts", json={"id": inviter})

        resp = await client.post(
            "/api/v1/referrals", json={"referrer_id": inviter, "referred_id": "   "}
        )

        assert resp.status_code == 400
        assert resp.json()["error"] == "id_required"
        assert await _balance(client, inviter) == 100

    async def test_crossing_claims_both_answer(self, client: AsyncClient) -> None:
        first, second = _uid(), _uid()
        for account_id in (first, second):
            await client.post("/api/v1/accounts", json={"id": account_id})

        responses = await asyncio.gather(
            client.post(
                "/api/v1/referrals", json={"referrer_id": first, "referred_id": second}
            ),
            client.post(
                "/api/v1/referrals", json={"referrer_id": second, "referred_id": first}
            ),
        )

        assert all(r.status_code in (200, 409) for r in responses)


class TestClaimByUsername:
    async def test_case_insensitive_lookup_credits_inviter(self, client: AsyncClient) -> None:
        inviter, invitee = _uid(), _uid()
        name = f"Inviter_{uuid.uuid4().hex[:8]}"
        await client.post("/api/v1/accounts", json={"id": inviter, "username": name})

        resp = await client.post(
            "/api/v1/referrals/by-username",
            json={"inviter_username": "@" + name.lower(), "referred_id": invitee},
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["outcome"] == "success"
        assert data["referrer_id"] == inviter
        assert await _balance(client, inviter) == 200

    async def test_unknown_username_is_404(self, client: AsyncClient) -> None:
        invitee = _uid()
        resp = await client.post(
            "/api/v1/referrals/by-username",
            json={"inviter_username": f"nobody_{uuid.uuid4().hex}", "referred_id": invitee},
        )

        assert resp.status_code == 404
        assert resp.json()["error"] == "inviter_not_found"
        assert (await client.get(f"/api/v1/accounts/{invitee}")).status_code == 404


class TestBotWebhook:
    async def test_start_ref_links_accounts(self, client: AsyncClient) -> None:
        inviter = str(uuid.uuid4().int % 10**12)
        invitee = str(uuid.uuid4().int % 10**12)
        await client.post("/api/v1/accounts", json={"id": inviter})

        resp = await client.post(
            "/api/v1/bot/webhook",
            json={"message": {"text": f"/start ref_{inviter}",
                              "from": {"id": int(invitee), "username": "newbie"}}},
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["outcome"] == "success"
        referred = (await client.get(f"/api/v1/accounts/{invitee}")).json()["data"]
        assert referred["referred_by"] == inviter
        assert referred["username"] == "newbie"

    async def test_refer_command_links_by_username(self, client: AsyncClient) -> None:
        inviter = _uid()
        invitee = str(uuid.uuid4().int % 10**12)
        name = f"host_{uuid.uuid4().hex[:8]}"
        await client.post("/api/v1/accounts", json={"id": inviter, "username": name})

        resp = await client.post(
            "/api/v1/bot/webhook",
            json={"message": {"text": f"/refer {name}", "from": {"id": int(invitee)}}},
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["outcome"] == "success"
        referred = (await client.get(f"/api/v1/accounts/{invitee}")).json()["data"]
        assert referred["referred_by"] == inviter

    async def test_oversized_referrer_payload_still_answers(self, client: AsyncClient) -> None:
        invitee = str(uuid.uuid4().int % 10**12)

        resp = await client.post(
            "/api/v1/bot/webhook",
            json={"message": {"text": "/start ref_" + "9" * 80, "from": {"id": int(invitee)}}},
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["action"] == "account"

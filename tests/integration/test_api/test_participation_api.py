"""Integration tests for nomination, nominee profile and voter endpoints."""

from datetime import UTC, datetime, timedelta

import pytest

from election_cycle.services import election_service


@pytest.fixture
async def open_cycle(async_session, clean_election, make_accounts):
    """A running cycle whose nomination window has started."""
    await make_accounts("alice", "bob", "carol")
    now = datetime.now(UTC)
    return await election_service.create_cycle(
        async_session,
        title="Board Election",
        description="Elect the board",
        content="",
        nomination_open=now,
        nomination_close=now + timedelta(days=1),
        voting_open=now + timedelta(days=2),
        voting_close=now + timedelta(days=3),
        now=now,
    )


class TestNominationsApi:
    async def test_self_nomination(self, client, open_cycle, auth_headers) -> None:
        response = await client.post("/api/v1/nominations", json={"nominee": "alice"}, headers=auth_headers("alice"))

        assert response.status_code == 201
        body = response.json()
        assert body["nominee"] == "alice"
        assert body["accepted"] is True

        state = (await client.get("/api/v1/election")).json()
        assert state["phase"] == "nominating"
        assert state["nomination_count"] == 1

    async def test_accept_and_decline(self, client, open_cycle, auth_headers) -> None:
        await client.post("/api/v1/nominations", json={"nominee": "bob"}, headers=auth_headers("alice"))
        await client.post("/api/v1/nominations", json={"nominee": "carol"}, headers=auth_headers("alice"))

        accepted = await client.post(
            "/api/v1/nominations/decision", json={"accept": True}, headers=auth_headers("bob")
        )
        declined = await client.post(
            "/api/v1/nominations/decision", json={"accept": False}, headers=auth_headers("carol")
        )

        assert accepted.status_code == 200
        assert accepted.json()["accepted"] is True
        assert declined.status_code == 204
        listing = (await client.get("/api/v1/nominations")).json()
        assert [n["nominee"] for n in listing] == ["bob"]

    async def test_filter_unaccepted(self, client, open_cycle, auth_headers) -> None:
        await client.post("/api/v1/nominations", json={"nominee": "alice"}, headers=auth_headers("alice"))
        await client.post("/api/v1/nominations", json={"nominee": "bob"}, headers=auth_headers("alice"))

        response = await client.get("/api/v1/nominations", params={"accepted": "false"})

        assert [n["nominee"] for n in response.json()] == ["bob"]

    async def test_unknown_nominee(self, client, open_cycle, auth_headers) -> None:
        response = await client.post("/api/v1/nominations", json={"nominee": "ghost"}, headers=auth_headers("alice"))

        assert response.status_code == 404

    async def test_duplicate(self, client, open_cycle, auth_headers) -> None:
        await client.post("/api/v1/nominations", json={"nominee": "bob"}, headers=auth_headers("alice"))

        response = await client.post("/api/v1/nominations", json={"nominee": "bob"}, headers=auth_headers("carol"))

        assert response.status_code == 400
        assert response.json()["detail"] == "'bob' is already nominated"

    async def test_no_cycle(self, client, clean_election, make_accounts, auth_headers) -> None:
        await make_accounts("alice")

        response = await client.post("/api/v1/nominations", json={"nominee": "alice"}, headers=auth_headers("alice"))

        assert response.status_code == 409


class TestNomineesApi:
    async def test_profile_lifecycle(self, client, open_cycle, auth_headers) -> None:
        headers = auth_headers("alice")
        await client.post("/api/v1/nominations", json={"nominee": "alice"}, headers=headers)

        saved = await client.put(
            "/api/v1/nominees/me",
            json={"name": "Alice", "descriptor": "Candidate", "picture": "https://example.com/a.png"},
            headers=headers,
        )
        assert saved.status_code == 200
        assert saved.json()["owner"] == "alice"

        fetched = await client.get("/api/v1/nominees/alice")
        assert fetched.json()["descriptor"] == "Candidate"
        assert [p["owner"] for p in (await client.get("/api/v1/nominees")).json()] == ["alice"]

        deleted = await client.delete("/api/v1/nominees/me", headers=headers)
        assert deleted.status_code == 204
        assert (await client.get("/api/v1/nominees/alice")).status_code == 404

    async def test_invalid_picture(self, client, open_cycle, auth_headers) -> None:
        headers = auth_headers("alice")
        await client.post("/api/v1/nominations", json={"nominee": "alice"}, headers=headers)

        response = await client.put(
            "/api/v1/nominees/me", json={"name": "Alice", "picture": "ipfs://abc"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Picture URL must begin with 'http'"

    async def test_not_nominated(self, client, open_cycle, auth_headers) -> None:
        response = await client.put("/api/v1/nominees/me", json={"name": "Carol"}, headers=auth_headers("carol"))

        assert response.status_code == 404


class TestVotersApi:
    async def test_register_then_repeat(self, client, clean_election, make_accounts, auth_headers, ballots) -> None:
        await make_accounts("alice")

        first = await client.post("/api/v1/voters/register", headers=auth_headers("alice"))
        second = await client.post("/api/v1/voters/register", headers=auth_headers("alice"))

        assert first.status_code == 201
        assert first.json()["newly_registered"] is True
        assert first.json()["referrer"] == "election"
        assert second.status_code == 200
        assert second.json()["newly_registered"] is False
        assert ballots.named("register_voter") == [("register_voter", "alice", "8,VOTE", "election")]

        state = (await client.get("/api/v1/election")).json()
        assert state["pending_voter_count"] == 1

    async def test_lookup(self, client, clean_election, make_accounts, auth_headers) -> None:
        await make_accounts("alice")
        await client.post("/api/v1/voters/register", headers=auth_headers("alice"))

        found = await client.get("/api/v1/voters/alice")
        missing = await client.get("/api/v1/voters/bob")

        assert found.status_code == 200
        assert found.json()["treasury"] == "8,VOTE"
        assert missing.status_code == 404

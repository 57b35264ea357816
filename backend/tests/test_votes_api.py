"""
Tests for impact votes and tallies.
"""

import pytest

from stockcal.db.models import Vote


@pytest.fixture
def nvda_id(event_ids):
    return event_ids["NVIDIA Q3 FY2026 Earnings"]


class TestSubmitVote:
    """POST /votes"""

    def test_first_vote(self, client, nvda_id):
        response = client.post("/votes", json={"eventId": nvda_id, "vote": "yes"})
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["vote"]["vote"] == "yes"
        assert data["aggregate"] == {"eventId": nvda_id, "yes": 1, "no": 0, "no_comment": 0, "total": 1}

    def test_changing_vote_updates_in_place(self, client, session_factory, nvda_id):
        first = client.post("/votes", json={"eventId": nvda_id, "vote": "yes"}).json()["data"]["aggregate"]
        response = client.post("/votes", json={"eventId": nvda_id, "vote": "no"})

        aggregate = response.json()["data"]["aggregate"]
        assert aggregate["yes"] == 0
        assert aggregate["no"] == 1
        assert aggregate["total"] == first["total"] == 1

        db = session_factory()
        try:
            rows = db.query(Vote).filter(Vote.event_id == nvda_id).all()
            assert [r.vote for r in rows] == ["no"]
        finally:
            db.close()

    def test_votes_from_two_users(self, client, other_client, nvda_id):
        client.post("/votes", json={"eventId": nvda_id, "vote": "yes"})
        response = other_client.post("/votes", json={"eventId": nvda_id, "vote": "no_comment"})

        aggregate = response.json()["data"]["aggregate"]
        assert aggregate["total"] == 2
        assert aggregate["total"] == aggregate["yes"] + aggregate["no"] + aggregate["no_comment"]

    def test_invalid_vote_value(self, client, nvda_id):
        response = client.post("/votes", json={"eventId": nvda_id, "vote": "maybe"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

        tally = client.get("/votes", params={"eventId": nvda_id}).json()["data"]["aggregate"]
        assert tally["total"] == 0

    def test_unknown_event(self, client):
        response = client.post("/votes", json={"eventId": 99999, "vote": "yes"})
        assert response.status_code == 404

    def test_requires_identity(self, anon_client, nvda_id):
        response = anon_client.post("/votes", json={"eventId": nvda_id, "vote": "yes"})
        assert response.status_code == 401


class TestGetVotes:
    """GET /votes"""

    def test_event_summary_includes_user_vote(self, client, nvda_id):
        client.post("/votes", json={"eventId": nvda_id, "vote": "no"})

        data = client.get("/votes", params={"eventId": nvda_id}).json()["data"]
        assert data["userVote"] == "no"
        assert data["aggregate"]["no"] == 1

    def test_event_summary_without_votes(self, client, nvda_id):
        data = client.get("/votes", params={"eventId": nvda_id}).json()["data"]
        assert data["userVote"] is None
        assert data["aggregate"]["total"] == 0

    def test_user_votes(self, client, event_ids, nvda_id):
        tesla = event_ids["Tesla Q3 2025 Earnings"]
        client.post("/votes", json={"eventId": nvda_id, "vote": "yes"})
        client.post("/votes", json={"eventId": tesla, "vote": "no"})

        data = client.get("/votes").json()["data"]
        assert sorted(v["eventId"] for v in data) == sorted([nvda_id, tesla])

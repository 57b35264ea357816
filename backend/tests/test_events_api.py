"""
Tests for the event catalog endpoint, the month grid endpoint and the
shared error envelope.
"""

import re


class TestListEvents:
    """GET /events"""

    def test_lists_full_catalog(self, client):
        response = client.get("/events")
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["count"] == 20
        assert len(body["data"]) == 20

    def test_events_in_date_order_with_camel_case_keys(self, client):
        data = client.get("/events").json()["data"]

        dates = [e["eventDate"] for e in data]
        assert dates == sorted(dates)
        first = data[0]
        assert first["title"] == "Tesla Q3 2025 Earnings"
        assert first["impactScope"] == "single_stock"
        assert first["affectedTickers"] == ["TSLA"]
        assert first["isFixedDate"] is True

    def test_ticker_filter_includes_market_events(self, client):
        body = client.get("/events", params={"ticker": "AAPL"}).json()

        assert body["count"] == 10
        for event in body["data"]:
            assert event["impactScope"] == "market" or "AAPL" in event["affectedTickers"]

    def test_category_filter(self, client):
        body = client.get("/events", params={"category": "earnings"}).json()
        assert body["count"] == 8
        assert {e["category"] for e in body["data"]} == {"earnings"}

    def test_scope_filter(self, client):
        assert client.get("/events", params={"scope": "market"}).json()["count"] == 9

    def test_search_query(self, client):
        body = client.get("/events", params={"q": "robinhood"}).json()
        assert body["count"] == 4

    def test_date_range(self, client):
        body = client.get("/events", params={"startDate": "2025-11-01", "endDate": "2025-11-30"}).json()
        assert body["count"] == 11
        assert all(e["eventDate"].startswith("2025-11") for e in body["data"])

    def test_invalid_category_is_bad_request(self, client):
        response = client.get("/events", params={"category": "dividends"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_invalid_date_is_bad_request(self, client):
        response = client.get("/events", params={"startDate": "next week"})
        assert response.status_code == 400


class TestMonthGrid:
    """GET /calendar/month"""

    def cell(self, body, day):
        for week in body["data"]["weeks"]:
            for cell in week:
                if cell["date"] == day:
                    return cell
        return None

    def test_month_shape(self, client):
        response = client.get("/calendar/month", params={"year": 2025, "month": 11})
        assert response.status_code == 200

        body = response.json()
        assert len(body["data"]["weeks"]) == 6
        assert self.cell(body, "2025-10-26")["inMonth"] is False
        assert body["data"]["visibleEventCount"] == 20

    def test_default_events_on_native_date(self, client):
        body = client.get("/calendar/month", params={"year": 2025, "month": 11}).json()
        titles = [e["title"] for e in self.cell(body, "2025-11-07")["defaultEvents"]]
        assert titles == ["FOMC Interest Rate Decision"]

    def test_placed_events_follow_calendar_scope(self, client, event_ids):
        options = event_ids["Robinhood Options Trading Expansion"]
        client.post("/calendar/placements", json={"eventId": options, "date": "2025-11-14"})

        body = client.get("/calendar/month", params={"year": 2025, "month": 11}).json()
        assert [e["id"] for e in self.cell(body, "2025-11-14")["placedEvents"]] == [options]

        hood = client.get("/calendar/month", params={"year": 2025, "month": 11, "ticker": "HOOD"}).json()
        assert self.cell(hood, "2025-11-14")["placedEvents"] == []

    def test_anonymous_month_has_no_placements(self, anon_client):
        body = anon_client.get("/calendar/month", params={"year": 2025, "month": 11}).json()
        assert all(not cell["placedEvents"] for week in body["data"]["weeks"] for cell in week)

    def test_invalid_month(self, client):
        response = client.get("/calendar/month", params={"year": 2025, "month": 13})
        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "month"


class TestIdentityAndErrors:
    """Identity cookie issuance and the error envelope"""

    def test_cookie_issued_when_missing(self, anon_client):
        response = anon_client.get("/healthz")
        assert response.status_code == 200
        assert re.fullmatch(r"user_[0-9a-z]+_\d+", response.cookies["userId"])

    def test_cookie_not_reissued(self, client):
        response = client.get("/healthz")
        assert "set-cookie" not in response.headers

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/no-such-route")
        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOT_FOUND"
        assert body["status_code"] == 404
        assert "message" in body

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

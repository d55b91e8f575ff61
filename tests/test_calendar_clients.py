"""
Tests for the Google Calendar and mock calendar adapters.
"""

import asyncio
import json
from typing import Any, Dict, List

import pendulum
import pytest
import requests

from freeslots.adapters.google_calendar_client import UNTITLED_EVENT, GoogleCalendarClient
from freeslots.adapters.mock_calendar_client import MockCalendarClient
from freeslots.domain.exceptions import AuthenticationError, CalendarAPIError

TZ = "Asia/Tokyo"
START = pendulum.datetime(2025, 5, 15, tz=TZ)
END = pendulum.datetime(2025, 5, 29, tz=TZ)


class FakeResponse:
    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    """Replays canned responses and records requests."""

    def __init__(self, responses: List[Any]):
        self._responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "params": dict(params), "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses) -> GoogleCalendarClient:
    return GoogleCalendarClient(access_token="token-123", session=FakeSession(list(responses)))


class TestGoogleCalendarClient:
    def test_parses_timed_and_all_day_events(self):
        client = _client(
            FakeResponse(
                200,
                {
                    "items": [
                        {
                            "id": "e1",
                            "summary": "Weekly sync",
                            "start": {"dateTime": "2025-05-15T10:00:00+09:00"},
                            "end": {"dateTime": "2025-05-15T11:00:00+09:00"},
                        },
                        {
                            "id": "e2",
                            "start": {"date": "2025-05-20"},
                            "end": {"date": "2025-05-21"},
                            "location": "Osaka",
                        },
                    ]
                },
            )
        )

        events = client.fetch_events("a@example.com", START, END, TZ)

        assert len(events) == 2
        timed, all_day = events
        assert timed.title == "Weekly sync"
        assert not timed.is_all_day
        assert timed.start == pendulum.datetime(2025, 5, 15, 10, tz=TZ)
        assert timed.participant == "a@example.com"
        assert all_day.is_all_day
        assert all_day.title == UNTITLED_EVENT
        assert all_day.location == "Osaka"
        assert all_day.start == pendulum.datetime(2025, 5, 20, tz=TZ)

    def test_request_parameters(self):
        client = _client(FakeResponse(200, {"items": []}))

        client.fetch_events("a@example.com", START, END, TZ)

        request = client.session.requests[0]
        assert request["url"].endswith("/calendars/a%40example.com/events")
        assert request["headers"]["Authorization"] == "Bearer token-123"
        assert request["params"]["singleEvents"] == "true"
        assert request["params"]["orderBy"] == "startTime"
        assert request["params"]["timeMin"] == START.to_iso8601_string()

    def test_uses_configured_calendar_id(self):
        client = GoogleCalendarClient(
            access_token="t",
            session=FakeSession([FakeResponse(200, {"items": []})]),
            calendar_ids={"a@example.com": "team-calendar"},
        )

        client.fetch_events("a@example.com", START, END, TZ)

        assert client.session.requests[0]["url"].endswith("/calendars/team-calendar/events")

    def test_skips_cancelled_transparent_and_malformed_items(self):
        client = _client(
            FakeResponse(
                200,
                {
                    "items": [
                        {
                            "id": "cancelled",
                            "status": "cancelled",
                            "start": {"dateTime": "2025-05-15T10:00:00+09:00"},
                            "end": {"dateTime": "2025-05-15T11:00:00+09:00"},
                        },
                        {
                            "id": "free",
                            "transparency": "transparent",
                            "start": {"dateTime": "2025-05-15T12:00:00+09:00"},
                            "end": {"dateTime": "2025-05-15T13:00:00+09:00"},
                        },
                        {"id": "broken", "start": {}},
                        {
                            "id": "inverted",
                            "start": {"dateTime": "2025-05-15T15:00:00+09:00"},
                            "end": {"dateTime": "2025-05-15T14:00:00+09:00"},
                        },
                    ]
                },
            )
        )

        assert client.fetch_events("a@example.com", START, END, TZ) == []

    def test_follows_pagination(self):
        item = {
            "id": "e1",
            "summary": "x",
            "start": {"dateTime": "2025-05-15T10:00:00+09:00"},
            "end": {"dateTime": "2025-05-15T11:00:00+09:00"},
        }
        client = _client(
            FakeResponse(200, {"items": [item], "nextPageToken": "p2"}),
            FakeResponse(200, {"items": [dict(item, id="e2")]}),
        )

        events = client.fetch_events("a@example.com", START, END, TZ)

        assert [event.event_id for event in events] == ["e1", "e2"]
        assert client.session.requests[1]["params"]["pageToken"] == "p2"

    def test_unauthorized_raises_authentication_error(self):
        client = _client(FakeResponse(401, {}))

        with pytest.raises(AuthenticationError):
            client.fetch_events("a@example.com", START, END, TZ)

    def test_http_error_raises_calendar_error(self):
        client = _client(FakeResponse(500, {}))

        with pytest.raises(CalendarAPIError, match="500"):
            client.fetch_events("a@example.com", START, END, TZ)

    def test_transport_error_raises_calendar_error(self):
        client = _client(requests.exceptions.ConnectionError("down"))

        with pytest.raises(CalendarAPIError):
            client.fetch_events("a@example.com", START, END, TZ)

    def test_async_interface(self):
        client = _client(FakeResponse(200, {"items": []}))

        events = asyncio.run(client.get_events("a@example.com", START, END, TZ))

        assert events == []


class TestMockCalendarClient:
    def test_bundled_data_is_attributed_by_calendar_id(self):
        client = MockCalendarClient(calendar_ids={"kuroda@example.com": "kuroda"})

        events = asyncio.run(
            client.get_events(
                "kuroda@example.com",
                pendulum.datetime(2025, 5, 15, tz=TZ),
                pendulum.datetime(2025, 5, 15, 23, 59, tz=TZ),
                TZ,
            )
        )

        assert [event.title for event in events] == ["Weekly sync", "Client visit (on site)"]
        assert events[1].location == "Shinagawa office"

    def test_all_day_flag(self):
        client = MockCalendarClient()

        events = asyncio.run(client.get_events("kuwabara", START, END, TZ))

        offsite = [event for event in events if event.title == "Offsite"]
        assert len(offsite) == 1
        assert offsite[0].is_all_day

    def test_custom_data_file(self, tmp_path):
        data_file = tmp_path / "events.json"
        data_file.write_text(
            json.dumps(
                [
                    {"calendarId": "x", "title": "ok", "start": "2025-05-15T10:00:00+09:00", "end": "2025-05-15T11:00:00+09:00"},
                    {"calendarId": "x", "title": "no end", "start": "2025-05-15T12:00:00+09:00"},
                    {"calendarId": "y", "title": "other", "start": "2025-05-15T10:00:00+09:00", "end": "2025-05-15T11:00:00+09:00"},
                ]
            ),
            encoding="utf-8",
        )

        client = MockCalendarClient(data_file=data_file)
        events = asyncio.run(client.get_events("x", START, END, TZ))

        assert [event.title for event in events] == ["ok"]

    def test_missing_data_file(self, tmp_path):
        with pytest.raises(CalendarAPIError):
            MockCalendarClient(data_file=tmp_path / "missing.json")

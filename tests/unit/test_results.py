"""
Search Result Extractor Tests

Tests for extract_results() / format_date():
- Empty responses
- Flattening, field_values, presenter names
- Dutch weekday and "vandaag" in the Europe/Brussels zone
- Order preservation and idempotence
"""

from datetime import datetime, timedelta

import pytest

from src.search.results import (
    DISPLAY_TIMEZONE,
    TODAY_LABEL,
    FormattedDate,
    extract_results,
    format_date,
    normalize_hit,
)

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=DISPLAY_TIMEZONE)


def _response(*hits: dict) -> dict:
    return {"hits": {"hits": list(hits)}}


class TestEmptyResponses:
    """No hits gives an empty list."""

    @pytest.mark.parametrize(
        "response",
        [None, {}, {"hits": {}}, {"hits": {"hits": []}}, {"hits": None}],
    )
    def test_returns_empty_list(self, response) -> None:
        assert extract_results(response) == []


class TestFormatDate:
    """Tests for format_date()."""

    def test_winter_time_in_brussels(self) -> None:
        formatted = format_date("2024-01-01T10:00:00Z", now=FIXED_NOW)

        assert formatted == FormattedDate(full_date="01/01/2024", time="11:00", day="maandag")

    def test_summer_time_crosses_midnight(self) -> None:
        formatted = format_date("2024-07-01T22:30:00Z", now=FIXED_NOW)

        assert formatted.full_date == "02/07/2024"
        assert formatted.time == "00:30"
        assert formatted.day == "dinsdag"

    def test_today_label(self) -> None:
        formatted = format_date("2024-03-15T20:00:00+01:00", now=FIXED_NOW)

        assert formatted.day == TODAY_LABEL

    def test_today_uses_display_timezone(self) -> None:
        """23:30 UTC on the 14th is already the 15th in Brussels."""
        formatted = format_date("2024-03-14T23:30:00Z", now=FIXED_NOW)

        assert formatted.full_date == "15/03/2024"
        assert formatted.day == TODAY_LABEL

    def test_real_clock_today(self) -> None:
        formatted = format_date(datetime.now(DISPLAY_TIMEZONE).isoformat())

        assert formatted.day == TODAY_LABEL

    def test_yesterday_is_weekday_name(self) -> None:
        yesterday = FIXED_NOW - timedelta(days=1)

        assert format_date(yesterday.isoformat(), now=FIXED_NOW).day == "donderdag"

    def test_as_dict_keys(self) -> None:
        formatted = format_date("2024-01-01T10:00:00Z", now=FIXED_NOW)

        assert formatted.as_dict() == {"fullDate": "01/01/2024", "time": "11:00", "day": "maandag"}


class TestExtractResults:
    """Tests for hit normalization."""

    def test_end_to_end_song_hit(self) -> None:
        response = _response(
            {"_id": "1", "_source": {"id": 5, "title": "X", "start": "2024-01-01T10:00:00Z"}}
        )

        assert extract_results(response, now=FIXED_NOW) == [
            {
                "_id": "1",
                "id": 5,
                "title": "X",
                "start": {"fullDate": "01/01/2024", "time": "11:00", "day": "maandag"},
            }
        ]

    def test_presenters_become_names(self) -> None:
        hit = {
            "_id": "b1",
            "_source": {
                "title": "Ochtend",
                "presenters": [{"name": "A", "id": 1}, {"name": "B", "id": 2}],
            },
        }

        [record] = extract_results(_response(hit))

        assert record["presenters"] == ["A", "B"]

    def test_field_values_kept_nested(self) -> None:
        hit = {"_id": "p1", "_source": {"id": 7, "field_values": {"genre": "pop"}}}

        [record] = extract_results(_response(hit))

        assert record == {"_id": "p1", "id": 7, "field_values": {"genre": "pop"}}

    def test_absent_reserved_fields_are_omitted(self) -> None:
        [record] = extract_results(_response({"_id": "1", "_source": {"id": 1}}))

        assert set(record) == {"_id", "id"}

    def test_start_and_stop_formatted(self) -> None:
        hit = {
            "_id": "1",
            "_source": {"start": "2024-01-01T10:00:00Z", "stop": "2024-01-01T11:15:00Z"},
        }

        [record] = extract_results(_response(hit), now=FIXED_NOW)

        assert record["start"]["time"] == "11:00"
        assert record["stop"]["time"] == "12:15"

    def test_order_preserved(self) -> None:
        hits = [{"_id": str(i), "_source": {"id": i}} for i in range(5)]

        records = extract_results(_response(*hits))

        assert [record["_id"] for record in records] == ["0", "1", "2", "3", "4"]

    def test_idempotent(self) -> None:
        response = _response(
            {
                "_id": "1",
                "_source": {
                    "id": 1,
                    "presenters": [{"name": "A"}],
                    "start": "2024-01-01T10:00:00Z",
                },
            }
        )

        first = extract_results(response, now=FIXED_NOW)
        second = extract_results(response, now=FIXED_NOW)

        assert first == second
        assert response["hits"]["hits"][0]["_source"]["presenters"] == [{"name": "A"}]

    def test_normalize_hit_returns_structured_record(self) -> None:
        record = normalize_hit(
            {"_id": "1", "_source": {"id": 1, "presenters": [{"name": "A"}]}},
            now=FIXED_NOW,
        )

        assert record.hit_id == "1"
        assert record.fields == {"id": 1}
        assert record.presenters == ["A"]
        assert record.start is None

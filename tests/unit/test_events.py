"""Tests for the Redis event emitter."""

import json
import logging
from datetime import date

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from listing_api.services.events import emit_event


@pytest.mark.unit
def test_emit_event_pushes_json_to_queue(mock_redis):
    assert emit_event("visit_requested", {"visit_id": 7, "agent_id": 3}) is True

    mock_redis.rpush.assert_called_once()
    queue, raw = mock_redis.rpush.call_args[0]
    event = json.loads(raw)
    assert queue == "events:p2p"
    assert event["type"] == "visit_requested"
    assert event["visit_id"] == 7
    assert event["agent_id"] == 3
    assert isinstance(event["ts"], int)


@pytest.mark.unit
def test_emit_event_serializes_dates(mock_redis):
    """Non-JSON values such as dates are written as strings."""
    emit_event("visit_requested", {"visit_date": date(2024, 6, 1)})

    event = json.loads(mock_redis.rpush.call_args[0][1])
    assert event["visit_date"] == "2024-06-01"


@pytest.mark.unit
@pytest.mark.parametrize("error", [RedisConnectionError("refused"), RedisTimeoutError("slow")])
def test_emit_event_reports_failure(mock_redis, caplog, error):
    """Queue errors are logged and reported, never raised."""
    mock_redis.rpush.side_effect = error

    with caplog.at_level(logging.ERROR, logger="listing_api.services.events"):
        assert emit_event("visit_cancelled", {"visit_id": 1}) is False

    assert "Failed to emit event visit_cancelled" in caplog.text

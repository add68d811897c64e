import json

from redis.exceptions import ConnectionError as RedisConnectionError

from booking_engine.services import events as events_module
from booking_engine.services.events import P2P_QUEUE, emit_event


def test_skipped_without_redis(monkeypatch):
    monkeypatch.setattr(events_module, "redis_client", None)
    assert emit_event("booking_created", {"booking_id": 1}) is False


def test_pushes_json_to_p2p_queue(events):
    assert emit_event("booking_created", {"booking_id": 7}) is True

    key, raw = events[0]
    payload = json.loads(raw)
    assert key == P2P_QUEUE
    assert payload["type"] == "booking_created"
    assert payload["booking_id"] == 7
    assert isinstance(payload["ts"], int)


def test_redis_failure_is_logged_not_raised(monkeypatch, caplog):
    class _DownRedis:
        def rpush(self, key, value):
            raise RedisConnectionError("connection refused")

    monkeypatch.setattr(events_module, "redis_client", _DownRedis())

    assert emit_event("booking_created", {"booking_id": 1}) is False
    assert "Failed to emit event booking_created" in caplog.text

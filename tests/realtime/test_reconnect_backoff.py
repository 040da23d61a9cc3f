import random

from src.worktrack.worktrack.realtime.backoff import ReconnectBackoff


def test_base_delays_double_up_to_cap():
    backoff = ReconnectBackoff()
    assert [backoff.base_delay(n) for n in range(7)] == [1, 2, 4, 8, 16, 30, 30]


def test_jitter_stays_within_twenty_percent():
    backoff = ReconnectBackoff(rng=random.Random(1234))
    for attempt in range(12):
        base = backoff.base_delay()
        delay = backoff.next_delay()
        assert base * 0.8 <= delay <= base * 1.2
        assert backoff.attempt == attempt + 1


def test_stable_connection_resets_attempts():
    now = [0.0]
    backoff = ReconnectBackoff(clock=lambda: now[0])
    for _ in range(4):
        backoff.next_delay()

    backoff.connected()
    now[0] += 59
    backoff.disconnected()
    assert backoff.attempt == 4

    backoff.connected()
    now[0] += 60
    backoff.disconnected()
    assert backoff.attempt == 0
    assert backoff.base_delay() == 1


def test_disconnect_without_connect_keeps_attempts():
    backoff = ReconnectBackoff()
    backoff.next_delay()
    backoff.disconnected()
    assert backoff.attempt == 1

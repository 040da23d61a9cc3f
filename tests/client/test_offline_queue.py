import itertools

from src.worktrack.worktrack.client.api import BackendError
from src.worktrack.worktrack.client.network import is_online
from src.worktrack.worktrack.client.offline import OfflineActivityQueue


class FakeApi:
    def __init__(self):
        self.calls = []
        self.down = False
        self.reject = set()

    def _call(self, kind, payload):
        if self.down:
            raise ConnectionError("offline")
        if payload["uuid"] in self.reject:
            raise BackendError(400, "bad payload")
        self.calls.append((kind, payload["uuid"]))
        return {"success": True}

    def start_unallocated(self, payload):
        return self._call("start-unallocated", payload)

    def start_task(self, payload):
        return self._call("start-task", payload)

    def complete(self, payload):
        return self._call("complete", payload)


def make_queue(api, online):
    ids = (f"u-{n}" for n in itertools.count(1))
    return OfflineActivityQueue(
        api, online=lambda: online[0], uuid_factory=lambda: next(ids), clock=lambda: "2026-03-02T09:00:00Z"
    )


def test_online_calls_go_straight_to_the_server():
    api = FakeApi()
    queue = make_queue(api, [True])

    assert queue.start_task(7, 10, 3) == {"success": True}
    assert api.calls == [("start-task", "u-1")]
    assert queue.pending() == []


def test_offline_calls_are_queued_and_replayed_in_order():
    api = FakeApi()
    online = [False]
    queue = make_queue(api, online)

    started = queue.start_unallocated(7)
    queue.complete(started["uuid"], 7, note="done")
    queue.start_task(7, 10, 3, item_id=55)

    assert started == {"success": True, "queued": True, "uuid": "u-1"}
    assert [p["type"] for p in queue.pending()] == ["start", "complete", "start-task"]
    assert queue.pending()[0]["timestamp"] == "2026-03-02T09:00:00Z"

    online[0] = True
    report = queue.sync()

    assert report.to_dict() == {"success": True, "synced": 3, "failed": 0, "remaining": 0}
    assert api.calls == [("start-unallocated", "u-1"), ("complete", "u-1"), ("start-task", "u-2")]


def test_failed_send_while_online_is_queued():
    api = FakeApi()
    api.down = True
    queue = make_queue(api, [True])

    assert queue.start_unallocated(7)["queued"] is True
    assert len(queue.pending()) == 1


def test_rejected_rows_stay_queued():
    api = FakeApi()
    queue = make_queue(api, [False])
    queue.start_unallocated(7)
    queue.start_unallocated(7)
    api.reject.add("u-1")

    report = queue.sync()

    assert (report.synced, report.failed, report.remaining) == (1, 1, 1)
    assert queue.pending()[0]["uuid"] == "u-1"



def test_complete_waits_for_its_failed_start():
    api = FakeApi()
    queue = make_queue(api, [False])
    started = queue.start_task(7, 10, 3)
    queue.complete(started["uuid"], 7)
    queue.start_unallocated(7)
    api.reject.add("u-1")

    report = queue.sync()

    assert (report.synced, report.failed, report.remaining) == (1, 1, 2)
    assert [p["type"] for p in queue.pending()] == ["start-task", "complete"]

    api.reject.clear()
    report = queue.sync()

    assert report.remaining == 0
    assert api.calls == [("start-unallocated", "u-2"), ("start-task", "u-1"), ("complete", "u-1")]


def test_complete_is_queued_behind_a_pending_start():
    api = FakeApi()
    online = [False]
    queue = make_queue(api, online)
    started = queue.start_unallocated(7)
    online[0] = True

    assert queue.complete(started["uuid"], 7)["queued"] is True
    assert api.calls == []

    queue.sync()

    assert api.calls == [("start-unallocated", "u-1"), ("complete", "u-1")]

def test_is_online_uses_resolver():
    def failing(host, port):
        raise OSError("no dns")

    assert is_online(resolver=lambda host, port: [("ok",)])
    assert not is_online(resolver=failing)

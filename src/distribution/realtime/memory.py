"""In-process broadcaster: records events for tests and single-process deployments."""

from distribution.realtime.port import ALL, BroadcastPort


class InMemoryBroadcaster(BroadcastPort):
    def __init__(self):
        self.events: list[dict] = []
        self.should_fail = False

    def configure(self, should_fail: bool = False):
        self.should_fail = should_fail

    def broadcast(self, event_name: str, payload: dict, audience: str = ALL) -> None:
        if self.should_fail:
            raise ConnectionError("Broadcast transport unavailable")
        self.events.append({"event": event_name, "payload": payload, "audience": audience})

    def named(self, event_name: str) -> list[dict]:
        return [e for e in self.events if e["event"] == event_name]

    def reset(self):
        self.events.clear()
        self.should_fail = False

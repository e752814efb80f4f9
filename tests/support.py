"""Test doubles shared across test modules."""

from __future__ import annotations


class FakeRuntime:
    """Runtime double: replays a fixed event list, optionally failing at the end."""

    def __init__(self, events=None, error=None, on_start=None):
        self.events = list(events or [])
        self.error = error
        self.on_start = on_start
        self.invocations = []

    async def stream(self, invocation):
        self.invocations.append(invocation)
        if self.on_start is not None:
            self.on_start(invocation)
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error


class FakeClock:
    """Monotonic clock double advancing by a fixed step per call."""

    def __init__(self, start=100.0, step=1.5):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


def assistant_text(text):
    """SDK-style assistant event with one text block."""
    return {"role": "assistant", "content": [{"type": "text", "text": text}]}


def success_payload(artifact_path="out.md", **overrides):
    payload = {
        "status": "success",
        "artifactPath": artifact_path,
        "topic": "x",
        "sourcesCount": 5,
        "wordCount": 4000,
        "keyFindings": ["a", "b"],
    }
    payload.update(overrides)
    return payload

import json
from typing import Any, List, Optional

import pytest
import requests

from agents.base import OpenAIStyleClient


def delta(text: Optional[str]) -> dict:
    """One streamed chat-completion chunk."""
    d = {} if text is None else {"content": text}
    return {"choices": [{"index": 0, "delta": d}]}


def sse(*events: Any) -> bytes:
    """Encode events as SSE blocks. Dicts become JSON, strings go in verbatim."""
    parts = []
    for ev in events:
        payload = ev if isinstance(ev, str) else json.dumps(ev, ensure_ascii=False)
        parts.append(f"data: {payload}\n\n")
    return "".join(parts).encode("utf-8")


def completion(content: str) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeResponse:
    """Just enough of requests.Response for the client and stream consumer."""

    def __init__(
        self,
        chunks: Optional[List[bytes]] = None,
        status_code: int = 200,
        body: Any = None,
        has_body: bool = True,
        error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.raw = object() if has_body else None
        self._chunks = list(chunks or [])
        self._body = body
        self._error = error
        self.reads = 0
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_content(self, chunk_size=None):
        for chunk in self._chunks:
            self.reads += 1
            yield chunk
        if self._error is not None:
            raise self._error

    def json(self):
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body

    def close(self):
        self.closed = True


class FakeLLMServer:
    """Stands in for requests.post; hands out queued responses per request kind."""

    def __init__(self):
        self.stream_responses: List[Any] = []
        self.json_responses: List[Any] = []
        self.requests: List[dict] = []
        self.calls: List[dict] = []

    def post(self, url, headers=None, json=None, timeout=None, stream=False):
        self.requests.append(json)
        self.calls.append({"url": url, "headers": headers, "timeout": timeout, "stream": stream})
        queue = self.stream_responses if json.get("stream") else self.json_responses
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def stream_requests(self) -> List[dict]:
        return [r for r in self.requests if r.get("stream")]

    @property
    def structured_requests(self) -> List[dict]:
        return [r for r in self.requests if not r.get("stream")]


@pytest.fixture
def server(monkeypatch) -> FakeLLMServer:
    srv = FakeLLMServer()
    monkeypatch.setattr(requests, "post", srv.post)
    return srv


@pytest.fixture
def client() -> OpenAIStyleClient:
    return OpenAIStyleClient("http://llm.test/", "test-model")

import json
import pytest
import httpx
from fastapi.testclient import TestClient

from streamgate.api import create_app

MOCK_CONFIG = {
    "models": {
        "qwen3": {
            "url": "http://qwen3.example.com/v1/chat/completions",
            "name": "Qwen3-0.6B",
            "description": "Fast Thinking",
        },
        "gemma": {
            "url": "http://gemma.example.com/v1/chat/completions",
            "name": "Gemma-3-4B",
            "description": "Best Responses",
        },
    },
    "system_prompt": "You are a test assistant.",
    "upstream": {"max_tokens": 2000, "temperature": 0.7},
    "settings": {"host": "127.0.0.1", "port": 5000, "timeout": None, "log_file": None},
}

MOCK_STREAMING_CHUNKS = [
    {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1694268190,
        "model": "qwen3",
        "choices": [
            {"index": 0, "delta": {"role": "assistant", "content": ""}, "finish_reason": None}
        ],
    },
    {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1694268190,
        "model": "qwen3",
        "choices": [{"index": 0, "delta": {"content": "Hello"}, "finish_reason": None}],
    },
    {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1694268190,
        "model": "qwen3",
        "choices": [{"index": 0, "delta": {"content": " there"}, "finish_reason": None}],
    },
    {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1694268190,
        "model": "qwen3",
        "choices": [{"index": 0, "delta": {}, "finish_reason": "stop"}],
    },
]


def sse_lines(chunks):
    """Upstream body lines for a list of chunks, blank-line separated and [DONE]-terminated."""
    lines = []
    for chunk in chunks:
        lines.append(f"data: {json.dumps(chunk)}")
        lines.append("")
    lines.append("data: [DONE]")
    lines.append("")
    return lines


class MockUpstream:
    """
    Stand-in for the backends, used as an httpx MockTransport handler.

    Records every request it receives and answers with ``lines``, one
    line per body chunk, or raises ``error`` instead of answering.
    """

    def __init__(self, lines=None, status_code=200, error=None, fail_after=None):
        self.lines = lines if lines is not None else sse_lines(MOCK_STREAMING_CHUNKS)
        self.status_code = status_code
        self.error = error
        self.fail_after = fail_after
        self.requests = []
        self.lines_sent = 0

    @property
    def bodies(self):
        return [json.loads(request.content) for request in self.requests]

    async def _body(self):
        for line in self.lines:
            if self.fail_after is not None and self.lines_sent >= self.fail_after:
                raise httpx.ReadError("connection reset by peer")
            self.lines_sent += 1
            yield f"{line}\n".encode()

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            headers={"content-type": "text/event-stream"},
            content=self._body(),
        )

    @property
    def transport(self):
        return httpx.MockTransport(self)


@pytest.fixture
def mock_config():
    return MOCK_CONFIG


@pytest.fixture
def upstream():
    """Upstream replaying MOCK_STREAMING_CHUNKS"""
    return MockUpstream()


@pytest.fixture
def make_client(mock_config):
    """Factory for a test client wired to a given MockUpstream"""

    def factory(upstream):
        return TestClient(create_app(mock_config, transport=upstream.transport))

    return factory


@pytest.fixture
def test_client(make_client, upstream):
    """Create a test client wired to the default mock upstream"""
    return make_client(upstream)

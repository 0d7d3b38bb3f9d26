"""Streaming relay for the streamgate gateway."""

import logging
import time
from dataclasses import dataclass, field
from typing import AsyncGenerator, AsyncIterable, Optional, Sequence, Union

import httpx
from pydantic import ValidationError

from .backends import build_upstream_body, open_upstream
from .config import relay_logger
from .errors import UpstreamReadError
from .models import ChatMessage, StreamResponse

logger = logging.getLogger(__name__)

SENTINEL = b"[DONE]"
DATA_PREFIX = b"data: "


@dataclass
class RelayStats:
    """Throughput counters for one relayed stream."""

    model: str
    tokens: int = 0
    started: float = field(default_factory=time.perf_counter)

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started

    def tokens_per_second(self, elapsed: Optional[float] = None) -> float:
        elapsed = self.elapsed if elapsed is None else elapsed
        if elapsed <= 0:
            return float("inf")
        return self.tokens / elapsed

    def log_completion(self) -> None:
        elapsed = self.elapsed
        relay_logger.info(
            "Stream completed on %s in %.2f seconds (%d tokens, %.1f tokens/sec)",
            self.model,
            elapsed,
            self.tokens,
            self.tokens_per_second(elapsed),
        )


def parse_chunk(payload: Union[str, bytes]) -> Optional[StreamResponse]:
    """
    Parse the JSON after a ``data:`` prefix, returning None if it is not a valid chunk.

    A bare ``null`` is a chunk with no choices.
    """
    if payload.strip() in ("null", b"null"):
        return StreamResponse()
    try:
        return StreamResponse.model_validate_json(payload)
    except ValidationError:
        return None


async def split_lines(chunks: AsyncIterable[bytes]) -> AsyncGenerator[bytes, None]:
    """
    Split a byte stream into lines on ``\\n`` only, dropping one trailing ``\\r``.

    Lines stay as raw bytes so they can be forwarded exactly as received. A final
    line without a newline is yielded at end of stream.
    """
    buffer = b""
    async for chunk in chunks:
        buffer += chunk
        while True:
            end = buffer.find(b"\n")
            if end == -1:
                break
            line, buffer = buffer[:end], buffer[end + 1:]
            if line.endswith(b"\r"):
                line = line[:-1]
            yield line

    if buffer:
        if buffer.endswith(b"\r"):
            buffer = buffer[:-1]
        yield buffer


def _frame(line: bytes) -> bytes:
    return line + b"\n"


async def relay_lines(
    lines: AsyncIterable[bytes], stats: RelayStats
) -> AsyncGenerator[bytes, None]:
    """
    Forward upstream event-stream lines to the client.

    - Empty lines are skipped.
    - A line containing [DONE] is forwarded and ends the relay.
    - ``data:`` lines are forwarded verbatim only if their payload parses as a
      chunk; chunks with non-empty delta content are counted in ``stats``.
    - Any other line is forwarded verbatim.
    """
    async for line in lines:
        if not line:
            continue

        if SENTINEL in line:
            yield _frame(line)
            break

        if line.startswith(DATA_PREFIX):
            chunk = parse_chunk(line[len(DATA_PREFIX):])
            if chunk is None:
                # keep-alives and malformed payloads
                continue
            yield _frame(line)
            if chunk.content:
                stats.tokens += 1
        else:
            yield _frame(line)


async def relay_chat(
    model: str,
    endpoint: str,
    messages: Sequence[ChatMessage],
    max_tokens: int = 2000,
    temperature: float = 0.7,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncGenerator[bytes, None]:
    """
    POST a conversation to a backend and relay its event stream line by line.

    Each relay uses its own client and connection. The completion line is logged
    whenever the upstream body was opened, including after a read failure.

    Raises:
        UpstreamUnreachable: if the backend cannot be reached
        UpstreamReadError: if reading the body fails mid-stream
    """
    body = build_upstream_body(messages, max_tokens, temperature)

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await open_upstream(client, endpoint, body)
        stats = RelayStats(model=model)
        relay_logger.info("Stream started on %s", model)
        try:
            async for frame in relay_lines(split_lines(response.aiter_bytes()), stats):
                yield frame
        except httpx.HTTPError as e:
            raise UpstreamReadError(endpoint, str(e) or type(e).__name__) from e
        finally:
            await response.aclose()
            stats.log_completion()

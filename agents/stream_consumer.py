# stream_consumer.py
"""
Incremental reader for streamed chat completions.

The server sends server-sent events: blocks separated by a blank line,
each block holding one or more `data: {...}` lines, with `data: [DONE]`
marking the end. Every JSON payload looks like

    {"choices": [{"delta": {"content": "..."}}]}

iter_stream_events() turns a streamed `requests.Response` into a lazy,
finite sequence of StreamEvent objects: one "chunk" event per non-empty
delta (carrying the text assembled so far) and exactly one "finish"
event at the end. consume() is the callback flavour used by the
chat and check-in logic.
"""

import codecs
import json
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

import requests

from agents.errors import MalformedDelta, StreamFailure, StreamUnavailable
from models import StreamState

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
BLOCK_DELIMITER = "\n\n"

CHUNK = "chunk"
FINISH = "finish"


@dataclass(frozen=True)
class StreamEvent:
    kind: str  # CHUNK or FINISH
    text: str  # assembled output so far


def parse_delta(payload: str) -> str:
    """
    Return the text delta carried by one `data:` payload ("" when the
    payload has no content, e.g. a role-only or finish_reason chunk).
    Raise MalformedDelta when the payload is not a chat-completion chunk.
    """
    try:
        obj = json.loads(payload)
    except ValueError as e:
        raise MalformedDelta(f"Payload is not JSON: {payload[:80]!r}") from e

    if not isinstance(obj, dict):
        raise MalformedDelta("Payload is not a JSON object")
    choices = obj.get("choices")
    if not isinstance(choices, list):
        raise MalformedDelta("Payload has no choices list")
    if not choices:
        return ""

    first = choices[0]
    if not isinstance(first, dict):
        raise MalformedDelta("choices[0] is not an object")
    delta = first.get("delta") or {}
    if not isinstance(delta, dict):
        raise MalformedDelta("choices[0].delta is not an object")

    content = delta.get("content")
    if content is None:
        return ""
    if not isinstance(content, str):
        raise MalformedDelta("choices[0].delta.content is not a string")
    return content


def iter_block_deltas(block: str) -> Iterator[str]:
    """Yield the non-empty text deltas of one event block, in order."""
    for line in block.split("\n"):
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX):]
        if payload.startswith(" "):
            payload = payload[1:]
        if payload.strip() == DONE_SENTINEL:
            return
        try:
            delta = parse_delta(payload)
        except MalformedDelta as e:
            logger.warning("Skipping malformed delta: %s", e)
            continue
        if delta:
            yield delta


def _check_response(response) -> None:
    status = getattr(response, "status_code", None)
    if status is None or not 200 <= status < 300:
        raise StreamUnavailable(f"Stream request returned HTTP {status}")
    if getattr(response, "raw", None) is None:
        raise StreamUnavailable("Response has no readable body")


def _iter_text(
    response,
    chunk_size: Optional[int],
    cancel_event: Optional[threading.Event],
) -> Iterator[str]:
    # The decoder keeps partial multi-byte sequences between reads.
    decoder = codecs.getincrementaldecoder("utf-8")()
    reads = iter(response.iter_content(chunk_size=chunk_size))
    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise StreamFailure("Stream cancelled")
        try:
            raw = next(reads)
        except StopIteration:
            break
        except (requests.RequestException, OSError) as e:
            raise StreamFailure(f"Stream read failed: {e}") from e

        try:
            text = decoder.decode(raw)
        except UnicodeDecodeError as e:
            raise StreamFailure(f"Stream is not valid UTF-8: {e}") from e
        if text:
            yield text

    try:
        tail = decoder.decode(b"", final=True)
    except UnicodeDecodeError as e:
        raise StreamFailure("Stream ended inside a multi-byte character") from e
    if tail:
        yield tail


def iter_stream_events(
    response,
    chunk_size: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[StreamEvent]:
    """
    Read a streamed response and yield StreamEvents.

    Raises StreamUnavailable (before yielding anything) when the response
    is not 2xx or has no body, and StreamFailure when reading breaks. The
    response is closed on every exit path, including when the caller
    stops iterating early.
    """
    try:
        _check_response(response)

        state = StreamState()
        buffer = ""
        for text in _iter_text(response, chunk_size, cancel_event):
            # Joining before normalising also handles a CRLF split across reads.
            buffer = (buffer + text).replace("\r\n", "\n")
            while BLOCK_DELIMITER in buffer:
                block, buffer = buffer.split(BLOCK_DELIMITER, 1)
                for delta in iter_block_deltas(block):
                    yield StreamEvent(CHUNK, state.append(delta))

        if buffer.strip():
            for delta in iter_block_deltas(buffer):
                yield StreamEvent(CHUNK, state.append(delta))

        logger.debug("Stream finished with %d characters", len(state.partial_text))
        yield StreamEvent(FINISH, state.finish())
    finally:
        response.close()


def iter_text_events(deltas: Iterable[str]) -> Iterator[StreamEvent]:
    """Same event sequence as iter_stream_events(), from plain deltas."""
    state = StreamState()
    for delta in deltas:
        if delta:
            yield StreamEvent(CHUNK, state.append(delta))
    yield StreamEvent(FINISH, state.finish())


def consume(
    response,
    on_chunk: Callable[[str], None],
    on_finish: Callable[[str], None],
    cancel_event: Optional[threading.Event] = None,
) -> str:
    """
    Drive iter_stream_events() with callbacks.

    on_chunk gets the assembled text after every delta; on_finish gets the
    full text exactly once, and is not called if the stream fails.
    Returns the full text.
    """
    final_text = ""
    for event in iter_stream_events(response, cancel_event=cancel_event):
        if event.kind == CHUNK:
            on_chunk(event.text)
        else:
            final_text = event.text
            on_finish(final_text)
    return final_text

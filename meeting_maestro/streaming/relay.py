"""Relay an upstream delta stream to the client as discrete events.

Each non-empty delta becomes one content event, in arrival order, followed by
exactly one done event. The relay is primed before the HTTP response starts:
:func:`open_relay` pulls up to the first content delta so that an upstream
failure at that point can still be reported with an error status. Once content
has gone out, a failure can no longer be reported that way, so it is logged and
the stream is ended with the done event.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator

from meeting_maestro.errors import UpstreamFailureError
from meeting_maestro.streaming.events import StreamEvent

logger = logging.getLogger(__name__)


async def _next_delta(iterator: AsyncIterator[str], deadline: float | None) -> str | None:
    """Return the next non-empty delta, or ``None`` when upstream is exhausted."""
    while True:
        try:
            async with asyncio.timeout_at(deadline):
                delta = await anext(iterator)
        except StopAsyncIteration:
            return None
        if delta:
            return delta


async def _close_upstream(iterator: AsyncIterator[str]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception:
        logger.warning("Error while closing upstream stream", exc_info=True)


async def open_relay(
    deltas: AsyncIterator[str],
    timeout: float | None = None,
) -> RelayStream:
    """Prime *deltas* and return the event stream.

    Args:
        deltas: Upstream text deltas, e.g. from ``CompletionClient.stream``.
        timeout: Optional overall deadline in seconds for the whole upstream stream.

    Returns:
        A :class:`RelayStream`. Closing it closes *deltas* without draining it,
        whether or not iteration ever started.

    Raises:
        UpstreamFailureError: If upstream fails or times out before producing
            any content.
    """
    iterator = aiter(deltas)
    deadline = None if timeout is None else asyncio.get_running_loop().time() + timeout

    try:
        first = await _next_delta(iterator, deadline)
    except UpstreamFailureError:
        await _close_upstream(iterator)
        raise
    except TimeoutError as exc:
        await _close_upstream(iterator)
        raise UpstreamFailureError(f"Upstream stream timed out after {timeout}s") from exc
    except Exception as exc:
        await _close_upstream(iterator)
        raise UpstreamFailureError(f"Upstream stream failed: {exc}") from exc
    except BaseException:
        await _close_upstream(iterator)
        raise

    return RelayStream(iterator, first, deadline)


class RelayStream:
    """Primed event stream that owns the upstream iterator.

    Iterating yields one content event per non-empty delta and then a single
    done event. :meth:`aclose` always releases the upstream, including when
    the stream was primed but never iterated.
    """

    def __init__(
        self,
        iterator: AsyncIterator[str],
        first: str | None,
        deadline: float | None,
    ) -> None:
        self._iterator = iterator
        self._events = _relay(iterator, first, deadline)

    def __aiter__(self) -> RelayStream:
        return self

    async def __anext__(self) -> StreamEvent:
        return await anext(self._events)

    async def aclose(self) -> None:
        await self._events.aclose()
        await _close_upstream(self._iterator)


async def _relay(
    iterator: AsyncIterator[str],
    first: str | None,
    deadline: float | None,
) -> AsyncGenerator[StreamEvent, None]:
    sent = 0
    try:
        delta = first
        while delta is not None:
            yield StreamEvent.content(delta)
            sent += 1
            try:
                delta = await _next_delta(iterator, deadline)
            except Exception:
                # Frames already sent cannot be retracted.
                logger.exception("Upstream stream failed after %d content frames", sent)
                break
        yield StreamEvent.done()
    finally:
        await _close_upstream(iterator)

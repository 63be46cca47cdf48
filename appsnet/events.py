from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, AsyncIterator

from pydantic import ValidationError

from .docker_ops import DockerRuntime
from .models import ContainerEvent

log = logging.getLogger(__name__)

_END = object()


class EventFeed:
    """Live docker event stream, subscribed by ``"<type>.<action>"`` key.

    The SDK stream is a blocking generator, so a daemon thread pumps it into an
    asyncio queue. When the stream breaks the feed reconnects, resuming from the
    time of the last event it delivered.
    """

    def __init__(self, runtime: DockerRuntime, reconnect_delay_s: float = 5.0, since: int | None = None):
        self.runtime = runtime
        self.reconnect_delay_s = reconnect_delay_s
        self.since = since

    async def subscribe(self, key: str) -> AsyncIterator[ContainerEvent]:
        event_type, _, action = key.partition(".")
        filters: dict[str, Any] = {"type": [event_type]}
        if action:
            filters["event"] = [action]

        since = self.since
        while True:
            queue: asyncio.Queue[Any] = asyncio.Queue()
            stream = None
            try:
                stream = await asyncio.to_thread(self.runtime.events, filters, since)
                self._start_pump(stream, queue)
                log.debug(f"Subscribed to {key} events")
                while True:
                    item = await queue.get()
                    if item is _END:
                        log.warning(f"Event stream for {key} ended, reconnecting")
                        break
                    if isinstance(item, BaseException):
                        log.warning(f"Event stream for {key} failed: {type(item).__name__}: {item}")
                        break
                    event = self._decode(item)
                    if event is None or event.key != key:
                        continue
                    if event.time:
                        since = event.time
                    yield event
            except Exception as e:
                log.warning(f"Could not open event stream for {key}: {type(e).__name__}: {e}")
            finally:
                close = getattr(stream, "close", None)
                if close is not None:
                    close()
            await asyncio.sleep(self.reconnect_delay_s)

    @staticmethod
    def _start_pump(stream: Any, queue: asyncio.Queue[Any]) -> None:
        loop = asyncio.get_running_loop()

        def _pump() -> None:
            try:
                for payload in stream:
                    loop.call_soon_threadsafe(queue.put_nowait, payload)
                result: Any = _END
            except Exception as e:
                result = e
            try:
                loop.call_soon_threadsafe(queue.put_nowait, result)
            except RuntimeError:
                # Loop already closed during shutdown.
                pass

        threading.Thread(target=_pump, name="docker-events", daemon=True).start()

    @staticmethod
    def _decode(payload: Any) -> ContainerEvent | None:
        if not isinstance(payload, dict):
            log.debug(f"Ignoring non-object event payload: {payload!r}")
            return None
        try:
            return ContainerEvent.from_payload(payload)
        except ValidationError as e:
            log.debug(f"Ignoring malformed event payload: {e}")
            return None

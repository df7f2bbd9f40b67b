"""
Push-mode delivery.

``PushStreamer`` is the STOPPED/RUNNING state machine that owns the repeating
timer task; ``event_stream`` is the Server-Sent Events generator behind each
subscriber connection.

Event format: ``data: {json}\\n\\n``
"""
import asyncio
import json
import logging
from typing import AsyncGenerator, Optional

from data_simulator.playback import PlaybackSource
from data_simulator.utils import utc_now

from app.services.session_registry import SessionRegistry, Subscriber

logger = logging.getLogger(__name__)

# How often an idle stream checks whether its client went away
DISCONNECT_POLL_SECONDS = 1.0


class NoPlaybackDataError(RuntimeError):
    """Push mode cannot start without recorded data to replay."""


def format_sse(event: dict) -> str:
    return f"data: {json.dumps(event)}\n\n"


class PushStreamer:
    def __init__(
        self,
        playback: PlaybackSource,
        registry: SessionRegistry,
        interval: float = 1.0,
    ):
        self.playback = playback
        self.registry = registry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None
        self.is_running = False

    def start(self) -> bool:
        """
        Arm the broadcast timer. Returns False if it was already running.
        Must be called from within the event loop.
        """
        if self.is_running:
            return False
        if not self.playback.has_data:
            raise NoPlaybackDataError("No data loaded")

        self.is_running = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Starting solar panel simulation...")
        return True

    def stop(self) -> bool:
        """Disarm the timer and tell subscribers. Returns False if not running."""
        if not self.is_running:
            return False

        self.is_running = False
        self._cancel_task()
        self.registry.broadcast({"type": "stopped", "message": "Simulation stopped"})
        logger.info("Solar panel simulation stopped")
        return True

    async def shutdown(self) -> None:
        """Disarm any live timer and wait for it to finish."""
        self.is_running = False
        task = self._cancel_task()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel_task(self) -> Optional[asyncio.Task]:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        return task

    def tick(self) -> Optional[dict]:
        """One timer fire: next playback record, fresh timestamp, fan out."""
        record = self.playback.next()
        if record is None:
            return None
        event = {
            **record,
            "timestamp": utc_now().isoformat(),
            "type": "data",
        }
        self.registry.broadcast(event)
        return event

    async def _run(self) -> None:
        # First record goes out one interval after start
        while True:
            await asyncio.sleep(self.interval)
            if not self.is_running:
                break
            self.tick()

    def connected_event(self) -> dict:
        return {
            "type": "connected",
            "message": "Connected to solar panel stream",
            "totalDataPoints": len(self.playback),
            "isRunning": self.is_running,
        }


async def event_stream(request, streamer: PushStreamer) -> AsyncGenerator[str, None]:
    """
    Register a subscriber for this connection and yield its SSE frames until
    the client disconnects. The subscriber is removed however the stream ends;
    a stream closed before it starts never registers one.
    """
    subscriber: Optional[Subscriber] = None
    try:
        subscriber = streamer.registry.register()
        yield format_sse(streamer.connected_event())
        while True:
            if await request.is_disconnected():
                break
            try:
                event = await asyncio.wait_for(subscriber.queue.get(), timeout=DISCONNECT_POLL_SECONDS)
            except asyncio.TimeoutError:
                continue
            yield format_sse(event)
    except asyncio.CancelledError:
        if subscriber is not None:
            logger.info(f"Stream cancelled for client {subscriber.id}")
        raise
    finally:
        if subscriber is not None:
            streamer.registry.remove(subscriber.id)

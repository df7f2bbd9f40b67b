import asyncio
import itertools
import logging
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

# Events held for a subscriber that is not reading; newer events are dropped
SUBSCRIBER_QUEUE_SIZE = 100


class SubscriberClosed(ConnectionError):
    pass


class SubscriberBacklogged(ConnectionError):
    """Event dropped because the subscriber stopped draining its queue."""


class Subscriber:
    """
    One long-lived stream connection. Events wait in a bounded queue drained
    by the connection's response generator; when it is full, sends fail.
    """

    def __init__(self, subscriber_id: int, maxsize: int = SUBSCRIBER_QUEUE_SIZE):
        self.id = subscriber_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def send(self, event: dict) -> None:
        if self.closed:
            raise SubscriberClosed(f"Subscriber {self.id} is closed")
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            raise SubscriberBacklogged(f"Subscriber {self.id} queue full, event dropped")

    def close(self) -> None:
        self.closed = True

    def __repr__(self):
        return f"Subscriber(id={self.id}, closed={self.closed})"


class SessionRegistry:
    """Active push subscribers, in registration order."""

    def __init__(self):
        self._subscribers: Dict[int, Subscriber] = {}
        self._ids = itertools.count(1)

    def register(self, subscriber: Optional[Subscriber] = None) -> Subscriber:
        if subscriber is None:
            subscriber = Subscriber(next(self._ids))
        self._subscribers[subscriber.id] = subscriber
        logger.info(f"New client connected: {subscriber.id}")
        return subscriber

    def remove(self, subscriber_id: int) -> bool:
        subscriber = self._subscribers.pop(subscriber_id, None)
        if subscriber is None:
            return False
        subscriber.close()
        logger.info(f"Client disconnected: {subscriber_id}")
        return True

    def broadcast(self, event: dict) -> int:
        """
        Best-effort send of ``event`` to every subscriber. A failing
        subscriber is logged and skipped. Returns the number of successful sends.
        """
        delivered = 0
        # Copy so a subscriber removed mid-broadcast does not disturb iteration
        for subscriber in list(self._subscribers.values()):
            try:
                subscriber.send(event)
            except Exception as e:
                logger.warning(f"Error sending data to client {subscriber.id}: {e}")
                continue
            delivered += 1
        return delivered

    def subscribers(self) -> List[Subscriber]:
        return list(self._subscribers.values())

    def __contains__(self, subscriber_id) -> bool:
        return subscriber_id in self._subscribers

    def __len__(self) -> int:
        return len(self._subscribers)

    def __iter__(self) -> Iterator[Subscriber]:
        return iter(self.subscribers())

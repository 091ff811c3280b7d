from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Optional


class Priority(IntEnum):
    NORMAL = 0
    HIGH = 1


@dataclass(frozen=True, eq=False)
class QueueItem:
    """A request to play one clip.

    Equality is identity: two requests for the same clip are separate items.
    """

    identifier: str
    priority: Priority = Priority.NORMAL


class PlaybackQueue:
    """Pending items in play order, HIGH tier ahead of NORMAL, FIFO within a tier."""

    def __init__(self):
        self._items: List[QueueItem] = []

    def insert(self, item: QueueItem, pin_head: bool = False) -> None:
        """Append ``item`` and stable-partition the queue by tier.

        With ``pin_head`` the current head keeps its place, since it is
        already rendering on the sink.
        """
        self._items.append(item)
        start = 1 if pin_head and len(self._items) > 1 else 0
        tail = self._items[start:]
        # sort() is stable, so each tier keeps arrival order
        tail.sort(key=lambda queued: queued.priority != Priority.HIGH)
        self._items[start:] = tail

    def push_front(self, item: QueueItem) -> None:
        self._items.insert(0, item)

    def head(self) -> Optional[QueueItem]:
        return self._items[0] if self._items else None

    def pop_head(self) -> Optional[QueueItem]:
        if not self._items:
            return None
        return self._items.pop(0)

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self):
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[QueueItem]:
        return iter(list(self._items))

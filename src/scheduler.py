"""
Sequential clip playback with priority pre-emption.

Every queue mutation and sink command runs on one worker thread that takes
commands from a FIFO. Public methods, sink events, interruption notifications
and fallback completion timers only submit commands, so a clip finishing and a
high-priority request arriving can never race each other.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Optional

from config import (
    COMPLETION_MARGIN,
    RESET_ON_INTERRUPTION,
    VOLUME_POLL_INTERVAL,
    logger,
)
from housekeeping import VolumeMonitor
from interruptions import BEGAN, ENDED, parse_interruption
from queue_item import PlaybackQueue, Priority, QueueItem
from sink import ClipNotFound, SinkError, SinkListener

_STOP = object()


@dataclass(frozen=True)
class PlaybackState:
    current: Optional[QueueItem] = None

    @property
    def idle(self) -> bool:
        return self.current is None

    def __str__(self):
        if self.current is None:
            return "Idle"
        return f"Playing({self.current.identifier})"


IDLE = PlaybackState()


class PlaybackScheduler(SinkListener):
    def __init__(
        self,
        sink,
        interruptions=None,
        completion_margin=COMPLETION_MARGIN,
        reset_on_interruption=RESET_ON_INTERRUPTION,
        volume_poll_interval=VOLUME_POLL_INTERVAL,
        timer_factory=threading.Timer,
    ):
        self.sink = sink
        self.completion_margin = completion_margin
        self.reset_on_interruption = reset_on_interruption
        self._timer_factory = timer_factory

        # Owned by the worker thread
        self._queue = PlaybackQueue()
        self._state = IDLE
        self._is_playing = False
        self._session = None
        self._session_live = False
        self._generation = 0

        self._lock = threading.Lock()
        self._torn_down = False
        self._commands = queue.Queue()

        sink.bind(self)
        self._subscription = None
        if interruptions is not None:
            self._subscription = interruptions.subscribe(self._on_interruption_notification)

        self._volume_monitor = VolumeMonitor(sink, interval=volume_poll_interval)
        self._volume_monitor.start()

        self._worker = threading.Thread(
            target=self._command_loop, daemon=True, name="PlaybackScheduler"
        )
        self._worker.start()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.teardown()

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def pending(self):
        """Snapshot of the queue in play order, including the playing head."""
        return self._queue.snapshot()

    def join(self, timeout=None) -> bool:
        """Waits until every submitted command has run. Returns False on timeout."""
        done = self._commands.all_tasks_done
        with done:
            return done.wait_for(lambda: not self._commands.unfinished_tasks, timeout)

    # Public API

    def enqueue(self, item, priority=Priority.NORMAL) -> QueueItem:
        item = _as_item(item, priority)
        self._submit(self._enqueue, item)
        return item

    def clear(self) -> None:
        self._submit(self._clear)

    def interrupt(self, item, priority=Priority.HIGH) -> QueueItem:
        item = _as_item(item, priority)
        self._submit(self._interrupt, item)
        return item

    def stop_current(self) -> None:
        self._submit(self._stop_current)

    def stop_current_and_advance(self) -> None:
        self._submit(self._stop_current_and_advance)

    def teardown(self) -> None:
        with self._lock:
            if self._torn_down:
                return
            self._torn_down = True
            self._commands.put((self._release, ()))
            self._commands.put((_STOP, ()))

        self._volume_monitor.cancel()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if threading.current_thread() is not self._worker:
            self._worker.join(timeout=5.0)

    # Sink events

    def on_clip_finished(self, success: bool = True, clip=None) -> None:
        self._submit(self._session_finished, success, clip)

    def on_interruption_began(self) -> None:
        self._submit(self._interruption_began)

    def on_interruption_ended(self, should_resume: bool) -> None:
        self._submit(self._interruption_ended, should_resume)

    def _on_interruption_notification(self, notification) -> None:
        interruption = parse_interruption(notification)
        if interruption is None:
            return
        if interruption.kind == BEGAN:
            self.on_interruption_began()
        elif interruption.kind == ENDED:
            self.on_interruption_ended(interruption.should_resume)

    # Command loop

    def _submit(self, command, *args) -> bool:
        with self._lock:
            if self._torn_down:
                logger.debug(f"Scheduler torn down; dropping {command.__name__}")
                return False
            self._commands.put((command, args))
        return True

    def _command_loop(self):
        while True:
            command, args = self._commands.get()
            try:
                if command is _STOP:
                    break
                command(*args)
            except Exception as e:
                logger.error(f"Playback command error: {e}")
            finally:
                self._commands.task_done()

    def _enqueue(self, item):
        pin_head = self._is_playing and self._queue.head() is self._state.current
        self._queue.insert(item, pin_head=pin_head)
        logger.info(
            f"Queued {item.identifier} ({item.priority.name.lower()}). "
            f"Queue size: {len(self._queue)}"
        )
        if not self._is_playing:
            self._advance()

    def _clear(self):
        dropped = len(self._queue)
        self._queue.clear()
        logger.info(f"Cleared {dropped} queued clip(s)")

    def _interrupt(self, item):
        self._queue.push_front(item)
        logger.info(f"Interrupting for {item.identifier} ({item.priority.name.lower()})")
        self._stop_current_and_advance()

    def _stop_current(self):
        self._stop_session()
        if self.reset_on_interruption:
            self._go_idle()

    def _stop_current_and_advance(self):
        self._stop_session()
        self._is_playing = False
        self._advance()

    def _advance(self):
        head = self._queue.head()
        if head is None:
            self._go_idle()
            return
        self._is_playing = True
        self._state = PlaybackState(head)
        self._play(head)

    def _play(self, item):
        self._generation += 1
        generation = self._generation
        self._stop_session()
        self._session = None

        try:
            clip = self.sink.load(item.identifier)
        except ClipNotFound as e:
            logger.warning(str(e))
            self._submit(self._clip_finished, False, generation)
            return

        # Nothing renders until play() returns, so a failure here leaves no live session
        try:
            duration = self.sink.duration(clip)
            self.sink.activate()
            self.sink.play(clip)
        except SinkError as e:
            logger.error(f"Error playing audio: {e}")
            self._submit(self._clip_finished, False, generation)
            return

        self._session = clip
        self._session_live = True
        logger.info(f"Playing {item.identifier} ({duration:.2f}s)")

        if not self.sink.reports_completion:
            delay = max(0.0, duration) + self.completion_margin
            timer = self._timer_factory(
                delay, self._submit, args=(self._session_finished, True, clip)
            )
            timer.daemon = True
            timer.start()

    def _session_finished(self, success, clip=None):
        """Completion reported for ``clip``, by the sink or the fallback timer.

        Dropped unless it belongs to the live session. A sink that does not
        say which clip finished is taken to mean the live one.
        """
        if not self._session_live or (clip is not None and clip is not self._session):
            logger.debug("Ignoring completion for a session that is no longer live")
            return
        self._clip_finished(success, self._generation)

    def _clip_finished(self, success=True, generation=None):
        if generation is not None and generation != self._generation:
            logger.debug("Ignoring completion for a clip no longer at the head")
            return

        current = self._state.current
        if current is None:
            logger.debug("Completion while idle ignored")
            return

        if not self._queue:
            # Queue was cleared under the playing clip
            logger.debug("Completion with empty queue; going idle")
            self._go_idle()
            return

        if self._queue.head() is current:
            self._queue.pop_head()
            if success:
                logger.info(f"Finished {current.identifier}")
            else:
                logger.info(f"Skipped {current.identifier}")

        self._session = None
        self._session_live = False
        self._advance()

    def _interruption_began(self):
        logger.info(f"Audio interruption began during {self._state}")
        self._stop_current()

    def _interruption_ended(self, should_resume):
        logger.info(f"Audio interruption ended (should_resume={should_resume})")
        if should_resume:
            self._advance()

    def _stop_session(self):
        if self._session_live:
            self.sink.stop()
            self._session_live = False

    def _go_idle(self):
        self._session = None
        self._session_live = False
        self._is_playing = False
        self._state = IDLE
        self._reset_audio_status()

    def _reset_audio_status(self):
        try:
            self.sink.deactivate()
        except SinkError as e:
            logger.error(f"Error resetting audio status: {e}")

    def _release(self):
        self._stop_session()
        self._session = None
        self._is_playing = False
        self._state = IDLE
        self._reset_audio_status()
        logger.info("Playback scheduler torn down")


def _as_item(item, priority) -> QueueItem:
    if isinstance(item, QueueItem):
        return item
    return QueueItem(str(item), Priority(priority))

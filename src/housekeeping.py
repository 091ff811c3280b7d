import threading

from config import VOLUME_POLL_INTERVAL, logger
from sink import SinkError


class VolumeMonitor:
    """Logs the sink's output volume on a recurring timer.

    Diagnostic only: reads ambient device state and never touches the queue.
    """

    def __init__(self, sink, interval=VOLUME_POLL_INTERVAL, timer_factory=threading.Timer):
        self.sink = sink
        self.interval = interval
        self._timer_factory = timer_factory
        self._timer = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self):
        return self._running

    def start(self):
        if self.interval <= 0:
            return
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule()

    def _schedule(self):
        self._timer = self._timer_factory(self.interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self):
        try:
            volume = self.sink.output_volume()
            logger.debug(f"Current output volume: {volume:.2f}")
        except SinkError as e:
            logger.warning(f"Volume check failed: {e}")
        with self._lock:
            if self._running:
                self._schedule()

    def cancel(self):
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

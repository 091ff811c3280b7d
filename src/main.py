"""
Demo caller: queues a handful of clips, then pre-empts them with a
high-priority clip.
"""

import argparse
import time

from config import CLIPS_DIR, logger
from interruptions import InterruptionCenter
from queue_item import Priority
from scheduler import PlaybackScheduler
from sounddevice_sink import SoundDeviceSink

DEFAULT_CLIPS = ["1", "2", "3", "4", "6"]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play clips through the priority queue")
    parser.add_argument("clips", nargs="*", default=DEFAULT_CLIPS, help="Clip identifiers")
    parser.add_argument("--clips-dir", default=CLIPS_DIR, help="Directory holding the clips")
    parser.add_argument(
        "--interrupt-after",
        type=float,
        default=None,
        help="Seconds to wait before interrupting with a high-priority clip",
    )
    parser.add_argument("--interrupt-clip", default="5", help="Clip used to interrupt")
    return parser.parse_args(argv)


def wait_until_idle(scheduler, poll=0.1):
    while scheduler.is_playing or scheduler.pending():
        time.sleep(poll)


def run(args, sink=None, interruptions=None):
    if sink is None:
        sink = SoundDeviceSink(clips_dir=args.clips_dir)
    if interruptions is None:
        interruptions = InterruptionCenter()

    scheduler = PlaybackScheduler(sink, interruptions=interruptions)
    try:
        scheduler.clear()
        for clip in args.clips:
            scheduler.enqueue(clip, Priority.NORMAL)

        if args.interrupt_after is not None:
            time.sleep(args.interrupt_after)
            logger.info(f"Interrupting with '{args.interrupt_clip}'")
            scheduler.interrupt(args.interrupt_clip, Priority.HIGH)

        scheduler.join()
        wait_until_idle(scheduler)
    except KeyboardInterrupt:
        logger.info("Stopping playback...")
    finally:
        scheduler.teardown()
    return scheduler


def main(argv=None):
    args = parse_args(argv)
    run(args)


if __name__ == "__main__":
    main()

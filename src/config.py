import logging
import os

from dotenv import load_dotenv


load_dotenv()


def _setup_logging():
    """Configures the root logger with a single handler."""
    global _logging_setup_complete
    if _logging_setup_complete:
        return

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    console_handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d %(name)s %(levelname)s %(message)s", "%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    _logging_setup_complete = True


_logging_setup_complete = False
_setup_logging()
logger = logging.getLogger("clipqueue")


def _float_env(name, default, minimum=0.0, maximum=None):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}; using default {default}")
        return default
    if value < minimum:
        logger.warning(f"{name}={value} below {minimum}; using default {default}")
        return default
    if maximum is not None and value > maximum:
        value = maximum
    return value


def _bool_env(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Clip resolution
CLIPS_DIR = os.environ.get("CLIPS_DIR", "./clips")
CLIP_EXTENSION = os.environ.get("CLIP_EXTENSION", "wav").lstrip(".").lower()

# Output device (name or index understood by sounddevice)
_output_device = os.environ.get("OUTPUT_DEVICE") or None
if _output_device is not None and _output_device.isdigit():
    _output_device = int(_output_device)
OUTPUT_DEVICE = _output_device
OUTPUT_VOLUME = _float_env("OUTPUT_VOLUME", 1.0, maximum=1.0)

# Scheduler timing
COMPLETION_MARGIN = _float_env("COMPLETION_MARGIN", 0.5)
VOLUME_POLL_INTERVAL = _float_env("VOLUME_POLL_INTERVAL", 1.0)

# Interruption-began resets the playing flag when set
RESET_ON_INTERRUPTION = _bool_env("RESET_ON_INTERRUPTION")

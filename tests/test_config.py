"""Unit tests for config.py module."""

import logging
import os
import sys
from unittest.mock import patch


def load_config(env):
    with patch.dict(os.environ, env, clear=True):
        if "config" in sys.modules:
            del sys.modules["config"]
        import config

        return config


class TestLogging:
    """Test logging configuration."""

    def test_logger_exists(self):
        config = load_config({})

        assert isinstance(config.logger, logging.Logger)
        assert config.logger.name == "clipqueue"

    def test_single_root_handler(self):
        load_config({})
        load_config({})

        assert len(logging.getLogger().handlers) == 1

    def test_log_level_from_environment(self):
        load_config({"LOG_LEVEL": "debug"})
        assert logging.getLogger().level == logging.DEBUG
        load_config({})
        assert logging.getLogger().level == logging.INFO


class TestClipConfig:
    def test_defaults(self):
        config = load_config({})

        assert config.CLIPS_DIR == "./clips"
        assert config.CLIP_EXTENSION == "wav"
        assert config.OUTPUT_DEVICE is None
        assert config.OUTPUT_VOLUME == 1.0

    def test_custom_values(self):
        config = load_config(
            {
                "CLIPS_DIR": "/srv/clips",
                "CLIP_EXTENSION": ".WAV",
                "OUTPUT_DEVICE": "2",
                "OUTPUT_VOLUME": "0.3",
            }
        )

        assert config.CLIPS_DIR == "/srv/clips"
        assert config.CLIP_EXTENSION == "wav"
        assert config.OUTPUT_DEVICE == 2
        assert config.OUTPUT_VOLUME == 0.3

    def test_named_output_device(self):
        config = load_config({"OUTPUT_DEVICE": "USB Speaker"})
        assert config.OUTPUT_DEVICE == "USB Speaker"

    def test_volume_capped_at_one(self):
        config = load_config({"OUTPUT_VOLUME": "4"})
        assert config.OUTPUT_VOLUME == 1.0


class TestSchedulerConfig:
    def test_defaults(self):
        config = load_config({})

        assert config.COMPLETION_MARGIN == 0.5
        assert config.VOLUME_POLL_INTERVAL == 1.0
        assert config.RESET_ON_INTERRUPTION is False

    def test_custom_values(self):
        config = load_config(
            {
                "COMPLETION_MARGIN": "0.25",
                "VOLUME_POLL_INTERVAL": "0",
                "RESET_ON_INTERRUPTION": "true",
            }
        )

        assert config.COMPLETION_MARGIN == 0.25
        assert config.VOLUME_POLL_INTERVAL == 0.0
        assert config.RESET_ON_INTERRUPTION is True

    def test_invalid_numbers_fall_back(self):
        config = load_config({"COMPLETION_MARGIN": "soon", "VOLUME_POLL_INTERVAL": "-2"})

        assert config.COMPLETION_MARGIN == 0.5
        assert config.VOLUME_POLL_INTERVAL == 1.0

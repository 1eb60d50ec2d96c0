"""Tests for logging setup."""

import logging
from unittest.mock import patch

from acme_companion.utils.logging import setup_logging


class TestSetupLogging:
    """Test root logger configuration."""

    def test_level_and_process_tag(self):
        with patch("acme_companion.utils.logging.logging.basicConfig") as basic_config:
            setup_logging("debug", "dhparam-worker")

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == logging.DEBUG
        assert " - dhparam-worker - " in kwargs["format"]

    def test_unknown_level_falls_back_to_info(self):
        with patch("acme_companion.utils.logging.logging.basicConfig") as basic_config:
            setup_logging("chatty")

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == logging.INFO
        assert " - companion - " in kwargs["format"]

    def test_http_client_noise_reduced(self):
        with patch("acme_companion.utils.logging.logging.basicConfig"):
            setup_logging("DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

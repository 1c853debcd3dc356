# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging setup."""

import logging

import structlog

from registrar.core.config.settings import Settings
from registrar.utils.logging import bind_context, clear_context, get_logger, setup_logging


def test_setup_logging_applies_level():
    setup_logging(Settings(_env_file=None, log_level="WARNING", debug=False))

    assert logging.getLogger("registrar").level == logging.WARNING
    assert logging.getLogger("google").level == logging.WARNING


def test_context_binding():
    clear_context()
    bind_context(student_id="u1")

    assert structlog.contextvars.get_contextvars() == {"student_id": "u1"}

    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_get_logger():
    assert get_logger(__name__) is not None

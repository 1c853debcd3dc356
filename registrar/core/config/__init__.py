# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the registrar core.

Example:
    >>> from registrar.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.registrar.default_ay_code)
    'AY2526'
"""

from registrar.core.config.settings import (
    APISettings,
    RegistrarSettings,
    Settings,
    StoreSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "StoreSettings",
    "RegistrarSettings",
    "APISettings",
]

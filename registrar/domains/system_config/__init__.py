# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""System configuration domain package.

Provides access to the singleton config/system document:
- Active academic year and semester
- Enrollment windows
- Latest issued student id
"""

from registrar.domains.system_config.service import (
    SystemConfigService,
    is_valid_ay_code,
)

__all__ = [
    "SystemConfigService",
    "is_valid_ay_code",
]

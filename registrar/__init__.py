"""Registrar Core.

Enrollment record resolution and cross-collection consistency engine for the
school registrar dashboard.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"

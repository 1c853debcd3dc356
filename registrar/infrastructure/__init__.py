# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external services.

This package contains integrations with external systems:
- store: Document store (Firestore, in-memory)
"""

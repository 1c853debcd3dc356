# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP API package.

Exposes the registrar operations over FastAPI. See registrar.api.app.create_app.
"""

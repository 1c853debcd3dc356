# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the registrar core.

Each domain module provides services that orchestrate reads and writes
across the enrollment, section, grade and subject collections.

Domains:
    system_config: Active academic year, semester and enrollment windows.
    enrollment: Key scheme, record resolution and lifecycle transitions.
    section: Section roster membership.
    subject: Cohort subject assignment and grade-sheet synchronization.
"""

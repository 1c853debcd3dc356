# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides:
- The cohort key scheme for enrollment document ids
- Tiered resolution of a student's enrollment across key formats
- Lifecycle transitions (submit, enroll, revoke, delete)
- Replica reconciliation
- EnrollmentService, the public operation boundary
"""

from registrar.domains.enrollment.keys import cohort_key, student_scoped_key
from registrar.domains.enrollment.lifecycle import LifecycleCoordinator, LifecycleOutcome
from registrar.domains.enrollment.reconcile import EnrollmentReconciler, ReconcileReport
from registrar.domains.enrollment.resolver import EnrollmentResolver, ResolvedEnrollment
from registrar.domains.enrollment.service import EnrollmentService

__all__ = [
    "cohort_key",
    "student_scoped_key",
    "EnrollmentResolver",
    "ResolvedEnrollment",
    "LifecycleCoordinator",
    "LifecycleOutcome",
    "EnrollmentReconciler",
    "ReconcileReport",
    "EnrollmentService",
]

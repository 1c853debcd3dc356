# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Document paths of the registrar collections.

    students/{studentId}                               student profile
    students/{studentId}/enrollment/{cohortKey}        enrollment record
    students/{studentId}/studentGrades/{cohortKey}     grade sheet
    enrollments/{studentId}_{cohortKey}                top-level enrollment replica
    sections/{sectionId}                               section roster
"""

TOP_LEVEL_COLLECTION = "enrollments"
STUDENTS_COLLECTION = "students"
SECTIONS_COLLECTION = "sections"


def student_path(student_id: str) -> str:
    return f"{STUDENTS_COLLECTION}/{student_id}"


def enrollment_collection(student_id: str) -> str:
    return f"{STUDENTS_COLLECTION}/{student_id}/enrollment"


def enrollment_path(student_id: str, key: str) -> str:
    return f"{enrollment_collection(student_id)}/{key}"


def grade_sheet_path(student_id: str, key: str) -> str:
    return f"{STUDENTS_COLLECTION}/{student_id}/studentGrades/{key}"


def top_level_path(key: str) -> str:
    return f"{TOP_LEVEL_COLLECTION}/{key}"


def section_path(section_id: str) -> str:
    return f"{SECTIONS_COLLECTION}/{section_id}"

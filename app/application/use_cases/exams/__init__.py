"""Exam result use cases."""

from app.application.use_cases.exams.save_results import (
    ExamResultService,
    resolve_grade,
)

__all__ = ["ExamResultService", "resolve_grade"]

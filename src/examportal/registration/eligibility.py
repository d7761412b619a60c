"""Eligibility Evaluator - attendance gate for exam registration."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select

from examportal.registration.models import EligibilityDecision, ReasonCode
from examportal.store import AttendanceRecord, Exam

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class EligibilityEvaluator:
    """Decides whether a student may register for an exam.

    Reads exam and attendance rows through the session it is given and never
    writes, so it can run inside or outside a unit of work.
    """

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        """Initialize the evaluator.

        Args:
            today: Returns the current local date; exams dated before it are closed.
        """
        self._today = today

    def is_open(self, exam: Exam | None) -> bool:
        """Whether registration is open for the exam."""
        return exam is not None and exam.exam_date >= self._today()

    def attendance_for(self, session: Session, student_id: str, course_id: str) -> float:
        """Attendance percentage of a student in a course, 0.0 without a record."""
        stmt = select(AttendanceRecord.percentage).where(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.course_id == course_id,
        )
        percentage = session.execute(stmt).scalar_one_or_none()
        return float(percentage) if percentage is not None else 0.0

    def assess(self, session: Session, student_id: str, exam: Exam) -> EligibilityDecision:
        """Check attendance against an already loaded, open exam."""
        attendance = self.attendance_for(session, student_id, exam.course_id)
        required = float(exam.min_attendance)
        if attendance >= required:
            return EligibilityDecision.allow(attendance, required)
        return EligibilityDecision.deny(ReasonCode.INSUFFICIENT_ATTENDANCE, attendance, required)

    def evaluate(self, session: Session, student_id: str, exam_id: str) -> EligibilityDecision:
        """Decide eligibility of a student for an exam.

        Args:
            session: Session used for reads.
            student_id: The student's unique ID.
            exam_id: The exam's unique ID.

        Returns:
            EligibilityDecision; ineligible with EXAM_NOT_OPEN when the exam is
            missing or past, or INSUFFICIENT_ATTENDANCE with the measured value.
        """
        exam = session.get(Exam, exam_id)
        if exam is None or not self.is_open(exam):
            return EligibilityDecision.deny(ReasonCode.EXAM_NOT_OPEN)
        return self.assess(session, student_id, exam)

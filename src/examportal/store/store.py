"""PortalStore - Catalog and listing API over the portal database."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from examportal.store.database import Database
from examportal.store.exceptions import (
    CourseExistsError,
    CourseNotFoundError,
    ExamNotFoundError,
    HallTicketNotFoundError,
    StudentExistsError,
    StudentInUseError,
    StudentNotFoundError,
)
from examportal.store.models import (
    AttendanceRecord,
    AuditLogEntry,
    Course,
    Exam,
    HallTicket,
    Notification,
    NotificationAudience,
    PaymentStatus,
    RegistrationEntry,
    Student,
)

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from sqlalchemy import Select
    from sqlalchemy.orm import Session


class PortalStore:
    """Main API for portal catalog operations.

    Provides CRUD for students, courses, exams and attendance, read-only
    listings of registrations and hall tickets, and the audit log. Ledger
    and hall ticket rows are never written here; see
    ``examportal.registration.RegistrationCoordinator``.
    """

    def __init__(self, db_path: str = "examportal.db", busy_timeout: float = 5.0) -> None:
        """Initialize the store with an SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds to wait on a locked database
        """
        self._db = Database(db_path, busy_timeout=busy_timeout)
        self._db.create_tables()

    @property
    def database(self) -> Database:
        """The underlying connection manager, for units of work."""
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Student Operations ---

    def create_student(self, student_number: str, name: str, email: str) -> Student:
        """Create a new student.

        Args:
            student_number: Institution-issued student number
            name: Full name
            email: Contact address for confirmations

        Returns:
            Created Student with generated ID

        Raises:
            StudentExistsError: If student number or email is already taken
        """
        session = self._db.get_session()
        try:
            student = Student(student_number=student_number, name=name, email=email)
            session.add(student)
            session.commit()
            session.refresh(student)
            return student
        except IntegrityError as e:
            session.rollback()
            if "UNIQUE constraint failed" in str(e):
                raise StudentExistsError(
                    f"Student number '{student_number}' or email already exists"
                ) from e
            raise
        finally:
            session.close()

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            return student
        finally:
            session.close()

    def list_students(self) -> list[Student]:
        """List all students, ordered by student number."""
        session = self._db.get_session()
        try:
            stmt = select(Student).order_by(Student.student_number)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_student(
        self,
        student_id: str,
        student_number: str | None = None,
        name: str | None = None,
        email: str | None = None,
    ) -> Student:
        """Update a student's identity fields.

        Only fields that are not None are changed.

        Raises:
            StudentNotFoundError: If student doesn't exist
            StudentExistsError: If the new student number or email is taken
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")

            if student_number is not None:
                student.student_number = student_number
            if name is not None:
                student.name = name
            if email is not None:
                student.email = email

            session.commit()
            session.refresh(student)
            return student
        except IntegrityError as e:
            session.rollback()
            if "UNIQUE constraint failed" in str(e):
                raise StudentExistsError(
                    "Student number or email already belongs to another student"
                ) from e
            raise
        finally:
            session.close()

    def delete_student(self, student_id: str) -> Student:
        """Delete a student and their attendance records.

        Students with ledger entries are kept; registrations are never deleted.

        Returns:
            The deleted student

        Raises:
            StudentNotFoundError: If student doesn't exist
            StudentInUseError: If the student has registrations
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")

            stmt = select(RegistrationEntry.id).where(RegistrationEntry.student_id == student_id)
            if session.execute(stmt.limit(1)).first() is not None:
                raise StudentInUseError(
                    f"Student '{student_id}' has registrations and cannot be deleted"
                )

            session.execute(
                delete(AttendanceRecord).where(AttendanceRecord.student_id == student_id)
            )
            session.delete(student)
            session.commit()
            return student
        finally:
            session.close()

    # --- Course Operations ---

    def create_course(self, name: str, code: str) -> Course:
        """Create a new course.

        Raises:
            CourseExistsError: If a course with the same code exists
        """
        session = self._db.get_session()
        try:
            course = Course(name=name, code=code)
            session.add(course)
            session.commit()
            session.refresh(course)
            return course
        except IntegrityError as e:
            session.rollback()
            if "UNIQUE constraint failed" in str(e):
                raise CourseExistsError(f"Course code '{code}' already exists") from e
            raise
        finally:
            session.close()

    def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        session = self._db.get_session()
        try:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            return course
        finally:
            session.close()

    def list_courses(self) -> list[Course]:
        """List all courses, ordered by code."""
        session = self._db.get_session()
        try:
            stmt = select(Course).order_by(Course.code)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    # --- Exam Operations ---

    def create_exam(
        self,
        course_id: str,
        title: str,
        exam_date: date,
        fee: Decimal,
        exam_type: str = "final",
        start_time: str | None = None,
        venue: str | None = None,
        requires_payment: bool = True,
        min_attendance: float = 75.0,
    ) -> Exam:
        """Schedule a new exam for a course.

        Args:
            course_id: The course the exam belongs to
            title: Exam title
            exam_date: Scheduled date
            fee: Registration fee; must be paid exactly
            exam_type: Kind of exam (e.g. "midterm", "final")
            start_time: Optional start time, free text
            venue: Optional venue
            requires_payment: Whether registrations are recorded as paid or free
            min_attendance: Attendance percentage needed to register

        Returns:
            Created Exam with generated ID

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        session = self._db.get_session()
        try:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            exam = Exam(
                course_id=course_id,
                title=title,
                exam_date=exam_date,
                fee=fee,
                exam_type=exam_type,
                start_time=start_time,
                venue=venue,
                requires_payment=requires_payment,
                min_attendance=min_attendance,
            )
            session.add(exam)
            session.commit()
            return self._load_exam(session, exam.id)
        finally:
            session.close()

    def get_exam(self, exam_id: str) -> Exam:
        """Get exam by ID, with its course loaded.

        Raises:
            ExamNotFoundError: If exam doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._load_exam(session, exam_id)
        finally:
            session.close()

    def list_exams(self, scheduled_from: date | None = None) -> list[Exam]:
        """List exams with their courses.

        Args:
            scheduled_from: Only exams on or after this date (None = all)

        Returns:
            Exams ordered by date then title
        """
        session = self._db.get_session()
        try:
            stmt = select(Exam).options(joinedload(Exam.course))
            if scheduled_from is not None:
                stmt = stmt.where(Exam.exam_date >= scheduled_from)
            stmt = stmt.order_by(Exam.exam_date, Exam.title)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    @staticmethod
    def _load_exam(session: Session, exam_id: str) -> Exam:
        stmt = select(Exam).options(joinedload(Exam.course)).where(Exam.id == exam_id)
        exam = session.execute(stmt).scalar_one_or_none()
        if exam is None:
            raise ExamNotFoundError(f"Exam with id '{exam_id}' not found")
        return exam

    # --- Attendance Operations ---

    def set_attendance(
        self, student_id: str, course_id: str, percentage: float
    ) -> AttendanceRecord:
        """Create or replace a student's attendance percentage for a course.

        Raises:
            StudentNotFoundError: If student doesn't exist
            CourseNotFoundError: If course doesn't exist
        """
        session = self._db.get_session()
        try:
            if session.get(Student, student_id) is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            stmt = select(AttendanceRecord).where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.course_id == course_id,
            )
            record = session.execute(stmt).scalar_one_or_none()
            if record is None:
                record = AttendanceRecord(
                    student_id=student_id, course_id=course_id, percentage=percentage
                )
                session.add(record)
            else:
                record.percentage = percentage

            session.commit()
            stmt = (
                select(AttendanceRecord)
                .options(joinedload(AttendanceRecord.course))
                .where(AttendanceRecord.id == record.id)
            )
            return session.execute(stmt).scalar_one()
        finally:
            session.close()

    def list_attendance(self, student_id: str) -> list[AttendanceRecord]:
        """List a student's attendance records, with courses loaded."""
        session = self._db.get_session()
        try:
            stmt = (
                select(AttendanceRecord)
                .options(joinedload(AttendanceRecord.course))
                .where(AttendanceRecord.student_id == student_id)
                .order_by(AttendanceRecord.course_id)
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    # --- Registration Listings ---

    def list_registrations(
        self,
        student_id: str | None = None,
        status: PaymentStatus | None = None,
    ) -> list[RegistrationEntry]:
        """List ledger entries with their students, exams and courses loaded.

        Args:
            student_id: Filter by student (None = all)
            status: Filter by payment status (None = all)

        Returns:
            Entries ordered by exam date
        """
        session = self._db.get_session()
        try:
            stmt = (
                select(RegistrationEntry)
                .join(RegistrationEntry.exam)
                .options(
                    joinedload(RegistrationEntry.exam).joinedload(Exam.course),
                    joinedload(RegistrationEntry.student),
                )
            )
            if student_id is not None:
                stmt = stmt.where(RegistrationEntry.student_id == student_id)
            if status is not None:
                stmt = stmt.where(RegistrationEntry.status == status.value)
            stmt = stmt.order_by(Exam.exam_date, Exam.title)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def get_registration(self, student_id: str, exam_id: str) -> RegistrationEntry | None:
        """Get the ledger entry for a (student, exam) pair, if any."""
        session = self._db.get_session()
        try:
            stmt = (
                select(RegistrationEntry)
                .options(joinedload(RegistrationEntry.exam))
                .where(
                    RegistrationEntry.student_id == student_id,
                    RegistrationEntry.exam_id == exam_id,
                )
            )
            return session.execute(stmt).scalar_one_or_none()
        finally:
            session.close()

    # --- Hall Ticket Listings ---

    def list_hall_tickets(self, student_id: str | None = None) -> list[HallTicket]:
        """List hall tickets with their exams loaded.

        Args:
            student_id: Filter by student (None = all)
        """
        session = self._db.get_session()
        try:
            stmt = (
                select(HallTicket)
                .join(HallTicket.exam)
                .options(joinedload(HallTicket.exam).joinedload(Exam.course))
            )
            if student_id is not None:
                stmt = stmt.where(HallTicket.student_id == student_id)
            stmt = stmt.order_by(Exam.exam_date, Exam.title)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def get_hall_ticket(self, student_id: str, exam_id: str) -> HallTicket:
        """Get the hall ticket for a (student, exam) pair.

        Raises:
            HallTicketNotFoundError: If no ticket was issued
        """
        session = self._db.get_session()
        try:
            stmt = (
                select(HallTicket)
                .options(joinedload(HallTicket.exam))
                .where(HallTicket.student_id == student_id, HallTicket.exam_id == exam_id)
            )
            ticket = session.execute(stmt).scalar_one_or_none()
            if ticket is None:
                raise HallTicketNotFoundError(
                    f"Hall ticket for student '{student_id}' and exam '{exam_id}' not found"
                )
            return ticket
        finally:
            session.close()

    # --- Notification Operations ---

    def create_notification(self, audience: NotificationAudience, message: str) -> Notification:
        """Store a broadcast notification."""
        session = self._db.get_session()
        try:
            notification = Notification(audience=audience.value, message=message)
            session.add(notification)
            session.commit()
            session.refresh(notification)
            return notification
        finally:
            session.close()

    def list_notifications(self, student_id: str | None = None) -> list[Notification]:
        """List notifications, most recent first.

        Args:
            student_id: Only notifications addressed to this student (None = all)
        """
        session = self._db.get_session()
        try:
            stmt = select(Notification)
            if student_id is not None:
                paid = session.execute(
                    self._paid_students().where(RegistrationEntry.student_id == student_id)
                ).first()
                own = NotificationAudience.PAID if paid else NotificationAudience.UNPAID
                stmt = stmt.where(
                    Notification.audience.in_([NotificationAudience.ALL.value, own.value])
                )
            stmt = stmt.order_by(Notification.sent_at.desc(), Notification.id)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def list_recipients(self, audience: NotificationAudience) -> list[Student]:
        """Students a notification for the audience goes to, by student number."""
        session = self._db.get_session()
        try:
            stmt = select(Student).order_by(Student.student_number)
            if audience == NotificationAudience.PAID:
                stmt = stmt.where(Student.id.in_(self._paid_students()))
            elif audience == NotificationAudience.UNPAID:
                stmt = stmt.where(Student.id.not_in(self._paid_students()))
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    @staticmethod
    def _paid_students() -> Select[tuple[str]]:
        return select(RegistrationEntry.student_id).where(
            RegistrationEntry.status == PaymentStatus.PAID.value
        )

    # --- Audit Operations ---

    def record_audit(self, actor: str, action: str) -> AuditLogEntry:
        """Append an audit log row."""
        session = self._db.get_session()
        try:
            entry = AuditLogEntry(actor=actor, action=action)
            session.add(entry)
            session.commit()
            session.refresh(entry)
            return entry
        finally:
            session.close()

    def list_audit_log(self, limit: int = 100, offset: int = 0) -> list[AuditLogEntry]:
        """Query the audit log, most recent first."""
        session = self._db.get_session()
        try:
            stmt = (
                select(AuditLogEntry)
                .order_by(AuditLogEntry.created_at.desc(), AuditLogEntry.id)
                .limit(limit)
                .offset(offset)
            )
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

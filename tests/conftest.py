"""Shared pytest fixtures and configuration."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from examportal.registration import RegistrationCoordinator
from examportal.store import Course, Exam, PortalStore, Student


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store() -> PortalStore:
    """Create an in-memory PortalStore for testing."""
    s = PortalStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def student(store: PortalStore) -> Student:
    """A registered student."""
    return store.create_student(student_number="S1001", name="Alice Smith", email="alice@uni.edu")


@pytest.fixture
def course(store: PortalStore) -> Course:
    """A course with exams."""
    return store.create_course(name="Databases", code="CS301")


@pytest.fixture
def exam(store: PortalStore, course: Course) -> Exam:
    """An upcoming paid exam: fee 50.00, 75% attendance required."""
    return store.create_exam(
        course_id=course.id,
        title="Databases Final",
        exam_date=date.today() + timedelta(days=30),
        fee=Decimal("50.00"),
        start_time="09:00",
        venue="Hall A",
    )


@pytest.fixture
def paid_student(store: PortalStore, student: Student, course: Course, exam: Exam) -> Student:
    """The student, eligible and registered (paid) for the exam."""
    store.set_attendance(student.id, course.id, 90.0)
    result = RegistrationCoordinator(store.database).register_for_exam(
        student.id, exam.id, Decimal("50.00")
    )
    assert result.success
    return student

"""
Student Registry - the keyed store behind every student operation.

Holds Student records in the students table, keyed by a random UUID and
iterated in ascending id order. Six operations are exposed:

1. create_student      - validate payload, allocate id, insert
2. get_student_by_id   - point lookup
3. get_student_by_name - first case-insensitive exact name match
4. get_all_students    - every record in id order
5. update_student      - replace business fields, stamp updated_at
6. delete_student      - remove and return the removed record

No operation raises for bad input, missing records or database errors.
Each returns Ok(value) or Err(kind, message) and callers branch on
result.ok / result.kind.

Every operation runs under one lock with its own session, so concurrent
callers (FastAPI serves sync routes from a thread pool) never interleave
against the table.
"""

import time
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from app.database import SessionLocal
from app.models.student import Student, utc_now
from app.logging_config import get_logger, log_with_context

logger = get_logger("registry")


# ── Results ──────────────────────────────────────────────────

class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFoundError"
    STORAGE = "StorageFault"


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying the operation's value."""
    value: Any
    ok = True


@dataclass(frozen=True)
class Err:
    """Failed outcome: an error kind and a caller-facing message."""
    kind: ErrorKind
    message: str
    ok = False


Result = Union[Ok, Err]


# ── Payload ──────────────────────────────────────────────────

class StudentPayload(BaseModel):
    """
    Input for create and update.

    Every text field is optional at the schema level so that a missing
    field is reported by the registry as a ValidationError rather than
    rejected by the request parser. parent_number must be a non-negative
    integer when given; it is checked for presence but never stored.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, description="Student's full name")
    date_birth: Optional[str] = Field(None, alias="dateBirth", description="Date of birth")
    date_admission: Optional[str] = Field(None, alias="dateAdmission",
                                          description="Date of admission")
    course: Optional[str] = Field(None, description="Course name")
    course_type: Optional[str] = Field(None, alias="courseType", description="Course type")
    location: Optional[str] = Field(None, description="Campus or study location")
    parent: Optional[str] = Field(None, description="Guardian name")
    parent_number: Optional[int] = Field(None, alias="parentNumber", ge=0,
                                         description="Guardian contact number")

    def business_fields(self) -> dict:
        return {
            "name": self.name,
            "date_birth": self.date_birth,
            "date_admission": self.date_admission,
            "course": self.course,
            "course_type": self.course_type,
            "location": self.location,
            "parent": self.parent,
        }

    def is_complete(self) -> bool:
        """True when all seven text fields are non-empty and parent_number is positive."""
        texts_present = all(self.business_fields().values())
        return texts_present and self.parent_number is not None and self.parent_number > 0


def _blank(value: Optional[str]) -> bool:
    return not value


# ── Registry ─────────────────────────────────────────────────

class StudentRegistry:
    """Single owner of all Student records."""

    def __init__(self, session_factory):
        self._session_factory = session_factory
        self._lock = threading.Lock()

    def _invalid(self, message: str, operation: str) -> Err:
        log_with_context(logger, "WARNING", message, extra_data={"operation": operation})
        return Err(ErrorKind.VALIDATION, message)

    def _not_found(self, message: str, context: dict) -> Err:
        log_with_context(logger, "INFO", message, context=context)
        return Err(ErrorKind.NOT_FOUND, message)

    def _fault(self, message: str, error: Exception, context: dict = None) -> Err:
        log_with_context(logger, "ERROR", message, context=context,
                         extra_data={"error": str(error), "error_type": type(error).__name__})
        return Err(ErrorKind.STORAGE, message)

    def create_student(self, payload: StudentPayload) -> Result:
        """Insert a new record with a fresh id; updated_at stays empty."""
        if not payload.is_complete():
            return self._invalid("Invalid payload properties for creating a student.", "create")

        with self._lock, self._session_factory() as session:
            try:
                student = Student(
                    id=str(uuid.uuid4()),
                    created_at=utc_now(),
                    updated_at=None,
                    **payload.business_fields()
                )
                session.add(student)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                return self._fault("Error creating a student.", e)

        log_with_context(logger, "INFO", "Student created: {}".format(student.name),
                         context={"student_id": student.id})
        return Ok(student)

    def get_student_by_id(self, student_id: str) -> Result:
        if _blank(student_id):
            return self._invalid("Invalid ID for getting a student.", "get_by_id")

        with self._lock, self._session_factory() as session:
            try:
                student = session.get(Student, student_id)
            except SQLAlchemyError as e:
                return self._fault("Error retrieving student by ID.", e,
                                   context={"student_id": student_id})

        if student is None:
            return self._not_found("Student with id={} not found.".format(student_id),
                                   context={"student_id": student_id})
        return Ok(student)

    def get_student_by_name(self, name: str) -> Result:
        """
        Return the first student, in id order, whose name equals `name`
        ignoring case. Substrings do not match.
        """
        if _blank(name):
            return self._invalid("Invalid name for getting a student.", "get_by_name")

        start_time = time.time()
        wanted = name.lower()

        with self._lock, self._session_factory() as session:
            try:
                students = session.query(Student).order_by(Student.id).all()
            except SQLAlchemyError as e:
                return self._fault("Error retrieving student by name.", e,
                                   context={"name": name})

        found = next((s for s in students if s.name.lower() == wanted), None)

        duration_ms = (time.time() - start_time) * 1000
        if found is None:
            return self._not_found('Student with name="{}" not found.'.format(name),
                                   context={"name": name})

        log_with_context(logger, "DEBUG",
                         "Name lookup scanned {} students".format(len(students)),
                         context={"student_id": found.id},
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return Ok(found)

    def get_all_students(self) -> Result:
        with self._lock, self._session_factory() as session:
            try:
                students = session.query(Student).order_by(Student.id).all()
            except SQLAlchemyError as e:
                return self._fault("Error retrieving all students.", e)
        return Ok(students)

    def update_student(self, student_id: str, payload: StudentPayload) -> Result:
        """
        Replace all business fields of an existing record. id and
        created_at are kept; updated_at is set to now.
        """
        if _blank(student_id) or not payload.is_complete():
            return self._invalid("Invalid ID or payload properties for updating a student.",
                                 "update")

        with self._lock, self._session_factory() as session:
            try:
                student = session.get(Student, student_id)
                if student is None:
                    return self._not_found("Student with id={} not found.".format(student_id),
                                           context={"student_id": student_id})

                for field_name, value in payload.business_fields().items():
                    setattr(student, field_name, value)
                # A clock step backwards must not put updated_at before created_at
                student.updated_at = max(utc_now(), student.created_at)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                return self._fault("Error updating student.", e,
                                   context={"student_id": student_id})

        log_with_context(logger, "INFO", "Student updated",
                         context={"student_id": student_id})
        return Ok(student)

    def delete_student(self, student_id: str) -> Result:
        """Remove a record and return it as it was just before removal."""
        if _blank(student_id):
            return self._invalid("Invalid ID for deleting a student.", "delete")

        with self._lock, self._session_factory() as session:
            try:
                student = session.get(Student, student_id)
                if student is None:
                    return self._not_found("Student with id={} not found.".format(student_id),
                                           context={"student_id": student_id})
                session.delete(student)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                return self._fault("Error deleting student.", e,
                                   context={"student_id": student_id})

        log_with_context(logger, "INFO", "Student deleted",
                         context={"student_id": student_id})
        return Ok(student)


# Process-wide registry, created once at import over the configured database
registry = StudentRegistry(SessionLocal)


def get_registry() -> StudentRegistry:
    """FastAPI dependency returning the process-wide registry."""
    return registry

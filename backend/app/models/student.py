"""
Student model - the single record type held by the registry.

Rows are keyed by a random UUID string. The seven business fields are
plain text; dates are kept exactly as the caller supplied them.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String
from app.database import Base


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (SQLite stores no offset)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Student(Base):
    """
    SQLAlchemy model for the students table.

    `id` and `created_at` are written once on insert. `updated_at` stays
    NULL until the first update and is refreshed on every later one.
    """
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier")
    name = Column(Text, nullable=False, doc="Student's full name")
    date_birth = Column(Text, nullable=False, doc="Date of birth")
    date_admission = Column(Text, nullable=False, doc="Date of admission")
    course = Column(Text, nullable=False, doc="Enrolled course")
    course_type = Column(Text, nullable=False,
                         doc="Course type, e.g. full or part time")
    location = Column(Text, nullable=False, doc="Campus or study location")
    parent = Column(Text, nullable=False, doc="Guardian name")
    created_at = Column(DateTime, nullable=False, default=utc_now,
                        doc="Timestamp when the record was created")
    updated_at = Column(DateTime, nullable=True,
                        doc="Timestamp of the latest update (NULL until updated)")

    def to_dict(self) -> dict:
        """Serialize to the registry's camelCase wire form."""
        return {
            "id": self.id,
            "name": self.name,
            "dateBirth": self.date_birth,
            "dateAdmission": self.date_admission,
            "course": self.course,
            "courseType": self.course_type,
            "location": self.location,
            "parent": self.parent,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', course='{self.course}')>"

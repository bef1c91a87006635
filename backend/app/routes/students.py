"""
Student API routes - REST surface of the student registry.

Each endpoint calls one registry operation and translates its result:
Ok becomes the JSON record(s); Err becomes an HTTPException whose detail
is the registry message unchanged.

    ValidationError -> 400
    NotFoundError   -> 404
    StorageFault    -> 500
"""

import time
from fastapi import APIRouter, Depends, HTTPException, Query

from app.services.registry import (
    ErrorKind, Result, StudentPayload, StudentRegistry, get_registry
)
from app.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")

# ── Result to HTTP mapping ────────────────────────────────────

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
}


def unwrap(result: Result):
    """Return the value of an Ok result or raise the matching HTTP error."""
    if result.ok:
        return result.value
    raise HTTPException(status_code=STATUS_BY_KIND[result.kind], detail=result.message)


# ── Endpoints ────────────────────────────────────────────────

@router.post("/api/students", status_code=201)
def create_student(payload: StudentPayload,
                   registry: StudentRegistry = Depends(get_registry)):
    """Register a new student."""
    student = unwrap(registry.create_student(payload))
    return student.to_dict()


@router.get("/api/students")
def list_students(registry: StudentRegistry = Depends(get_registry)):
    """List every student in ascending id order."""
    start_time = time.time()
    students = unwrap(registry.get_all_students())

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Listed {} students".format(len(students)),
                     extra_data={"duration_ms": round(duration_ms, 2)})
    return [s.to_dict() for s in students]


# Declared before /{student_id} so "search" is not taken as an id
@router.get("/api/students/search")
def find_student_by_name(
    name: str = Query("", description="Exact student name, case-insensitive"),
    registry: StudentRegistry = Depends(get_registry)
):
    """Look up a student by name."""
    student = unwrap(registry.get_student_by_name(name))
    return student.to_dict()


@router.get("/api/students/{student_id}")
def get_student(student_id: str, registry: StudentRegistry = Depends(get_registry)):
    student = unwrap(registry.get_student_by_id(student_id))
    return student.to_dict()


@router.put("/api/students/{student_id}")
def update_student(student_id: str, payload: StudentPayload,
                   registry: StudentRegistry = Depends(get_registry)):
    """Replace a student's details; id and createdAt are kept."""
    student = unwrap(registry.update_student(student_id, payload))
    return student.to_dict()


@router.delete("/api/students/{student_id}")
def delete_student(student_id: str, registry: StudentRegistry = Depends(get_registry)):
    """Remove a student and return the removed record."""
    student = unwrap(registry.delete_student(student_id))
    return student.to_dict()

"""
Comanda — Students API

Registry of students ordered for through the school lunch channels.
`q` searches name, guardian and phone and returns at most 10 matches.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.db.database import get_db
from comanda.models.student import Grade, Student
from comanda.schemas.student import StudentCreateRequest, StudentResponse, StudentUpdateRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/students", tags=["students"])

SEARCH_LIMIT = 10
REQUIRED_FIELDS = ("full_name", "grade", "section", "guardian_name")


async def _load(db: AsyncSession, student_id: str) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found.")
    return student


@router.get("", response_model=list[StudentResponse])
async def list_students(
    q: str | None = Query(None, max_length=100, description="Search name, guardian or phone"),
    grade: Grade | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """All students by name, or the first matches for a search term."""
    query = select(Student).order_by(Student.full_name.asc())
    if grade is not None:
        query = query.where(Student.grade == grade)

    term = (q or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.where(or_(
            Student.full_name.ilike(pattern),
            Student.guardian_name.ilike(pattern),
            Student.phone.ilike(pattern),
        )).limit(SEARCH_LIMIT)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(student_id: str, db: AsyncSession = Depends(get_db)):
    return await _load(db, student_id)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(payload: StudentCreateRequest, db: AsyncSession = Depends(get_db)):
    now = utcnow()
    student = Student(**payload.model_dump(), created_at=now, updated_at=now)
    db.add(student)
    await db.commit()
    logger.info("Student %s (%s %s) registered", student.full_name, student.grade.value, student.section.value)
    return student


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str, payload: StudentUpdateRequest, db: AsyncSession = Depends(get_db)
):
    student = await _load(db, student_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(student, field, value)
    student.updated_at = utcnow()
    await db.commit()
    return student


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(student_id: str, db: AsyncSession = Depends(get_db)):
    """Past orders keep their snapshot of the student's details."""
    student = await _load(db, student_id)
    await db.delete(student)
    await db.commit()
    logger.info("Student %s deleted", student.full_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

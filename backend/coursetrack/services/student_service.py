"""
Service de l'annuaire des élèves.
"""

import logging
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursetrack.exceptions import DuplicateEntry, NotFound
from coursetrack.models.catalog import Course, Major
from coursetrack.models.enrollment import Enrollment, Grade
from coursetrack.models.student import Student
from coursetrack.schemas.student import (
    StudentCourse,
    StudentCoursesResponse,
    StudentCreate,
    StudentResponse,
)
from coursetrack.services.catalog_service import get_student_or_404
from coursetrack.services.grade_service import grade_summary

logger = logging.getLogger(__name__)


def create_student(db: Session, data: StudentCreate) -> StudentResponse:
    """
    Crée un élève.
    Lève NotFound si la filière n'existe pas, DuplicateEntry si l'email est déjà utilisé.
    """
    major = db.get(Major, data.major_id)
    if major is None:
        db.rollback()
        raise NotFound(f"Filière {data.major_id} introuvable.")

    student = Student(**data.model_dump())
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEntry(f"Un élève avec l'email '{data.email}' existe déjà.")
    db.refresh(student)
    return _to_response(student, major.name)


def list_students(db: Session) -> list[StudentResponse]:
    """Retourne tous les élèves triés par nom puis prénom, avec le nom de leur filière."""
    rows = db.execute(
        select(Student, Major.name)
        .join(Major, Major.id == Student.major_id)
        .order_by(Student.last_name, Student.first_name)
    ).all()
    return [_to_response(student, major_name) for student, major_name in rows]


def get_student(db: Session, student_id: int) -> Optional[StudentResponse]:
    row = db.execute(
        select(Student, Major.name)
        .join(Major, Major.id == Student.major_id)
        .where(Student.id == student_id)
    ).first()
    if row is None:
        return None
    return _to_response(row[0], row[1])


def delete_student(db: Session, student_id: int) -> bool:
    """
    Supprime un élève. Inscriptions et notes sont supprimées en cascade par la base.
    Retourne True si supprimé, False si introuvable.
    """
    student = db.get(Student, student_id)
    if student is None:
        return False
    db.delete(student)
    db.commit()
    logger.info("Élève %s supprimé", student_id)
    return True


def list_student_courses(db: Session, student_id: int) -> StudentCoursesResponse:
    """Cours suivis par un élève avec ses notes, sa moyenne pondérée et sa lettre."""
    get_student_or_404(db, student_id)

    rows = db.execute(
        select(Course, Grade)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .outerjoin(
            Grade,
            and_(
                Grade.student_id == Enrollment.student_id,
                Grade.course_id == Enrollment.course_id,
            ),
        )
        .where(Enrollment.student_id == student_id)
        .order_by(Course.prefix, Course.number)
    ).all()

    courses = [
        StudentCourse(
            course_id=course.id,
            prefix=course.prefix,
            number=course.number,
            section=course.section,
            title=course.title,
            **grade_summary(grade),
        )
        for course, grade in rows
    ]
    return StudentCoursesResponse(student_id=student_id, total=len(courses), courses=courses)


def _to_response(student: Student, major_name: Optional[str]) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        first_name=student.first_name,
        last_name=student.last_name,
        email=student.email,
        major_id=student.major_id,
        major_name=major_name,
        graduating_year=student.graduating_year,
        created_at=student.created_at,
    )

"""
Schémas Pydantic pour les élèves.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, EmailStr, field_validator


class StudentCreate(BaseModel):
    """Schéma de création d'un élève (POST /students)."""
    first_name: str
    last_name: str
    email: EmailStr
    major_id: int
    graduating_year: int

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("graduating_year")
    @classmethod
    def plausible_year(cls, v: int) -> int:
        if not 1900 <= v <= 2200:
            raise ValueError("Année de diplomation invalide.")
        return v


class StudentResponse(BaseModel):
    """Schéma de réponse pour un élève (GET /students)."""
    id: int
    first_name: str
    last_name: str
    email: str
    major_id: int
    major_name: Optional[str] = None
    graduating_year: int
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


class StudentCourse(BaseModel):
    """Cours suivi par un élève, avec ses notes (GET /students/{id}/courses)."""
    course_id: int
    prefix: str
    number: int
    section: str
    title: str
    quiz1: Optional[float]
    quiz2: Optional[float]
    project1: Optional[float]
    project2: Optional[float]
    final_exam: Optional[float]
    overall_grade: Union[float, str]
    letter_grade: str


class StudentCoursesResponse(BaseModel):
    student_id: int
    total: int
    courses: List[StudentCourse]

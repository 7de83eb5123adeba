"""
Schémas Pydantic pour les inscriptions (POST /enrollments) et la liste de classe.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel


class EnrollmentCreate(BaseModel):
    student_id: int
    course_id: int


class EnrollmentResponse(BaseModel):
    """Réponse après inscription : identifiants de l'inscription et de sa note."""
    id: int
    student_id: int
    course_id: int
    grade_id: int
    created_at: Optional[datetime]


class RosterEntry(BaseModel):
    """Élève inscrit à une section avec ses notes (null si la note n'existe pas encore)."""
    student_id: int
    first_name: str
    last_name: str
    email: str
    quiz1: Optional[float]
    quiz2: Optional[float]
    project1: Optional[float]
    project2: Optional[float]
    final_exam: Optional[float]
    overall_grade: Union[float, str]
    letter_grade: str


class CourseRosterResponse(BaseModel):
    course_id: int
    total: int
    students: List[RosterEntry]

"""
Schémas Pydantic pour le carnet de notes.

La plage [0, 100] est vérifiée par le service (InvalidGrade → 400), pas ici :
le schéma ne fait que typer les composantes.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class GradeUpdate(BaseModel):
    """
    Corps de PUT /grades/{student_id}/{course_id}.
    Composante absente : 0 à la création, inchangée sinon.
    """
    quiz1: Optional[float] = None
    quiz2: Optional[float] = None
    project1: Optional[float] = None
    project2: Optional[float] = None
    final_exam: Optional[float] = None


class GradeResponse(BaseModel):
    id: int
    student_id: int
    course_id: int
    quiz1: float
    quiz2: float
    project1: float
    project2: float
    final_exam: float
    overall_grade: Union[float, str]
    letter_grade: str
    updated_at: Optional[datetime]

"""
Schémas Pydantic pour le catalogue (filières, cours).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class MajorResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class CourseCreate(BaseModel):
    """Corps de requête pour créer une section de cours (POST /courses)."""
    prefix: str
    number: int
    section: str
    title: str
    classroom: str
    start_time: str
    instructor_id: Optional[int] = None

    @field_validator("prefix")
    @classmethod
    def prefix_upper(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le préfixe du cours ne peut pas être vide.")
        return v.strip().upper()

    @field_validator("number")
    @classmethod
    def number_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Le numéro du cours doit être positif.")
        return v

    @field_validator("section")
    @classmethod
    def section_padded(cls, v: str) -> str:
        """'1' et '01' désignent la même section."""
        if not v.strip():
            raise ValueError("La section ne peut pas être vide.")
        return v.strip().zfill(2)

    @field_validator("title", "classroom", "start_time")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class CourseResponse(BaseModel):
    id: int
    prefix: str
    number: int
    section: str
    title: str
    classroom: str
    start_time: str
    instructor_id: Optional[int]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}

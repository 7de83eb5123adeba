"""
Router pour l'annuaire des élèves.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coursetrack.database import get_db
from coursetrack.exceptions import DuplicateEntry, NotFound
from coursetrack.schemas.student import StudentCoursesResponse, StudentCreate, StudentResponse
from coursetrack.services import student_service

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])


@router.get("", response_model=List[StudentResponse], summary="Lister tous les élèves")
def list_students(db: Session = Depends(get_db)):
    """Retourne tous les élèves triés alphabétiquement par nom puis prénom."""
    return student_service.list_students(db)


@router.post("", response_model=StudentResponse, status_code=201, summary="Créer un élève")
def create_student(data: StudentCreate, db: Session = Depends(get_db)):
    try:
        return student_service.create_student(db, data)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateEntry as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{student_id}", response_model=StudentResponse, summary="Détail d'un élève")
def get_student(student_id: int, db: Session = Depends(get_db)):
    student = student_service.get_student(db, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Élève introuvable.")
    return student


@router.delete("/{student_id}", status_code=204, summary="Supprimer un élève")
def delete_student(student_id: int, db: Session = Depends(get_db)):
    """Supprime définitivement un élève. Ses inscriptions et notes sont supprimées en cascade."""
    if not student_service.delete_student(db, student_id):
        raise HTTPException(status_code=404, detail="Élève introuvable.")


@router.get("/{student_id}/courses", response_model=StudentCoursesResponse, summary="Cours suivis et notes")
def student_courses(student_id: int, db: Session = Depends(get_db)):
    try:
        return student_service.list_student_courses(db, student_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

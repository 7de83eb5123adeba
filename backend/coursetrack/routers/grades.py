"""
Router pour le carnet de notes.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coursetrack.database import get_db
from coursetrack.exceptions import NotFound, StorageFailure
from coursetrack.schemas.grade import GradeResponse, GradeUpdate
from coursetrack.services import grade_service

router = APIRouter(prefix="/api/v1/grades", tags=["Notes"])


@router.put("/{student_id}/{course_id}", response_model=GradeResponse, summary="Enregistrer les notes")
def set_grades(student_id: int, course_id: int, data: GradeUpdate, db: Session = Depends(get_db)):
    """
    Met à jour les notes d'un élève pour un cours.
    Les composantes absentes du corps ne sont pas modifiées (0 si la note est créée).
    Chaque note doit être comprise entre 0 et 100.
    """
    try:
        grade = grade_service.set_grades(db, student_id, course_id, data)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return grade_service.to_response(grade)


@router.get("/{student_id}/{course_id}", response_model=GradeResponse, summary="Consulter les notes")
def get_grades(student_id: int, course_id: int, db: Session = Depends(get_db)):
    try:
        grade = grade_service.get_grade(db, student_id, course_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return grade_service.to_response(grade)

"""
Router pour les inscriptions.
POST /api/v1/enrollments crée l'inscription et sa note en une seule opération.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from coursetrack.database import get_db
from coursetrack.exceptions import NotFound, StorageFailure
from coursetrack.schemas.enrollment import EnrollmentCreate, EnrollmentResponse
from coursetrack.services import enrollment_service

router = APIRouter(prefix="/api/v1/enrollments", tags=["Inscriptions"])


@router.post("", response_model=EnrollmentResponse, status_code=201, summary="Inscrire un élève")
def enroll(data: EnrollmentCreate, request: Request, db: Session = Depends(get_db)):
    """
    Inscrit un élève à une section de cours.

    - 404 : élève ou cours introuvable
    - 400 : déjà inscrit à cette section, ou à une autre section du même cours
    - 500 : échec d'enregistrement (rien n'est conservé)
    """
    max_attempts = request.app.state.settings.ENROLL_MAX_ATTEMPTS
    try:
        return enrollment_service.enroll_student(
            db, data.student_id, data.course_id, max_attempts=max_attempts
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

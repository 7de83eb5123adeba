"""
Router pour le catalogue : filières et sections de cours.
La liste de classe (élèves + notes) est exposée sous /courses/{id}/students.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coursetrack.database import get_db, get_file_store
from coursetrack.exceptions import DuplicateEntry, NotFound
from coursetrack.schemas.catalog import CourseCreate, CourseResponse, MajorResponse
from coursetrack.schemas.enrollment import CourseRosterResponse
from coursetrack.services import catalog_service, enrollment_service
from coursetrack.services.file_store import FileStore

router = APIRouter(prefix="/api/v1", tags=["Catalogue"])


@router.get("/majors", response_model=List[MajorResponse], summary="Lister les filières")
def list_majors(db: Session = Depends(get_db)):
    return catalog_service.list_majors(db)


@router.post("/courses", response_model=CourseResponse, status_code=201, summary="Créer une section de cours")
def create_course(data: CourseCreate, db: Session = Depends(get_db)):
    """Crée une section. La clé (préfixe, numéro, section) doit être unique."""
    try:
        return catalog_service.create_course(db, data)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateEntry as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/courses", response_model=List[CourseResponse], summary="Lister les cours")
def list_courses(db: Session = Depends(get_db)):
    return catalog_service.list_courses(db)


@router.get("/courses/{course_id}", response_model=CourseResponse, summary="Détail d'un cours")
def get_course(course_id: int, db: Session = Depends(get_db)):
    course = catalog_service.get_course(db, course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Cours introuvable.")
    return course


@router.delete("/courses/{course_id}", status_code=204, summary="Supprimer un cours")
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
):
    """
    Supprime une section définitivement.
    Inscriptions, notes et supports (lignes et fichiers) sont supprimés avec elle.
    """
    try:
        catalog_service.delete_course(db, store, course_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(
    "/courses/{course_id}/students",
    response_model=CourseRosterResponse,
    summary="Liste de classe avec notes",
)
def course_roster(course_id: int, db: Session = Depends(get_db)):
    """Élèves inscrits avec leurs cinq notes, leur moyenne pondérée et leur lettre."""
    try:
        return enrollment_service.list_course_roster(db, course_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

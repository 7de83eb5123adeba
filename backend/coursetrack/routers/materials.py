"""
Router pour les supports de cours.
POST   /api/v1/courses/{course_id}/materials                : dépôt (multipart, champ `file`)
GET    /api/v1/courses/{course_id}/materials                : liste
DELETE /api/v1/courses/{course_id}/materials/{material_id}  : suppression
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from coursetrack.database import get_db, get_file_store
from coursetrack.exceptions import NotFound, StorageFailure
from coursetrack.schemas.material import MaterialResponse
from coursetrack.services import material_service
from coursetrack.services.file_store import FileStore

router = APIRouter(prefix="/api/v1/courses/{course_id}/materials", tags=["Supports de cours"])


@router.post("", response_model=MaterialResponse, status_code=201, summary="Déposer un support")
def upload_material(
    course_id: int,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
):
    """
    Dépose un fichier pour un cours.

    Types acceptés : PDF, Word, PowerPoint, Excel, ZIP, RAR, images, texte brut.
    Taille maximale : 10 Mo. Un fichier vide est accepté.
    """
    max_size = request.app.state.settings.max_upload_size_bytes

    # Route synchrone : exécutée dans le pool de threads, jamais sur la boucle d'événements.
    # Lecture bornée : au-delà du plafond + 1 octet, le fichier est de toute façon refusé
    content = file.file.read(max_size + 1)

    try:
        return material_service.upload_material(
            db,
            store,
            course_id,
            content,
            file_name=file.filename or "",
            content_type=file.content_type or "",
            max_size_bytes=max_size,
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=List[MaterialResponse], summary="Lister les supports")
def list_materials(course_id: int, db: Session = Depends(get_db)):
    try:
        return material_service.list_materials(db, course_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{material_id}", status_code=204, summary="Supprimer un support")
def delete_material(
    course_id: int,
    material_id: int,
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
):
    try:
        material_service.delete_material(db, store, course_id, material_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

"""
Schémas Pydantic pour les supports de cours.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class MaterialResponse(BaseModel):
    id: int
    course_id: int
    file_name: str
    storage_path: str
    content_type: str
    size_bytes: int
    uploaded_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ReconciliationReport(BaseModel):
    """Résultat du rapprochement fichiers ↔ lignes course_materials."""
    orphan_files_removed: List[str]
    missing_files: List[int]  # ids des lignes dont le fichier est absent

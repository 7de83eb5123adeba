"""
Service d'admission des supports de cours.

Invariant : une ligne course_materials existe si et seulement si son fichier existe.
- Dépôt      : fichier écrit, puis ligne insérée ; si l'insertion échoue, le fichier
               est supprimé avant de remonter l'erreur (jamais de fichier orphelin)
- Suppression: ligne supprimée d'abord, puis fichier (best-effort) ; si la ligne
               ne peut pas être supprimée, le fichier n'est pas touché
- Démarrage  : reconcile_materials supprime les fichiers sans ligne

Le service est synchrone et ne cède jamais la main entre l'écriture du fichier et
le commit : une déconnexion du client ne peut pas interrompre la séquence.
"""

import logging
import re
import secrets
import time
from pathlib import PurePosixPath

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursetrack.exceptions import NotFound, StorageFailure, TooLarge, UnsupportedType
from coursetrack.models.catalog import Course
from coursetrack.models.material import CourseMaterial
from coursetrack.schemas.material import ReconciliationReport
from coursetrack.services.catalog_service import get_course_or_404
from coursetrack.services.file_store import FileStore

logger = logging.getLogger(__name__)

MAX_MATERIAL_SIZE_BYTES = 10 * 1024 * 1024  # 10 Mio

ALLOWED_CONTENT_TYPES = {
    # PDF
    "application/pdf",
    # Word
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    # PowerPoint
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Excel
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    # Archives
    "application/zip",
    "application/x-zip-compressed",
    "application/vnd.rar",
    "application/x-rar-compressed",
    # Images
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/bmp",
    "image/svg+xml",
    # Texte
    "text/plain",
}

COURSE_DIR = "courses"
RECONCILE_GRACE_SECONDS = 300  # 5 min
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def normalize_content_type(content_type: str) -> str:
    """'Application/PDF; charset=binary' → 'application/pdf'."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def safe_file_name(file_name: str) -> str:
    """
    Nom de fichier sûr dérivé du nom d'origine : sans répertoire,
    caractères hors [A-Za-z0-9._-] remplacés par '_'.
    """
    base = PurePosixPath((file_name or "").replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[:120] or "fichier"


def build_storage_path(course_id: int, file_name: str) -> str:
    """
    courses/<course_id>/<horodatage ms>-<suffixe aléatoire>-<nom sûr>

    Le jeton (horodatage + 8 hex aléatoires) garantit l'absence de collision entre
    dépôts concurrents sur un même cours, sans verrou.
    """
    token = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
    return f"{COURSE_DIR}/{course_id}/{token}-{safe_file_name(file_name)}"


def upload_material(
    db: Session,
    store: FileStore,
    course_id: int,
    data: bytes,
    file_name: str,
    content_type: str,
    max_size_bytes: int = MAX_MATERIAL_SIZE_BYTES,
) -> CourseMaterial:
    """
    Dépose un support pour un cours.

    Étapes :
    1. Le cours existe (NotFound)
    2. Type MIME autorisé (UnsupportedType)
    3. Taille ≤ plafond (TooLarge), rien n'est écrit en cas de refus
    4. Écriture du fichier sous un chemin unique (StorageFailure si échec)
    5. Insertion de la ligne + commit ; si échec : suppression du fichier, puis
       NotFound si le cours a disparu entre-temps, StorageFailure sinon
    """
    get_course_or_404(db, course_id)

    mime = normalize_content_type(content_type)
    if mime not in ALLOWED_CONTENT_TYPES:
        db.rollback()
        raise UnsupportedType(f"Type de fichier non autorisé : '{content_type}'.")

    if len(data) > max_size_bytes:
        db.rollback()
        raise TooLarge(
            f"Fichier trop volumineux ({len(data)} octets). "
            f"Taille maximale : {max_size_bytes // (1024 * 1024)} Mo."
        )

    storage_path = build_storage_path(course_id, file_name)
    try:
        store.write(storage_path, data)
    except (OSError, ValueError) as exc:
        db.rollback()
        logger.error("Écriture du support %s impossible : %s", storage_path, exc)
        raise StorageFailure("Le fichier n'a pas pu être enregistré.") from exc

    material = CourseMaterial(
        course_id=course_id,
        file_name=file_name,
        storage_path=storage_path,
        content_type=mime,
        size_bytes=len(data),
    )
    try:
        db.add(material)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        _discard_file(store, storage_path, reason=str(exc))
        if db.get(Course, course_id) is None:
            db.rollback()
            raise NotFound(f"Cours {course_id} introuvable (supprimé pendant le dépôt).") from exc
        db.rollback()
        raise StorageFailure("Le support n'a pas pu être enregistré.") from exc

    db.refresh(material)
    logger.info(
        "Support déposé : cours %s, '%s' → %s (%d octets)",
        course_id, file_name, storage_path, len(data),
    )
    return material


def list_materials(db: Session, course_id: int) -> list[CourseMaterial]:
    get_course_or_404(db, course_id)
    return db.execute(
        select(CourseMaterial)
        .where(CourseMaterial.course_id == course_id)
        .order_by(CourseMaterial.uploaded_at, CourseMaterial.id)
    ).scalars().all()


def delete_material(db: Session, store: FileStore, course_id: int, material_id: int) -> None:
    """
    Supprime un support : la ligne d'abord (commit), puis le fichier.
    Lève NotFound si le support n'existe pas ou appartient à un autre cours.
    Un fichier déjà absent n'est pas une erreur.
    """
    material = db.get(CourseMaterial, material_id)
    if material is None or material.course_id != course_id:
        db.rollback()
        raise NotFound(f"Support {material_id} introuvable pour le cours {course_id}.")

    storage_path = material.storage_path
    try:
        db.delete(material)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Suppression du support %s annulée : %s", material_id, exc)
        raise StorageFailure("Le support n'a pas pu être supprimé.") from exc

    try:
        removed = store.delete(storage_path)
    except OSError as exc:
        # La ligne est déjà supprimée : le fichier restant sera retiré par reconcile_materials
        logger.warning("Support %s supprimé, fichier %s conservé : %s", material_id, storage_path, exc)
        return

    if not removed:
        logger.info("Support %s supprimé (fichier %s déjà absent)", material_id, storage_path)
    else:
        logger.info("Support %s supprimé (%s)", material_id, storage_path)


def reconcile_materials(
    db: Session,
    store: FileStore,
    grace_seconds: int = RECONCILE_GRACE_SECONDS,
) -> ReconciliationReport:
    """
    Rapproche le stockage et la table course_materials.

    - Fichier sans ligne : supprimé (dépôt interrompu, suppression de cours)
    - Ligne sans fichier : signalée (journal + rapport), la ligne est conservée

    La transaction reste ouverte jusqu'à la fin des suppressions : sous SQLite
    (BEGIN IMMEDIATE) un dépôt concurrent attend donc la fin du rapprochement.
    Les fichiers plus récents que grace_seconds ne sont jamais supprimés : un
    dépôt en cours sur un autre processus peut ne pas avoir encore commité sa ligne.
    """
    try:
        known = dict(
            db.execute(select(CourseMaterial.storage_path, CourseMaterial.id)).all()
        )
        stored = set(store.list(COURSE_DIR))

        cutoff_ms = (time.time() - grace_seconds) * 1000
        removed = []
        for path in sorted(stored - set(known)):
            if not _written_before(path, cutoff_ms):
                logger.info("Fichier sans ligne %s conservé (dépôt récent)", path)
                continue
            try:
                store.delete(path)
            except OSError as exc:
                logger.warning("Fichier orphelin %s non supprimé : %s", path, exc)
                continue
            removed.append(path)
    finally:
        db.rollback()

    missing = sorted(material_id for path, material_id in known.items() if path not in stored)
    for material_id in missing:
        logger.warning("Support %s : fichier absent du stockage", material_id)

    logger.info(
        "Rapprochement supports : %d fichier(s) orphelin(s) supprimé(s), %d fichier(s) manquant(s)",
        len(removed), len(missing),
    )
    return ReconciliationReport(orphan_files_removed=removed, missing_files=missing)


def _written_before(storage_path: str, cutoff_ms: float) -> bool:
    """
    Lit l'horodatage (ms) en tête du nom attribué par build_storage_path.
    Un nom sans horodatage n'a pas été écrit par un dépôt : considéré comme ancien.
    """
    head = storage_path.rsplit("/", 1)[-1].split("-", 1)[0]
    if not head.isdigit():
        return True
    return int(head) < cutoff_ms


def _discard_file(store: FileStore, storage_path: str, reason: str) -> None:
    """Nettoyage compensatoire après un échec d'insertion."""
    try:
        store.delete(storage_path)
    except OSError as exc:
        logger.error("Nettoyage impossible du fichier %s : %s", storage_path, exc)
        return
    logger.warning("Fichier %s supprimé après échec d'insertion : %s", storage_path, reason)

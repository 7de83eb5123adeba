"""
Service du catalogue : filières, cours, et helpers d'accès partagés
(get_course_or_404, get_student_or_404) utilisés par les autres services.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursetrack.exceptions import DuplicateEntry, NotFound
from coursetrack.models.catalog import Course, Instructor, Major
from coursetrack.models.material import CourseMaterial
from coursetrack.models.student import Student
from coursetrack.schemas.catalog import CourseCreate
from coursetrack.services.file_store import FileStore

logger = logging.getLogger(__name__)

DEFAULT_MAJORS = (
    "Computer Science and Innovation",
    "Data Science",
    "Cybersecurity",
    "Digital Forensics",
)


def get_course_or_404(db: Session, course_id: int, for_update: bool = False) -> Course:
    course = db.get(Course, course_id, with_for_update=for_update)
    if course is None:
        raise NotFound(f"Cours {course_id} introuvable.")
    return course


def get_student_or_404(db: Session, student_id: int, for_update: bool = False) -> Student:
    student = db.get(Student, student_id, with_for_update=for_update)
    if student is None:
        raise NotFound(f"Élève {student_id} introuvable.")
    return student


def seed_majors(db: Session) -> int:
    """
    Insère les filières de référence si la table est vide.
    Idempotent : retourne le nombre de filières insérées (0 si déjà semées).
    """
    count = db.execute(select(func.count()).select_from(Major)).scalar() or 0
    if count:
        db.rollback()
        return 0

    db.add_all([Major(name=name) for name in DEFAULT_MAJORS])
    db.commit()
    logger.info("Filières initialisées : %d", len(DEFAULT_MAJORS))
    return len(DEFAULT_MAJORS)


def list_majors(db: Session) -> list[Major]:
    return db.execute(select(Major).order_by(Major.id)).scalars().all()


def create_course(db: Session, data: CourseCreate) -> Course:
    """
    Crée une section de cours.
    Lève NotFound si l'enseignant indiqué n'existe pas,
    DuplicateEntry si la clé de section (préfixe, numéro, section) existe déjà.
    """
    if data.instructor_id is not None and db.get(Instructor, data.instructor_id) is None:
        db.rollback()
        raise NotFound(f"Enseignant {data.instructor_id} introuvable.")

    course = Course(**data.model_dump())
    db.add(course)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEntry(
            f"La section {data.prefix}-{data.number} section {data.section} existe déjà."
        )
    db.refresh(course)
    logger.info("Cours créé : %s (%s)", course.label, course.id)
    return course


def list_courses(db: Session) -> list[Course]:
    """Retourne toutes les sections, triées par clé de section."""
    return db.execute(
        select(Course).order_by(Course.prefix, Course.number, Course.section)
    ).scalars().all()


def get_course(db: Session, course_id: int) -> Optional[Course]:
    return db.get(Course, course_id)


def delete_course(db: Session, store: FileStore, course_id: int) -> None:
    """
    Supprime une section de cours.

    La base supprime en cascade inscriptions, notes et lignes course_materials.
    Les fichiers des supports suivent le cycle de vie du cours : ils sont
    supprimés après le commit (best-effort, un fichier déjà absent n'est pas une erreur).
    """
    course = get_course_or_404(db, course_id)
    paths = db.execute(
        select(CourseMaterial.storage_path).where(CourseMaterial.course_id == course_id)
    ).scalars().all()

    db.delete(course)
    db.commit()

    for path in paths:
        try:
            store.delete(path)
        except OSError as exc:
            logger.warning("Cours %s supprimé, fichier %s non supprimé : %s", course_id, path, exc)

    logger.info("Cours %s supprimé (%d support(s))", course_id, len(paths))

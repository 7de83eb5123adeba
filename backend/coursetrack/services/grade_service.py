"""
Service du carnet de notes.

- set_grades : upsert de la note d'une inscription (répare une note manquante)
- compute_overall_grade / letter_grade : moyenne pondérée pour les rapports (non persistée)

Politique des composantes absentes : 0 à la création de la note, inchangées lors
d'une mise à jour (une mise à jour partielle n'efface jamais une note existante).
"""

import logging
import math
from typing import Any, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coursetrack.exceptions import InvalidGrade, NotFound, StorageFailure
from coursetrack.models.enrollment import GRADE_COMPONENTS, Enrollment, Grade
from coursetrack.schemas.grade import GradeResponse, GradeUpdate

logger = logging.getLogger(__name__)

GRADE_WEIGHTS = {
    "quiz1": 0.15,
    "quiz2": 0.15,
    "project1": 0.20,
    "project2": 0.20,
    "final_exam": 0.30,
}

# Seuils inclusifs, du plus haut au plus bas
LETTER_THRESHOLDS = (
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)

NOT_AVAILABLE = "N/A"


def compute_overall_grade(grade: Any) -> Union[float, str]:
    """
    Moyenne pondérée des composantes enregistrées (arrondie à 2 décimales).

    Une composante None n'est pas comptée : ni au numérateur, ni dans le total
    des poids (moyenne renormalisée). Retourne "N/A" si aucune n'est enregistrée.
    Accepte un Grade, un GradeUpdate ou tout objet portant les cinq attributs.
    """
    if grade is None:
        return NOT_AVAILABLE

    weighted_sum = 0.0
    weight_total = 0.0
    for name, weight in GRADE_WEIGHTS.items():
        value = getattr(grade, name, None)
        if value is None:
            continue
        weighted_sum += value * weight
        weight_total += weight

    if weight_total == 0:
        return NOT_AVAILABLE
    return round(weighted_sum / weight_total, 2)


def letter_grade(score: Union[float, str]) -> str:
    if score == NOT_AVAILABLE:
        return NOT_AVAILABLE
    for threshold, letter in LETTER_THRESHOLDS:
        if score >= threshold:
            return letter
    return "F"


def grade_summary(grade: Optional[Grade]) -> dict:
    """Composantes + moyenne + lettre, pour les listes de classe et les relevés."""
    overall = compute_overall_grade(grade)
    summary = {name: getattr(grade, name, None) for name in GRADE_COMPONENTS}
    summary["overall_grade"] = overall
    summary["letter_grade"] = letter_grade(overall)
    return summary


def validate_components(components: GradeUpdate) -> dict:
    """
    Retourne les composantes fournies (exclut les absentes).
    Lève InvalidGrade si une valeur n'est pas un nombre fini dans [0, 100].
    """
    provided = {
        name: value
        for name, value in components.model_dump().items()
        if value is not None
    }
    for name, value in provided.items():
        if not math.isfinite(value) or not 0 <= value <= 100:
            raise InvalidGrade(f"La note '{name}' doit être comprise entre 0 et 100 (reçu : {value}).")
    return provided


def set_grades(
    db: Session,
    student_id: int,
    course_id: int,
    components: GradeUpdate,
) -> Grade:
    """
    Enregistre les notes d'un élève pour un cours.

    1. Valide les composantes fournies (InvalidGrade, aucune écriture)
    2. Vérifie que l'inscription existe (NotFound sinon)
    3. Crée la note si elle manque (inscription créée hors de ce moteur), sinon la met à jour

    Idempotent : les mêmes composantes donnent la même ligne.
    """
    provided = validate_components(components)

    # 2 tentatives : une note créée par un appel concurrent entre la lecture et
    # l'insertion viole uq_grade_student_course, la 2e tentative la met à jour.
    for attempt in (1, 2):
        enrollment = db.execute(
            select(Enrollment).where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
            )
        ).scalar()
        if enrollment is None:
            db.rollback()
            raise NotFound(f"L'élève {student_id} n'est pas inscrit au cours {course_id}.")

        grade = _find_grade(db, student_id, course_id)
        try:
            if grade is None:
                grade = Grade(
                    student_id=student_id,
                    course_id=course_id,
                    **{name: provided.get(name, 0) for name in GRADE_COMPONENTS},
                )
                db.add(grade)
                logger.warning(
                    "Note manquante recréée pour l'inscription élève %s / cours %s",
                    student_id, course_id,
                )
            else:
                for name, value in provided.items():
                    setattr(grade, name, value)
            db.commit()
            break
        except IntegrityError as exc:
            db.rollback()
            if attempt == 2:
                raise StorageFailure("Impossible d'enregistrer les notes.") from exc
            logger.warning("Conflit à l'enregistrement des notes (élève %s, cours %s), nouvel essai", student_id, course_id)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Échec d'enregistrement des notes (élève %s, cours %s) : %s", student_id, course_id, exc)
            raise StorageFailure("Impossible d'enregistrer les notes.") from exc

    db.refresh(grade)
    logger.info("Notes mises à jour : élève %s, cours %s (%s)", student_id, course_id, sorted(provided))
    return grade


def get_grade(db: Session, student_id: int, course_id: int) -> Grade:
    grade = _find_grade(db, student_id, course_id)
    if grade is None:
        raise NotFound(f"Aucune note pour l'élève {student_id} au cours {course_id}.")
    return grade


def to_response(grade: Grade) -> GradeResponse:
    overall = compute_overall_grade(grade)
    return GradeResponse(
        id=grade.id,
        student_id=grade.student_id,
        course_id=grade.course_id,
        quiz1=grade.quiz1,
        quiz2=grade.quiz2,
        project1=grade.project1,
        project2=grade.project2,
        final_exam=grade.final_exam,
        overall_grade=overall,
        letter_grade=letter_grade(overall),
        updated_at=grade.updated_at,
    )


def _find_grade(db: Session, student_id: int, course_id: int) -> Optional[Grade]:
    return db.execute(
        select(Grade).where(
            Grade.student_id == student_id,
            Grade.course_id == course_id,
        )
    ).scalar()

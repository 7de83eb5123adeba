"""
Service métier des inscriptions (registre des inscriptions).

Une inscription et sa note sont créées ensemble, dans une seule transaction :
aucun état "inscrit sans note" n'est observable.

Concurrence :
- la ligne de l'élève est verrouillée (SELECT ... FOR UPDATE ; sous SQLite la
  transaction est ouverte en BEGIN IMMEDIATE, voir database.py), ce qui sérialise
  les inscriptions d'un même élève ;
- les contraintes uq_enrollment_student_course et uq_enrollment_course_number
  restent l'arbitre final : une violation provoquée par un commit concurrent est
  rejouée sur un état relu, et se traduit donc en AlreadyEnrolled ou SectionConflict.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coursetrack.exceptions import (
    AlreadyEnrolled,
    CourseTrackError,
    SectionConflict,
    StorageFailure,
)
from coursetrack.models.catalog import Course
from coursetrack.models.enrollment import Enrollment, Grade
from coursetrack.models.student import Student
from coursetrack.schemas.enrollment import (
    CourseRosterResponse,
    EnrollmentResponse,
    RosterEntry,
)
from coursetrack.services.catalog_service import get_course_or_404, get_student_or_404
from coursetrack.services.grade_service import grade_summary

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


def enroll_student(
    db: Session,
    student_id: int,
    course_id: int,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> EnrollmentResponse:
    """
    Inscrit un élève à une section de cours et ouvre sa note.

    Lève :
    - NotFound        : élève ou cours inexistant
    - AlreadyEnrolled : inscription (élève, cours) déjà présente
    - SectionConflict : élève déjà inscrit dans une autre section du même cours
    - StorageFailure  : erreur de base, tout est annulé
    """
    for attempt in range(1, max_attempts + 1):
        try:
            enrollment, grade_id, label = _enroll_once(db, student_id, course_id)
            break
        except CourseTrackError:
            db.rollback()
            raise
        except IntegrityError as exc:
            # Contrainte violée par une inscription concurrente déjà commitée :
            # on relit l'état pour rendre la bonne erreur métier.
            db.rollback()
            logger.warning(
                "Inscription élève %s / cours %s : conflit d'unicité (tentative %d/%d) : %s",
                student_id, course_id, attempt, max_attempts, exc.orig,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Inscription élève %s / cours %s annulée : %s", student_id, course_id, exc)
            raise StorageFailure("L'inscription n'a pas pu être enregistrée.") from exc
    else:
        raise StorageFailure(
            f"L'inscription n'a pas pu être enregistrée après {max_attempts} tentatives."
        )

    # Hors du filet de reprise : inscription et note sont déjà commitées
    db.refresh(enrollment)
    logger.info(
        "Inscription créée : élève %s → %s (inscription %s, note %s)",
        student_id, label, enrollment.id, grade_id,
    )
    return EnrollmentResponse(
        id=enrollment.id,
        student_id=enrollment.student_id,
        course_id=enrollment.course_id,
        grade_id=grade_id,
        created_at=enrollment.created_at,
    )


def _enroll_once(db: Session, student_id: int, course_id: int) -> Tuple[Enrollment, int, str]:
    """
    Une tentative complète, dans la transaction courante :
    1. Élève (verrouillé) et cours existent
    2. Pas d'inscription (élève, cours) existante
    3. Pas d'inscription à une autre section du même préfixe + numéro
    4. INSERT enrollment puis INSERT grade, commit unique

    Retourne (inscription, id de la note, libellé de la section), lus avant le commit.
    """
    get_student_or_404(db, student_id, for_update=True)
    course = get_course_or_404(db, course_id)

    # 1. Doublon
    existing = db.execute(
        select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
        )
    ).scalar()
    if existing:
        raise AlreadyEnrolled(f"L'élève {student_id} est déjà inscrit en {course.label}.")

    # 2. Autre section du même cours
    held = _find_conflicting_section(db, student_id, course)
    if held is not None:
        raise SectionConflict(
            f"L'élève {student_id} est déjà inscrit en {held.label} : "
            f"inscription en section {course.section} refusée.",
            held_section=held.label,
        )

    # 3. Inscription + note, même transaction
    enrollment = Enrollment(
        student_id=student_id,
        course_id=course_id,
        course_prefix=course.prefix,
        course_number=course.number,
    )
    db.add(enrollment)
    db.flush()  # Obtenir l'ID avant la création de la note

    grade = _open_grade_entry(db, enrollment)
    grade_id, label = grade.id, course.label

    db.commit()
    return enrollment, grade_id, label


def _find_conflicting_section(db: Session, student_id: int, course: Course) -> Optional[Course]:
    """Section du même cours (préfixe + numéro) déjà suivie par l'élève, ou None."""
    return db.execute(
        select(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .where(
            Enrollment.student_id == student_id,
            Course.prefix == course.prefix,
            Course.number == course.number,
            Course.id != course.id,
        )
        .limit(1)
    ).scalar()


def _open_grade_entry(db: Session, enrollment: Enrollment) -> Grade:
    """Crée la note de l'inscription, cinq composantes à 0."""
    grade = Grade(
        student_id=enrollment.student_id,
        course_id=enrollment.course_id,
        quiz1=0,
        quiz2=0,
        project1=0,
        project2=0,
        final_exam=0,
    )
    db.add(grade)
    db.flush()
    return grade


def list_course_roster(db: Session, course_id: int) -> CourseRosterResponse:
    """
    Élèves inscrits à une section avec leurs notes, moyenne et lettre.
    LEFT JOIN sur grades : une inscription sans note (créée hors moteur) apparaît avec des notes nulles.
    """
    get_course_or_404(db, course_id)

    rows = db.execute(
        select(Student, Grade)
        .join(Enrollment, Enrollment.student_id == Student.id)
        .outerjoin(
            Grade,
            and_(
                Grade.student_id == Enrollment.student_id,
                Grade.course_id == Enrollment.course_id,
            ),
        )
        .where(Enrollment.course_id == course_id)
        .order_by(Student.last_name, Student.first_name)
    ).all()

    students = [
        RosterEntry(
            student_id=student.id,
            first_name=student.first_name,
            last_name=student.last_name,
            email=student.email,
            **grade_summary(grade),
        )
        for student, grade in rows
    ]

    logger.debug("Liste de classe cours %s : %d élève(s)", course_id, len(students))
    return CourseRosterResponse(course_id=course_id, total=len(students), students=students)

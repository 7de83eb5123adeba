"""
Tests du carnet de notes : upsert, validation [0, 100], politique des composantes
absentes, moyenne pondérée et lettres.
"""

import math

import pytest

from coursetrack.exceptions import InvalidGrade, NotFound
from coursetrack.models.enrollment import Enrollment, Grade
from coursetrack.schemas.grade import GradeUpdate
from coursetrack.services.enrollment_service import enroll_student
from coursetrack.services.grade_service import (
    compute_overall_grade,
    get_grade,
    letter_grade,
    set_grades,
    to_response,
)


@pytest.fixture
def enrolled(db, make_student, make_course):
    student_id = make_student()
    course_id = make_course()
    enroll_student(db, student_id, course_id)
    return student_id, course_id


# ============================================================
# Moyenne pondérée
# ============================================================

def test_moyenne_ponderee_toutes_composantes():
    """100×.15 + 80×.15 + 90×.20 + 70×.20 + 85×.30 = 84.5 → B."""
    components = GradeUpdate(quiz1=100, quiz2=80, project1=90, project2=70, final_exam=85)

    overall = compute_overall_grade(components)

    assert overall == 84.5
    assert letter_grade(overall) == "B"


def test_moyenne_aucune_composante():
    overall = compute_overall_grade(GradeUpdate())
    assert overall == "N/A"
    assert letter_grade(overall) == "N/A"


def test_moyenne_none():
    assert compute_overall_grade(None) == "N/A"


def test_moyenne_renormalisee():
    """Composantes absentes exclues du numérateur et du total des poids."""
    assert compute_overall_grade(GradeUpdate(quiz1=90)) == 90.0
    # (100×.15 + 50×.30) / .45 = 66.67
    assert compute_overall_grade(GradeUpdate(quiz1=100, final_exam=50)) == 66.67


def test_zero_est_une_note_enregistree():
    assert compute_overall_grade(GradeUpdate(quiz1=0, quiz2=100)) == 50.0


@pytest.mark.parametrize(
    "score, expected",
    [
        (100, "A"),
        (93, "A"),
        (92.99, "A-"),
        (90, "A-"),
        (87, "B+"),
        (86.5, "B"),
        (83, "B"),
        (80, "B-"),
        (77, "C+"),
        (73, "C"),
        (70, "C-"),
        (67, "D+"),
        (63, "D"),
        (60, "D-"),
        (59.99, "F"),
        (0, "F"),
    ],
)
def test_seuils_lettres(score, expected):
    assert letter_grade(score) == expected


# ============================================================
# set_grades
# ============================================================

def test_mise_a_jour_partielle_conserve_les_autres(db, enrolled):
    student_id, course_id = enrolled

    set_grades(db, student_id, course_id, GradeUpdate(quiz1=95))
    grade = set_grades(db, student_id, course_id, GradeUpdate(quiz2=88))

    assert grade.quiz1 == 95
    assert grade.quiz2 == 88
    assert grade.final_exam == 0


def test_mise_a_jour_complete(db, enrolled):
    student_id, course_id = enrolled

    grade = set_grades(
        db, student_id, course_id,
        GradeUpdate(quiz1=100, quiz2=80, project1=90, project2=70, final_exam=85),
    )

    response = to_response(grade)
    assert response.overall_grade == 84.5
    assert response.letter_grade == "B"


def test_set_grades_idempotent(db, enrolled, count):
    student_id, course_id = enrolled
    components = GradeUpdate(quiz1=70, project1=82.5)

    first = set_grades(db, student_id, course_id, components)
    first_values = (first.id, first.quiz1, first.quiz2, first.project1, first.project2, first.final_exam)
    second = set_grades(db, student_id, course_id, components)
    second_values = (second.id, second.quiz1, second.quiz2, second.project1, second.project2, second.final_exam)

    assert first_values == second_values
    assert count(Grade) == 1


@pytest.mark.parametrize("value", [-1, 100.01, 150, math.inf, math.nan])
def test_note_hors_plage_refusee(db, enrolled, value):
    student_id, course_id = enrolled
    set_grades(db, student_id, course_id, GradeUpdate(quiz1=50))

    with pytest.raises(InvalidGrade, match="quiz1"):
        set_grades(db, student_id, course_id, GradeUpdate(quiz1=value))

    assert get_grade(db, student_id, course_id).quiz1 == 50


def test_une_seule_composante_invalide_bloque_tout(db, enrolled):
    student_id, course_id = enrolled

    with pytest.raises(InvalidGrade, match="final_exam"):
        set_grades(db, student_id, course_id, GradeUpdate(quiz1=90, final_exam=101))

    assert get_grade(db, student_id, course_id).quiz1 == 0


def test_bornes_acceptees(db, enrolled):
    student_id, course_id = enrolled
    grade = set_grades(db, student_id, course_id, GradeUpdate(quiz1=0, quiz2=100))
    assert (grade.quiz1, grade.quiz2) == (0, 100)


def test_set_grades_sans_inscription(db, make_student, make_course, count):
    with pytest.raises(NotFound, match="pas inscrit"):
        set_grades(db, make_student(), make_course(), GradeUpdate(quiz1=80))
    assert count(Grade) == 0


def test_note_manquante_recreee(db, make_student, make_course, count):
    """Inscription insérée hors moteur (sans note) : la note est créée, absentes à 0."""
    student_id = make_student()
    course_id = make_course()
    db.add(Enrollment(student_id=student_id, course_id=course_id, course_prefix="CSI", course_number=300))
    db.commit()

    grade = set_grades(db, student_id, course_id, GradeUpdate(project2=77))

    assert grade.project2 == 77
    assert grade.quiz1 == 0
    assert grade.final_exam == 0
    assert count(Grade) == 1


def test_get_grade_inexistante(db):
    with pytest.raises(NotFound):
        get_grade(db, 1, 1)

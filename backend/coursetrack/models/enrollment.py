"""
Modèles SQLAlchemy pour les inscriptions et leur note associée.

Une inscription est identifiée par le couple (student_id, course_id).
La note (grades) est en 1:1 avec l'inscription, via une clé étrangère composite :
supprimer l'inscription (directement ou par cascade depuis l'élève ou le cours)
supprime la note.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from coursetrack.database import Base

GRADE_COMPONENTS = ("quiz1", "quiz2", "project1", "project2", "final_exam")


class Enrollment(Base):
    """
    Inscription élève ↔ section de cours.

    course_prefix / course_number sont copiés depuis le cours à l'insertion :
    la contrainte uq_enrollment_course_number applique la règle
    "une seule section par cours" directement en base, y compris sous concurrence.
    """
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
        UniqueConstraint("student_id", "course_prefix", "course_number", name="uq_enrollment_course_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    course_prefix = Column(String(10), nullable=False)
    course_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Grade(Base):
    """Notes d'une inscription : cinq composantes dans [0, 100], 0 par défaut."""
    __tablename__ = "grades"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_grade_student_course"),
        ForeignKeyConstraint(
            ["student_id", "course_id"],
            ["enrollments.student_id", "enrollments.course_id"],
            ondelete="CASCADE",
        ),
        *(
            CheckConstraint(f"{name} >= 0 AND {name} <= 100", name=f"ck_grade_{name}_range")
            for name in GRADE_COMPONENTS
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, nullable=False)
    course_id = Column(Integer, nullable=False)

    quiz1 = Column(Float, nullable=False, default=0)
    quiz2 = Column(Float, nullable=False, default=0)
    project1 = Column(Float, nullable=False, default=0)
    project2 = Column(Float, nullable=False, default=0)
    final_exam = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

"""
Modèles SQLAlchemy du catalogue : filières, enseignants et cours.
Données de référence, majoritairement en lecture.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from coursetrack.database import Base


class Major(Base):
    """Filière d'un élève. Semée au démarrage, jamais supprimée tant qu'elle est référencée."""
    __tablename__ = "majors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False)


class Instructor(Base):
    """Enseignant responsable d'un cours (l'authentification est gérée ailleurs)."""
    __tablename__ = "instructors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Course(Base):
    """
    Section d'un cours.
    (prefix, number, section) = clé de section, unique.
    (prefix, number)          = clé de cours : un élève n'en suit qu'une section.
    """
    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint("prefix", "number", "section", name="uq_course_section_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    prefix = Column(String(10), nullable=False)       # Ex: "CSI"
    number = Column(Integer, nullable=False)          # Ex: 300
    section = Column(String(10), nullable=False)      # Ex: "01"
    title = Column(String(255), nullable=False)
    classroom = Column(String(100), nullable=False)
    start_time = Column(String(20), nullable=False)   # Ex: "09:30"
    instructor_id = Column(Integer, ForeignKey("instructors.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def label(self) -> str:
        return f"{self.prefix}-{self.number} section {self.section}"

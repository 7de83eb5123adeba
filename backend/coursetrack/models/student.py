"""
Modèle SQLAlchemy pour la table students.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from coursetrack.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    major_id = Column(Integer, ForeignKey("majors.id"), nullable=False)
    graduating_year = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

"""
Modèle SQLAlchemy pour les supports de cours déposés par les enseignants.

storage_path est attribué par le système (unique, sans collision) ;
file_name conserve le nom d'origine pour l'affichage.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from coursetrack.database import Base


class CourseMaterial(Base):
    __tablename__ = "course_materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(String(255), nullable=False)
    storage_path = Column(String(500), unique=True, nullable=False)
    content_type = Column(String(150), nullable=False)
    size_bytes = Column(Integer, nullable=False)
    uploaded_at = Column(DateTime, server_default=func.now())

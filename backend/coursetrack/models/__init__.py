# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# grades référence enrollments(student_id, course_id) : enrollment.py doit être chargé.

from coursetrack.models.catalog import Course, Instructor, Major  # noqa: F401
from coursetrack.models.student import Student  # noqa: F401
from coursetrack.models.enrollment import Enrollment, Grade  # noqa: F401
from coursetrack.models.material import CourseMaterial  # noqa: F401

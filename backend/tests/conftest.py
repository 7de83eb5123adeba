"""
Configuration partagée pour tous les tests.

- Base SQLite fichier par test (tmp_path) : cascades et contraintes réelles,
  plusieurs connexions possibles pour les tests de concurrence
- MemoryFileStore : stockage en mémoire avec injection de pannes
- client : API construite via create_app, stockage remplacé par MemoryFileStore

Sous SQLite, toute transaction prend le verrou d'écriture (BEGIN IMMEDIATE) :
une session de test doit être fermée (ou rollback) avant d'appeler l'API ou
de lancer des threads.
"""

import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

import coursetrack.models  # noqa: F401
from coursetrack.config import Settings
from coursetrack.database import Base, create_db_engine, create_session_factory, get_file_store
from coursetrack.main import create_app
from coursetrack.models.catalog import Course, Major
from coursetrack.models.student import Student


class MemoryFileStore:
    """FileStore en mémoire. fail_writes / fail_deletes simulent une panne disque."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.fail_writes = False
        self.fail_deletes = False
        self._lock = threading.Lock()

    def write(self, path: str, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("disque plein")
        with self._lock:
            if path in self.files:
                raise FileExistsError(path)
            self.files[path] = data

    def delete(self, path: str) -> bool:
        if self.fail_deletes:
            raise OSError("suppression impossible")
        with self._lock:
            return self.files.pop(path, None) is not None

    def exists(self, path: str) -> bool:
        return path in self.files

    def list(self, prefix: str = "") -> list[str]:
        return sorted(p for p in self.files if p.startswith(prefix))


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'coursetrack_test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store():
    return MemoryFileStore()


@pytest.fixture
def major(db):
    m = Major(name="Computer Science and Innovation")
    db.add(m)
    db.flush()
    major_id = m.id
    db.commit()
    return major_id


@pytest.fixture
def make_student(db, major):
    counter = {"n": 0}

    def _make(first_name="Ada", last_name="Lovelace", email=None):
        counter["n"] += 1
        student = Student(
            first_name=first_name,
            last_name=last_name,
            email=email or f"student{counter['n']}@school.edu",
            major_id=major,
            graduating_year=2027,
        )
        db.add(student)
        db.flush()
        student_id = student.id
        db.commit()
        return student_id

    return _make


@pytest.fixture
def make_course(db):
    def _make(prefix="CSI", number=300, section="01", title="Database Systems"):
        course = Course(
            prefix=prefix,
            number=number,
            section=section,
            title=title,
            classroom="JOYC 210",
            start_time="09:30",
        )
        db.add(course)
        db.flush()
        course_id = course.id
        db.commit()
        return course_id

    return _make


def count_rows(session_factory, model, **filters) -> int:
    """Compte les lignes dans une session dédiée (fermée aussitôt)."""
    with session_factory() as session:
        query = select(func.count()).select_from(model)
        for name, value in filters.items():
            query = query.where(getattr(model, name) == value)
        return session.execute(query).scalar()


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'coursetrack_api.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        MAX_UPLOAD_SIZE_MB=10,
    )


@pytest.fixture
def api(app_settings, store):
    """Application complète (lifespan exécuté) avec stockage en mémoire."""
    app = create_app(app_settings)
    app.dependency_overrides[get_file_store] = lambda: store
    with TestClient(app) as c:
        yield app, c
    app.dependency_overrides.clear()


@pytest.fixture
def client(api):
    return api[1]


@pytest.fixture
def api_course(client):
    """Crée une section via l'API et retourne son id."""
    def _create(prefix="CSI", number=300, section="01"):
        response = client.post("/api/v1/courses", json={
            "prefix": prefix,
            "number": number,
            "section": section,
            "title": "Database Systems",
            "classroom": "JOYC 210",
            "start_time": "09:30",
        })
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create


@pytest.fixture
def api_student(client):
    """Crée un élève via l'API (filière semée n°1) et retourne son id."""
    counter = {"n": 0}

    def _create(first_name="Ada", last_name="Lovelace"):
        counter["n"] += 1
        response = client.post("/api/v1/students", json={
            "first_name": first_name,
            "last_name": last_name,
            "email": f"api{counter['n']}@school.edu",
            "major_id": 1,
            "graduating_year": 2027,
        })
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create


@pytest.fixture
def count(db):
    """
    count(Model, **filtres) via la session de test, puis rollback pour libérer
    le verrou SQLite avant un éventuel appel concurrent.
    """
    def _count(model, **filters):
        query = select(func.count()).select_from(model)
        for name, value in filters.items():
            query = query.where(getattr(model, name) == value)
        result = db.execute(query).scalar()
        db.rollback()
        return result

    return _count


@pytest.fixture
def api_count(api):
    """count(Model, **filtres) sur la base de l'application."""
    app = api[0]
    return lambda model, **filters: count_rows(app.state.session_factory, model, **filters)

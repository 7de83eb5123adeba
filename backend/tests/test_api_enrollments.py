"""
Tests d'intégration API pour les inscriptions.
"""

from unittest.mock import patch

from coursetrack.exceptions import StorageFailure
from coursetrack.models.enrollment import Enrollment, Grade


def test_inscription_succes(client, api_student, api_course, api_count):
    student_id = api_student()
    course_id = api_course()

    response = client.post("/api/v1/enrollments", json={"student_id": student_id, "course_id": course_id})

    assert response.status_code == 201
    body = response.json()
    assert body["student_id"] == student_id
    assert body["course_id"] == course_id
    assert body["grade_id"] is not None
    assert api_count(Enrollment) == 1
    assert api_count(Grade) == 1


def test_inscription_double(client, api_student, api_course, api_count):
    payload = {"student_id": api_student(), "course_id": api_course()}
    client.post("/api/v1/enrollments", json=payload)

    response = client.post("/api/v1/enrollments", json=payload)

    assert response.status_code == 400
    assert "déjà inscrit" in response.json()["detail"]
    assert api_count(Enrollment) == 1


def test_inscription_autre_section(client, api_student, api_course):
    student_id = api_student()
    section_01 = api_course(section="01")
    section_02 = api_course(section="02")
    client.post("/api/v1/enrollments", json={"student_id": student_id, "course_id": section_01})

    response = client.post("/api/v1/enrollments", json={"student_id": student_id, "course_id": section_02})

    assert response.status_code == 400
    assert "CSI-300 section 01" in response.json()["detail"]


def test_inscription_eleve_introuvable(client, api_course):
    response = client.post("/api/v1/enrollments", json={"student_id": 999, "course_id": api_course()})
    assert response.status_code == 404


def test_inscription_cours_introuvable(client, api_student):
    response = client.post("/api/v1/enrollments", json={"student_id": api_student(), "course_id": 999})
    assert response.status_code == 404


def test_inscription_body_invalide(client):
    response = client.post("/api/v1/enrollments", json={"student_id": "abc"})
    assert response.status_code == 422


def test_inscription_echec_stockage(client):
    """StorageFailure du service → 500 avec le message."""
    with patch("coursetrack.routers.enrollments.enrollment_service.enroll_student") as mock:
        mock.side_effect = StorageFailure("L'inscription n'a pas pu être enregistrée.")

        response = client.post("/api/v1/enrollments", json={"student_id": 1, "course_id": 1})

    assert response.status_code == 500
    assert "pas pu être enregistrée" in response.json()["detail"]


def test_inscription_nombre_de_tentatives_configure(api, app_settings):
    app, client = api
    app_settings.ENROLL_MAX_ATTEMPTS = 5

    with patch("coursetrack.routers.enrollments.enrollment_service.enroll_student") as mock:
        mock.side_effect = StorageFailure("échec")
        client.post("/api/v1/enrollments", json={"student_id": 1, "course_id": 2})

    mock.assert_called_once()
    assert mock.call_args.kwargs["max_attempts"] == 5


def test_liste_de_classe_apres_inscriptions(client, api_student, api_course):
    course_id = api_course()
    for name in ("Curie", "Babbage", "Arendt"):
        client.post("/api/v1/enrollments", json={"student_id": api_student(last_name=name), "course_id": course_id})

    response = client.get(f"/api/v1/courses/{course_id}/students")

    assert response.status_code == 200
    assert response.json()["total"] == 3
    assert [s["last_name"] for s in response.json()["students"]] == ["Arendt", "Babbage", "Curie"]

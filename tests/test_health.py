"""
Tests for the health and root endpoints.
"""


def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "connected"


def test_root(client):
    assert client.get("/").json() == {"status": "Resume Tailor API running"}

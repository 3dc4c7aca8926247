from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from chat_relay.config import get_settings
from chat_relay.database import get_db
from chat_relay.main import app
from factories import make_notebook, make_settings, make_source, mock_storage

DIAGNOSTICS_PATH = "/chat-diagnostics"


@pytest.fixture
def diagnostics_client():
    def _client(db, settings=None):
        def _override_get_db():
            yield db

        app.dependency_overrides[get_db] = _override_get_db
        app.dependency_overrides[get_settings] = lambda: settings or make_settings()
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


class TestDiagnosticsEndpoint:
    def test_preflight(self, diagnostics_client):
        response = diagnostics_client(MagicMock()).options(DIAGNOSTICS_PATH)

        assert response.status_code == 200
        assert response.text == "ok"
        assert response.headers["access-control-allow-origin"] == "*"

    def test_requires_notebook_id(self, diagnostics_client):
        response = diagnostics_client(MagicMock()).post(DIAGNOSTICS_PATH, json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Notebook ID is required"}

    def test_healthy_report(self, diagnostics_client, notebook_id):
        db = mock_storage(notebook=make_notebook(), sources=[make_source("completed")], document_count=4)

        response = diagnostics_client(db).post(DIAGNOSTICS_PATH, json={"notebookId": notebook_id})

        assert response.status_code == 200
        report = response.json()
        assert report["overallStatus"] == "HEALTHY"
        assert report["recommendations"] == []
        assert set(report) == {
            "notebookId",
            "timestamp",
            "environment",
            "notebook",
            "sources",
            "vectorStore",
            "chatHistory",
            "recommendations",
            "overallStatus",
        }
        assert response.headers["access-control-allow-origin"] == "*"

    def test_issues_found(self, diagnostics_client, notebook_id):
        db = mock_storage(notebook=make_notebook(), sources=[make_source("pending")], document_count=0)

        response = diagnostics_client(db, make_settings(notebook_generation_auth=None)).post(
            DIAGNOSTICS_PATH, json={"notebookId": notebook_id}
        )

        report = response.json()
        assert report["overallStatus"] == "ISSUES_FOUND"
        assert report["environment"]["hasNotebookGenerationAuth"] is False
        assert len(report["recommendations"]) == 3

    @patch("chat_relay.routers.diagnostics.diagnose")
    def test_storage_failure_is_single_error(self, mock_diagnose, diagnostics_client, notebook_id):
        mock_diagnose.side_effect = OperationalError("SELECT", {}, Exception("could not connect to server"))

        response = diagnostics_client(MagicMock()).post(DIAGNOSTICS_PATH, json={"notebookId": notebook_id})

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"error", "timestamp"}
        assert body["timestamp"].endswith("Z")
        assert "could not connect to server" in body["error"]

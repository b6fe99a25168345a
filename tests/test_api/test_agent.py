"""Tests for the agent endpoint and app wiring."""

from dataclasses import replace
from unittest.mock import Mock, patch

from fastapi.testclient import TestClient

from chat_agent.api.main import app, create_app
from chat_agent.config import config
from chat_agent.errors import RunCancelledError

client = TestClient(app)


class TestAgentEndpoint:
    """Tests for POST /api/agent."""

    def test_local_math_run(self):
        """Without a credential the run is local and calculates first."""
        response = client.post("/api/agent", json={"goal": "2*(3+4)"})

        assert response.status_code == 200
        data = response.json()
        assert data["goal"] == "2*(3+4)"
        assert data["llm"] == "local"
        assert data["steps"] == 2
        assert data["transcript"][0] == {
            "step": 1,
            "decision": {
                "tool": "calculate",
                "input": "2*(3+4)",
                "notes": "local: looks like math",
            },
            "observation": {"result": "14"},
        }
        assert data["transcript"][1]["decision"]["tool"] == "final"
        assert "observation" not in data["transcript"][1]
        assert data["answer"] == "Done. See the results above."

    def test_local_search_run(self, chats_dir):
        """A text goal searches the chats."""
        response = client.post("/api/agent", json={"goal": "hello", "maxSteps": 1})

        data = response.json()
        assert data["steps"] == 1
        assert data["transcript"][0]["decision"]["tool"] == "searchChats"
        assert data["answer"] == "Found 1 matches."

    def test_max_steps_is_clamped(self):
        """An out-of-range budget is clamped, not rejected."""
        response = client.post("/api/agent", json={"goal": "1+1", "maxSteps": -4})

        assert response.status_code == 200
        assert response.json()["steps"] == 1

    def test_missing_goal(self):
        """An absent goal is rejected before any run starts."""
        response = client.post("/api/agent", json={"maxSteps": 2})

        assert response.status_code == 400
        assert response.json() == {"error": "goal is required"}

    def test_invalid_max_steps(self):
        """A non-integer budget is a 400 with an error body."""
        response = client.post("/api/agent", json={"goal": "1+1", "maxSteps": "many"})

        assert response.status_code == 400
        assert "error" in response.json()

    @patch("chat_agent.api.routes.agent.AgentOrchestrator")
    def test_cancelled_run(self, mock_orchestrator_class):
        """A run past its deadline answers 504."""
        mock_instance = Mock()
        mock_instance.run.side_effect = RunCancelledError("deadline exceeded")
        mock_orchestrator_class.return_value = mock_instance

        response = client.post("/api/agent", json={"goal": "slow"})

        assert response.status_code == 504
        assert response.json() == {"error": "deadline exceeded"}

    @patch("chat_agent.api.routes.agent.AgentOrchestrator")
    def test_unexpected_error(self, mock_orchestrator_class):
        """Unexpected failures answer 500 without leaking details."""
        mock_instance = Mock()
        mock_instance.run.side_effect = RuntimeError("boom")
        mock_orchestrator_class.return_value = mock_instance

        response = client.post("/api/agent", json={"goal": "anything"})

        assert response.status_code == 500
        assert response.json() == {"error": "Agent error"}


class TestStaticFiles:
    """Tests for serving the front end."""

    def test_public_dir_served_at_root(self, tmp_path, monkeypatch):
        """index.html is served at / when PUBLIC_DIR exists."""
        (tmp_path / "index.html").write_text("<h1>chat agent</h1>")
        monkeypatch.setattr(config, "server", replace(config.server, public_dir=str(tmp_path)))

        static_client = TestClient(create_app())

        response = static_client.get("/")
        assert response.status_code == 200
        assert "chat agent" in response.text
        assert static_client.get("/health").json() == {"status": "ok"}

    def test_missing_public_dir(self, tmp_path, monkeypatch):
        """Without PUBLIC_DIR only the API is served."""
        monkeypatch.setattr(
            config, "server", replace(config.server, public_dir=str(tmp_path / "none"))
        )

        response = TestClient(create_app()).get("/")

        assert response.status_code == 404

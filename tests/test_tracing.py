"""
Tests for Langfuse tracing integration with SDK v3.

Tests cover:
- Client disabled states (credentials, failed connectivity)
- Context manager no-ops when disabled
- Full trace lifecycle with mocked Langfuse
- Orchestrator integration with tracing enabled
"""

from unittest.mock import MagicMock, patch

import pytest

from chat_agent.orchestration import AgentOrchestrator
from chat_agent.tracing import (
    ObservationContext,
    TracingClient,
    TracingContext,
    get_tracing_client,
    init_tracing_client,
    shutdown_tracing,
)


@pytest.fixture
def mock_langfuse():
    """Patch the Langfuse class and yield the client instance it returns."""
    with patch("chat_agent.tracing.client.Langfuse") as mock_class:
        instance = MagicMock()
        instance.auth_check.return_value = True

        root_span = MagicMock()
        root_span.trace_id = "trace-1"
        root_span.id = "span-1"
        instance.start_as_current_observation.return_value.__enter__.return_value = root_span

        mock_class.return_value = instance
        yield instance
    shutdown_tracing()


class TestTracingClient:
    """Tests for TracingClient."""

    def test_client_disabled_without_credentials(self):
        """Test client is disabled when credentials not provided."""
        client = TracingClient(public_key="", secret_key="")
        assert client.enabled is False
        assert "credentials not configured" in client.error.lower()

    def test_client_disabled_with_partial_credentials(self):
        """Test client is disabled with only public key."""
        client = TracingClient(public_key="pk-test", secret_key="")
        assert client.enabled is False
        assert client.client is None

    def test_client_enabled_with_reachable_server(self, mock_langfuse):
        """Valid credentials and a passing auth check enable tracing."""
        client = TracingClient(public_key="pk-test", secret_key="sk-test", host="http://lf:3000")

        assert client.enabled is True
        assert client.error is None
        assert client.client is mock_langfuse

    def test_client_disabled_when_auth_check_fails(self, mock_langfuse):
        """A failing auth check disables tracing."""
        mock_langfuse.auth_check.return_value = False

        client = TracingClient(public_key="pk-test", secret_key="sk-test")

        assert client.enabled is False
        assert "auth_check" in client.error

    def test_client_disabled_when_server_unreachable(self, mock_langfuse):
        """Connectivity errors disable tracing instead of raising."""
        mock_langfuse.auth_check.side_effect = ConnectionError("refused")

        client = TracingClient(public_key="pk-test", secret_key="sk-test")

        assert client.enabled is False
        assert "refused" in client.error

    def test_flush_and_shutdown_no_op_when_disabled(self):
        """Test flush and shutdown are no-ops when tracing disabled."""
        client = TracingClient()
        client.flush()
        client.shutdown()

    def test_flush_when_enabled(self, mock_langfuse):
        """Flush is forwarded to Langfuse."""
        client = TracingClient(public_key="pk-test", secret_key="sk-test")
        client.flush()
        mock_langfuse.flush.assert_called_once()


class TestTracingClientSingleton:
    """Tests for tracing client singleton pattern."""

    def test_init_tracing_client_creates_singleton(self):
        """Test init_tracing_client creates global singleton."""
        client = init_tracing_client()
        assert get_tracing_client() is client

        shutdown_tracing()
        assert get_tracing_client() is None


class TestTracingContext:
    """Tests for TracingContext."""

    def test_context_disabled_without_client(self):
        """Test context is disabled when no client initialized."""
        shutdown_tracing()

        ctx = TracingContext(execution_id="test-123")
        ctx.start_trace(name="test", input={"goal": "x"})
        ctx.end_trace(output="result")

        assert ctx.enabled is False
        assert ctx._root_span is None

    def test_span_and_generation_no_op_when_disabled(self):
        """Context managers still yield an observation to write to."""
        shutdown_tracing()
        ctx = TracingContext(execution_id="test-123")

        with ctx.span(name="tool:calculate") as span:
            span.set_output({"result": "2"})
            span.set_status("success")
        with ctx.generation(name="reasoner_step_1", model="gpt-4o-mini") as gen:
            gen.set_output("reply")

        assert span._observation is None
        assert gen._observation is None

    def test_observation_stores_output_and_status(self):
        """set_output and set_status are recorded for end()."""
        observation = ObservationContext(name="test")
        observation.set_output({"key": "value"})
        observation.set_status("error")

        assert observation._output == {"key": "value"}
        assert observation._status == "error"

    def test_full_lifecycle(self, mock_langfuse):
        """Spans are parented to the root span and closed with their output."""
        init_tracing_client(public_key="pk-test", secret_key="sk-test")
        ctx = TracingContext(execution_id="test-123")

        ctx.start_trace(name="agent_run", input={"goal": "1+1"})
        with ctx.span(name="tool:calculate", input={"input": "1+1"}) as span:
            span.set_output({"result": "2"})
        ctx.end_trace(output="2", metadata={"steps": 1})

        calls = mock_langfuse.start_as_current_observation.call_args_list
        assert calls[0].kwargs["name"] == "agent_run"
        assert calls[0].kwargs["metadata"]["execution_id"] == "test-123"
        assert calls[1].kwargs["name"] == "tool:calculate"
        assert calls[1].kwargs["trace_context"] == {
            "trace_id": "trace-1",
            "parent_span_id": "span-1",
        }

        root_span = mock_langfuse.start_as_current_observation.return_value.__enter__.return_value
        final_update = root_span.update.call_args_list[-1].kwargs
        assert final_update["output"] == "2"
        assert final_update["metadata"]["status"] == "success"
        assert final_update["metadata"]["steps"] == 1


class TestOrchestratorIntegration:
    """Tests for the orchestrator with tracing enabled."""

    def test_tool_dispatch_is_traced(self, mock_langfuse):
        """Each tool dispatch opens a span named after the tool."""
        init_tracing_client(public_key="pk-test", secret_key="sk-test")
        ctx = TracingContext(execution_id="test-456")
        ctx.start_trace(name="agent_run")

        result = AgentOrchestrator(execution_id="test-456", tracing_context=ctx).run("2+2")

        names = [
            call.kwargs["name"]
            for call in mock_langfuse.start_as_current_observation.call_args_list
        ]
        assert result.transcript[0].observation == {"result": "4"}
        assert "tool:calculate" in names

    def test_remote_decisions_are_traced_as_generations(
        self, mock_langfuse, remote_config, mock_llm_client
    ):
        """Remote reasoner calls open generations with the model name."""
        init_tracing_client(public_key="pk-test", secret_key="sk-test")
        ctx = TracingContext(execution_id="test-789")
        ctx.start_trace(name="agent_run")

        AgentOrchestrator(remote_config, mock_llm_client, tracing_context=ctx).run("goal")

        generations = [
            call.kwargs
            for call in mock_langfuse.start_as_current_observation.call_args_list
            if call.kwargs.get("as_type") == "generation"
        ]
        assert generations[0]["name"] == "reasoner_step_1"
        assert generations[0]["model"] == remote_config.model

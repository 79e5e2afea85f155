"""Unit tests for the queue worker: job error helpers and message sending."""

import asyncio
import errno

import pytest
from structlog.testing import capture_logs

from app import worker
from app.worker import (
    _send_template_message_async,
    get_error_message,
    get_error_stack,
    get_job_error_details,
)


def raised(error):
    try:
        raise error
    except Exception as e:
        return e


# =============================================================================
# Error helpers
# =============================================================================


class TestErrorHelpers:
    def test_message_of_exception(self):
        assert get_error_message(ValueError("Telefone inválido")) == "Telefone inválido"

    def test_message_of_bare_exception_uses_type(self):
        assert get_error_message(RuntimeError()) == "RuntimeError"

    def test_message_of_string(self):
        assert get_error_message("falhou") == "falhou"

    def test_message_of_other_values_is_json(self):
        assert get_error_message({"code": 42}) == '{"code": 42}'

    def test_stack_contains_traceback(self):
        stack = get_error_stack(raised(KeyError("nome")))
        assert "Traceback" in stack
        assert "KeyError" in stack

    def test_stack_of_non_exception_is_message(self):
        assert get_error_stack("falhou") == "falhou"

    def test_details_of_exception(self):
        details = get_job_error_details(raised(ValueError("ruim")))
        assert details["message"] == "ruim"
        assert "ValueError: ruim" in details["stack"]
        assert "code" not in details

    def test_details_include_errno(self):
        error = ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")
        details = get_job_error_details(error)
        assert details["code"] == str(errno.ECONNREFUSED)

    def test_details_of_non_exception(self):
        assert get_job_error_details("timeout") == {"message": "timeout"}


class TestTaskFailureHandler:
    def test_logs_job_context(self):
        class Request:
            retries = 3

        class Task:
            name = "app.worker.send_template_message"
            request = Request()

        with capture_logs() as logs:
            worker.on_task_failure(
                sender=Task(),
                task_id="job-1",
                exception=raised(ValueError("falhou")),
                args=("inst", "11987654321", "Olá"),
                kwargs={},
            )

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "queue_job_failed"
        assert entry["log_level"] == "error"
        assert entry["job_id"] == "job-1"
        assert entry["job_name"] == "app.worker.send_template_message"
        assert entry["retries"] == 3
        assert entry["error"] == "falhou"
        assert "ValueError" in entry["stack"]


# =============================================================================
# send_template_message
# =============================================================================


class FakeFactory:
    def __init__(self, provider):
        self.provider = provider
        self.closed = False

    def get_whatsapp_provider(self):
        return self.provider

    async def aclose(self):
        self.closed = True


class TestSendTemplateMessage:
    def test_renders_and_sends(self, provider):
        factory = FakeFactory(provider)

        result = asyncio.run(
            _send_template_message_async(
                "inst",
                "11987654321",
                "Olá {{nome}}, seu código é {{codigo}}",
                {"nome": "Ana", "codigo": "X1"},
                factory=factory,
            )
        )

        assert result["status"] == "sent"
        assert result["message_id"] == "MSG1"
        assert provider.sent == [
            {"instance_name": "inst", "to": "11987654321", "text": "Olá Ana, seu código é X1"}
        ]
        assert factory.closed

    def test_provider_error_propagates_for_retry(self, provider):
        provider.error = "Instance not connected"
        factory = FakeFactory(provider)

        with pytest.raises(worker.WhatsAppProviderError):
            asyncio.run(
                _send_template_message_async("inst", "11987654321", "oi", {}, factory=factory)
            )

        assert factory.closed

    def test_missing_phone_is_rejected(self, provider):
        with pytest.raises(ValueError):
            asyncio.run(
                _send_template_message_async("inst", "", "oi", {}, factory=FakeFactory(provider))
            )
        assert provider.sent == []

    def test_empty_rendered_message_is_rejected(self, provider):
        with pytest.raises(ValueError):
            asyncio.run(
                _send_template_message_async(
                    "inst", "11987654321", "{{nome}}", {"nome": ""}, factory=FakeFactory(provider)
                )
            )
        assert provider.sent == []

    def test_task_is_registered_with_backoff(self):
        task = worker.celery_app.tasks["app.worker.send_template_message"]
        assert task.autoretry_for == (worker.WhatsAppProviderError,)
        assert task.retry_backoff is True
        assert task.retry_jitter is False


class TestHealthCheck:
    def test_reports_database_connected(self, settings):
        assert asyncio.run(worker._health_check_async()) == {
            "status": "healthy",
            "database": "connected",
        }

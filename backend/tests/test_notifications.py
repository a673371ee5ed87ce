"""Tests for the delivery capability and its logging."""

from unittest.mock import patch

from ops_platform.models import Integration, IntegrationLog, IntegrationType
from ops_platform.services.notifications import DeliveryResult, deliver, send_best_effort


class TestDeliver:
    def test_mock_provider_succeeds(self, db_session, make_workspace, make_integration):
        workspace = make_workspace()
        make_integration(workspace, IntegrationType.EMAIL, provider="mock")

        result = deliver(db_session, workspace.id, IntegrationType.EMAIL, "ana@example.com", "Hi", subject="Hello")

        assert result.success is True
        assert result.external_id.startswith("mock-")
        log = db_session.query(IntegrationLog).one()
        assert (log.integration_type, log.event, log.success) == ("email", "send", True)
        assert log.details == {"external_id": result.external_id}

    def test_missing_integration_is_a_logged_failure(self, db_session, make_workspace):
        workspace = make_workspace()

        result = deliver(db_session, workspace.id, IntegrationType.SMS, "+15550001", "Hi")

        assert result.success is False
        assert "No sms integration" in result.error
        assert db_session.query(IntegrationLog).one().success is False

    def test_unknown_provider_records_last_error(self, db_session, make_workspace, make_integration):
        workspace = make_workspace()
        integration = make_integration(workspace, IntegrationType.EMAIL, provider="carrier-pigeon")

        result = deliver(db_session, workspace.id, IntegrationType.EMAIL, "ana@example.com", "Hi")

        assert result.success is False
        db_session.refresh(integration)
        assert "carrier-pigeon" in integration.last_error

    def test_success_clears_previous_error(self, db_session, make_workspace, make_integration):
        workspace = make_workspace()
        integration = make_integration(workspace, IntegrationType.EMAIL, provider="mock")
        integration.last_error = "Unauthorized"
        db_session.commit()

        deliver(db_session, workspace.id, IntegrationType.EMAIL, "ana@example.com", "Hi")

        db_session.refresh(integration)
        assert integration.last_error is None

    def test_twilio_path_truncates_body(self, db_session, make_workspace, make_integration):
        workspace = make_workspace()
        make_integration(
            workspace, IntegrationType.SMS, provider="twilio",
            config={"account_sid": "AC1", "auth_token": "t", "phone": "+15559999"},
        )

        with patch("ops_platform.services.notifications.send_sms", return_value={"success": True, "sid": "SM1"}) as sms:
            result = deliver(db_session, workspace.id, IntegrationType.SMS, "+15550001", "x" * 300)

        assert result == DeliveryResult(success=True, external_id="SM1")
        assert len(sms.call_args.kwargs["message"]) == 160
        assert sms.call_args.kwargs["to_phone"] == "+15550001"

    def test_brevo_path(self, db_session, make_workspace, make_integration):
        workspace = make_workspace()
        make_integration(workspace, IntegrationType.EMAIL, provider="brevo", config={"api_key": "k"})

        with patch(
            "ops_platform.services.notifications.send_email",
            return_value={"success": False, "error": "Unauthorized"},
        ) as email:
            result = deliver(db_session, workspace.id, IntegrationType.EMAIL, "ana@example.com", "Body", subject="S")

        assert result.success is False
        assert result.error == "Unauthorized"
        assert email.call_args.kwargs["subject"] == "S"

    def test_provider_exception_becomes_failure(self, db_session, make_workspace, make_integration):
        workspace = make_workspace()
        make_integration(workspace, IntegrationType.EMAIL, provider="brevo", config={"api_key": "k"})

        with patch("ops_platform.services.notifications.send_email", side_effect=TimeoutError("timed out")):
            result = deliver(db_session, workspace.id, IntegrationType.EMAIL, "ana@example.com", "Body")

        assert result.success is False
        assert "timed out" in result.error
        assert db_session.query(Integration).one().last_error == "timed out"


class TestSendBestEffort:
    def test_swallows_exceptions(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace()
        recording_notifier.raise_error = RuntimeError("boom")

        delivered = send_best_effort(
            recording_notifier, db_session, workspace.id, IntegrationType.EMAIL, "a@example.com", "Hi"
        )

        assert delivered is False
        assert len(recording_notifier.calls) == 1

    def test_reports_delivery_outcome(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace()

        assert send_best_effort(recording_notifier, db_session, workspace.id, IntegrationType.SMS, "+15550001", "Hi")
        recording_notifier.succeed = False
        assert not send_best_effort(recording_notifier, db_session, workspace.id, IntegrationType.SMS, "+15550001", "Hi")

    def test_passes_subject_through(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace()

        send_best_effort(
            recording_notifier, db_session, workspace.id, IntegrationType.EMAIL,
            "a@example.com", "Hi", subject="Greetings",
        )

        assert recording_notifier.calls[0]["subject"] == "Greetings"

"""Tests for the unauthenticated contact form and booking page."""

import pytest

from ops_platform.errors import NotFound
from ops_platform.models import Contact, Conversation, IntegrationType, Message, MessageDirection, WorkspaceStatus
from ops_platform.services.public_service import (
    DEFAULT_WELCOME_MESSAGE,
    get_public_booking_page,
    get_public_contact_form,
    render_welcome,
    submit_contact_form,
)
from ops_platform.services.workspace_service import upsert_contact_form


class TestContactFormSubmission:
    def test_lead_becomes_inbound_message(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace()

        result = submit_contact_form(
            db_session, workspace.id, name="Ana", email="ana@example.com",
            message="Do you do colour?", notifier=recording_notifier,
        )

        assert result["success"] is True
        message = db_session.query(Message).one()
        assert message.conversation_id == result["conversationId"]
        assert message.direction == MessageDirection.IN
        assert message.body == "Do you do colour?"
        assert db_session.get(Contact, result["contactId"]).name == "Ana"

    def test_repeat_lead_threads_into_same_conversation(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace()

        first = submit_contact_form(db_session, workspace.id, email="ana@example.com", message="one",
                                    notifier=recording_notifier)
        second = submit_contact_form(db_session, workspace.id, email="ana@example.com", message="two",
                                     notifier=recording_notifier)

        assert first["contactId"] == second["contactId"]
        assert first["conversationId"] == second["conversationId"]
        assert db_session.query(Conversation).count() == 1
        assert db_session.query(Message).count() == 2

    def test_welcome_only_on_connected_channels(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace(email_connected=True)

        submit_contact_form(
            db_session, workspace.id, email="ana@example.com", phone="+15550001",
            notifier=recording_notifier,
        )

        assert recording_notifier.channels() == [IntegrationType.EMAIL]
        assert recording_notifier.calls[0]["subject"] == "We received your message"

    def test_no_welcome_without_channels(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace()

        submit_contact_form(db_session, workspace.id, email="ana@example.com", notifier=recording_notifier)

        assert recording_notifier.calls == []

    def test_welcome_uses_template(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace(sms_connected=True)
        upsert_contact_form(db_session, workspace.id, welcome_message_template="Hi {name}, talk soon")

        submit_contact_form(db_session, workspace.id, name="Bo", phone="+15550001", notifier=recording_notifier)

        assert recording_notifier.calls[0]["body"] == "Hi Bo, talk soon"
        assert recording_notifier.calls[0]["channel"] == IntegrationType.SMS

    def test_failed_welcome_keeps_lead(self, db_session, make_workspace, recording_notifier):
        workspace = make_workspace(email_connected=True)
        recording_notifier.raise_error = RuntimeError("provider down")

        result = submit_contact_form(db_session, workspace.id, email="ana@example.com", notifier=recording_notifier)

        assert result["success"] is True
        assert db_session.query(Message).count() == 1

    def test_unknown_workspace(self, db_session, recording_notifier):
        with pytest.raises(NotFound):
            submit_contact_form(db_session, 9999, email="ana@example.com", notifier=recording_notifier)


class TestRenderWelcome:
    def test_name_substitution(self):
        assert render_welcome("Hello {name}!", "Ana") == "Hello Ana!"

    def test_missing_name_falls_back(self):
        assert render_welcome("Hello {name}!", None) == "Hello there!"

    def test_blank_template_uses_default(self):
        assert render_welcome("", "Ana") == DEFAULT_WELCOME_MESSAGE


class TestPublicPages:
    def test_contact_form_by_id_and_name(self, db_session, make_workspace):
        workspace = make_workspace(name="Downtown Studio")
        upsert_contact_form(db_session, workspace.id)

        by_id = get_public_contact_form(db_session, str(workspace.id))
        by_name = get_public_contact_form(db_session, "Downtown Studio")

        assert by_id == by_name
        assert by_id["workspaceName"] == "Downtown Studio"
        assert by_id["formName"] == "Contact"
        assert [f["name"] for f in by_id["fields"]] == ["name", "email", "message"]

    def test_contact_form_missing(self, db_session, make_workspace):
        workspace = make_workspace()
        with pytest.raises(NotFound, match="Form not found"):
            get_public_contact_form(db_session, str(workspace.id))

    def test_unknown_workspace_ref(self, db_session):
        with pytest.raises(NotFound):
            get_public_contact_form(db_session, "Nowhere")

    def test_booking_page(self, db_session, ready_workspace, make_booking_type):
        workspace, _ = ready_workspace
        make_booking_type(workspace, "Beard trim", 15)

        page = get_public_booking_page(db_session, str(workspace.id))

        assert page["bookingOpen"] is True
        assert page["timezone"] == "UTC"
        assert [bt["name"] for bt in page["bookingTypes"]] == ["Beard trim", "Haircut"]

    def test_draft_workspace_is_closed(self, db_session, make_workspace):
        workspace = make_workspace(status=WorkspaceStatus.DRAFT)
        assert get_public_booking_page(db_session, workspace.name)["bookingOpen"] is False

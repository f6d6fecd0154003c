"""Admin email broadcast: personalization, skipping and delivery failures."""

import pytest

from salespath_admin.core.errors import EmailDeliveryError
from salespath_admin.features.email.service import (
    LoggingEmailSender,
    render_template,
    send_broadcast,
    wrap_html,
)
from salespath_admin.models.email import EmailBroadcastRequest
from salespath_admin.tests.factories import add_business, add_plan, add_subscription, add_user


class FailingSender:
    def __init__(self, fail_after: int = 0):
        self.fail_after = fail_after
        self.sent = []

    def send(self, message):
        if len(self.sent) >= self.fail_after:
            raise RuntimeError("smtp down")
        self.sent.append(message)


def test_render_template_replaces_every_occurrence():
    assert render_template("{{name}} / {{name}} / {{other}}", {"name": "Ann"}) == "Ann / Ann / {{other}}"


def test_wrap_html_adds_signature():
    html = wrap_html("<p>Hi</p>")
    assert "<p>Hi</p>" in html
    assert "The SalesPath Team" in html


class TestBroadcastService:
    def test_users_personalized_with_business_names(self, db_session):
        owner = add_user(db_session, email="ann@example.com", name="Ann")
        add_business(db_session, owner, name="Shop")
        nameless = add_user(db_session, email="anon@example.com", name=None)
        sender = LoggingEmailSender()

        result = send_broadcast(
            db_session,
            EmailBroadcastRequest(
                type="users",
                recipient_ids=[owner, nameless],
                subject="Update",
                body="Hi {{name}}, about {{businessNames}}",
            ),
            sender,
        )

        assert result.sent == 2
        assert result.skipped == 0
        by_to = {m.to: m for m in sender.sent}
        assert "Hi Ann, about Shop" in by_to["ann@example.com"].html
        assert "Hi there, about your business" in by_to["anon@example.com"].html
        assert by_to["ann@example.com"].from_address == '"SalesPath" <hi@salespath.co.za>'

    def test_businesses_personalize_subject_and_body(self, db_session):
        owner = add_user(db_session, email="ann@example.com", name="Ann")
        plan = add_plan(db_session)
        shop = add_business(db_session, owner, name="Shop")
        add_subscription(db_session, shop, plan, status="TRIAL")
        sender = LoggingEmailSender()

        send_broadcast(
            db_session,
            EmailBroadcastRequest(
                type="businesses",
                recipient_ids=[shop],
                subject="{{businessName}} news",
                body="{{name}}: you are on {{status}}",
            ),
            sender,
        )

        assert len(sender.sent) == 1
        assert sender.sent[0].subject == "Shop news"
        assert "Ann: you are on TRIAL" in sender.sent[0].html

    def test_business_without_subscription_uses_fallback(self, db_session):
        owner = add_user(db_session, email="ann@example.com")
        shop = add_business(db_session, owner)
        sender = LoggingEmailSender()

        send_broadcast(
            db_session,
            EmailBroadcastRequest(recipient_ids=[shop], subject="s", body="{{status}}"),
            sender,
        )

        assert "no subscription" in sender.sent[0].html

    def test_recipients_without_email_are_skipped(self, db_session):
        with_email = add_user(db_session, email="a@example.com")
        without = add_user(db_session, email=None)
        sender = LoggingEmailSender()

        result = send_broadcast(
            db_session,
            EmailBroadcastRequest(type="users", recipient_ids=[with_email, without], subject="s", body="b"),
            sender,
        )

        assert (result.sent, result.skipped) == (1, 1)

    def test_first_failure_aborts(self, db_session):
        ids = [add_user(db_session, email=f"u{i}@example.com") for i in range(3)]
        sender = FailingSender(fail_after=1)

        with pytest.raises(EmailDeliveryError) as info:
            send_broadcast(
                db_session,
                EmailBroadcastRequest(type="users", recipient_ids=ids, subject="s", body="b"),
                sender,
            )

        assert len(sender.sent) == 1
        assert info.value.status_code == 502


class TestBroadcastApi:
    def test_send(self, client, admin_headers, db_session, email_sender):
        owner = add_user(db_session, email="ann@example.com", name="Ann")
        shop = add_business(db_session, owner, name="Shop")

        resp = client.post(
            "/admin/email/send",
            headers=admin_headers,
            json={"type": "businesses", "recipientIds": [shop], "subject": "Hi", "body": "Hello {{name}}"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "sent": 1, "skipped": 0}
        assert email_sender.sent[0].to == "ann@example.com"

    def test_delivery_failure(self, client, admin_headers, db_session):
        from salespath_admin.features.email.service import get_email_sender
        from salespath_admin.main import app

        owner = add_user(db_session, email="ann@example.com")
        app.dependency_overrides[get_email_sender] = lambda: FailingSender()

        resp = client.post(
            "/admin/email/send",
            headers=admin_headers,
            json={"type": "users", "recipientIds": [owner], "subject": "Hi", "body": "b"},
        )

        assert resp.status_code == 502
        assert resp.json()["type"] == "email_delivery_failed"

    def test_empty_subject_rejected(self, client, admin_headers):
        resp = client.post(
            "/admin/email/send",
            headers=admin_headers,
            json={"recipientIds": ["x"], "subject": "", "body": "b"},
        )
        assert resp.status_code == 422

    def test_unknown_type_rejected(self, client, admin_headers):
        resp = client.post(
            "/admin/email/send",
            headers=admin_headers,
            json={"type": "everyone", "recipientIds": [], "subject": "s", "body": "b"},
        )
        assert resp.status_code == 422

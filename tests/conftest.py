"""
Test Configuration and Fixtures.

Provides shared fixtures for all tests.
"""

import json
import smtplib
from pathlib import Path
from typing import Any, Callable, Dict
from unittest.mock import MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient

from mailentine.app import create_app
from mailentine.config import (
    AuthSettings,
    EmailSettings,
    ScheduleSettings,
    Settings,
    SmtpSettings,
)


@pytest.fixture
def write_json() -> Callable[[Path, Dict[str, Any]], Path]:
    """Write a JSON document to disk and return its path."""
    def _write(path: Path, data: Dict[str, Any]) -> Path:
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Path of the start-date file (not created)."""
    return tmp_path / "start_date.json"


@pytest.fixture
def messages_file(tmp_path: Path) -> Path:
    """Path of the messages file (not created)."""
    return tmp_path / "messages.json"


@pytest.fixture
def smtp_settings() -> SmtpSettings:
    return SmtpSettings(
        host="smtp.example.com",
        port=587,
        sender_email="sender@example.com",
        sender_password="app-password",
        receiver_email="receiver@example.com",
        verify_tls=True,
        require_tls=False,
        connect_timeout=10.0,
        initial_timeout=30.0,
        tls_timeout=60.0,
    )


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(subject_template="Mailentine Day #{day} \U0001F48C")


@pytest.fixture
def make_settings(
    state_file: Path,
    messages_file: Path,
    smtp_settings: SmtpSettings,
    email_settings: EmailSettings,
) -> Callable[..., Settings]:
    """Build Settings pointing at the temporary schedule files."""
    def _make(
        username: str = "",
        password: str = "",
        smtp: SmtpSettings = smtp_settings,
    ) -> Settings:
        return Settings(
            smtp=smtp,
            email=email_settings,
            schedule=ScheduleSettings(
                state_file=str(state_file),
                messages_file=str(messages_file),
                timezone="UTC",
            ),
            auth=AuthSettings(username=username, password=password),
            port=8080,
            environment="test",
        )
    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    """Settings without Basic Auth."""
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> Flask:
    """Create test Flask application."""
    return create_app({"TESTING": True}, settings=settings)


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create test client."""
    return app.test_client()


@pytest.fixture
def auth_client(make_settings) -> FlaskClient:
    """Test client for an app with Basic Auth enabled."""
    app = create_app(
        {"TESTING": True},
        settings=make_settings(username="cron", password="s3cret"),
    )
    return app.test_client()


@pytest.fixture
def smtp_client() -> MagicMock:
    """
    Fake SMTP connection that accepts the whole exchange.

    Advertises STARTTLS and AUTH; individual tests override replies.
    """
    client = MagicMock(spec=smtplib.SMTP)
    client.sock = MagicMock()
    extensions = {"starttls", "auth"}
    client.has_extn.side_effect = lambda name: name.lower() in extensions
    client.ehlo.return_value = (250, b"smtp.example.com at your service")
    client.starttls.return_value = (220, b"2.0.0 Ready to start TLS")
    client.auth.return_value = (235, b"2.7.0 Accepted")
    client.mail.return_value = (250, b"2.1.0 OK")
    client.rcpt.return_value = (250, b"2.1.5 OK")
    client.data.return_value = (250, b"2.0.0 OK queued")
    client.quit.return_value = (221, b"2.0.0 closing connection")
    return client


@pytest.fixture
def smtp_factory(smtp_client: MagicMock) -> MagicMock:
    """Stand-in for smtplib.SMTP returning the fake connection."""
    return MagicMock(return_value=smtp_client)

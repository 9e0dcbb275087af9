"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

SCENARIO_DATE = "Thu, 3 Dec 2020 00:00:00 +0100"


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from mua_codec.config import Settings

    return Settings(
        compose_timezone="UTC",
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test start from freshly loaded settings."""
    from mua_codec.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scenario_date() -> datetime:
    """The fixed date used by the message scenarios."""
    return datetime(2020, 12, 3, 0, 0, 0, tzinfo=timezone(timedelta(hours=1)))


@pytest.fixture
def single_part_text() -> str:
    """A rendered single part message."""
    return (
        "From: Daniele Buondonno <danibond@gmail.com>\n"
        "To: marcorossi@mail.it\n"
        "Subject: Hello\n"
        f"Date: {SCENARIO_DATE}\n"
        "\n"
        'Content-Type: text/plain; charset="us-ascii"\n'
        "\n"
        "Hi!"
    )


@pytest.fixture
def multipart_text() -> str:
    """A rendered multipart/alternative message."""
    return (
        "From: Daniele Buondonno <danibond@gmail.com>\n"
        "To: marcorossi@mail.it, \"Uno, o due\" <unoodue@mail.it>\n"
        "Subject: Hello\n"
        f"Date: {SCENARIO_DATE}\n"
        "\n"
        "MIME-Version: 1.0\n"
        "Content-Type: multipart/alternative; boundary=frontier\n"
        "\n"
        "This is a message with multiple parts in MIME format.\n"
        "--frontier\n"
        'Content-Type: text/plain; charset="us-ascii"\n'
        "\n"
        "Hi\n"
        "--frontier\n"
        'Content-Type: text/html; charset="utf-8"\n'
        "Content-Transfer-Encoding: base64\n"
        "\n"
        "PGI+SGk8L2I+\n"
        "--frontier--"
    )

"""Unit tests for the command-line interface."""

import io
import json

import pytest

from mua_codec.cli import main

SCENARIO_DATE = "Thu, 3 Dec 2020 00:00:00 +0100"


@pytest.fixture
def stdin(monkeypatch: pytest.MonkeyPatch):
    """Feed text to the CLI's standard input."""

    def feed(text: str) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(text))

    return feed


@pytest.fixture(autouse=True)
def utc_compose_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MUA_COMPOSE_TIMEZONE", "UTC")


class TestAddressCommands:
    """Test suite for address subcommands."""

    def test_address_decode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test printing the three parts of an address."""
        stdin('"Uno, o due" <unoodue@mail.it>\n')

        assert main(["address-decode"]) == 0
        assert capsys.readouterr().out == "Uno, o due\nunoodue\nmail.it\n"

    def test_address_encode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test rendering an address from three lines."""
        stdin("Daniele Buondonno\ndanibond\ngmail.com\n")

        assert main(["address-encode"]) == 0
        assert capsys.readouterr().out == "Daniele Buondonno <danibond@gmail.com>\n"

    def test_invalid_address_exits_with_error(
        self, stdin, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that a codec error exits with 1 and logs to stderr."""
        stdin("\nbad local!\nmail.it\n")

        assert main(["address-encode"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "codec_error" in captured.err

    def test_recipients_decode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test printing one triple per recipient."""
        stdin("To: marcorossi@mail.it, Bob Bo <bob@x.org>\n")

        assert main(["recipients-decode"]) == 0
        assert capsys.readouterr().out == ", marcorossi, mail.it\nBob Bo, bob, x.org\n"

    def test_recipients_encode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test rendering a To header from triples."""
        stdin(", marcorossi, mail.it\nUno, o due, unoodue, mail.it\n")

        assert main(["recipients-encode"]) == 0
        assert capsys.readouterr().out == (
            'To: marcorossi@mail.it, "Uno, o due" <unoodue@mail.it>\n'
        )


class TestSubjectAndDateCommands:
    """Test suite for subject and date subcommands."""

    def test_subject_encode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test encoding a non-ASCII subject."""
        stdin("Café\n")

        assert main(["subject-encode"]) == 0
        assert capsys.readouterr().out == "=?utf-8?B?Q2Fmw6k=?=\n"

    def test_subject_decode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test decoding an encoded-word subject."""
        stdin("=?utf-8?B?Q2Fmw6k=?=\n")

        assert main(["subject-decode"]) == 0
        assert capsys.readouterr().out == "Café\n"

    def test_date_decode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test printing the day of week of a date."""
        stdin(f"{SCENARIO_DATE}\n")

        assert main(["date-decode"]) == 0
        assert capsys.readouterr().out == "THURSDAY\n"

    def test_date_encode(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test rendering midnight in the configured time zone."""
        stdin("2020 12 3\n")

        assert main(["date-encode"]) == 0
        assert capsys.readouterr().out == "Thu, 3 Dec 2020 00:00:00 GMT\n"

    def test_date_encode_with_injected_settings(
        self,
        stdin,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
        mock_settings,
    ) -> None:
        """Test that the CLI uses the loaded settings for zone and log level."""
        monkeypatch.setattr("mua_codec.cli.get_settings", lambda: mock_settings)
        stdin("2020 12 3\n")

        assert main(["date-encode"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "Thu, 3 Dec 2020 00:00:00 GMT\n"
        assert "mua_codec_started" in captured.err

    def test_date_encode_rejects_bad_input(self, stdin) -> None:
        """Test that an impossible date exits with 1."""
        stdin("2020 13 3\n")

        assert main(["date-encode"]) == 1


class TestMessageCommands:
    """Test suite for message subcommands."""

    def test_message_encode(
        self, stdin, capsys: pytest.CaptureFixture[str], single_part_text: str
    ) -> None:
        """Test composing a single part message from lines."""
        stdin("Daniele Buondonno\ndanibond\ngmail.com\n\nmarcorossi\nmail.it\nHello\nHi!\n\n")

        assert main(["message-encode", "--date", SCENARIO_DATE]) == 0
        assert capsys.readouterr().out == single_part_text + "\n"

    def test_message_encode_multipart(self, stdin, capsys: pytest.CaptureFixture[str]) -> None:
        """Test composing a multipart message when an HTML line is given."""
        stdin("\na\nx.it\n\nb\ny.it\n\nc\nz.it\nHi\nHello\n<b>Hello</b>\n")

        assert main(["message-encode", "--date", SCENARIO_DATE]) == 0
        out = capsys.readouterr().out
        assert out.startswith("From: a@x.it\nTo: b@y.it, c@z.it\nSubject: Hi\n")
        assert out.endswith("--frontier--\n")

    def test_message_encode_requires_recipient_triples(self, stdin) -> None:
        """Test that incomplete recipient triples exit with 1."""
        stdin("\na\nx.it\n\nb\nHi\nHello\n\n")

        assert main(["message-encode", "--date", SCENARIO_DATE]) == 1

    def test_message_decode_json(
        self, stdin, capsys: pytest.CaptureFixture[str], multipart_text: str
    ) -> None:
        """Test printing a parsed message as JSON."""
        stdin(multipart_text + "\n")

        assert main(["message-decode", "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["subject"] == "Hello"
        assert [r["local"] for r in payload["recipients"]] == ["marcorossi", "unoodue"]
        assert [p["content_type"] for p in payload["parts"]] == [
            "multipart/alternative",
            "text/plain",
            "text/html",
        ]
        assert payload["parts"][2]["body"] == "<b>Hi</b>"

    def test_message_decode_text(
        self, stdin, capsys: pytest.CaptureFixture[str], single_part_text: str
    ) -> None:
        """Test printing a parsed message as text."""
        stdin(single_part_text)

        assert main(["message-decode"]) == 0
        out = capsys.readouterr().out
        assert "From: Daniele Buondonno <danibond@gmail.com>" in out
        assert "Date: 2020-12-03T00:00:00+01:00" in out
        assert "[1] text/plain; charset=us-ascii\nHi!" in out

    def test_message_decode_reports_malformed_text(self, stdin) -> None:
        """Test that malformed message text exits with 1."""
        stdin("Subject: nothing else\n")

        assert main(["message-decode"]) == 1

    def test_unknown_subcommand_is_a_usage_error(self) -> None:
        """Test that argparse exits with 2 for unknown subcommands."""
        with pytest.raises(SystemExit) as excinfo:
            main(["unknown"])

        assert excinfo.value.code == 2

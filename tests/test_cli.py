"""Tests for CLI interface.

Test Coverage:
    - Argument parsing
    - Command routing
    - Answer command with a mocked pipeline
    - Profile set/show against a temporary database
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from eswriter.cli import EXIT_NO_QUESTIONS, answer_html, cmd_version, create_parser, main
from eswriter.config import Settings
from eswriter.models import Answer, AnswerStatus, Completion, UserProfile

FORM = '<label for="a">Strengths?</label><textarea id="a"></textarea>'


def make_answer(question: str, answer: str, index: int = 0, status=AnswerStatus.COMPLETED) -> Answer:
    """Helper to create an Answer for testing."""
    return Answer(question=question, answer=answer, index=index, status=status)


@pytest.fixture
def html_file(tmp_path) -> Path:
    path = tmp_path / "form.html"
    path.write_text(FORM, encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        google_api_key="test_google_key",
        profile_db_path=str(tmp_path / "profiles.db"),
        _env_file=None,
    )


class TestParserCreation:
    """Test CLI parser creation."""

    def test_parser_prog_name(self):
        """Parser has correct program name."""
        assert create_parser().prog == "eswriter"

    def test_help_exits(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--help"])

    def test_answer_requires_file(self):
        """Answer command requires the HTML file argument."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["answer"])

    def test_answer_defaults(self):
        args = create_parser().parse_args(["answer", "form.html"])

        assert args.command == "answer"
        assert args.html_file == Path("form.html")
        assert args.subject is None
        assert args.format == "text"

    def test_answer_invalid_format_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["answer", "form.html", "--format", "xml"])

    def test_serve_options(self):
        args = create_parser().parse_args(["serve", "--port", "9000"])

        assert args.port == 9000
        assert args.host is None

    def test_profile_requires_subcommand(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["profile"])

    def test_profile_default_db(self):
        """Without --db the store location comes from settings."""
        args = create_parser().parse_args(["profile", "show", "user-1"])

        assert args.db is None
        assert args.subject == "user-1"


class TestVersionCommand:
    """Test version command."""

    def test_version_command_execution(self, capsys):
        """Version command prints version."""
        args = create_parser().parse_args(["version"])

        assert cmd_version(args) == 0
        assert "ES Writer v" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestAnswerCommand:
    """Test the answer command with the pipeline mocked out."""

    def test_text_output(self, html_file, settings, capsys):
        answers = [
            make_answer("Strengths?", "継続力です。", 0),
            make_answer("Weaknesses?", "", 1, AnswerStatus.TIMED_OUT),
        ]
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli.answer_html", new=AsyncMock(return_value=answers)):
            exit_code = main(["answer", str(html_file), "--bio", "student"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Q1. Strengths?" in out
        assert "継続力です。" in out
        assert "<no answer: timed_out>" in out

    def test_json_output(self, html_file, settings, capsys):
        answers = [make_answer("Strengths?", "継続力です。")]
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli.answer_html", new=AsyncMock(return_value=answers)):
            exit_code = main(["answer", str(html_file), "--format", "json"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == [
            {"question": "Strengths?", "answer": "継続力です。"},
        ]

    def test_profile_from_flags(self, html_file, settings):
        mock_answer = AsyncMock(return_value=[make_answer("Strengths?", "ok")])
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli.answer_html", new=mock_answer):
            main(["answer", str(html_file), "--bio", "b", "--experience", "e", "--projects", "p"])

        html, profile, _ = mock_answer.await_args.args
        assert html == FORM
        assert profile == UserProfile(bio="b", experience="e", projects="p")

    def test_profile_from_store(self, html_file, settings):
        main(["profile", "--db", settings.profile_db_path, "set", "user-1", "--bio", "stored"])
        mock_answer = AsyncMock(return_value=[make_answer("Strengths?", "ok")])
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli.answer_html", new=mock_answer):
            exit_code = main(["answer", str(html_file), "--subject", "user-1"])

        assert exit_code == 0
        assert mock_answer.await_args.args[1].bio == "stored"

    def test_unknown_subject(self, html_file, settings, capsys):
        with patch("eswriter.cli.get_settings", return_value=settings):
            exit_code = main(["answer", str(html_file), "--subject", "nobody"])

        assert exit_code == 1
        assert "No profile" in capsys.readouterr().err

    def test_no_questions(self, html_file, settings, capsys):
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli.answer_html", new=AsyncMock(return_value=[])):
            exit_code = main(["answer", str(html_file)])

        assert exit_code == EXIT_NO_QUESTIONS
        assert "No questions found" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, settings):
        with patch("eswriter.cli.get_settings", return_value=settings):
            assert main(["answer", str(tmp_path / "missing.html")]) == 1

    def test_pipeline_error(self, html_file, settings, capsys):
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli.answer_html", new=AsyncMock(side_effect=ValueError("boom"))):
            exit_code = main(["answer", str(html_file)])

        assert exit_code == 1
        assert "boom" in capsys.readouterr().err

    def test_keyboard_interrupt(self, html_file, settings):
        with patch("eswriter.cli.get_settings", return_value=settings), \
             patch("eswriter.cli._run_async", side_effect=KeyboardInterrupt):
            assert main(["answer", str(html_file)]) == 130


class TestAnswerHtml:
    """Test the in-process pipeline run."""

    @pytest.mark.asyncio
    async def test_no_questions_skips_client(self, settings):
        with patch("eswriter.cli.create_completion_client") as factory:
            answers = await answer_html("<p>nothing</p>", UserProfile(), settings)

        assert answers == []
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_runs_orchestrator(self, settings):
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)
        client.complete = AsyncMock(
            return_value=Completion(text="継続力です。", provider="gemini", model="gemini-1.5-flash")
        )
        with patch("eswriter.cli.create_completion_client", return_value=client):
            answers = await answer_html(FORM, UserProfile(bio="student"), settings)

        assert [a.answer for a in answers] == ["継続力です。"]
        client.__aexit__.assert_awaited_once()


class TestProfileCommand:
    """Test profile set/show."""

    def test_set_then_show(self, tmp_path, capsys):
        db = str(tmp_path / "profiles.db")

        assert main(["profile", "--db", db, "set", "user-1", "--bio", "CS student", "--projects", "拡張機能"]) == 0
        assert "Saved profile for user-1" in capsys.readouterr().out

        assert main(["profile", "--db", db, "show", "user-1"]) == 0
        assert json.loads(capsys.readouterr().out) == {
            "bio": "CS student", "experience": "", "projects": "拡張機能",
        }

    def test_show_missing(self, tmp_path, capsys):
        db = str(tmp_path / "profiles.db")

        assert main(["profile", "--db", db, "show", "nobody"]) == 1
        assert "No profile" in capsys.readouterr().err

    def test_uses_profile_db_path_setting(self, tmp_path, monkeypatch, capsys):
        """PROFILE_DB_PATH points set/show at the same file the server reads."""
        db = tmp_path / "var" / "profiles.db"
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PROFILE_DB_PATH", str(db))
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        assert main(["profile", "set", "user-1", "--bio", "from env"]) == 0
        assert main(["profile", "show", "user-1"]) == 0

        assert db.exists()
        assert not (tmp_path / "data" / "profiles.db").exists()
        assert json.loads(capsys.readouterr().out.split("\n", 1)[1])["bio"] == "from env"

    def test_unwritable_db(self, tmp_path, capsys):
        """A database that cannot be opened exits 1 without a traceback."""
        assert main(["profile", "--db", str(tmp_path), "set", "user-1", "--bio", "x"]) == 1
        assert "Failed to open profile store" in capsys.readouterr().err

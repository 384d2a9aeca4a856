"""Tests for the ``precast`` command line (precast.cli)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from precast import __version__
from precast.cli import DEFAULT_NAME, _feature_values, build_parser, collect_config, main, prompt_axis
from precast.errors import SetupError
from precast.stack import Axis, ConfigRecommender

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def precast_cwd(tmp_path: Path, monkeypatch) -> Path:
    """Run every command against a temp working directory with a clean env."""
    for var in ("PRECAST_DEBUG", "DEBUG_ERRORS", "PRECAST_VERBOSE", "PRECAST_TEMPLATE_DIR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PRECAST_CWD", str(tmp_path))
    return tmp_path


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_init_defaults(self):
        args = build_parser().parse_args(["init"])
        assert args.name is None
        assert args.typescript is True
        assert args.git is True
        assert args.package_manager == "npm"
        assert args.docker is None

    def test_package_manager_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["init", "--package-manager", "npx"])


class TestFeatureValues:
    def test_absent_flags_omitted(self):
        assert _feature_values(build_parser().parse_args(["add"])) == {}

    def test_comma_lists(self):
        args = build_parser().parse_args(
            ["add", "--plugins", "stripe, resend", "--mcp", "github", "--auth", "clerk", "--docker"]
        )
        assert _feature_values(args) == {
            "auth_provider": "clerk",
            "mcp_servers": ["github"],
            "plugins": ["stripe", "resend"],
            "docker": True,
        }

    def test_ai_prefers_claude(self):
        args = build_parser().parse_args(["add", "--ai", "cursor,claude"])
        values = _feature_values(args)
        assert values["ai_context"] == ["cursor", "claude"]
        assert values["ai_assistant"] == "claude"

    def test_ai_first_assistant(self):
        values = _feature_values(build_parser().parse_args(["add", "--ai", "gemini"]))
        assert values["ai_assistant"] == "gemini"


class TestCollectConfig:
    def test_defaults_with_yes(self):
        config = collect_config(build_parser().parse_args(["init", "-y"]))
        assert config.name == DEFAULT_NAME
        assert config.framework == "react"
        assert config.backend == "none"
        assert config.styling == "tailwind"

    def test_flags_win(self):
        args = build_parser().parse_args(
            ["init", "shop", "-y", "--framework", "vue", "--backend", "express", "--no-typescript",
             "--deployment", "netlify", "--install"]
        )
        config = collect_config(args)
        assert (config.name, config.framework, config.backend) == ("shop", "vue", "express")
        assert config.typescript is False
        assert config.deployment_method == "netlify"
        assert config.auto_install is True

    def test_prompt_axis_offers_none(self):
        with patch("precast.cli.Prompt.ask", return_value="express") as ask:
            answer = prompt_axis(ConfigRecommender(), Axis.BACKEND, {"framework": "react"})
        assert answer == "express"
        choices = ask.call_args.kwargs["choices"]
        assert "express" in choices
        assert "none" in choices

    def test_interactive_prompts_in_order(self):
        args = build_parser().parse_args(["init", "shop"])
        answers = iter(["react", "express", "postgres", "prisma", "tailwind", "node"])
        with patch("precast.cli.sys.stdin") as stdin, \
                patch("precast.cli.Prompt.ask", side_effect=lambda *a, **k: next(answers)), \
                patch("precast.cli.Confirm.ask", return_value=True) as confirm:
            stdin.isatty.return_value = True
            config = collect_config(args)
        assert (config.database, config.orm) == ("postgres", "prisma")
        assert config.docker is True
        confirm.assert_called_once()


class TestInit:
    def test_creates_project(self, precast_cwd: Path):
        main(["init", "shop", "-y", "--no-git"])

        project = precast_cwd / "shop"
        assert (project / "package.json").is_file()
        metadata = json.loads((project / "precast.json").read_text(encoding="utf-8"))
        assert metadata["name"] == "shop"
        assert metadata["git"] is False

    def test_invalid_configuration_exits(self, precast_cwd: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["init", "shop", "-y", "--no-git", "--database", "postgres"])
        assert exc_info.value.code == 1
        assert "Cannot use a database without a backend" in capsys.readouterr().err
        assert not (precast_cwd / "shop").exists()

    def test_existing_directory_exits(self, precast_cwd: Path, capsys):
        (precast_cwd / "shop").mkdir()
        with pytest.raises(SystemExit) as exc_info:
            main(["init", "shop", "-y", "--no-git"])
        assert exc_info.value.code == 1
        assert "already exists" in capsys.readouterr().err

    def test_aliases_normalised(self, precast_cwd: Path):
        main(["init", "shop", "-y", "--no-git", "--framework", "NextJS", "--backend", "next"])
        metadata = json.loads((precast_cwd / "shop" / "precast.json").read_text(encoding="utf-8"))
        assert metadata["framework"] == "next"
        assert (precast_cwd / "shop" / "next.config.mjs").is_file()

    def test_unknown_feature_ids_rejected_before_creation(self, precast_cwd: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["init", "shop", "-y", "--no-git", "--ui-library", "bogus", "--deployment", "heroku"])
        assert exc_info.value.code == 1
        err = " ".join(capsys.readouterr().err.split())
        assert 'Invalid UI library "bogus"' in err
        assert 'Invalid deployment method "heroku"' in err
        assert "shadcn" in err
        assert not (precast_cwd / "shop").exists()

    def test_unknown_plugin_and_assistant(self, precast_cwd: Path, capsys):
        with pytest.raises(SystemExit):
            main(["init", "shop", "-y", "--no-git", "--plugins", "stripe,paypal", "--ai", "claude,clippy"])
        err = " ".join(capsys.readouterr().err.split())
        assert 'Invalid plugin "paypal"' in err
        assert 'Invalid AI assistant "clippy"' in err
        assert '"stripe"' not in err

    def test_auth_alias_accepted(self, precast_cwd: Path):
        main(["init", "shop", "-y", "--no-git", "--auth", "passport.js"])
        assert (precast_cwd / "shop" / "precast.json").is_file()

    def test_setup_error_exits_cleanly(self, precast_cwd: Path, capsys):
        with patch(
            "precast.cli.ProjectOrchestrator.create_project",
            side_effect=SetupError("Unknown deployment method: heroku"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["init", "shop", "-y", "--no-git"])
        assert exc_info.value.code == 1
        assert "Unknown deployment method" in " ".join(capsys.readouterr().err.split())


class TestAdd:
    def test_requires_a_flag(self, precast_cwd: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["add", str(precast_cwd)])
        assert exc_info.value.code == 1
        assert "nothing to add" in capsys.readouterr().err

    def test_not_a_project(self, precast_cwd: Path, capsys):
        with pytest.raises(SystemExit):
            main(["add", str(precast_cwd), "--ai", "claude"])
        assert "not a precast project" in " ".join(capsys.readouterr().err.split())

    def test_adds_ai_context(self, precast_cwd: Path):
        main(["init", "shop", "-y", "--no-git"])
        main(["add", str(precast_cwd / "shop"), "--ai", "claude"])

        project = precast_cwd / "shop"
        assert (project / "CLAUDE.md").is_file()
        metadata = json.loads((project / "precast.json").read_text(encoding="utf-8"))
        assert metadata["aiAssistant"] == "claude"
        assert metadata["aiContext"] == ["claude"]

    def test_invalid_update_lists_errors(self, precast_cwd: Path, capsys):
        main(["init", "shop", "-y", "--no-git"])
        with pytest.raises(SystemExit):
            main(["add", str(precast_cwd / "shop"), "--powerups", "sharp,imagemin"])
        assert "conflicts with" in capsys.readouterr().err

    def test_unknown_feature_id_rejected(self, precast_cwd: Path, capsys):
        main(["init", "shop", "-y", "--no-git"])
        with pytest.raises(SystemExit) as exc_info:
            main(["add", str(precast_cwd / "shop"), "--api-client", "graphql"])
        assert exc_info.value.code == 1
        assert 'Invalid API client "graphql"' in " ".join(capsys.readouterr().err.split())
        metadata = json.loads((precast_cwd / "shop" / "precast.json").read_text(encoding="utf-8"))
        assert metadata.get("apiClient") in (None, "none")


class TestList:
    def test_one_axis(self, capsys):
        main(["list", "database"])
        out = capsys.readouterr().out
        assert "postgres" in out
        assert "mongodb" in out

    def test_powerups(self, capsys):
        main(["list", "powerups"])
        assert "traefik" in capsys.readouterr().out

    def test_unknown_axis(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["list", "colors"])
        assert exc_info.value.code == 1
        assert "unknown axis" in capsys.readouterr().err


class TestDebugFlags:
    def test_verbose_enables_debug_log(self):
        with patch("precast.cli.set_verbose") as set_verbose, patch("precast.cli.run_list", return_value=0):
            main(["--verbose", "list"])
        set_verbose.assert_called_once_with(True)

    def test_debug_reaches_settings(self):
        captured = MagicMock(return_value=0)
        with patch("precast.cli.run_init", captured), patch("precast.cli.set_verbose"):
            main(["--debug", "init", "-y"])
        settings = captured.call_args.args[1]
        assert settings.debug is True

"""Unit tests for utility functions (precast.utils).

Tests cover:
- run_command (success, failure, timeout, env vars, missing binary)
- ProcessRunner (CommandError on non-zero exit)
- install_command / add_command
- db_name / title_case
- load_json / save_json / write_file / append_lines / remove_tree
- update_package_json
- format_duration
- Rich output helpers
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from precast.utils import (
    CommandError,
    ProcessRunner,
    add_command,
    append_lines,
    db_name,
    debug_log,
    ensure_dir,
    format_duration,
    install_command,
    load_json,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    remove_tree,
    run_command,
    save_json,
    set_verbose,
    title_case,
    update_package_json,
    write_file,
)

PY = sys.executable


# ---------------------------------------------------------------------------
# run_command / ProcessRunner
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    async def test_successful_command(self):
        returncode, stdout, stderr = await run_command([PY, "-c", "print('hello')"])
        assert returncode == 0
        assert stdout == "hello"

    @pytest.mark.unit
    async def test_failed_command(self):
        returncode, _, _ = await run_command([PY, "-c", "import sys; sys.exit(3)"])
        assert returncode == 3

    @pytest.mark.unit
    async def test_command_with_cwd(self, tmp_path: Path):
        _, stdout, _ = await run_command([PY, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert Path(stdout).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    async def test_command_timeout(self):
        returncode, _, stderr = await run_command([PY, "-c", "import time; time.sleep(10)"], timeout=1)
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    async def test_command_with_env(self):
        _, stdout, _ = await run_command(
            [PY, "-c", "import os; print(os.environ['TEST_VAR'])"], env={"TEST_VAR": "test_value"}
        )
        assert stdout == "test_value"

    @pytest.mark.unit
    async def test_missing_binary(self):
        returncode, _, stderr = await run_command(["nonexistent-binary-12345-xyz"])
        assert returncode == 127
        assert "Command not found" in stderr


class TestProcessRunner:
    @pytest.mark.unit
    async def test_returns_stdout(self):
        assert await ProcessRunner().run([PY, "-c", "print('ok')"]) == "ok"

    @pytest.mark.unit
    async def test_non_zero_raises(self):
        with pytest.raises(CommandError) as exc_info:
            await ProcessRunner().run([PY, "-c", "import sys; sys.stderr.write('boom'); sys.exit(2)"])
        assert exc_info.value.returncode == 2
        assert "boom" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Package managers
# ---------------------------------------------------------------------------


class TestPackageManagerCommands:
    @pytest.mark.unit
    @pytest.mark.parametrize("pm, expected", [
        ("npm", ["npm", "install"]), ("yarn", ["yarn", "install"]), ("unknown", ["npm", "install"]),
    ])
    def test_install_command(self, pm, expected):
        assert install_command(pm) == expected

    @pytest.mark.unit
    def test_npm_dev_flag(self):
        assert add_command("npm", ["vitest@^3"], dev=True) == ["npm", "install", "--save-dev", "vitest@^3"]

    @pytest.mark.unit
    def test_pnpm_dev_flag(self):
        assert add_command("pnpm", ["a", "b"], dev=True) == ["pnpm", "add", "-D", "a", "b"]

    @pytest.mark.unit
    def test_bun_runtime_dependency(self):
        assert add_command("bun", ["zod"]) == ["bun", "add", "zod"]


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


class TestNames:
    @pytest.mark.unit
    @pytest.mark.parametrize("name, expected", [
        ("my-app", "my_app"), ("My.Shop", "my_shop"), ("plain", "plain"),
    ])
    def test_db_name(self, name, expected):
        assert db_name(name) == expected

    @pytest.mark.unit
    def test_title_case(self):
        assert title_case("react-router") == "React Router"
        assert title_case("better_auth") == "Better Auth"


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestFileHelpers:
    @pytest.mark.unit
    async def test_save_and_load_json(self, tmp_path: Path):
        path = await save_json({"a": 1, "b": "ü"}, tmp_path / "nested" / "data.json")
        assert load_json(path) == {"a": 1, "b": "ü"}
        assert path.read_text(encoding="utf-8").endswith("}\n")

    @pytest.mark.unit
    def test_load_json_rejects_list(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a JSON object"):
            load_json(path)

    @pytest.mark.unit
    def test_load_json_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")

    @pytest.mark.unit
    async def test_write_file_creates_parents(self, tmp_path: Path):
        path = await write_file(tmp_path / "a" / "b" / "c.txt", "x")
        assert path.read_text(encoding="utf-8") == "x"

    @pytest.mark.unit
    async def test_append_lines(self, tmp_path: Path):
        path = tmp_path / "requirements.txt"
        path.write_text("fastapi", encoding="utf-8")
        await append_lines(path, ["stripe>=12.0"])
        assert path.read_text(encoding="utf-8") == "fastapi\nstripe>=12.0\n"

    @pytest.mark.unit
    def test_ensure_dir(self, tmp_path: Path):
        result = ensure_dir(tmp_path / "x" / "y")
        assert result.is_dir()

    @pytest.mark.unit
    async def test_remove_tree(self, tmp_path: Path):
        target = tmp_path / "project"
        (target / "src").mkdir(parents=True)
        await remove_tree(target)
        assert not target.exists()
        await remove_tree(target)


class TestUpdatePackageJson:
    @pytest.mark.unit
    async def test_merges_and_sorts(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "app", "dependencies": {"zod": "^3"}, "scripts": {"dev": "vite"}}),
            encoding="utf-8",
        )
        await update_package_json(
            tmp_path, dependencies={"axios": "^1"}, dev_dependencies={"vitest": "^3"},
            scripts={"build": "vite build"},
        )
        data = json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))
        assert list(data["dependencies"]) == ["axios", "zod"]
        assert data["devDependencies"] == {"vitest": "^3"}
        assert list(data["scripts"]) == ["dev", "build"]

    @pytest.mark.unit
    async def test_existing_versions_overridden_by_new(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps({"dependencies": {"zod": "^2"}}), encoding="utf-8")
        await update_package_json(tmp_path, dependencies={"zod": "^3"})
        data = json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))
        assert data["dependencies"]["zod"] == "^3"

    @pytest.mark.unit
    async def test_missing_manifest(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            await update_package_json(tmp_path, dependencies={"a": "1"})


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize("seconds, expected", [
        (0, "0.0s"), (2.5, "2.5s"), (59.94, "59.9s"), (65.2, "1m 5s"), (3600, "60m 0s"), (-1, "0.0s"),
    ])
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_helpers_do_not_raise(self):
        print_step_header("Creating app")
        print_success("ok")
        print_warning("careful")
        print_error("bad")
        print_summary_table({"Framework": "react"}, title="Stack")

    @pytest.mark.unit
    def test_debug_log_respects_verbose(self):
        with patch("precast.utils.console") as mock_console:
            set_verbose(False)
            debug_log("hidden")
            mock_console.print.assert_not_called()
            set_verbose(True)
            try:
                debug_log("shown")
            finally:
                set_verbose(False)
            mock_console.print.assert_called_once_with("[dim]shown[/dim]")

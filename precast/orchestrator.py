"""Project creation orchestrator.

Runs one project-creation request end to end:

1. SCAFFOLD -- render the framework, backend and base files.
2. ENRICH   -- run the setup generators in a fixed order, each inside its own
   error boundary; a failing step is recorded and the run continues.
3. FINALISE -- sidecar metadata, deployment config, git repository and Docker
   files.

Any exception escaping the scaffold or finalise stages removes the project
directory and is re-raised.  ``add_features`` re-runs only the enrichment
steps affected by a :class:`ConfigUpdate` on an existing project.

Usage::

    orchestrator = ProjectOrchestrator(Settings.from_env())
    result = await orchestrator.create_project(config)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from precast.collector import CollectedError, ErrorCollector
from precast.config import Settings
from precast.errors import (
    ConfigurationError,
    DirectoryExistsError,
    ProjectCreationError,
    UnknownFrameworkError,
)
from precast.metadata import detect_project, update_metadata, write_metadata
from precast.scaffolder import DockerGenerator, ProjectScaffolder, TemplateRenderer
from precast.setup import (
    API_CLIENT_GENERATORS,
    DEPLOYMENT_GENERATORS,
    UI_GENERATORS,
    AdminWidgetSetup,
    AIContextSetup,
    ColorPaletteSetup,
    DockerComposeSetup,
    EnvSetup,
    MCPSetup,
    PluginsSetup,
    PowerUpsSetup,
    SetupGenerator,
    auth_generator,
    database_generator,
    lookup,
)
from precast.setup.ai_context import assistants
from precast.stack.models import ConfigUpdate, ProjectConfig, is_set
from precast.stack.validator import ConfigValidator, normalize
from precast.utils import (
    ProcessRunner,
    debug_log,
    format_duration,
    install_command,
    print_step_header,
    print_success,
    print_warning,
    remove_tree,
)

__all__ = [
    "ConfigurationError",
    "DirectoryExistsError",
    "ProjectCreationError",
    "ProjectOrchestrator",
    "ProjectResult",
    "SETUP_STEPS",
    "SetupStep",
    "UnknownFrameworkError",
]

INSTALL_STEP = "Dependency installation"


# ---------------------------------------------------------------------------
# Enrichment steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetupStep:
    """One enrichment step.

    ``enabled`` is the guard evaluated against the project configuration,
    ``generator`` resolves the setup generator for it, and ``fields`` lists
    the :class:`ConfigUpdate` fields whose change makes ``add_features``
    re-run the step.
    """

    name: str
    enabled: Callable[[ProjectConfig], bool]
    generator: Callable[[ProjectConfig], SetupGenerator]
    fields: tuple[str, ...] = ()


def _wants_admin_widget(config: ProjectConfig) -> bool:
    return bool(config.plugins) or config.has_database or is_set(config.auth_provider)


SETUP_STEPS: tuple[SetupStep, ...] = (
    SetupStep(
        "AI context setup",
        lambda c: bool(assistants(c)) or bool(c.ai_context),
        lambda c: AIContextSetup(),
        ("ai_context", "ai_assistant"),
    ),
    SetupStep(
        "MCP server configuration",
        lambda c: c.ai_assistant == "claude" and bool(c.mcp_servers),
        lambda c: MCPSetup(),
        ("ai_assistant", "mcp_servers"),
    ),
    SetupStep(
        "Color palette setup",
        lambda c: is_set(c.color_palette),
        lambda c: ColorPaletteSetup(),
        ("color_palette",),
    ),
    SetupStep(
        "Database configuration setup",
        lambda c: c.has_database,
        database_generator,
    ),
    SetupStep(
        "Authentication setup",
        lambda c: is_set(c.auth_provider),
        lambda c: auth_generator(c.auth_provider),
        ("auth_provider",),
    ),
    SetupStep(
        "Powerups setup",
        lambda c: bool(c.powerups),
        lambda c: PowerUpsSetup(),
        ("powerups",),
    ),
    SetupStep(
        "Plugins setup",
        lambda c: bool(c.plugins),
        lambda c: PluginsSetup(),
        ("plugins",),
    ),
    SetupStep(
        "Admin widget setup",
        _wants_admin_widget,
        lambda c: AdminWidgetSetup(),
        ("plugins", "auth_provider", "docker"),
    ),
    SetupStep(
        "Docker compose setup",
        lambda c: c.docker and c.has_database,
        lambda c: DockerComposeSetup(),
        ("docker",),
    ),
    SetupStep(
        "Environment files setup",
        lambda c: True,
        lambda c: EnvSetup(),
        ("auth_provider", "api_client", "powerups", "plugins", "docker", "mcp_servers", "ai_assistant"),
    ),
    SetupStep(
        "UI library setup",
        lambda c: is_set(c.ui_library),
        lambda c: lookup(UI_GENERATORS, c.ui_library, "UI library"),
        ("ui_library",),
    ),
    SetupStep(
        "API client setup",
        lambda c: is_set(c.api_client),
        lambda c: lookup(API_CLIENT_GENERATORS, c.api_client, "API client"),
        ("api_client",),
    ),
)


class ProjectResult(BaseModel):
    """Outcome of a successful ``create_project`` or ``add_features`` run."""

    project_path: Path
    errors: list[CollectedError] = Field(default_factory=list)
    warnings: list[CollectedError] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    steps_run: list[str] = Field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ProjectOrchestrator:
    """Creates projects and adds features to existing ones.

    Args:
        settings: CLI settings (working directory, timeouts, debug flags).
        renderer: Template renderer; defaults to one over ``settings.template_dir``.
        runner: Process runner for git and package-manager commands.
        collector: Receives soft failures of enrichment steps.
        validator: Used by ``add_features`` to re-validate the updated stack.
        steps: Enrichment step table, :data:`SETUP_STEPS` by default.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        renderer: TemplateRenderer | None = None,
        runner: ProcessRunner | None = None,
        collector: ErrorCollector | None = None,
        validator: ConfigValidator | None = None,
        steps: tuple[SetupStep, ...] = SETUP_STEPS,
    ) -> None:
        self.settings = settings or Settings()
        self.renderer = renderer or TemplateRenderer(self.settings.template_dir)
        self.runner = runner or ProcessRunner(timeout=self.settings.git_timeout)
        self.collector = collector or ErrorCollector(
            debug=self.settings.debug, log_path=self.settings.debug_log_path
        )
        self.validator = validator or ConfigValidator()
        self.steps = steps
        self.scaffolder = ProjectScaffolder(self.renderer)

    # -- Create ------------------------------------------------------------

    async def create_project(self, config: ProjectConfig) -> ProjectResult:
        """Create the project described by *config* under ``settings.cwd``.

        Raises:
            DirectoryExistsError: The target directory already exists; nothing
                is written.
            UnknownFrameworkError: The framework has no scaffold.
            CommandError: A git command failed.
        """
        start = time.monotonic()
        project_path = self.settings.project_path(config.name)
        if project_path.exists():
            raise DirectoryExistsError(project_path)

        config = config.model_copy(update={"project_path": str(project_path)})
        project_path.mkdir(parents=True)
        mark = len(self.collector.errors)
        next_steps: list[str] = []
        steps_run: list[str] = []
        try:
            print_step_header(f"Creating {config.name}")
            await self.scaffolder.generate(config, project_path)
            print_success(f"Scaffolded {config.framework} project")

            for step in self.steps:
                if not step.enabled(config):
                    continue
                steps_run.append(step.name)
                next_steps += await self._run_step(step, config, project_path)

            if config.auto_install:
                steps_run.append(INSTALL_STEP)
                await self._install(config, project_path)

            await write_metadata(config, project_path, self.settings.metadata_file)

            if is_set(config.deployment_method):
                generator = lookup(DEPLOYMENT_GENERATORS, config.deployment_method, "deployment method")
                await generator.setup(config, project_path, self.renderer)
                next_steps += generator.next_steps(config)

            if config.git:
                await self._init_git(config, project_path)

            if config.docker:
                await DockerGenerator(self.renderer).generate_all(config, project_path)
        except Exception:
            print_warning(f"Removing {project_path} after a failed run")
            await remove_tree(project_path)
            raise

        return self._result(project_path, next_steps, steps_run, start, mark)

    # -- Add features ------------------------------------------------------

    async def add_features(self, project_dir: str | Path, update: ConfigUpdate) -> ProjectResult:
        """Apply *update* to an existing precast project.

        Only the enrichment steps whose fields are touched by *update* (and
        whose guard holds for the updated configuration) run.  With
        ``auto_install`` each step also installs its own packages inside the
        same error boundary.  The sidecar is rewritten afterwards.

        Raises:
            ProjectCreationError: *project_dir* has no sidecar metadata.
            ConfigurationError: The updated configuration does not validate.
        """
        start = time.monotonic()
        project_path = Path(project_dir).resolve()
        current = detect_project(project_path, self.settings.metadata_file)
        if current is None:
            raise ProjectCreationError(
                f"{project_path} is not a precast project (no {self.settings.metadata_file})"
            )

        mark = len(self.collector.errors)
        config = normalize(current.apply(update))
        result = self.validator.validate(config)
        if not result.valid:
            raise ConfigurationError(result.errors)
        for warning in result.warnings:
            self.collector.add_warning("Validation", warning)

        touched = update.changed_fields()
        next_steps: list[str] = []
        steps_run: list[str] = []
        for step in self.steps:
            if touched & set(step.fields) and step.enabled(config):
                steps_run.append(step.name)
                next_steps += await self._run_step(
                    step, config, project_path, install=config.auto_install
                )

        if config.docker and not current.docker and not (project_path / "Dockerfile").exists():
            await DockerGenerator(self.renderer).generate_all(config, project_path)

        await update_metadata(project_path, update, self.settings.metadata_file, resolved=config)
        return self._result(project_path, next_steps, steps_run, start, mark)

    # -- Internals ---------------------------------------------------------

    async def _run_step(
        self, step: SetupStep, config: ProjectConfig, project_path: Path, install: bool = False
    ) -> list[str]:
        """Run one enrichment step inside its error boundary; return its next steps."""
        step_start = time.monotonic()
        try:
            generator = step.generator(config)
            await generator.setup(config, project_path, self.renderer)
            if install:
                await generator.install_dependencies(config, project_path, self.runner)
            steps = generator.next_steps(config)
        except Exception as exc:
            print_warning(f"{step.name} failed: {exc}")
            self.collector.add_error(step.name, exc)
            return []
        debug_log(f"{step.name} finished in {format_duration(time.monotonic() - step_start)}")
        return steps

    async def _install(self, config: ProjectConfig, project_path: Path) -> None:
        try:
            await self.runner.run(
                install_command(config.package_manager),
                cwd=project_path,
                timeout=self.settings.install_timeout,
            )
        except Exception as exc:
            print_warning(f"{INSTALL_STEP} failed: {exc}")
            self.collector.add_error(INSTALL_STEP, exc)
            return
        print_success("Dependencies installed")

    async def _init_git(self, config: ProjectConfig, project_path: Path) -> None:
        await self.runner.run(["git", "init"], cwd=project_path)
        await self.renderer.render_to_file(
            "git/gitignore.j2", project_path / ".gitignore", config.template_context()
        )
        await self.runner.run(["git", "add", "."], cwd=project_path)
        await self.runner.run(["git", "commit", "-m", "Initial commit"], cwd=project_path)
        debug_log("Initialised git repository")

    def _result(
        self,
        project_path: Path,
        next_steps: list[str],
        steps_run: list[str],
        start: float,
        mark: int = 0,
    ) -> ProjectResult:
        # Entries before *mark* belong to earlier runs of a shared collector.
        entries = self.collector.errors[mark:]
        return ProjectResult(
            project_path=project_path,
            errors=[e for e in entries if e.kind == "error"],
            warnings=[e for e in entries if e.kind == "warning"],
            next_steps=list(dict.fromkeys(next_steps)),
            steps_run=steps_run,
            duration=time.monotonic() - start,
        )

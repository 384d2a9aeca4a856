"""``.env`` and ``.env.example`` generation.

Every setup generator declares the variables it reads through
:meth:`SetupGenerator.env_variables`; this step collects them for the steps
enabled on the project and writes two files per package:

* ``.env`` with working development values (generated secrets, the database
  URL from ``docker/.env`` when the Docker stack was generated);
* ``.env.example`` with the placeholders, safe to commit.

In a monorepo browser-exposed variables (``NEXT_PUBLIC_*``, ``VITE_*``) go to
``apps/web`` and everything else to ``apps/api``.  Files that already exist
are merged: keys already present keep their values.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from pathlib import Path

from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import API_PORT, ProjectConfig, is_set
from precast.utils import debug_log, write_file

from .api_client import API_CLIENT_GENERATORS
from .auth import auth_generator
from .base import SetupGenerator
from .database import database_generator
from .mcp import MCPSetup
from .plugins import PluginsSetup
from .powerups import PowerUpsSetup

PUBLIC_PREFIXES = ("NEXT_PUBLIC_", "VITE_")

# Variables whose development value is a fresh random secret.
GENERATED_SECRETS = frozenset({"BETTER_AUTH_SECRET", "AUTH_SECRET", "JWT_SECRET", "SESSION_SECRET"})

# (heading, key fragments) in file order; unmatched keys land in "Other".
GROUPS: list[tuple[str, tuple[str, ...]]] = [
    ("Core Configuration", ("NODE_ENV", "PORT", "API_URL")),
    ("Database Configuration", ("DATABASE", "MONGODB", "D1")),
    ("Authentication", ("AUTH", "CLERK", "SESSION", "JWT")),
    ("Third-party Services", ("STRIPE", "RESEND", "SENDGRID", "TWILIO", "POSTHOG", "SENTRY",
                              "UPLOADTHING", "ALGOLIA", "SOCKET", "GA_")),
]


def generate_secret() -> str:
    return secrets.token_urlsafe(32)


def parse_env(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines; comments and blank lines are ignored."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip()
    return values


def env_sources(config: ProjectConfig) -> list[SetupGenerator]:
    """Generators enabled on *config* that may declare variables."""
    sources: list[SetupGenerator] = []
    if config.has_database:
        sources.append(database_generator(config))
    if is_set(config.auth_provider):
        sources.append(auth_generator(config.auth_provider))
    if is_set(config.api_client) and config.api_client in API_CLIENT_GENERATORS:
        sources.append(API_CLIENT_GENERATORS[config.api_client])
    if config.powerups:
        sources.append(PowerUpsSetup())
    if config.plugins:
        sources.append(PluginsSetup())
    if config.ai_assistant == "claude" and config.mcp_servers:
        sources.append(MCPSetup())
    return sources


def collect_env_variables(config: ProjectConfig) -> dict[str, str]:
    """Every variable the project reads, mapped to its example value."""
    variables = {"NODE_ENV": "development"}
    if config.has_backend:
        variables["PORT"] = str(API_PORT)
    for source in env_sources(config):
        variables.update(source.env_variables(config))
    return variables


def development_values(
    examples: dict[str, str], docker_env: dict[str, str] | None = None
) -> dict[str, str]:
    """Turn example values into usable development values."""
    values = dict(examples)
    for key in values:
        if key in GENERATED_SECRETS:
            values[key] = generate_secret()
    if docker_env and "DATABASE_URL" in values and docker_env.get("DATABASE_URL"):
        values["DATABASE_URL"] = docker_env["DATABASE_URL"]
    return values


def split_by_scope(variables: dict[str, str]) -> tuple[dict[str, str], dict[str, str]]:
    """``(web, server)`` halves of *variables*."""
    web = {k: v for k, v in variables.items() if k.startswith(PUBLIC_PREFIXES)}
    server = {k: v for k, v in variables.items() if k not in web}
    if "NODE_ENV" in server:
        web.setdefault("NODE_ENV", server["NODE_ENV"])
    return web, server


def _group(key: str) -> str:
    for heading, fragments in GROUPS:
        if any(fragment in key for fragment in fragments):
            return heading
    return "Other Configuration"


def format_env(variables: dict[str, str], title: str) -> str:
    lines = [f"# {title}", "# Generated by create-precast-app", ""]
    headings = [heading for heading, _ in GROUPS] + ["Other Configuration"]
    for heading in headings:
        keys = [key for key in variables if _group(key) == heading]
        if not keys:
            continue
        lines += [f"# {heading}", *(f"{key}={variables[key]}" for key in keys), ""]
    return "\n".join(lines)


async def merge_env_file(path: Path, variables: dict[str, str], title: str) -> Path:
    """Write *variables* to *path*, keeping keys that are already there."""
    if not path.exists():
        return await write_file(path, format_env(variables, title))
    text = path.read_text(encoding="utf-8")
    existing = parse_env(text)
    missing = {key: value for key, value in variables.items() if key not in existing}
    if not missing:
        return path
    stamp = datetime.now(timezone.utc).date().isoformat()
    if text and not text.endswith("\n"):
        text += "\n"
    text += f"\n# Added by create-precast-app on {stamp}\n"
    text += "".join(f"{key}={value}\n" for key, value in missing.items())
    return await write_file(path, text)


class EnvSetup(SetupGenerator):
    id = "env"
    name = "Environment files"

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        return collect_env_variables(config)

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        root = Path(project_path)
        examples = collect_env_variables(config)
        docker_env_path = root / "docker" / ".env"
        docker_env = parse_env(docker_env_path.read_text(encoding="utf-8")) if docker_env_path.exists() else None
        values = development_values(examples, docker_env)

        if config.is_monorepo:
            targets = list(zip(
                (config.web_dir(root), config.server_dir(root)),
                split_by_scope(values),
                split_by_scope(examples),
            ))
        else:
            targets = [(root, values, examples)]

        written: list[Path] = []
        for directory, dev_values, example_values in targets:
            if not dev_values:
                continue
            debug_log(f"Writing {len(dev_values)} environment variables to {directory}")
            written.append(await merge_env_file(directory / ".env", dev_values, "Development environment"))
            written.append(await merge_env_file(
                directory / ".env.example", example_values, "Environment template, copy to .env"
            ))
        return written

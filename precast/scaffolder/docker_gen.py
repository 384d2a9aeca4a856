"""Docker file generation.

Two entry points share the service tables below:

* :meth:`DockerGenerator.generate_all` writes the production ``Dockerfile``,
  ``docker-compose.yml`` and ``.dockerignore`` at the project root;
* :meth:`DockerGenerator.generate_database_compose` writes a local development
  database stack under ``docker/`` with generated passwords.

Compose documents are built as dicts and serialised with PyYAML.
"""

from __future__ import annotations

import secrets
import string
from pathlib import Path
from typing import Any
from urllib.parse import quote

import yaml

from precast.stack.models import ProjectConfig
from precast.utils import debug_log, ensure_dir, update_package_json, write_file

from .templates import TemplateRenderer

# Docker-safe password alphabet: no "$" (compose interpolation) or quotes.
_PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#%^&*"

# Databases that run in-process or on a managed edge service.
LOCAL_DATABASES = frozenset({"sqlite", "duckdb", "cloudflare-d1", "turso"})

DOCKERIGNORE_ENTRIES = [
    "node_modules",
    "npm-debug.log",
    ".git",
    ".gitignore",
    "README.md",
    ".env",
    ".next",
    ".nuxt",
    "dist",
    "build",
]

DATABASE_SERVICES: dict[str, dict[str, Any]] = {
    "postgres": {
        "image": "postgres:16-alpine",
        "port": 5432,
        "volume": "postgres_data",
        "mount": "/var/lib/postgresql/data",
        "passwords": ("POSTGRES_PASSWORD",),
        "environment": {
            "POSTGRES_USER": "postgres",
            "POSTGRES_PASSWORD": "{POSTGRES_PASSWORD}",
            "POSTGRES_DB": "{db}",
        },
        "url": "postgresql://postgres:{POSTGRES_PASSWORD}@{host}:5432/{db}",
        "url_var": "DATABASE_URL",
    },
    "mysql": {
        "image": "mysql:8",
        "port": 3306,
        "volume": "mysql_data",
        "mount": "/var/lib/mysql",
        "passwords": ("MYSQL_ROOT_PASSWORD", "MYSQL_PASSWORD"),
        "environment": {
            "MYSQL_ROOT_PASSWORD": "{MYSQL_ROOT_PASSWORD}",
            "MYSQL_DATABASE": "{db}",
            "MYSQL_USER": "user",
            "MYSQL_PASSWORD": "{MYSQL_PASSWORD}",
        },
        "url": "mysql://user:{MYSQL_PASSWORD}@{host}:3306/{db}",
        "url_var": "DATABASE_URL",
    },
    "mongodb": {
        "image": "mongo:7",
        "port": 27017,
        "volume": "mongodb_data",
        "mount": "/data/db",
        "passwords": ("MONGO_ROOT_PASSWORD",),
        "environment": {
            "MONGO_INITDB_ROOT_USERNAME": "root",
            "MONGO_INITDB_ROOT_PASSWORD": "{MONGO_ROOT_PASSWORD}",
            "MONGO_INITDB_DATABASE": "{db}",
        },
        "url": "mongodb://root:{MONGO_ROOT_PASSWORD}@{host}:27017/{db}?authSource=admin",
        "url_var": "DATABASE_URL",
    },
}

DOCKER_SCRIPTS = {
    "docker:up": "docker compose -f docker/docker-compose.yml up -d",
    "docker:down": "docker compose -f docker/docker-compose.yml down",
    "docker:logs": "docker compose -f docker/docker-compose.yml logs -f",
    "docker:reset": (
        "docker compose -f docker/docker-compose.yml down -v && "
        "docker compose -f docker/docker-compose.yml up -d"
    ),
    "docker:ps": "docker compose -f docker/docker-compose.yml ps",
}


def generate_password(length: int = 20) -> str:
    """Random password safe to embed in compose files and ``.env``."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def database_url(database: str, db: str, passwords: dict[str, str], host: str = "localhost") -> str | None:
    """Connection URL for *database* with URL-encoded passwords."""
    service_def = DATABASE_SERVICES.get(database)
    if service_def is None:
        return None
    encoded = {key: quote(value, safe="") for key, value in passwords.items()}
    return service_def["url"].format(host=host, db=db, **encoded)


def _service(service_def: dict[str, Any], db: str, passwords: dict[str, str]) -> dict[str, Any]:
    return {
        "image": service_def["image"],
        "restart": "unless-stopped",
        "environment": {k: v.format(db=db, **passwords) for k, v in service_def["environment"].items()},
        "ports": [f"{service_def['port']}:{service_def['port']}"],
        "volumes": [f"{service_def['volume']}:{service_def['mount']}"],
    }


def _env_file(config: ProjectConfig, db: str, service_def: dict[str, Any], passwords: dict[str, str]) -> str:
    lines = [
        "# Docker Environment Variables",
        "# Generated by create-precast-app",
        "",
        f"PROJECT_NAME={config.name}",
        f"DB_NAME={db}",
        "",
        "# Database passwords (change these in production!)",
        *(f"{key}={value}" for key, value in passwords.items()),
        "",
        "# Database URL (passwords are URL-encoded)",
        f"{service_def['url_var']}={database_url(config.database, db, passwords)}",
    ]
    return "\n".join(lines) + "\n"


def dump_compose(document: dict[str, Any]) -> str:
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


class DockerGenerator:
    """Generates Dockerfiles and Compose files for a project."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    # -- Production files --------------------------------------------------

    def compose_document(self, config: ProjectConfig) -> dict[str, Any]:
        """Production compose document: the app plus its database service."""
        db = config.template_context()["db_name"]
        app: dict[str, Any] = {
            "build": ".",
            "ports": ["3000:3000"],
            "environment": {"NODE_ENV": "production"},
        }
        services: dict[str, Any] = {"app": app}
        document: dict[str, Any] = {"services": services}

        service_def = DATABASE_SERVICES.get(config.database)
        if service_def is not None:
            # Production compose uses fixed development credentials; the
            # generated passwords live in docker/.env.
            passwords = {key: "postgres" if key == "POSTGRES_PASSWORD" else "password"
                         for key in service_def["passwords"]}
            services[config.database] = _service(service_def, db, passwords)
            app["depends_on"] = [config.database]
            app["environment"][service_def["url_var"]] = database_url(
                config.database, db, passwords, host=config.database
            )
            document["volumes"] = {service_def["volume"]: {}}
        return document

    async def generate_all(self, config: ProjectConfig, project_path: str | Path) -> dict[str, Path]:
        """Write ``Dockerfile``, ``docker-compose.yml`` and ``.dockerignore``.

        Returns:
            Mapping of file label to written path.
        """
        root = Path(project_path)
        context = config.template_context()
        result = {
            "dockerfile": await self.renderer.render_to_file(
                "docker/Dockerfile.j2", root / "Dockerfile", context
            ),
            "compose": await write_file(
                root / "docker-compose.yml", dump_compose(self.compose_document(config))
            ),
            "dockerignore": await write_file(
                root / ".dockerignore", "\n".join(DOCKERIGNORE_ENTRIES) + "\n"
            ),
        }
        return result

    # -- Development database stack ----------------------------------------

    async def generate_database_compose(
        self, config: ProjectConfig, project_path: str | Path
    ) -> dict[str, str]:
        """Write ``docker/`` with a database service for local development.

        Databases without a container (SQLite, D1...) are skipped.  Returns
        the generated passwords keyed by variable name (empty when skipped).
        """
        service_def = DATABASE_SERVICES.get(config.database)
        if service_def is None:
            if config.database in LOCAL_DATABASES:
                debug_log(f"{config.database} runs locally, Docker setup not needed")
            return {}

        root = Path(project_path)
        docker_dir = ensure_dir(root / "docker")
        db = config.template_context()["db_name"]
        passwords = {key: generate_password() for key in service_def["passwords"]}

        service = _service(service_def, db, {key: f"${{{key}}}" for key in passwords})
        service["env_file"] = [".env"]
        document = {
            "name": config.name,
            "services": {config.database: service},
            "volumes": {service_def["volume"]: {}},
        }
        await write_file(docker_dir / "docker-compose.yml", dump_compose(document))

        await write_file(docker_dir / ".env", _env_file(config, db, service_def, passwords))
        placeholders = {key: "change-me" for key in passwords}
        await write_file(docker_dir / ".env.example", _env_file(config, db, service_def, placeholders))

        await self.renderer.render_to_file(
            "docker/README.md.j2",
            docker_dir / "README.md",
            config.template_context(),
        )

        if (root / "package.json").exists():
            await update_package_json(root, scripts=DOCKER_SCRIPTS)
        return passwords

    async def generate_service_compose(
        self,
        config: ProjectConfig,
        project_path: str | Path,
        services: dict[str, dict[str, Any]],
        filename: str = "docker-compose.services.yml",
    ) -> Path | None:
        """Write auxiliary services (Redis, Traefik...) to ``docker/<filename>``."""
        if not services:
            return None
        docker_dir = ensure_dir(Path(project_path) / "docker")
        volumes = {
            volume.split(":", 1)[0]: {}
            for service in services.values()
            for volume in service.get("volumes", [])
            if not volume.startswith(("/", "."))
        }
        document: dict[str, Any] = {"name": config.name, "services": services}
        if volumes:
            document["volumes"] = volumes
        return await write_file(docker_dir / filename, dump_compose(document))

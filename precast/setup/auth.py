"""Authentication provider setup.

Each provider is a row of :data:`AUTH_PROVIDERS`: packages per framework
(``"*"`` is the fallback), template trees per framework and the environment
variables it reads.  The env step turns those variables into ``.env`` entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from precast.errors import SetupError
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig

from .base import ANY, SetupGenerator, framework_env, lookup, pick
from .database import PRISMA_PROVIDERS

_GITHUB_ENV = {
    "GITHUB_CLIENT_ID": "your-github-oauth-app-id",
    "GITHUB_CLIENT_SECRET": "your-github-oauth-app-secret",
}


@dataclass(frozen=True)
class AuthProviderSpec:
    id: str
    name: str
    packages: dict[str, dict[str, str]]
    templates: dict[str, str]
    env: dict[str, str]
    dev_packages: dict[str, dict[str, str]] = field(default_factory=dict)
    frameworks: tuple[str, ...] = ANY
    backends: tuple[str, ...] = ANY
    requires_database: bool = False
    server_side: bool = False


AUTH_PROVIDERS: dict[str, AuthProviderSpec] = {
    spec.id: spec
    for spec in (
        AuthProviderSpec(
            id="better-auth",
            name="Better Auth",
            packages={"*": {"better-auth": "^1.2.0"}},
            templates={"next": "auth/better-auth-next", "*": "auth/better-auth"},
            env={
                "BETTER_AUTH_SECRET": "your-secret-key-here",
                "BETTER_AUTH_URL": "http://localhost:3000",
                **_GITHUB_ENV,
            },
            frameworks=("next", "react", "vue", "svelte", "react-router",
                        "tanstack-router", "tanstack-start"),
            requires_database=True,
        ),
        AuthProviderSpec(
            id="auth.js",
            name="Auth.js",
            packages={
                "next": {"next-auth": "^5.0.0-beta.25"},
                "svelte": {"@auth/core": "^0.37.0", "@auth/sveltekit": "^1.7.0"},
                "*": {"@auth/core": "^0.37.0"},
            },
            templates={"next": "auth/authjs-next", "*": "auth/authjs"},
            env={
                "AUTH_SECRET": "your-secret-key-here",
                "AUTH_TRUST_HOST": "true",
                "AUTH_GITHUB_ID": "your-github-oauth-app-id",
                "AUTH_GITHUB_SECRET": "your-github-oauth-app-secret",
            },
            frameworks=("next", "react", "svelte"),
        ),
        AuthProviderSpec(
            id="clerk",
            name="Clerk",
            packages={
                "next": {"@clerk/nextjs": "^6.12.0"},
                "react-router": {"@clerk/react-router": "^1.1.0"},
                "*": {"@clerk/clerk-react": "^5.24.0"},
            },
            templates={"next": "auth/clerk-next", "react": "auth/clerk-react"},
            env={
                "NEXT_PUBLIC_CLERK_PUBLISHABLE_KEY": "pk_test_your-key",
                "VITE_CLERK_PUBLISHABLE_KEY": "pk_test_your-key",
                "CLERK_SECRET_KEY": "sk_test_your-key",
            },
            frameworks=("next", "react", "react-router"),
        ),
        AuthProviderSpec(
            id="passport",
            name="Passport.js",
            packages={"*": {"passport": "^0.7.0", "passport-jwt": "^4.0.1", "jsonwebtoken": "^9.0.2"}},
            dev_packages={"*": {"@types/passport": "^1.0.17", "@types/passport-jwt": "^4.0.1",
                                "@types/jsonwebtoken": "^9.0.9"}},
            templates={"*": "auth/passport"},
            env={"JWT_SECRET": "your-jwt-secret", "JWT_EXPIRES_IN": "7d"},
            backends=("node", "express", "koa"),
            server_side=True,
        ),
    )
}

# Accepted spellings from older metadata files and flags.
AUTH_ALIASES = {"authjs": "auth.js", "nextauth": "auth.js", "passport.js": "passport"}


class AuthSetup(SetupGenerator):
    """Installs one :class:`AuthProviderSpec`."""

    def __init__(self, spec: AuthProviderSpec) -> None:
        self.spec = spec
        self.id = spec.id
        self.name = spec.name
        self.supported_frameworks = spec.frameworks
        self.supported_backends = spec.backends

    def check_support(self, config: ProjectConfig) -> None:
        super().check_support(config)
        if self.spec.requires_database and not config.has_database:
            raise SetupError(f"{self.name} requires a database")

    def package_dir(self, config: ProjectConfig, project_path: Path) -> Path:
        if self.spec.server_side or self.spec.requires_database:
            return config.server_dir(project_path)
        return config.web_dir(project_path)

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        deps = dict(pick(self.spec.packages, config.framework, {}))
        dev = dict(pick(self.spec.dev_packages, config.framework, {})) if config.typescript else {}
        if self.id == "auth.js" and config.orm == "prisma":
            deps["@auth/prisma-adapter"] = "^2.7.0"
        return deps, dev

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        return framework_env(config, self.spec.env)

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        self.check_support(config)
        template = pick(self.spec.templates, config.framework, "")
        context = {
            **config.template_context(),
            "provider": PRISMA_PROVIDERS.get(config.database, "sqlite"),
        }
        target = self.package_dir(config, project_path)
        written: list[Path] = []
        if template:
            written = await renderer.render_tree(template, target, context)
            if template == "auth/better-auth-next":
                # Next.js also gets the shared server and client modules.
                written += await renderer.render_tree("auth/better-auth", target, context)
        await self.record_packages(config, project_path)
        return written

    def next_steps(self, config: ProjectConfig) -> list[str]:
        return [f"Fill in the {self.name} keys in .env"]


AUTH_GENERATORS: dict[str, SetupGenerator] = {
    spec_id: AuthSetup(spec) for spec_id, spec in AUTH_PROVIDERS.items()
}


def auth_generator(provider: str | None) -> SetupGenerator:
    provider = AUTH_ALIASES.get(provider or "", provider)
    return lookup(AUTH_GENERATORS, provider, "auth provider")

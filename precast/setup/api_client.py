"""Frontend API client setup (TanStack Query, SWR, Axios, tRPC).

Every client shares ``src/lib/api`` (base URL and a JSON ``fetcher``) and adds
its own module on top.  The API URL points at the standalone backend port.
"""

from __future__ import annotations

from pathlib import Path

from precast.errors import SetupError
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig

from .base import SetupGenerator, pick

# TanStack Query adapter package per framework.
QUERY_PACKAGES = {
    "vue": "@tanstack/vue-query",
    "svelte": "@tanstack/svelte-query",
    "angular": "@tanstack/angular-query-experimental",
    "vite": "@tanstack/query-core",
    "*": "@tanstack/react-query",
}


class ApiClientSetup(SetupGenerator):
    template = ""
    dependencies: dict[str, str] = {}

    def check_support(self, config: ProjectConfig) -> None:
        super().check_support(config)
        if not config.has_backend:
            raise SetupError(f"{self.name} requires a backend")

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        return dict(self.dependencies), {}

    def context(self, config: ProjectConfig) -> dict:
        return config.template_context()

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        prefix = "NEXT_PUBLIC_" if config.framework == "next" else "VITE_"
        return {f"{prefix}API_URL": f"http://localhost:{config.template_context()['api_port']}"}

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        self.check_support(config)
        web = config.web_dir(project_path)
        context = self.context(config)
        written = await renderer.render_tree("api/fetch-base", web, context)
        written += await renderer.render_tree(self.template, web, context)
        await self.record_packages(config, project_path)
        return written


class TanStackQuerySetup(ApiClientSetup):
    id = "tanstack-query"
    name = "TanStack Query"
    template = "api/tanstack-query"

    def context(self, config: ProjectConfig) -> dict:
        return {**config.template_context(),
                "query_package": pick(QUERY_PACKAGES, config.framework, "")}

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        package = pick(QUERY_PACKAGES, config.framework, "")
        deps = {package: "^5.74.0"}
        if package == "@tanstack/react-query":
            deps["@tanstack/react-query-devtools"] = "^5.74.0"
        return deps, {}


class SWRSetup(ApiClientSetup):
    id = "swr"
    name = "SWR"
    supported_frameworks = ("react", "next", "react-router", "tanstack-router", "tanstack-start")
    template = "api/swr"
    dependencies = {"swr": "^2.3.0"}


class AxiosSetup(ApiClientSetup):
    id = "axios"
    name = "Axios"
    template = "api/axios"
    dependencies = {"axios": "^1.9.0"}


class TRPCSetup(ApiClientSetup):
    id = "trpc"
    name = "tRPC"
    supported_backends = ("node", "express", "hono", "koa", "next", "next-api")
    template = "api/trpc"
    dependencies = {"@trpc/client": "^11.1.0", "@trpc/server": "^11.1.0",
                    "zod": "^3.24.0", "superjson": "^2.2.0"}


API_CLIENT_GENERATORS: dict[str, SetupGenerator] = {
    gen.id: gen for gen in (TanStackQuerySetup(), SWRSetup(), AxiosSetup(), TRPCSetup())
}

"""Framework scaffold generation.

Takes a ``ProjectConfig`` and writes the initial file set of the project:
the shared base files, the frontend package for the chosen framework, and the
server package (``apps/api``) or integrated server routes for the chosen
backend.  Everything here is table-driven: a framework or backend is a
:class:`PackageProfile` naming a template tree plus its ``package.json``
contents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from precast.errors import UnknownFrameworkError
from precast.stack.models import ProjectConfig
from precast.utils import debug_log, ensure_dir, save_json, update_package_json

from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageProfile:
    """Template tree and ``package.json`` contents of one framework or backend."""

    template: str | None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    typescript_dev: dict[str, str] = field(default_factory=dict)
    javascript_scripts: dict[str, str] | None = None
    tsconfig: str | None = None
    node_package: bool = True


_VITE_SCRIPTS = {"dev": "vite", "build": "vite build", "preview": "vite preview"}
_REACT = {"react": "^19.1.0", "react-dom": "^19.1.0"}
_REACT_TYPES = {"@types/react": "^19.1.0", "@types/react-dom": "^19.1.0", "typescript": "^5.8.0"}

FRAMEWORK_PROFILES: dict[str, PackageProfile] = {
    "react": PackageProfile(
        template="frameworks/react",
        dependencies=_REACT,
        dev_dependencies={"vite": "^6.3.0", "@vitejs/plugin-react": "^4.4.0"},
        scripts=_VITE_SCRIPTS,
        typescript_dev=_REACT_TYPES,
        tsconfig="react",
    ),
    "vue": PackageProfile(
        template="frameworks/vue",
        dependencies={"vue": "^3.5.0"},
        dev_dependencies={"vite": "^6.3.0", "@vitejs/plugin-vue": "^5.2.0"},
        scripts=_VITE_SCRIPTS,
        typescript_dev={"typescript": "^5.8.0", "vue-tsc": "^2.2.0"},
        tsconfig="bundler",
    ),
    "svelte": PackageProfile(
        template="frameworks/svelte",
        dev_dependencies={
            "svelte": "^5.28.0",
            "@sveltejs/kit": "^2.20.0",
            "@sveltejs/adapter-auto": "^6.0.0",
            "@sveltejs/vite-plugin-svelte": "^5.0.0",
            "vite": "^6.3.0",
        },
        scripts={"dev": "vite dev", "build": "vite build", "preview": "vite preview"},
        typescript_dev={"typescript": "^5.8.0", "svelte-check": "^4.1.0"},
        tsconfig="sveltekit",
    ),
    "angular": PackageProfile(
        template="frameworks/angular",
        dependencies={
            "@angular/core": "^19.2.0",
            "@angular/common": "^19.2.0",
            "@angular/compiler": "^19.2.0",
            "@angular/platform-browser": "^19.2.0",
            "@angular/router": "^19.2.0",
            "rxjs": "^7.8.0",
            "tslib": "^2.8.0",
            "zone.js": "^0.15.0",
        },
        dev_dependencies={
            "@angular/cli": "^19.2.0",
            "@angular/build": "^19.2.0",
            "@angular/compiler-cli": "^19.2.0",
            "typescript": "~5.7.0",
        },
        scripts={"dev": "ng serve", "start": "ng serve", "build": "ng build"},
        tsconfig="angular",
    ),
    "next": PackageProfile(
        template="frameworks/next",
        dependencies={**_REACT, "next": "^15.3.0"},
        scripts={"dev": "next dev", "build": "next build", "start": "next start", "lint": "next lint"},
        typescript_dev={**_REACT_TYPES, "@types/node": "^22.0.0"},
        tsconfig="next",
    ),
    "react-router": PackageProfile(
        template="frameworks/react-router",
        dependencies={**_REACT, "react-router": "^7.5.0", "@react-router/node": "^7.5.0",
                      "@react-router/serve": "^7.5.0", "isbot": "^5.1.0"},
        dev_dependencies={"@react-router/dev": "^7.5.0", "vite": "^6.3.0"},
        scripts={"dev": "react-router dev", "build": "react-router build",
                 "start": "react-router-serve ./build/server/index.js"},
        typescript_dev=_REACT_TYPES,
        tsconfig="react",
    ),
    "tanstack-router": PackageProfile(
        template="frameworks/tanstack-router",
        dependencies={**_REACT, "@tanstack/react-router": "^1.120.0"},
        dev_dependencies={"vite": "^6.3.0", "@vitejs/plugin-react": "^4.4.0",
                          "@tanstack/router-plugin": "^1.120.0"},
        scripts=_VITE_SCRIPTS,
        typescript_dev=_REACT_TYPES,
        tsconfig="react",
    ),
    "tanstack-start": PackageProfile(
        template="frameworks/tanstack-start",
        dependencies={**_REACT, "@tanstack/react-router": "^1.120.0",
                      "@tanstack/react-start": "^1.120.0"},
        dev_dependencies={"vite": "^6.3.0", "vite-tsconfig-paths": "^5.1.0"},
        scripts={"dev": "vite dev", "build": "vite build", "start": "node .output/server/index.mjs"},
        typescript_dev=_REACT_TYPES,
        tsconfig="react",
    ),
    "react-native": PackageProfile(
        template="frameworks/react-native",
        dependencies={"expo": "~53.0.0", "expo-status-bar": "~2.2.0", "react": "19.0.0",
                      "react-native": "0.79.2"},
        dev_dependencies={"@babel/core": "^7.26.0"},
        scripts={"dev": "expo start", "start": "expo start", "android": "expo start --android",
                 "ios": "expo start --ios"},
        typescript_dev={"@types/react": "~19.0.0", "typescript": "^5.8.0"},
        tsconfig="expo",
    ),
    "vite": PackageProfile(
        template="frameworks/vite",
        dev_dependencies={"vite": "^6.3.0"},
        scripts=_VITE_SCRIPTS,
        typescript_dev={"typescript": "^5.8.0"},
        tsconfig="bundler",
    ),
    "none": PackageProfile(template=None),
}

_NODE_SERVER_SCRIPTS_TS = {"dev": "tsx watch src/index.ts", "build": "tsc", "start": "node dist/index.js"}
_NODE_SERVER_SCRIPTS_JS = {"dev": "node --watch src/index.js", "start": "node src/index.js"}
_NODE_TS_DEV = {"typescript": "^5.8.0", "tsx": "^4.19.0", "@types/node": "^22.0.0"}

BACKEND_PROFILES: dict[str, PackageProfile] = {
    "express": PackageProfile(
        template="backends/express",
        dependencies={"express": "^5.1.0", "cors": "^2.8.5"},
        scripts=_NODE_SERVER_SCRIPTS_TS,
        javascript_scripts=_NODE_SERVER_SCRIPTS_JS,
        typescript_dev={**_NODE_TS_DEV, "@types/express": "^5.0.0", "@types/cors": "^2.8.17"},
        tsconfig="node",
    ),
    "hono": PackageProfile(
        template="backends/hono",
        dependencies={"hono": "^4.7.0", "@hono/node-server": "^1.14.0"},
        scripts=_NODE_SERVER_SCRIPTS_TS,
        javascript_scripts=_NODE_SERVER_SCRIPTS_JS,
        typescript_dev=_NODE_TS_DEV,
        tsconfig="node",
    ),
    "koa": PackageProfile(
        template="backends/koa",
        dependencies={"koa": "^2.16.0", "@koa/router": "^13.1.0", "@koa/cors": "^5.0.0"},
        scripts=_NODE_SERVER_SCRIPTS_TS,
        javascript_scripts=_NODE_SERVER_SCRIPTS_JS,
        typescript_dev={**_NODE_TS_DEV, "@types/koa": "^2.15.0", "@types/koa__router": "^12.0.0"},
        tsconfig="node",
    ),
    "nestjs": PackageProfile(
        template="backends/nestjs",
        dependencies={"@nestjs/common": "^11.0.0", "@nestjs/core": "^11.0.0",
                      "@nestjs/platform-express": "^11.0.0", "reflect-metadata": "^0.2.0",
                      "rxjs": "^7.8.0"},
        dev_dependencies={"@nestjs/cli": "^11.0.0", "typescript": "^5.8.0",
                          "@types/node": "^22.0.0"},
        scripts={"dev": "nest start --watch", "build": "nest build", "start": "node dist/main.js"},
        tsconfig="nestjs",
    ),
    "cloudflare-workers": PackageProfile(
        template="backends/cloudflare-workers",
        dependencies={"hono": "^4.7.0"},
        dev_dependencies={"wrangler": "^4.14.0", "@cloudflare/workers-types": "^4.20250501.0"},
        scripts={"dev": "wrangler dev", "deploy": "wrangler deploy"},
        typescript_dev={"typescript": "^5.8.0"},
        tsconfig="workers",
    ),
    "fastapi": PackageProfile(
        template="backends/fastapi",
        scripts={"dev": "uvicorn main:app --reload --port 3001",
                 "start": "uvicorn main:app --host 0.0.0.0 --port 3001"},
        node_package=False,
    ),
}
# "node" is the generic Node.js server and is scaffolded as Express.
BACKEND_PROFILES["node"] = BACKEND_PROFILES["express"]

INTEGRATED_TEMPLATES: dict[str, str] = {
    "next": "integrated/next",
    "next-api": "integrated/next",
    "sveltekit": "integrated/sveltekit",
}

STYLING_DEV_DEPENDENCIES: dict[str, dict[str, str]] = {
    "tailwind": {"tailwindcss": "^4.1.0", "@tailwindcss/vite": "^4.1.0"},
    "scss": {"sass": "^1.87.0"},
}
WORKSPACE_RUN: dict[str, str] = {
    "npm": "npm run {task} --workspaces --if-present",
    "pnpm": "pnpm -r {task}",
    "yarn": "yarn workspaces foreach -A run {task}",
    "bun": "bun run --filter '*' {task}",
}

STYLING_DEPENDENCIES: dict[str, dict[str, str]] = {
    "styled-components": {"styled-components": "^6.1.0"},
}

# Global stylesheet of each framework scaffold, relative to the web package.
STYLESHEETS: dict[str, str] = {
    "react": "src/index.css",
    "vue": "src/style.css",
    "svelte": "src/app.css",
    "angular": "src/styles.css",
    "next": "app/globals.css",
    "react-router": "app/app.css",
    "tanstack-router": "src/index.css",
    "tanstack-start": "src/styles.css",
    "vite": "src/style.css",
}


# ---------------------------------------------------------------------------
# Scaffolder
# ---------------------------------------------------------------------------


class ProjectScaffolder:
    """Writes the framework scaffold of a new project.

    The scaffold is everything later enrichment steps patch: the base files,
    the frontend package and (for standalone backends) the ``apps/api``
    package of an npm-workspaces monorepo.
    """

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def generate(self, config: ProjectConfig, project_path: str | Path) -> list[Path]:
        """Generate the scaffold into *project_path*.

        Raises:
            UnknownFrameworkError: If ``config.framework`` has no profile.
        """
        profile = FRAMEWORK_PROFILES.get(config.framework)
        if profile is None:
            raise UnknownFrameworkError(config.framework)

        root = Path(project_path)
        context = config.template_context()
        written = await self.renderer.render_tree("base", root, context)

        web_dir = config.web_dir(root)
        if profile.template is not None:
            written += await self._render_package(
                profile, web_dir, context, package_name=self._web_package_name(config)
            )
            written += await self._write_styling(config, web_dir)

        if config.is_monorepo:
            backend = BACKEND_PROFILES.get(config.backend)
            if backend is None:
                raise UnknownFrameworkError(config.backend)
            api_dir = config.server_dir(root)
            written += await self._render_package(
                backend, api_dir, context, package_name=f"@{config.name}/api"
            )
            written.append(await self._write_workspace_root(config, root))
        elif config.backend in INTEGRATED_TEMPLATES:
            written += await self.renderer.render_tree(
                INTEGRATED_TEMPLATES[config.backend], web_dir, context
            )
        elif profile.template is None:
            # No frontend and no server package: keep a root manifest so later
            # steps have a package.json to patch.
            written.append(await self._write_manifest(root, {"name": config.name, "private": True}))

        debug_log(f"Scaffolded {len(written)} files for {config.framework}")
        return written

    # -- Packages ----------------------------------------------------------

    async def _render_package(
        self,
        profile: PackageProfile,
        target: Path,
        context: dict[str, Any],
        package_name: str,
    ) -> list[Path]:
        ensure_dir(target)
        typescript = bool(context["typescript"])
        skip = [] if typescript else ["tsconfig"]
        written = await self.renderer.render_tree(profile.template, target, context, skip_patterns=skip)

        if profile.node_package:
            manifest: dict[str, Any] = {
                "name": package_name,
                "version": "0.1.0",
                "private": True,
                "type": "module",
                "scripts": dict(
                    profile.scripts if typescript or profile.javascript_scripts is None
                    else profile.javascript_scripts
                ),
            }
            dev = dict(profile.dev_dependencies)
            if typescript:
                dev.update(profile.typescript_dev)
            if profile.dependencies:
                manifest["dependencies"] = dict(sorted(profile.dependencies.items()))
            if dev:
                manifest["devDependencies"] = dict(sorted(dev.items()))
            written.append(await self._write_manifest(target, manifest))

        if typescript and profile.tsconfig:
            written.append(
                await self.renderer.render_to_file(
                    f"typescript/{profile.tsconfig}.json.j2", target / "tsconfig.json", context
                )
            )
        return written

    async def _write_styling(self, config: ProjectConfig, web_dir: Path) -> list[Path]:
        dev = dict(STYLING_DEV_DEPENDENCIES.get(config.styling, {}))
        deps = STYLING_DEPENDENCIES.get(config.styling, {})
        written: list[Path] = []
        if config.styling == "tailwind" and config.framework == "next":
            dev = {"tailwindcss": "^4.1.0", "@tailwindcss/postcss": "^4.1.0"}
            written.append(
                await self.renderer.render_to_file(
                    "styling/postcss.config.mjs.j2", web_dir / "postcss.config.mjs", config.template_context()
                )
            )
        if (dev or deps) and (web_dir / "package.json").exists():
            await update_package_json(web_dir, dependencies=deps, dev_dependencies=dev)
        return written

    async def _write_workspace_root(self, config: ProjectConfig, root: Path) -> Path:
        run_all = WORKSPACE_RUN.get(config.package_manager, WORKSPACE_RUN["npm"])
        scripts = {task: run_all.format(task=task) for task in ("dev", "build")}
        manifest = {
            "name": config.name,
            "version": "0.1.0",
            "private": True,
            "workspaces": ["apps/*"],
            "scripts": scripts,
        }
        if config.package_manager == "pnpm":
            await self.renderer.render_to_file(
                "workspace/pnpm-workspace.yaml.j2", root / "pnpm-workspace.yaml", config.template_context()
            )
        return await self._write_manifest(root, manifest)

    async def _write_manifest(self, target: Path, manifest: dict[str, Any]) -> Path:
        return await save_json(manifest, target / "package.json")

    @staticmethod
    def _web_package_name(config: ProjectConfig) -> str:
        return f"@{config.name}/web" if config.is_monorepo else config.name

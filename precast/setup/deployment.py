"""Deployment target configuration (Vercel, Netlify, Cloudflare Pages, Docker).

Each target writes its platform config file and adds ``deploy`` scripts to
the web package.  The Docker target builds and pushes an image from GitHub
Actions; it also writes the production ``Dockerfile`` when ``--docker`` did
not already.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from precast.scaffolder.docker_gen import DockerGenerator
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig
from precast.utils import save_json, update_package_json, write_file

from .base import SetupGenerator, pick

# Build output directory per framework, relative to the web package.
OUTPUT_DIRS = {
    "next": ".next",
    "svelte": "build",
    "react-router": "build/client",
    "tanstack-start": ".output/public",
    "*": "dist",
}


def output_dir(config: ProjectConfig) -> str:
    if config.framework == "angular":
        return f"dist/{config.name}/browser"
    return pick(OUTPUT_DIRS, config.framework, "dist")


@dataclass(frozen=True)
class DeploymentTarget:
    id: str
    name: str
    scripts: dict[str, str] = field(default_factory=dict)
    next_steps: tuple[str, ...] = ()


DEPLOYMENT_TARGETS: dict[str, DeploymentTarget] = {
    target.id: target
    for target in (
        DeploymentTarget(
            id="vercel",
            name="Vercel",
            scripts={"deploy": "vercel --prod", "deploy:preview": "vercel"},
            next_steps=("Install the Vercel CLI: npm install -g vercel",
                        "Log in with `vercel login`, then run the deploy script"),
        ),
        DeploymentTarget(
            id="netlify",
            name="Netlify",
            scripts={"deploy": "netlify deploy --prod --dir={output}",
                     "deploy:preview": "netlify deploy --dir={output}"},
            next_steps=("Install the Netlify CLI: npm install -g netlify-cli",
                        "Connect the site with `netlify init`, then run the deploy script"),
        ),
        DeploymentTarget(
            id="cloudflare-pages",
            name="Cloudflare Pages",
            scripts={"deploy": "wrangler pages deploy {output}"},
            next_steps=("Log in with `wrangler login`",
                        "Create the project: wrangler pages project create {name}"),
        ),
        DeploymentTarget(
            id="docker",
            name="Docker",
            next_steps=("Push to main to build and publish the image to GitHub Container Registry",),
        ),
    )
}


def docker_workflow(config: ProjectConfig) -> dict[str, Any]:
    """GitHub Actions workflow that builds and pushes the project image."""
    return {
        "name": "Docker",
        "on": {"push": {"branches": ["main"]}, "workflow_dispatch": None},
        "permissions": {"contents": "read", "packages": "write"},
        "jobs": {
            "build": {
                "runs-on": "ubuntu-latest",
                "steps": [
                    {"uses": "actions/checkout@v4"},
                    {"uses": "docker/setup-buildx-action@v3"},
                    {
                        "uses": "docker/login-action@v3",
                        "with": {
                            "registry": "ghcr.io",
                            "username": "${{ github.actor }}",
                            "password": "${{ secrets.GITHUB_TOKEN }}",
                        },
                    },
                    {
                        "uses": "docker/build-push-action@v6",
                        "with": {
                            "context": ".",
                            "push": True,
                            "tags": f"ghcr.io/${{{{ github.repository_owner }}}}/{config.name}:latest",
                        },
                    },
                ],
            }
        },
    }


class DeploymentSetup(SetupGenerator):
    def __init__(self, target: DeploymentTarget) -> None:
        self.target = target
        self.id = target.id
        self.name = target.name

    def _fill(self, value: str, config: ProjectConfig) -> str:
        return value.format(output=output_dir(config), name=config.name)

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        root = Path(project_path)
        web = config.web_dir(root)
        context = {**config.template_context(), "output_dir": output_dir(config)}
        written: list[Path] = []
        if self.id == "vercel":
            document: dict[str, Any] = {"$schema": "https://openapi.vercel.sh/vercel.json"}
            if config.framework != "next":
                document["outputDirectory"] = output_dir(config)
                # Client-side routing: serve index.html for unknown paths.
                document["rewrites"] = [{"source": "/(.*)", "destination": "/index.html"}]
            written.append(await save_json(document, web / "vercel.json"))
        elif self.id == "netlify":
            written.append(await renderer.render_to_file(
                "deployment/netlify.toml.j2", web / "netlify.toml", context
            ))
        elif self.id == "cloudflare-pages":
            written.append(await renderer.render_to_file(
                "deployment/wrangler.toml.j2", web / "wrangler.toml", context
            ))
        elif self.id == "docker":
            if not (root / "Dockerfile").exists():
                written += list((await DockerGenerator(renderer).generate_all(config, root)).values())
            content = yaml.safe_dump(docker_workflow(config), sort_keys=False, default_flow_style=False)
            written.append(await write_file(root / ".github" / "workflows" / "docker.yml", content))

        scripts = {key: self._fill(value, config) for key, value in self.target.scripts.items()}
        if scripts and (web / "package.json").exists():
            await update_package_json(web, scripts=scripts)
        return written

    def next_steps(self, config: ProjectConfig) -> list[str]:
        return [self._fill(step, config) for step in self.target.next_steps]


DEPLOYMENT_GENERATORS: dict[str, SetupGenerator] = {
    target_id: DeploymentSetup(target) for target_id, target in DEPLOYMENT_TARGETS.items()
}

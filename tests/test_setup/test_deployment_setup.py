"""Tests for deployment target configuration."""

from __future__ import annotations

import json

import pytest
import yaml

from precast.setup.deployment import DEPLOYMENT_GENERATORS, docker_workflow, output_dir

pytestmark = pytest.mark.unit


class TestOutputDir:
    @pytest.mark.parametrize("framework, expected", [
        ("next", ".next"), ("svelte", "build"), ("react", "dist"), ("angular", "dist/test-app/browser"),
    ])
    def test_per_framework(self, make_config, framework, expected):
        assert output_dir(make_config(framework=framework)) == expected


class TestTargets:
    async def test_vercel_spa_rewrites(self, make_config, scaffold, renderer):
        config = make_config(backend="none", deployment_method="vercel")
        project = await scaffold(config)
        await DEPLOYMENT_GENERATORS["vercel"].setup(config, project, renderer)

        document = json.loads((project / "vercel.json").read_text(encoding="utf-8"))
        assert document["outputDirectory"] == "dist"
        assert document["rewrites"][0]["destination"] == "/index.html"
        manifest = json.loads((project / "package.json").read_text(encoding="utf-8"))
        assert manifest["scripts"]["deploy"] == "vercel --prod"

    async def test_vercel_next_has_no_rewrites(self, make_config, tmp_path, mock_renderer):
        config = make_config(framework="next", backend="next")
        await DEPLOYMENT_GENERATORS["vercel"].setup(config, tmp_path, mock_renderer)
        assert "rewrites" not in json.loads((tmp_path / "vercel.json").read_text(encoding="utf-8"))

    async def test_netlify_goes_to_web_package(self, make_config, scaffold, renderer):
        config = make_config(deployment_method="netlify")
        project = await scaffold(config)
        await DEPLOYMENT_GENERATORS["netlify"].setup(config, project, renderer)

        web = project / "apps" / "web"
        assert 'publish = "dist"' in (web / "netlify.toml").read_text(encoding="utf-8")
        manifest = json.loads((web / "package.json").read_text(encoding="utf-8"))
        assert manifest["scripts"]["deploy"] == "netlify deploy --prod --dir=dist"

    async def test_docker_writes_dockerfile_and_workflow(self, make_config, tmp_path, renderer):
        config = make_config(backend="none")
        written = await DEPLOYMENT_GENERATORS["docker"].setup(config, tmp_path, renderer)

        assert tmp_path / "Dockerfile" in written
        workflow = yaml.safe_load((tmp_path / ".github" / "workflows" / "docker.yml").read_text(encoding="utf-8"))
        assert workflow["jobs"]["build"]["runs-on"] == "ubuntu-latest"

    async def test_docker_keeps_existing_dockerfile(self, make_config, tmp_path, mock_renderer):
        (tmp_path / "Dockerfile").write_text("FROM scratch\n", encoding="utf-8")
        await DEPLOYMENT_GENERATORS["docker"].setup(make_config(), tmp_path, mock_renderer)
        assert (tmp_path / "Dockerfile").read_text(encoding="utf-8") == "FROM scratch\n"

    def test_next_steps_filled(self, make_config):
        steps = DEPLOYMENT_GENERATORS["cloudflare-pages"].next_steps(make_config(name="shop"))
        assert "Create the project: wrangler pages project create shop" in steps


class TestDockerWorkflow:
    def test_image_tag(self, make_config):
        step = docker_workflow(make_config(name="shop"))["jobs"]["build"]["steps"][-1]
        assert step["with"]["tags"] == "ghcr.io/${{ github.repository_owner }}/shop:latest"

"""Precast scaffolder -- renders the initial file set of a new project.

Quick usage::

    from precast.scaffolder import ProjectScaffolder, TemplateRenderer

    renderer = TemplateRenderer()
    await ProjectScaffolder(renderer).generate(config, "/tmp/my-app")
"""

from precast.scaffolder.docker_gen import DockerGenerator
from precast.scaffolder.generator import ProjectScaffolder
from precast.scaffolder.templates import TemplateRenderer

__all__ = [
    "DockerGenerator",
    "ProjectScaffolder",
    "TemplateRenderer",
]

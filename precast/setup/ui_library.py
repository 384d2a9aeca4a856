"""Component library setup (shadcn/ui, DaisyUI, MUI, Chakra, Vuetify)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from precast.errors import SetupError
from precast.scaffolder.generator import STYLESHEETS
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig
from precast.utils import write_file

from .base import SetupGenerator

_REACT_APPS = ("react", "next", "react-router", "tanstack-router", "tanstack-start")


@dataclass(frozen=True)
class UILibrarySpec:
    id: str
    name: str
    frameworks: tuple[str, ...]
    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]
    template: str | None = None
    requires_tailwind: bool = False
    stylesheet_lines: tuple[str, ...] = ()
    post_install: tuple[str, ...] = ()


UI_LIBRARIES: dict[str, UILibrarySpec] = {
    spec.id: spec
    for spec in (
        UILibrarySpec(
            id="shadcn",
            name="shadcn/ui",
            frameworks=_REACT_APPS,
            dependencies={
                "class-variance-authority": "^0.7.1",
                "clsx": "^2.1.1",
                "tailwind-merge": "^3.2.0",
                "lucide-react": "^0.503.0",
            },
            dev_dependencies={"tw-animate-css": "^1.2.0"},
            template="ui/shadcn",
            requires_tailwind=True,
            stylesheet_lines=('@import "tw-animate-css";',),
            post_install=("Add components with `npx shadcn@latest add button`",),
        ),
        UILibrarySpec(
            id="daisyui",
            name="DaisyUI",
            frameworks=(*_REACT_APPS, "vue", "svelte", "vite", "angular"),
            dependencies={},
            dev_dependencies={"daisyui": "^5.0.0"},
            requires_tailwind=True,
            stylesheet_lines=('@plugin "daisyui";',),
        ),
        UILibrarySpec(
            id="mui",
            name="Material UI",
            frameworks=_REACT_APPS,
            dependencies={"@mui/material": "^7.0.0", "@emotion/react": "^11.14.0",
                          "@emotion/styled": "^11.14.0"},
            dev_dependencies={},
            template="ui/mui",
            post_install=("Wrap your app in <ThemeProvider theme={theme}>",),
        ),
        UILibrarySpec(
            id="chakra",
            name="Chakra UI",
            frameworks=_REACT_APPS,
            dependencies={"@chakra-ui/react": "^3.17.0", "@emotion/react": "^11.14.0"},
            dev_dependencies={},
            template="ui/chakra",
            post_install=("Wrap your app in <UIProvider> from src/lib/chakra",),
        ),
        UILibrarySpec(
            id="vuetify",
            name="Vuetify",
            frameworks=("vue",),
            dependencies={"vuetify": "^3.8.0", "@mdi/font": "^7.4.0"},
            dev_dependencies={"vite-plugin-vuetify": "^2.1.0"},
            post_install=("Register the Vuetify plugin in src/main",),
        ),
    )
}


async def add_to_stylesheet(path: Path, lines: tuple[str, ...]) -> Path:
    """Insert *lines* right after the Tailwind import (or at the top) of *path*."""
    existing = path.read_text(encoding="utf-8").splitlines() if path.exists() else []
    new = [line for line in lines if line not in existing]
    index = next((i + 1 for i, line in enumerate(existing) if "tailwindcss" in line), 0)
    content = existing[:index] + new + existing[index:]
    return await write_file(path, "\n".join(content) + "\n")


class UILibrarySetup(SetupGenerator):
    def __init__(self, spec: UILibrarySpec) -> None:
        self.spec = spec
        self.id = spec.id
        self.name = spec.name
        self.supported_frameworks = spec.frameworks

    def check_support(self, config: ProjectConfig) -> None:
        super().check_support(config)
        if self.spec.requires_tailwind and config.styling != "tailwind":
            raise SetupError(f"{self.name} requires Tailwind CSS styling")

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        return dict(self.spec.dependencies), dict(self.spec.dev_dependencies)

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        self.check_support(config)
        web = config.web_dir(project_path)
        stylesheet = STYLESHEETS.get(config.framework)
        written: list[Path] = []
        if self.spec.template:
            context = {**config.template_context(), "stylesheet": stylesheet or ""}
            written += await renderer.render_tree(self.spec.template, web, context)
        if self.spec.stylesheet_lines and stylesheet:
            written.append(await add_to_stylesheet(web / stylesheet, self.spec.stylesheet_lines))
        await self.record_packages(config, project_path)
        return written

    def next_steps(self, config: ProjectConfig) -> list[str]:
        return list(self.spec.post_install)


UI_GENERATORS: dict[str, SetupGenerator] = {
    spec_id: UILibrarySetup(spec) for spec_id, spec in UI_LIBRARIES.items()
}

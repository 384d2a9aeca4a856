"""Context files for AI coding assistants.

The assistants named by ``ai_assistant`` and ``ai_context`` each get the same
project summary in the file their tool reads.  Claude additionally gets
``.claude/settings.json`` with command permissions for the chosen stack.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from precast.errors import SetupError
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig
from precast.utils import save_json

from .base import SetupGenerator

# Assistant id -> (output file, heading)
CONTEXT_FILES: dict[str, tuple[str, str]] = {
    "claude": ("CLAUDE.md", "Claude Code Context"),
    "copilot": (".github/copilot-instructions.md", "Copilot Instructions"),
    "gemini": ("GEMINI.md", "Gemini Context"),
    "cursor": (".cursorrules", ""),
}

_RUNNERS = {"npm": "npx", "yarn": "npx", "pnpm": "pnpx", "bun": "bunx"}

_DOC_DOMAINS = {
    "next": ("nextjs.org", "vercel.com"),
    "react": ("react.dev",),
    "vue": ("vuejs.org",),
    "svelte": ("svelte.dev",),
    "angular": ("angular.dev",),
    "tailwind": ("tailwindcss.com",),
    "shadcn": ("ui.shadcn.com",),
    "daisyui": ("daisyui.com",),
    "prisma": ("prisma.io",),
    "drizzle": ("orm.drizzle.team",),
    "auth.js": ("authjs.dev",),
    "better-auth": ("better-auth.com",),
}


def assistants(config: ProjectConfig) -> list[str]:
    """Assistants to write context for, in a stable order."""
    selected = set(config.ai_context)
    if config.ai_assistant and config.ai_assistant != "none":
        selected.add(config.ai_assistant)
    return [name for name in CONTEXT_FILES if name in selected]


def claude_settings(config: ProjectConfig) -> dict[str, Any]:
    pm = config.package_manager
    allow = [f"Bash({pm} {cmd}:*)" for cmd in ("install", "add", "remove", "run", "test")]
    allow.append(f"Bash({_RUNNERS.get(pm, 'npx')}:*)")
    allow += ["Bash(git:*)", "Bash(node:*)", "Bash(ls:*)", "Bash(mkdir:*)", "WebSearch"]
    if config.typescript:
        allow.append("Bash(npx tsc:*)")
    for key in (config.framework, config.styling, config.ui_library, config.orm, config.auth_provider):
        allow += [f"WebFetch(domain:{domain})" for domain in _DOC_DOMAINS.get(key or "", ())]
    if config.orm in ("prisma", "drizzle"):
        tool = "prisma" if config.orm == "prisma" else "drizzle-kit"
        allow.append(f"Bash(npx {tool}:*)")
    return {"permissions": {"allow": allow, "deny": []}}


class AIContextSetup(SetupGenerator):
    id = "ai-context"
    name = "AI context"

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        unknown = sorted(set(config.ai_context) - set(CONTEXT_FILES))
        if unknown:
            raise SetupError(f"Unknown AI assistant: {', '.join(unknown)}")
        root = Path(project_path)
        written: list[Path] = []
        for assistant in assistants(config):
            filename, heading = CONTEXT_FILES[assistant]
            context = {**config.template_context(), "heading": heading}
            written.append(await renderer.render_to_file("ai/context.md.j2", root / filename, context))
            if assistant == "claude":
                written.append(await save_json(claude_settings(config), root / ".claude" / "settings.json"))
        return written

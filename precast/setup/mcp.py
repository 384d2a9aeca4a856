"""Model Context Protocol server configuration for Claude.

Writes ``.mcp.json`` at the project root in the ``{"mcpServers": {...}}``
layout Claude reads.  Servers listed in ``mcp_servers`` are used as given;
each entry of :data:`MCP_SERVERS` also carries the triggers used by
:func:`relevant_servers` to suggest servers for a stack.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from precast.errors import SetupError
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig
from precast.utils import load_json, print_warning, save_json

from .base import SetupGenerator

MCP_FILE = ".mcp.json"


@dataclass(frozen=True)
class MCPServer:
    id: str
    name: str
    description: str
    command: str
    args: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)
    databases: tuple[str, ...] = ()
    deployments: tuple[str, ...] = ()
    always: bool = False

    def entry(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"command": self.command, "args": list(self.args)}
        if self.env:
            entry["env"] = dict(self.env)
        return entry


def _npx(package: str) -> tuple[str, ...]:
    return ("-y", package)


MCP_SERVERS: dict[str, MCPServer] = {
    server.id: server
    for server in (
        MCPServer("filesystem", "Filesystem", "Secure file operations with configurable access",
                  "npx", (*_npx("@modelcontextprotocol/server-filesystem"), "."), always=True),
        MCPServer("memory", "Memory", "Knowledge graph-based persistent memory",
                  "npx", _npx("@modelcontextprotocol/server-memory")),
        MCPServer("sequential-thinking", "Sequential Thinking",
                  "Dynamic problem-solving through thought sequences",
                  "npx", _npx("@modelcontextprotocol/server-sequential-thinking")),
        MCPServer("puppeteer", "Puppeteer", "Browser automation for scraping and testing",
                  "npx", _npx("@modelcontextprotocol/server-puppeteer")),
        MCPServer("brave-search", "Brave Search", "Web search through the Brave Search API",
                  "npx", _npx("@modelcontextprotocol/server-brave-search"),
                  env={"BRAVE_API_KEY": "${BRAVE_API_KEY}"}),
        MCPServer("postgresql", "PostgreSQL", "Read-only access to PostgreSQL databases",
                  "npx", (*_npx("@modelcontextprotocol/server-postgres"), "${DATABASE_URL}"),
                  databases=("postgres",)),
        MCPServer("mongodb", "MongoDB", "Query MongoDB databases and Atlas clusters",
                  "npx", _npx("mongodb-mcp-server@latest"),
                  env={"MDB_MCP_CONNECTION_STRING": "${DATABASE_URL}"}, databases=("mongodb",)),
        MCPServer("github", "GitHub", "Repositories, issues and pull requests",
                  "npx", _npx("@modelcontextprotocol/server-github"),
                  env={"GITHUB_PERSONAL_ACCESS_TOKEN": "${GITHUB_PERSONAL_ACCESS_TOKEN}"}),
        MCPServer("gitlab", "GitLab", "Projects, issues and merge requests",
                  "npx", _npx("@modelcontextprotocol/server-gitlab"),
                  env={"GITLAB_PERSONAL_ACCESS_TOKEN": "${GITLAB_PERSONAL_ACCESS_TOKEN}",
                       "GITLAB_API_URL": "https://gitlab.com/api/v4"}),
        MCPServer("supabase", "Supabase", "Manage Supabase projects",
                  "npx", _npx("@supabase/mcp-server-supabase@latest"),
                  env={"SUPABASE_ACCESS_TOKEN": "${SUPABASE_ACCESS_TOKEN}"}),
        MCPServer("cloudflare", "Cloudflare", "Workers, KV, R2 and D1 bindings",
                  "npx", _npx("@cloudflare/mcp-server-cloudflare"),
                  env={"CLOUDFLARE_API_TOKEN": "${CLOUDFLARE_API_TOKEN}"},
                  deployments=("cloudflare-pages",)),
    )
}


def relevant_servers(config: ProjectConfig) -> list[MCPServer]:
    """Servers whose triggers match *config*."""
    return [
        server
        for server in MCP_SERVERS.values()
        if server.always
        or config.database in server.databases
        or (config.deployment_method or "") in server.deployments
    ]


class MCPSetup(SetupGenerator):
    id = "mcp"
    name = "MCP"

    def selected(self, config: ProjectConfig) -> list[MCPServer]:
        unknown = [sid for sid in config.mcp_servers if sid not in MCP_SERVERS]
        if unknown:
            print_warning(f"Ignoring unknown MCP servers: {', '.join(unknown)}")
        servers = [MCP_SERVERS[sid] for sid in config.mcp_servers if sid in MCP_SERVERS]
        if not servers:
            raise SetupError(f"None of the MCP servers are known: {', '.join(config.mcp_servers)}")
        return servers

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        variables: dict[str, str] = {}
        for server in MCP_SERVERS.values():
            if server.id in config.mcp_servers:
                for value in server.env.values():
                    if value.startswith("${") and value != "${DATABASE_URL}":
                        variables[value[2:-1]] = ""
        return variables

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        path = Path(project_path) / MCP_FILE
        document = load_json(path) if path.exists() else {}
        servers = document.setdefault("mcpServers", {})
        for server in self.selected(config):
            servers[server.id] = server.entry()
        return [await save_json(document, path)]

"""Per-technology setup generators run after the framework scaffold.

Quick usage::

    from precast.setup import UI_GENERATORS

    await UI_GENERATORS["shadcn"].setup(config, project_path, renderer)
"""

from precast.setup.admin_widget import AdminWidgetSetup
from precast.setup.ai_context import AIContextSetup
from precast.setup.api_client import API_CLIENT_GENERATORS
from precast.setup.auth import AUTH_GENERATORS, auth_generator
from precast.setup.base import SetupGenerator, lookup
from precast.setup.color_palette import ColorPaletteSetup
from precast.setup.database import ORM_GENERATORS, database_generator
from precast.setup.deployment import DEPLOYMENT_GENERATORS
from precast.setup.docker import DockerComposeSetup
from precast.setup.env import EnvSetup
from precast.setup.mcp import MCPSetup
from precast.setup.plugins import PluginsSetup
from precast.setup.powerups import PowerUpsSetup
from precast.setup.ui_library import UI_GENERATORS

__all__ = [
    "AIContextSetup",
    "API_CLIENT_GENERATORS",
    "AUTH_GENERATORS",
    "AdminWidgetSetup",
    "ColorPaletteSetup",
    "DEPLOYMENT_GENERATORS",
    "DockerComposeSetup",
    "EnvSetup",
    "MCPSetup",
    "ORM_GENERATORS",
    "PluginsSetup",
    "PowerUpsSetup",
    "SetupGenerator",
    "UI_GENERATORS",
    "auth_generator",
    "database_generator",
    "lookup",
]

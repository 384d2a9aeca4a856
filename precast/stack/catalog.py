"""Static registries of selectable stack options.

Each axis (framework, backend, database, orm, styling, runtime) has an
immutable list of :class:`StackOption`.  ``dependencies`` name options that
must also be selected, ``incompatible`` name options that must not be,
``recommended`` is advisory and feeds the recommender.  Power-ups have their
own richer :class:`PowerUpOption` records.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .models import Axis


class StackOption(BaseModel):
    """One selectable value within a stack axis."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    dependencies: tuple[str, ...] = ()
    incompatible: tuple[str, ...] = ()
    recommended: tuple[str, ...] = ()
    disabled: bool = Field(default=False, description="Hidden from lookups and prompts")


class PowerUpOption(BaseModel):
    """An optional tool bolted onto the generated project."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    frameworks: tuple[str, ...] = ("*",)
    requires: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()
    incompatible: tuple[str, ...] = ()
    requires_docker: bool = False


def _opt(option_id: str, name: str, description: str = "", **kwargs) -> StackOption:
    return StackOption(id=option_id, name=name, description=description, **kwargs)


# ---------------------------------------------------------------------------
# Framework families
# ---------------------------------------------------------------------------

REACT_FAMILY: frozenset[str] = frozenset(
    {"react", "next", "remix", "react-router", "tanstack-router", "tanstack-start", "react-native"}
)
VUE_FAMILY: frozenset[str] = frozenset({"vue", "nuxt"})

# Backends that run inside the framework's own server (no apps/api package).
INTEGRATED_BACKENDS: frozenset[str] = frozenset(
    {"next", "next-api", "nuxt", "remix", "sveltekit", "astro"}
)


# ---------------------------------------------------------------------------
# Axis registries
# ---------------------------------------------------------------------------

FRAMEWORKS: tuple[StackOption, ...] = (
    _opt("react", "React", "A JavaScript library for building user interfaces",
         recommended=("typescript", "tailwind")),
    _opt("vue", "Vue", "The Progressive JavaScript Framework",
         recommended=("typescript", "tailwind")),
    _opt("angular", "Angular", "Platform for building mobile and desktop web applications",
         dependencies=("typescript",), recommended=("scss",)),
    _opt("solid", "Solid", "Simple and performant reactivity for building user interfaces",
         recommended=("typescript", "tailwind"), disabled=True),
    _opt("svelte", "Svelte", "Cybernetically enhanced web apps",
         recommended=("typescript", "tailwind")),
    _opt("tanstack-router", "TanStack Router",
         "Type-safe React router with built-in caching and data fetching",
         dependencies=("react",), recommended=("typescript", "tailwind")),
    _opt("next", "Next.js", "The React Framework for Production",
         dependencies=("react",), recommended=("typescript", "tailwind", "prisma")),
    _opt("react-router", "React Router v7", "Full-stack React framework with modern data loading",
         dependencies=("react",), recommended=("typescript", "tailwind", "prisma")),
    _opt("tanstack-start", "TanStack Start", "Full-stack React framework powered by TanStack Router",
         dependencies=("react",), recommended=("typescript", "tailwind")),
    _opt("nuxt", "Nuxt", "The Intuitive Vue Framework",
         dependencies=("vue",), recommended=("typescript", "tailwind"), disabled=True),
    _opt("astro", "Astro", "Build faster websites with Astro's island architecture",
         recommended=("typescript", "tailwind"), disabled=True),
    _opt("vanilla", "Vanilla", "Plain JavaScript, no framework", disabled=True),
    _opt("react-native", "React Native", "Build native mobile apps using React",
         dependencies=("react",), recommended=("typescript",)),
    _opt("vite", "Vite", "Next Generation Frontend Tooling", recommended=("typescript",)),
    _opt("none", "None", "No frontend framework - backend only or custom setup"),
)

BACKENDS: tuple[StackOption, ...] = (
    _opt("node", "Node.js", "JavaScript runtime with Express.js framework",
         recommended=("typescript",)),
    _opt("express", "Express", "Fast, unopinionated, minimalist web framework for Node.js",
         recommended=("typescript",)),
    _opt("fastify", "Fastify", "Fast and low overhead web framework for Node.js",
         recommended=("typescript",), disabled=True),
    _opt("hono", "Hono", "Ultrafast web framework for the Edges", recommended=("typescript",)),
    _opt("nestjs", "NestJS", "Progressive Node.js framework for scalable server-side applications",
         dependencies=("typescript",), recommended=("typescript",)),
    _opt("koa", "Koa", "Modern, lightweight web framework created by the Express team",
         recommended=("typescript",)),
    _opt("next", "Next.js Server", "Route handlers and server actions inside Next.js",
         dependencies=("next",), recommended=("typescript",)),
    _opt("next-api", "Next.js API Routes", "API routes with Next.js",
         dependencies=("next",), recommended=("typescript",)),
    _opt("remix", "Remix Server", "Loaders and actions inside Remix",
         dependencies=("remix",), disabled=True),
    _opt("nuxt", "Nuxt Server", "Nitro server routes inside Nuxt",
         dependencies=("nuxt",), disabled=True),
    _opt("sveltekit", "SvelteKit", "Server routes inside SvelteKit", dependencies=("svelte",)),
    _opt("astro", "Astro Endpoints", "Server endpoints inside Astro",
         dependencies=("astro",), disabled=True),
    _opt("cloudflare-workers", "Cloudflare Workers",
         "Edge-first serverless functions with global deployment",
         recommended=("typescript", "cloudflare-d1", "drizzle")),
    _opt("fastapi", "FastAPI", "Modern, fast web framework for building APIs with Python",
         dependencies=("python",), recommended=("postgres", "mysql"),
         incompatible=("typescript",)),
    _opt("convex", "Convex", "Backend-as-a-Service with real-time sync",
         dependencies=("typescript",), recommended=("typescript",), disabled=True),
    _opt("none", "None", "Frontend only, no backend"),
)

DATABASES: tuple[StackOption, ...] = (
    _opt("postgres", "PostgreSQL", "The World's Most Advanced Open Source Relational Database",
         recommended=("prisma", "drizzle")),
    _opt("mongodb", "MongoDB", "The most popular NoSQL database",
         recommended=("prisma",), incompatible=("drizzle",)),
    _opt("mysql", "MySQL", "The world's most popular open source database",
         recommended=("prisma", "drizzle")),
    _opt("sqlite", "SQLite", "Embedded, file-based SQL database",
         recommended=("drizzle", "prisma")),
    _opt("supabase", "Supabase", "The open source Firebase alternative",
         dependencies=("postgres",), incompatible=("prisma", "drizzle", "typeorm"), disabled=True),
    _opt("firebase", "Firebase", "Google's mobile and web app development platform",
         incompatible=("prisma", "drizzle", "typeorm"), disabled=True),
    _opt("neon", "Neon", "Serverless Postgres with branching and autoscaling",
         recommended=("prisma", "drizzle"), disabled=True),
    _opt("turso", "Turso", "Edge-hosted distributed SQLite database",
         recommended=("drizzle",), disabled=True),
    _opt("planetscale", "PlanetScale", "Serverless MySQL platform with branching",
         recommended=("prisma", "drizzle"), disabled=True),
    _opt("cloudflare-d1", "Cloudflare D1", "Serverless SQLite database at the edge",
         recommended=("drizzle",), incompatible=("prisma", "typeorm", "mongoose")),
    _opt("duckdb", "DuckDB", "In-process analytical database for static sites and data apps",
         recommended=("typescript",), incompatible=("mongoose",)),
    _opt("none", "None", "No database"),
)

ORMS: tuple[StackOption, ...] = (
    _opt("prisma", "Prisma", "Next-generation Node.js and TypeScript ORM",
         dependencies=("node", "typescript"),
         incompatible=("supabase", "firebase", "cloudflare-d1")),
    _opt("drizzle", "Drizzle", "TypeScript ORM that feels like writing SQL",
         dependencies=("typescript",), incompatible=("mongodb", "supabase", "firebase")),
    _opt("typeorm", "TypeORM", "ORM for TypeScript and JavaScript",
         dependencies=("node",), incompatible=("supabase", "firebase", "cloudflare-d1")),
    _opt("mongoose", "Mongoose", "Elegant MongoDB object modeling for Node.js",
         dependencies=("node",),
         incompatible=("postgres", "mysql", "sqlite", "supabase", "firebase", "cloudflare-d1",
                       "duckdb", "turso", "neon", "planetscale")),
    _opt("none", "None", "No ORM"),
)

STYLING: tuple[StackOption, ...] = (
    _opt("tailwind", "Tailwind CSS", "A utility-first CSS framework"),
    _opt("css", "CSS", "Plain CSS"),
    _opt("scss", "SCSS", "Sass CSS preprocessor"),
    _opt("styled-components", "Styled Components", "CSS-in-JS styling", dependencies=("react",)),
)

RUNTIMES: tuple[StackOption, ...] = (
    _opt("node", "Node.js", "JavaScript runtime built on Chrome's V8 JavaScript engine",
         recommended=("typescript",)),
    _opt("bun", "Bun", "Fast all-in-one JavaScript runtime", recommended=("typescript",)),
    _opt("deno", "Deno", "Secure runtime for JavaScript and TypeScript", recommended=("typescript",)),
)

_ANY = ("*",)

POWERUPS: tuple[PowerUpOption, ...] = (
    PowerUpOption(id="million", name="Million.js", description="Make React faster with a compiler",
                  frameworks=tuple(sorted(REACT_FAMILY - {"react-native"})), requires=("react",)),
    PowerUpOption(id="next-seo", name="Next SEO", description="SEO made easy for Next.js projects",
                  frameworks=("next",), requires=("next",), conflicts=("react-helmet",)),
    PowerUpOption(id="react-helmet", name="React Helmet",
                  description="Document head management for React",
                  frameworks=("react", "remix"), requires=("react",), conflicts=("next-seo",),
                  incompatible=("next",)),
    PowerUpOption(id="react-aria", name="React Aria",
                  description="React Hooks for accessible UI primitives",
                  frameworks=tuple(sorted(REACT_FAMILY - {"react-native"})), requires=("react",),
                  conflicts=("axe-core",)),
    PowerUpOption(id="axe-core", name="Axe DevTools", description="Accessibility testing tools",
                  frameworks=_ANY, conflicts=("react-aria",)),
    PowerUpOption(id="vue-router", name="Vue Router",
                  description="Official router for Vue.js applications",
                  frameworks=("vue",), requires=("vue",)),
    PowerUpOption(id="svelte-routing", name="Svelte Routing",
                  description="Declarative routing for Svelte applications",
                  frameworks=("svelte",), requires=("svelte",)),
    PowerUpOption(id="partytown", name="Partytown",
                  description="Run third-party scripts in a web worker", frameworks=_ANY),
    PowerUpOption(id="next-intl", name="Next-intl", description="Internationalization for Next.js",
                  frameworks=("next",), requires=("next",)),
    PowerUpOption(id="sharp", name="Sharp", description="High performance image processing",
                  frameworks=_ANY, conflicts=("imagemin",)),
    PowerUpOption(id="imagemin", name="Imagemin", description="Minify images seamlessly",
                  frameworks=_ANY, conflicts=("sharp",)),
    PowerUpOption(id="sentry", name="Sentry", description="Error tracking and performance monitoring",
                  frameworks=_ANY),
    PowerUpOption(id="traefik", name="Traefik", description="Reverse proxy and local HTTPS routing",
                  frameworks=_ANY, requires_docker=True),
    PowerUpOption(id="redis", name="Redis", description="In-memory cache and message broker",
                  frameworks=_ANY, requires_docker=True),
    PowerUpOption(id="rabbitmq", name="RabbitMQ", description="Message queue broker",
                  frameworks=_ANY, requires_docker=True),
    PowerUpOption(id="elasticsearch", name="Elasticsearch", description="Search and analytics engine",
                  frameworks=_ANY, requires_docker=True),
    PowerUpOption(id="ngrok", name="ngrok", description="Public URL tunnel to your local app",
                  frameworks=_ANY, requires_docker=True),
    PowerUpOption(id="cloudflare-tunnel", name="Cloudflare Tunnel",
                  description="Expose local services through Cloudflare",
                  frameworks=_ANY, requires_docker=True),
)

DOCKER_POWERUPS: frozenset[str] = frozenset(p.id for p in POWERUPS if p.requires_docker)

DEFAULT_SELECTIONS: dict[str, str] = {
    "framework": "react",
    "backend": "none",
    "database": "none",
    "orm": "none",
    "styling": "tailwind",
    "runtime": "node",
}


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class StackCatalog:
    """Lookup over the static registries.

    The catalog is load-time data; there are no mutation operations.  Unknown
    and disabled ids are a normal outcome and come back as ``None``.
    """

    def __init__(
        self,
        registries: dict[Axis, tuple[StackOption, ...]] | None = None,
        powerups: tuple[PowerUpOption, ...] = POWERUPS,
    ) -> None:
        self._registries = registries or {
            Axis.FRAMEWORK: FRAMEWORKS,
            Axis.BACKEND: BACKENDS,
            Axis.DATABASE: DATABASES,
            Axis.ORM: ORMS,
            Axis.STYLING: STYLING,
            Axis.RUNTIME: RUNTIMES,
        }
        self._index: dict[Axis, dict[str, StackOption]] = {
            axis: {option.id: option for option in options}
            for axis, options in self._registries.items()
        }
        self._powerups = {p.id: p for p in powerups}

    def axes(self) -> list[Axis]:
        return list(self._registries)

    def get_option(
        self, axis: Axis | str, option_id: str | None, include_disabled: bool = False
    ) -> StackOption | None:
        """Look up *option_id* on *axis*; ``None`` when unknown or disabled."""
        try:
            index = self._index[Axis(axis)]
        except (KeyError, ValueError):
            return None
        option = index.get(option_id or "")
        if option is None or (option.disabled and not include_disabled):
            return None
        return option

    def list_options(self, axis: Axis | str, include_disabled: bool = False) -> list[StackOption]:
        """All options on *axis* in declaration order."""
        try:
            options = self._registries[Axis(axis)]
        except (KeyError, ValueError):
            return []
        return [o for o in options if include_disabled or not o.disabled]

    def get_powerup(self, powerup_id: str) -> PowerUpOption | None:
        return self._powerups.get(powerup_id)

    def list_powerups(self) -> list[PowerUpOption]:
        return list(self._powerups.values())

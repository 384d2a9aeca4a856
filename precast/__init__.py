"""create-precast-app -- scaffold full-stack projects from a validated stack.

Quick usage::

    from precast.stack import ConfigValidator, ProjectConfig
    from precast.orchestrator import ProjectOrchestrator

    config = ProjectConfig(name="my-app", framework="react")
    result = ConfigValidator().validate(config)
    if result.valid:
        await ProjectOrchestrator().create_project(config)
"""

__version__ = "0.3.0"

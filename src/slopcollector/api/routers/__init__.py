"""API routers."""

from slopcollector.api.routers import advice, code_patterns, diagram, projects, snapshots

__all__ = ["advice", "code_patterns", "diagram", "projects", "snapshots"]

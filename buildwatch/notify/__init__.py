"""Notification routing and message rendering."""

from __future__ import annotations

from .formatter import (
    BuildType,
    NotificationFormatter,
    build_type_label,
    render_commit_details,
)
from .routes import (
    BuildFailureRoute,
    DeploymentRoute,
    NotificationRoutes,
    RoutesValidationError,
    default_routes,
    load_routes,
    validate_routes,
)

__all__ = [
    "BuildFailureRoute",
    "BuildType",
    "DeploymentRoute",
    "NotificationFormatter",
    "NotificationRoutes",
    "RoutesValidationError",
    "build_type_label",
    "default_routes",
    "load_routes",
    "render_commit_details",
    "validate_routes",
]

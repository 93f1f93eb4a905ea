"""Routers package."""

from . import (
    health,
    auth,
    workspaces,
    folders,
    videos,
    notifications,
)

"""Role use cases."""

from app.application.use_cases.roles.grant_role import RoleService

__all__ = ["RoleService"]

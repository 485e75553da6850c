"""
Meta functionality for the database.
"""

from .registry import Person, Project, ProjectMembership, ProjectRole, RoleAssignment
from .urn_cache import GroupIdConnection

ALL_TABLES = (
    GroupIdConnection,
    Person,
    Project,
    ProjectMembership,
    ProjectRole,
    RoleAssignment,
)

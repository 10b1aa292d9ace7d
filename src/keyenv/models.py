"""Pydantic models for KeyEnv API resources.

Response models mirror the records returned by the service and keep any extra
fields the service sends. Input models describe request items and serialize to
the snake_case wire names.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class EnvironmentRole(str, Enum):
    """Role a user holds on an environment."""
    NONE = "none"
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


class KeyEnvModel(BaseModel):
    """Base for records returned by the service."""
    model_config = ConfigDict(extra='allow')


# Identity
class User(KeyEnvModel):
    """A user or service-token principal."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    clerk_id: Optional[str] = None
    avatar_url: Optional[str] = None
    auth_type: Optional[str] = None  # "user" or "service_token"
    team_id: Optional[str] = None
    project_ids: Optional[List[str]] = None
    scopes: Optional[List[str]] = None
    created_at: Optional[str] = None

    @property
    def is_service_token(self) -> bool:
        return self.auth_type == 'service_token'


# Projects and environments
class Environment(KeyEnvModel):
    id: str
    project_id: Optional[str] = None
    name: str
    inherits_from: Optional[str] = None
    created_at: Optional[str] = None


class Project(KeyEnvModel):
    id: str
    team_id: Optional[str] = None
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None


class ProjectWithEnvironments(Project):
    environments: List[Environment] = []


# Secrets
class Secret(KeyEnvModel):
    """Secret metadata. Never carries a value."""
    id: str
    environment_id: Optional[str] = None
    key: str
    type: Optional[str] = None
    description: Optional[str] = None
    version: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SecretWithValue(Secret):
    """Secret with its decrypted value.

    ``inherited_from`` names the environment the value was resolved from when the
    requested environment has no override of its own.
    """
    value: str
    inherited_from: Optional[str] = None


class SecretHistory(KeyEnvModel):
    """A previous version of a secret value."""
    id: str
    secret_id: Optional[str] = None
    value: str
    version: int
    changed_by: Optional[str] = None
    changed_at: Optional[str] = None


class BulkSecretItem(BaseModel):
    """One item of a bulk import request."""
    key: str
    value: str
    description: Optional[str] = None


class BulkImportResult(KeyEnvModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0


# Permissions
class EnvironmentPermission(KeyEnvModel):
    id: str
    environment_id: Optional[str] = None
    user_id: str
    role: EnvironmentRole
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    granted_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MyPermission(KeyEnvModel):
    """The calling user's effective role on one environment."""
    environment_id: str
    environment_name: str
    role: EnvironmentRole
    can_read: bool = False
    can_write: bool = False
    can_admin: bool = False


class MyPermissionsResponse(KeyEnvModel):
    permissions: List[MyPermission] = []
    is_team_admin: bool = False

    def role_for(self, environment_name: str) -> EnvironmentRole:
        """Get the effective role for an environment.

        Team admins hold admin-equivalent access everywhere, whether or not an
        explicit per-environment row exists.
        """
        if self.is_team_admin:
            return EnvironmentRole.ADMIN
        for permission in self.permissions:
            if permission.environment_name == environment_name:
                return permission.role
        return EnvironmentRole.NONE


class ProjectDefault(KeyEnvModel):
    """Default role applied when a user has no explicit permission on an environment."""
    id: str
    project_id: Optional[str] = None
    environment_name: str
    default_role: EnvironmentRole
    created_at: Optional[str] = None


class PermissionInput(BaseModel):
    """One item of a bulk permission update.

    Accepts ``userId`` as well as ``user_id``; always serializes as ``user_id``.
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias='userId')
    role: EnvironmentRole


class ProjectDefaultInput(BaseModel):
    """One item of a project defaults update.

    Accepts ``environmentName``/``defaultRole`` as well as the snake_case names;
    always serializes as ``environment_name``/``default_role``.
    """
    model_config = ConfigDict(populate_by_name=True)

    environment_name: str = Field(alias='environmentName')
    default_role: EnvironmentRole = Field(alias='defaultRole')

"""
KeyEnv Python client.

Typed access to the KeyEnv secrets-management API: users, projects,
environments, versioned secrets and per-environment permissions.
"""

__version__ = '0.1.0'

from .client import KeyEnv
from .cache import ExportCache
from .env_writer import EnvironmentWriter, ProcessEnvironmentWriter, DictEnvironmentWriter
from .exceptions import KeyEnvError, KeyEnvConfigError
from .models import (
    User,
    Project,
    ProjectWithEnvironments,
    Environment,
    Secret,
    SecretWithValue,
    SecretHistory,
    BulkSecretItem,
    BulkImportResult,
    EnvironmentRole,
    EnvironmentPermission,
    MyPermission,
    MyPermissionsResponse,
    ProjectDefault,
    PermissionInput,
    ProjectDefaultInput,
)

__all__ = [
    'KeyEnv',
    'KeyEnvError',
    'KeyEnvConfigError',
    'ExportCache',
    'EnvironmentWriter',
    'ProcessEnvironmentWriter',
    'DictEnvironmentWriter',
    'User',
    'Project',
    'ProjectWithEnvironments',
    'Environment',
    'Secret',
    'SecretWithValue',
    'SecretHistory',
    'BulkSecretItem',
    'BulkImportResult',
    'EnvironmentRole',
    'EnvironmentPermission',
    'MyPermission',
    'MyPermissionsResponse',
    'ProjectDefault',
    'PermissionInput',
    'ProjectDefaultInput',
]

"""
KeyEnv API client.

Example:
    from keyenv import KeyEnv

    client = KeyEnv(token=os.environ['KEYENV_TOKEN'])

    # Export all secrets for an environment
    secrets = client.export_secrets('project-id', 'production')
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

from .api_client import APIClient, RemoteAPIClient
from .cache import ExportCache
from .config.settings import resolve_settings
from .env_writer import EnvironmentWriter, ProcessEnvironmentWriter
from .envfile import render_env_file
from .exceptions import KeyEnvError
from .models import (
    BulkImportResult,
    BulkSecretItem,
    Environment,
    EnvironmentPermission,
    EnvironmentRole,
    MyPermissionsResponse,
    PermissionInput,
    Project,
    ProjectDefault,
    ProjectDefaultInput,
    ProjectWithEnvironments,
    Secret,
    SecretHistory,
    SecretWithValue,
    User,
)

logger = logging.getLogger(__name__)

API_PREFIX = '/api/v1'

# Envelope keys are fixed per endpoint; there is no single rule across the API.
DATA_KEY = 'data'
PROJECTS_KEY = 'projects'
ENVIRONMENTS_KEY = 'environments'
SECRETS_KEY = 'secrets'
SECRET_KEY = 'secret'
HISTORY_KEY = 'history'


def _segment(value: str) -> str:
    """Quote a value for use as a single path segment."""
    return quote(str(value), safe='')


def _compact(body: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None-valued fields from a request body."""
    return {k: v for k, v in body.items() if v is not None}


def _unwrap(response: Any, key: str) -> Any:
    """Extract the payload stored under an endpoint's envelope key."""
    if not isinstance(response, dict) or key not in response:
        raise KeyEnvError(f"Unexpected response shape: missing '{key}'", 0)
    return response[key]


class KeyEnv:
    """KeyEnv API client for managing secrets.

    Each instance owns its own export cache; two instances never share cached
    results, even with identical credentials.
    """

    def __init__(self, token: str, timeout: Optional[int] = None, base_url: Optional[str] = None,
                 cache_ttl: Optional[float] = None, api_client: Optional[APIClient] = None,
                 env_writer: Optional[EnvironmentWriter] = None, cache: Optional[ExportCache] = None):
        """Initialize the client.

        Args:
            token: Service token or user token (required)
            timeout: Connect and per-read timeout in milliseconds (default: 30000);
                not a deadline for the whole request
            base_url: API base URL (default: KEYENV_API_URL or https://api.keyenv.dev)
            cache_ttl: Export cache TTL in seconds (default: KEYENV_CACHE_TTL or 0 = disabled)
            api_client: Transport to use instead of the default requests-based client
            env_writer: Destination for load_env (default: os.environ)
            cache: Pre-built export cache (overrides cache_ttl)

        Raises:
            KeyEnvConfigError: If the token is missing or the timeout is invalid
        """
        self.settings = resolve_settings(token, timeout=timeout, base_url=base_url, cache_ttl=cache_ttl)
        self._api = api_client or RemoteAPIClient(
            self.settings.base_url, self.settings.token, self.settings.timeout
        )
        self._env_writer = env_writer or ProcessEnvironmentWriter()
        self._cache = cache if cache is not None else ExportCache(ttl=self.settings.cache_ttl)

    # Paths

    @staticmethod
    def _project_path(project_id: str) -> str:
        return f"{API_PREFIX}/projects/{_segment(project_id)}"

    def _environment_path(self, project_id: str, environment: str) -> str:
        return f"{self._project_path(project_id)}/environments/{_segment(environment)}"

    def _secrets_path(self, project_id: str, environment: str) -> str:
        return f"{self._environment_path(project_id, environment)}/secrets"

    def _secret_path(self, project_id: str, environment: str, key: str) -> str:
        return f"{self._secrets_path(project_id, environment)}/{_segment(key)}"

    def _permissions_path(self, project_id: str, environment: str) -> str:
        return f"{self._environment_path(project_id, environment)}/permissions"

    # Users

    def get_current_user(self) -> User:
        """Get the current user or service token info."""
        response = self._api.get(f"{API_PREFIX}/users/me")
        return User.model_validate(_unwrap(response, DATA_KEY))

    def validate_token(self) -> User:
        """Validate the token and return user info."""
        return self.get_current_user()

    # Projects

    def list_projects(self) -> List[Project]:
        """List all accessible projects."""
        response = self._api.get(f"{API_PREFIX}/projects")
        return [Project.model_validate(p) for p in _unwrap(response, PROJECTS_KEY)]

    def get_project(self, project_id: str) -> ProjectWithEnvironments:
        """Get a project, including its environments."""
        response = self._api.get(self._project_path(project_id))
        return ProjectWithEnvironments.model_validate(_unwrap(response, DATA_KEY))

    def create_project(self, team_id: str, name: str) -> Project:
        response = self._api.post(f"{API_PREFIX}/projects", {'team_id': team_id, 'name': name})
        return Project.model_validate(_unwrap(response, DATA_KEY))

    def delete_project(self, project_id: str) -> None:
        self._api.delete(self._project_path(project_id))
        self._cache.invalidate_project(project_id)

    # Environments

    def list_environments(self, project_id: str) -> List[Environment]:
        response = self._api.get(f"{self._project_path(project_id)}/environments")
        return [Environment.model_validate(e) for e in _unwrap(response, ENVIRONMENTS_KEY)]

    def create_environment(self, project_id: str, name: str,
                           inherits_from: Optional[str] = None) -> Environment:
        """Create an environment.

        Args:
            project_id: Project ID or slug
            name: Environment name
            inherits_from: Name of an environment whose values this one inherits
        """
        response = self._api.post(
            f"{self._project_path(project_id)}/environments",
            _compact({'name': name, 'inherits_from': inherits_from}),
        )
        return Environment.model_validate(_unwrap(response, DATA_KEY))

    def delete_environment(self, project_id: str, environment: str) -> None:
        self._api.delete(self._environment_path(project_id, environment))
        self._cache.invalidate(project_id, environment)

    # Secrets

    def list_secrets(self, project_id: str, environment: str) -> List[Secret]:
        """List secrets in an environment (keys and metadata only)."""
        response = self._api.get(self._secrets_path(project_id, environment))
        return [Secret.model_validate(s) for s in _unwrap(response, SECRETS_KEY)]

    def export_secrets(self, project_id: str, environment: str) -> List[SecretWithValue]:
        """Export all secrets with their decrypted values.

        Served from the export cache when caching is enabled and a fresh entry
        exists for the (project, environment) pair. A result fetched while the
        pair was being invalidated is returned but not cached.

        Example:
            for secret in client.export_secrets('project-id', 'production'):
                print(secret.key)
        """
        cached = self._cache.get(project_id, environment)
        if cached is not None:
            return cached

        # A mutation that lands while this fetch is in flight makes the result stale
        generation = self._cache.generation(project_id, environment)
        response = self._api.get(f"{self._secrets_path(project_id, environment)}/export")
        secrets = [SecretWithValue.model_validate(s) for s in _unwrap(response, SECRETS_KEY)]
        self._cache.set(project_id, environment, secrets, generation)
        return secrets

    def export_secrets_as_dict(self, project_id: str, environment: str) -> Dict[str, str]:
        """Export secrets as a key-value dict.

        If the same key appears more than once, the last occurrence wins.

        Example:
            env = client.export_secrets_as_dict('project-id', 'production')
            # {'DATABASE_URL': '...', 'API_KEY': '...'}
        """
        return {s.key: s.value for s in self.export_secrets(project_id, environment)}

    def get_secret(self, project_id: str, environment: str, key: str) -> SecretWithValue:
        """Get a single secret with its value."""
        response = self._api.get(self._secret_path(project_id, environment, key))
        return SecretWithValue.model_validate(_unwrap(response, SECRET_KEY))

    def create_secret(self, project_id: str, environment: str, key: str, value: str,
                      description: Optional[str] = None) -> Secret:
        response = self._api.post(
            self._secrets_path(project_id, environment),
            _compact({'key': key, 'value': value, 'description': description}),
        )
        self._cache.invalidate(project_id, environment)
        return Secret.model_validate(_unwrap(response, SECRET_KEY))

    def update_secret(self, project_id: str, environment: str, key: str, value: str,
                      description: Optional[str] = None) -> Secret:
        """Update a secret's value. The service bumps its version by one."""
        response = self._api.put(
            self._secret_path(project_id, environment, key),
            _compact({'value': value, 'description': description}),
        )
        self._cache.invalidate(project_id, environment)
        return Secret.model_validate(_unwrap(response, SECRET_KEY))

    def set_secret(self, project_id: str, environment: str, key: str, value: str,
                   description: Optional[str] = None) -> Secret:
        """Set a secret (update, or create if it does not exist).

        Tries the update first. Only a 404 from the update leads to a create;
        any other error is raised as-is.
        """
        updated = self._update_unless_missing(project_id, environment, key, value, description)
        if updated is not None:
            return updated

        logger.debug(f"Secret {key} not found in {project_id}/{environment}, creating it")
        return self.create_secret(project_id, environment, key, value, description)

    def _update_unless_missing(self, project_id: str, environment: str, key: str, value: str,
                               description: Optional[str]) -> Optional[Secret]:
        """Update a secret, returning None when the service reports it missing."""
        try:
            return self.update_secret(project_id, environment, key, value, description)
        except KeyEnvError as e:
            if e.is_not_found:
                return None
            raise

    def delete_secret(self, project_id: str, environment: str, key: str) -> None:
        self._api.delete(self._secret_path(project_id, environment, key))
        self._cache.invalidate(project_id, environment)

    def get_secret_history(self, project_id: str, environment: str, key: str) -> List[SecretHistory]:
        """Get previous versions of a secret (the current version is not included)."""
        response = self._api.get(f"{self._secret_path(project_id, environment, key)}/history")
        return [SecretHistory.model_validate(h) for h in _unwrap(response, HISTORY_KEY)]

    def bulk_import(self, project_id: str, environment: str,
                    secrets: Iterable[Union[BulkSecretItem, Mapping[str, Any]]],
                    overwrite: bool = False) -> BulkImportResult:
        """Bulk import secrets in one request.

        The service decides per item whether it is created, updated or skipped;
        existing keys are only updated when ``overwrite`` is true.

        Example:
            client.bulk_import('project-id', 'development', [
                {'key': 'DATABASE_URL', 'value': 'postgres://...'},
                {'key': 'API_KEY', 'value': 'sk_...'},
            ], overwrite=True)
        """
        items = [BulkSecretItem.model_validate(item).model_dump(exclude_none=True) for item in secrets]
        response = self._api.post(
            f"{self._secrets_path(project_id, environment)}/bulk",
            {'secrets': items, 'overwrite': overwrite},
        )
        self._cache.invalidate(project_id, environment)
        return BulkImportResult.model_validate(response)

    def load_env(self, project_id: str, environment: str) -> int:
        """Load secrets into the environment writer (os.environ by default).

        Existing variables with the same name are overwritten.

        Returns:
            Number of secrets loaded
        """
        secrets = self.export_secrets(project_id, environment)
        for secret in secrets:
            self._env_writer.set(secret.key, secret.value)
        logger.debug(f"Loaded {len(secrets)} secrets from {project_id}/{environment}")
        return len(secrets)

    def generate_env_file(self, project_id: str, environment: str) -> str:
        """Generate .env file content from secrets."""
        return render_env_file(environment, self.export_secrets(project_id, environment))

    # Permissions

    def list_permissions(self, project_id: str, environment: str) -> List[EnvironmentPermission]:
        response = self._api.get(self._permissions_path(project_id, environment))
        return [EnvironmentPermission.model_validate(p) for p in _unwrap(response, DATA_KEY)]

    def set_permission(self, project_id: str, environment: str, user_id: str,
                       role: Union[EnvironmentRole, str]) -> EnvironmentPermission:
        """Set a user's role on an environment.

        Raises:
            ValueError: If the role is not one of none, read, write, admin
        """
        role = EnvironmentRole(role)
        response = self._api.put(
            f"{self._permissions_path(project_id, environment)}/{_segment(user_id)}",
            {'role': role.value},
        )
        return EnvironmentPermission.model_validate(_unwrap(response, DATA_KEY))

    def delete_permission(self, project_id: str, environment: str, user_id: str) -> None:
        self._api.delete(f"{self._permissions_path(project_id, environment)}/{_segment(user_id)}")

    def bulk_set_permissions(self, project_id: str, environment: str,
                             permissions: Iterable[Union[PermissionInput, Mapping[str, Any]]]
                             ) -> List[EnvironmentPermission]:
        """Set several users' roles on an environment in one request.

        Items may use ``userId`` or ``user_id``; the request always carries ``user_id``.

        Raises:
            ValueError: If an item is malformed or has an unknown role
        """
        items = [PermissionInput.model_validate(p).model_dump(mode='json') for p in permissions]
        response = self._api.put(self._permissions_path(project_id, environment), {'permissions': items})
        return [EnvironmentPermission.model_validate(p) for p in _unwrap(response, DATA_KEY)]

    def get_my_permissions(self, project_id: str) -> MyPermissionsResponse:
        """Get the calling user's effective permissions for every environment in a project."""
        response = self._api.get(f"{self._project_path(project_id)}/my-permissions")
        return MyPermissionsResponse.model_validate(response)

    def get_project_defaults(self, project_id: str) -> List[ProjectDefault]:
        response = self._api.get(f"{self._project_path(project_id)}/permissions/defaults")
        return [ProjectDefault.model_validate(d) for d in _unwrap(response, DATA_KEY)]

    def set_project_defaults(self, project_id: str,
                             defaults: Iterable[Union[ProjectDefaultInput, Mapping[str, Any]]]
                             ) -> List[ProjectDefault]:
        """Replace the default roles for a project's environments.

        Items may use ``environmentName``/``defaultRole`` or the snake_case names;
        the request always carries ``environment_name``/``default_role``.
        """
        items = [ProjectDefaultInput.model_validate(d).model_dump(mode='json') for d in defaults]
        response = self._api.put(
            f"{self._project_path(project_id)}/permissions/defaults",
            {'defaults': items},
        )
        return [ProjectDefault.model_validate(d) for d in _unwrap(response, DATA_KEY)]

    # Cache

    def clear_cache(self, project_id: Optional[str] = None, environment: Optional[str] = None) -> None:
        """Clear cached exports.

        With no arguments clears everything; with a project clears that project;
        with a project and environment clears that one pair.
        """
        if project_id is None:
            self._cache.clear()
        elif environment is None:
            self._cache.invalidate_project(project_id)
        else:
            self._cache.invalidate(project_id, environment)

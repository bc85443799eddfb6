"""Session: the explicit context threaded through catalog load and every call."""

from typing import Any, Dict, List, Optional

import requests

from cloudstack_client.api.async_jobs import AsyncJobResolver
from cloudstack_client.api.catalog import load_catalog
from cloudstack_client.api.console import build_console_url
from cloudstack_client.api.executor import ApiExecutor
from cloudstack_client.api.registry import CommandRegistry
from cloudstack_client.config.settings import settings as default_settings
from cloudstack_client.database.profile_store_interface import BaseProfileStore
from cloudstack_client.exceptions import ConfigurationError, ProfileNotFoundError
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.models.command import CommandDescriptor, CommandTable
from cloudstack_client.models.profile import ConnectionProfile
from cloudstack_client.models.results import DispatchResult

logger = setup_logging(__name__)


class CloudStackSession:
    """
    A connection profile plus the command catalog loaded for it.

    Usage:
        session = CloudStackSession.open("prod", JSONProfileStore())
        session.load_catalog()
        result = session.call("listZones", {"available": True})
    """

    def __init__(
        self,
        profile: ConnectionProfile,
        settings=None,
        http_session: Optional[requests.Session] = None,
        resolver_factory=AsyncJobResolver,
    ) -> None:
        self.profile = profile
        self.settings = settings or default_settings
        self.executor = ApiExecutor(profile, session=http_session, settings=self.settings)
        self._resolver_factory = resolver_factory
        self._registry: Optional[CommandRegistry] = None

    @classmethod
    def open(cls, profile_name: Optional[str], store: BaseProfileStore, **kwargs) -> "CloudStackSession":
        """
        Resolve a profile through the store and create a session for it.

        :raises ConfigurationError: If no profile can be resolved.
        """
        settings = kwargs.get("settings") or default_settings
        name = profile_name or settings.get("DEFAULT_PROFILE")
        if not name:
            raise ConfigurationError("No connection profile given and no DEFAULT_PROFILE configured")
        try:
            profile = store.get_profile(name)
        except ProfileNotFoundError as e:
            raise ConfigurationError(e.message, error_code=e.error_code, details=e.details) from e
        return cls(profile, **kwargs)

    def load_catalog(self) -> CommandTable:
        """Run listApis and build the registry. Raises ``CatalogError`` on failure."""
        table = load_catalog(self.executor)
        self._registry = CommandRegistry(table, self.executor, resolver_factory=self._resolver_factory)
        return table

    @property
    def registry(self) -> CommandRegistry:
        if self._registry is None:
            self.load_catalog()
        return self._registry

    def commands(self) -> List[CommandDescriptor]:
        table = self.registry.table
        return [table[name] for name in sorted(table)]

    def describe(self, name: str) -> CommandDescriptor:
        return self.registry.resolve(name)

    def call(
        self,
        name: str,
        args: Optional[Dict[str, Any]] = None,
        wait: Optional[int] = None,
        no_wait: bool = False,
    ) -> DispatchResult:
        """Dispatch one command. See ``CommandRegistry.dispatch``."""
        return self.registry.dispatch(name, args, wait=wait, no_wait=no_wait)

    def console_url(self, vm_id: str) -> str:
        return build_console_url(self.profile, vm_id)

    def close(self) -> None:
        self.executor.close()

    def __enter__(self) -> "CloudStackSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

"""Credentials registry -- registration, discovery, and dispatch of credential types.

The :class:`CredentialsRegistry` maps credential type names (e.g.
``"gitlab_personal_access_token"``) to
:class:`~patcred.credentials.base.CredentialsDescriptor` instances. It
builds credentials and runs form field checks on behalf of whatever front
end is collecting the values.

Registration is an explicit call to :meth:`CredentialsRegistry.register`.
Third-party packages can also ship descriptors as entry points in the
``patcred.credentials`` group, picked up by
:meth:`CredentialsRegistry.discover`::

    [project.entry-points."patcred.credentials"]
    my-token = "my_package.credentials:MyTokenDescriptor"

For most use cases, call :func:`create_default_registry` to get a registry
pre-loaded with the built-in credential types.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Any, Optional

from patcred.credentials.base import CredentialsDescriptor, StandardCredentials
from patcred.exceptions import PluginError
from patcred.models import GlobalConfig
from patcred.secret import SecretCipher
from patcred.validation import FormValidation

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "patcred.credentials"
"""The entry-point group name used for credential type discovery."""


class CredentialsRegistry:
    """Registry and dispatcher for credential type descriptors.

    Example::

        registry = CredentialsRegistry()
        registry.register(PersonalAccessTokenDescriptor())
        result = registry.check_field("gitlab_personal_access_token", "token", value)
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, CredentialsDescriptor] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, descriptor: CredentialsDescriptor) -> None:
        """Register a descriptor, keyed by its ``type_name``.

        Args:
            descriptor: The descriptor instance to register.

        Raises:
            PluginError: If another descriptor already uses the same name.
        """
        name = descriptor.type_name
        if name in self._descriptors:
            raise PluginError(f"Credential type '{name}' is already registered")
        self._descriptors[name] = descriptor
        logger.debug("Registered credential type '%s'", name)

    def discover(self, config: GlobalConfig) -> list[str]:
        """Register descriptors advertised through Python entry points.

        When ``config.plugins.enabled`` is non-empty only those entry points
        are loaded; otherwise every entry point not listed in
        ``config.plugins.disabled`` is loaded.

        Args:
            config: The effective global configuration.

        Returns:
            The type names that were registered. Entry points that fail to
            load are logged as warnings and skipped.
        """
        loaded: list[str] = []
        enabled_set = set(config.plugins.enabled)
        disabled_set = set(config.plugins.disabled)

        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            name = ep.name
            if enabled_set and name not in enabled_set:
                logger.debug("Credential type '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Credential type '%s' is disabled, skipping", name)
                continue

            try:
                descriptor_cls = ep.load()
                descriptor: CredentialsDescriptor = descriptor_cls()
                self.register(descriptor)
                loaded.append(descriptor.type_name)
            except Exception as exc:
                logger.warning("Failed to load credential type '%s': %s", name, exc)

        return loaded

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_descriptor(self, type_name: str) -> CredentialsDescriptor:
        """Retrieve a registered descriptor by type name.

        Raises:
            PluginError: If no descriptor is registered for *type_name*.
        """
        descriptor = self._descriptors.get(type_name)
        if descriptor is None:
            available = ", ".join(sorted(self._descriptors)) or "(none)"
            raise PluginError(
                f"No credential type registered as '{type_name}'. "
                f"Available types: {available}"
            )
        return descriptor

    def list_descriptors(self) -> list[dict[str, str]]:
        """List registered credential types sorted by type name.

        Returns:
            A list of dicts with ``"type"`` and ``"display_name"`` keys.
        """
        return [
            {"type": name, "display_name": self._descriptors[name].display_name}
            for name in sorted(self._descriptors)
        ]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def check_field(
        self, type_name: str, field: str, value: Optional[str]
    ) -> FormValidation:
        """Run the form check for *field* of credential type *type_name*."""
        return self.get_descriptor(type_name).check_field(field, value)

    def create(self, type_name: str, **fields: Any) -> StandardCredentials:
        """Build a credential of type *type_name* from form field values."""
        return self.get_descriptor(type_name).new_instance(**fields)


def create_default_registry(
    cipher: Optional[SecretCipher] = None,
) -> CredentialsRegistry:
    """Create a :class:`CredentialsRegistry` with the built-in credential types.

    Registers ``gitlab_personal_access_token``.

    Args:
        cipher: Cipher handed to the built-in descriptors.

    Returns:
        A fully initialised :class:`CredentialsRegistry`.
    """
    from patcred.credentials.token import PersonalAccessTokenDescriptor

    registry = CredentialsRegistry()
    registry.register(PersonalAccessTokenDescriptor(cipher))
    return registry

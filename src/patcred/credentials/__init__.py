"""Credential types for patcred.

The main entry points are:

- :class:`PersonalAccessTokenImpl` -- the GitLab personal access token
  credential.
- :class:`PersonalAccessTokenDescriptor` -- its descriptor, which checks
  the ``token`` form field.
- :class:`CredentialsRegistry` -- maps type names to descriptors.
- :func:`create_default_registry` -- a registry with the built-in types.

Typical usage::

    from patcred.credentials import create_default_registry

    registry = create_default_registry()
    result = registry.check_field("gitlab_personal_access_token", "token", value)
    if not result.is_blocking:
        cred = registry.create("gitlab_personal_access_token", token=value)
"""

from patcred.credentials.base import CredentialsDescriptor, StandardCredentials
from patcred.credentials.registry import CredentialsRegistry, create_default_registry
from patcred.credentials.token import (
    PERSONAL_ACCESS_TOKEN_TYPE,
    PersonalAccessToken,
    PersonalAccessTokenDescriptor,
    PersonalAccessTokenImpl,
)

__all__ = [
    "CredentialsDescriptor",
    "CredentialsRegistry",
    "PERSONAL_ACCESS_TOKEN_TYPE",
    "PersonalAccessToken",
    "PersonalAccessTokenDescriptor",
    "PersonalAccessTokenImpl",
    "StandardCredentials",
    "create_default_registry",
]

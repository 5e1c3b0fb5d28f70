"""Canonical Pydantic models shared across all patcred modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`SecretsConfig`, :class:`PluginsConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

**Credential models** -- the scope enumeration and the serialised form of a
credential:
    :class:`CredentialsScope` and :class:`CredentialRecord`.

All models use Pydantic v2. :class:`CredentialRecord` is the only shape in
which a credential leaves the process, and it only ever carries the
encrypted form of the token.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Credentials ---


class CredentialsScope(str, enum.Enum):
    """Visibility of a credential within its owning store.

    ``GLOBAL`` credentials are visible to everything the store serves,
    ``SYSTEM`` credentials only to the host itself, and ``USER``
    credentials only to the user that owns them.
    """

    GLOBAL = "GLOBAL"
    SYSTEM = "SYSTEM"
    USER = "USER"


class CredentialRecord(BaseModel):
    """Serialised form of a credential, safe to write to disk or print.

    Produced by :meth:`~patcred.credentials.token.PersonalAccessTokenImpl.to_record`
    and consumed by
    :meth:`~patcred.credentials.token.PersonalAccessTokenImpl.from_record`.
    The ``token`` field holds an encrypted secret blob, never plaintext.

    Example::

        CredentialRecord(
            type="gitlab_personal_access_token",
            scope=CredentialsScope.GLOBAL,
            id="ci-bot",
            description="CI bot token",
            token="{gAAAAAB...}",
        )
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(description="Credential type name, e.g. gitlab_personal_access_token")
    scope: Optional[CredentialsScope] = Field(
        default=None, description="Visibility scope of the credential"
    )
    id: str = Field(description="Unique identifier within the owning store")
    description: str = Field(default="", description="Free-text label")
    token: str = Field(description="Encrypted secret blob")


# --- Configuration ---


class SecretsConfig(BaseModel):
    """Master key settings stored in :class:`GlobalConfig`.

    When ``key_source`` is unset, a key is generated on first use and kept
    in ``<data_dir>/master.key``.
    """

    key_source: Optional[str] = Field(
        default=None,
        description="Master key source: env:VAR or file:/path (default: generated key file)",
    )


class PluginsConfig(BaseModel):
    """Explicit credential type allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/patcred/config.json``.

    Loaded and saved by :func:`~patcred.config.load_global_config` and
    :func:`~patcred.config.save_global_config`. See
    :func:`~patcred.config.resolve_config` for the precedence chain.
    """

    secrets: SecretsConfig = Field(default_factory=SecretsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

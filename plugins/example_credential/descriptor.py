"""Example third-party credential type: a GitLab deploy token.

Register it from another package's ``pyproject.toml``::

    [project.entry-points."patcred.credentials"]
    deploy-token = "example_credential.descriptor:DeployTokenDescriptor"
"""

from __future__ import annotations

from typing import Optional

from patcred.credentials.base import CredentialsDescriptor, StandardCredentials
from patcred.secret import Secret, parse_secret
from patcred.validation import FormValidation


class DeployToken(StandardCredentials):
    """A deploy token: a username plus an opaque token of any length."""

    type_name = "gitlab_deploy_token"

    def __init__(
        self,
        scope=None,
        id: Optional[str] = None,
        description: Optional[str] = None,
        username: str = "",
        token: str = "",
    ) -> None:
        super().__init__(scope, id, description)
        self._username = username
        self._token = parse_secret(token) or Secret("")

    @property
    def username(self) -> str:
        return self._username

    def get_token(self) -> Secret:
        return self._token


class DeployTokenDescriptor(CredentialsDescriptor):
    """Descriptor for :class:`DeployToken`."""

    @property
    def type_name(self) -> str:
        return DeployToken.type_name

    @property
    def display_name(self) -> str:
        return "GitLab Deploy Token"

    def new_instance(self, **fields) -> DeployToken:
        return DeployToken(**fields)

    def do_check_username(self, value: Optional[str]) -> FormValidation:
        if not value:
            return FormValidation.error("username required")
        return FormValidation.ok()

    def do_check_token(self, value: Optional[str]) -> FormValidation:
        if not value:
            return FormValidation.error("token required")
        return FormValidation.ok()

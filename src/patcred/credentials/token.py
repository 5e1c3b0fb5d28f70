"""GitLab personal access token credentials.

This module provides the ``gitlab_personal_access_token`` credential type:

- :class:`PersonalAccessToken` -- the interface callers program against;
  :meth:`~PersonalAccessToken.get_token` hands out the opaque
  :class:`~patcred.secret.Secret` used for outbound API calls.
- :class:`PersonalAccessTokenImpl` -- the default implementation holding
  the token in memory.
- :class:`PersonalAccessTokenDescriptor` -- registers the type and checks
  the ``token`` form field.

The token is wrapped at construction and is never validated there;
validation is a separate step run by the form (see
:func:`~patcred.validation.validate_token`).

See Also:
    :class:`patcred.credentials.base.StandardCredentials` for identity
    and equality rules.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Union

from patcred.credentials.base import CredentialsDescriptor, StandardCredentials
from patcred.exceptions import PluginError
from patcred.messages import PERSONAL_ACCESS_TOKEN_DISPLAY_NAME
from patcred.models import CredentialRecord, CredentialsScope
from patcred.secret import Secret, SecretCipher, parse_secret
from patcred.validation import FormValidation, validate_token

PERSONAL_ACCESS_TOKEN_TYPE = "gitlab_personal_access_token"


class PersonalAccessToken(StandardCredentials):
    """A credential that carries a GitLab personal access token."""

    @abstractmethod
    def get_token(self) -> Secret:
        """Return the token as an opaque :class:`~patcred.secret.Secret`."""
        ...

    def reveal_secret(self) -> str:
        """Return the token plaintext."""
        return self.get_token().reveal()


class PersonalAccessTokenImpl(PersonalAccessToken):
    """Default :class:`PersonalAccessToken` holding the token in memory.

    Args:
        scope: Visibility scope, ``None`` for global.
        id: Unique id; a UUID is assigned when omitted.
        description: Free-text label.
        token: The token, plaintext or an encrypted blob. It is passed
            through :func:`~patcred.secret.parse_secret` so a blob is stored
            as its plaintext. Construction never fails.
        cipher: Cipher used to decode a blob. Defaults to the configured
            master key.

    Example::

        cred = PersonalAccessTokenImpl(None, "ci-bot", "CI bot", "glpat0123456789abcde")
        assert cred.reveal_secret() == "glpat0123456789abcde"
    """

    type_name = PERSONAL_ACCESS_TOKEN_TYPE

    def __init__(
        self,
        scope: Union[CredentialsScope, str, None],
        id: Optional[str],
        description: Optional[str],
        token: str,
        cipher: Optional[SecretCipher] = None,
    ) -> None:
        super().__init__(scope, id, description)
        self._token = parse_secret(token, cipher) or Secret("")

    @classmethod
    def create(
        cls,
        scope: Union[CredentialsScope, str, None],
        id: Optional[str],
        description: Optional[str],
        token: str,
        cipher: Optional[SecretCipher] = None,
    ) -> "PersonalAccessTokenImpl":
        """Factory equivalent of the constructor."""
        return cls(scope, id, description, token, cipher)

    def get_token(self) -> Secret:
        return self._token

    def to_record(self, cipher: SecretCipher) -> CredentialRecord:
        """Serialise this credential with the token encrypted by *cipher*.

        Args:
            cipher: Cipher that encrypts the token.

        Returns:
            A :class:`~patcred.models.CredentialRecord` that holds no
            plaintext.
        """
        return CredentialRecord(
            type=self.type_name,
            scope=self.scope,
            id=self.id,
            description=self.description,
            token=self._token.encrypted_value(cipher),
        )

    @classmethod
    def from_record(
        cls, record: CredentialRecord, cipher: Optional[SecretCipher] = None
    ) -> "PersonalAccessTokenImpl":
        """Rebuild a credential from :meth:`to_record` output.

        Raises:
            PluginError: If the record belongs to another credential type.
        """
        if record.type != cls.type_name:
            raise PluginError(
                f"Cannot load a '{record.type}' record as '{cls.type_name}'"
            )
        return cls(record.scope, record.id, record.description, record.token, cipher)


class PersonalAccessTokenDescriptor(CredentialsDescriptor):
    """Descriptor of the ``gitlab_personal_access_token`` credential type.

    Args:
        cipher: Cipher used to decode blobs while checking and building
            credentials. Defaults to the configured master key, loaded only
            when a blob is seen.
    """

    def __init__(self, cipher: Optional[SecretCipher] = None) -> None:
        self._cipher = cipher

    @property
    def type_name(self) -> str:
        return PERSONAL_ACCESS_TOKEN_TYPE

    @property
    def display_name(self) -> str:
        return PERSONAL_ACCESS_TOKEN_DISPLAY_NAME

    def new_instance(
        self,
        scope: Union[CredentialsScope, str, None] = None,
        id: Optional[str] = None,
        description: Optional[str] = None,
        token: str = "",
    ) -> PersonalAccessTokenImpl:
        return PersonalAccessTokenImpl(scope, id, description, token, self._cipher)

    def do_check_token(self, value: Optional[str]) -> FormValidation:
        """Sanity check for the ``token`` field, see :func:`validate_token`."""
        return validate_token(value, self._cipher)

"""Form validation results and the personal access token check.

A check never raises. It returns a :class:`FormValidation` whose
:attr:`~FormValidation.kind` is one of:

* ``OK`` -- nothing to report.
* ``WARNING`` -- shown to the user, but saving proceeds.
* ``ERROR`` -- blocks saving.

:func:`validate_token` is the check behind the ``token`` field of
:class:`~patcred.credentials.token.PersonalAccessTokenDescriptor`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from patcred.messages import TOKEN_LENGTH, TOKEN_REQUIRED, TOKEN_WRONG_LENGTH
from patcred.secret import SecretCipher, parse_secret


class Kind(str, enum.Enum):
    """Severity of a :class:`FormValidation`."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class FormValidation:
    """Outcome of a form field check.

    Build instances with :meth:`ok`, :meth:`warning`, or :meth:`error`
    rather than the constructor.

    Attributes:
        kind: The severity.
        message: Human-readable explanation, ``None`` for ``OK``.
    """

    kind: Kind
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "FormValidation":
        return cls(Kind.OK)

    @classmethod
    def warning(cls, message: str) -> "FormValidation":
        return cls(Kind.WARNING, message)

    @classmethod
    def error(cls, message: str) -> "FormValidation":
        return cls(Kind.ERROR, message)

    @property
    def is_ok(self) -> bool:
        return self.kind is Kind.OK

    @property
    def is_blocking(self) -> bool:
        """``True`` only for ``ERROR``; warnings let the save proceed."""
        return self.kind is Kind.ERROR

    def __str__(self) -> str:
        if self.message is None:
            return self.kind.value.upper()
        return f"{self.kind.value.upper()}: {self.message}"


def validate_token(
    candidate: Optional[str], cipher: Optional[SecretCipher] = None
) -> FormValidation:
    """Sanity check for a GitLab personal access token.

    Freshly typed plaintext must be exactly 20 characters or the check
    fails. A previously stored encrypted blob whose plaintext has the wrong
    length only produces a warning, so that values saved earlier keep
    passing when they are redisplayed unchanged.

    Args:
        candidate: The value from the form field, plaintext or encrypted blob.
        cipher: Cipher used to decode blobs, see
            :func:`~patcred.secret.parse_secret`.

    Returns:
        The :class:`FormValidation` outcome.
    """
    if not candidate:
        return FormValidation.error(TOKEN_REQUIRED)
    secret = parse_secret(candidate, cipher)
    if secret is None:
        return FormValidation.error(TOKEN_REQUIRED)

    plain_text = secret.reveal()
    if candidate == plain_text:
        if len(candidate) != TOKEN_LENGTH:
            return FormValidation.error(TOKEN_WRONG_LENGTH)
    elif len(plain_text) != TOKEN_LENGTH:
        return FormValidation.warning(TOKEN_WRONG_LENGTH)
    return FormValidation.ok()

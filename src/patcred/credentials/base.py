"""Abstract base classes for credential types.

This module defines the two foundational types of the credentials subsystem:

- :class:`StandardCredentials` -- identity metadata every credential carries
  (scope, id, description) and id-based equality.
- :class:`CredentialsDescriptor` -- the registration face of a credential
  type: its name, its display name, a factory, and the form field checks.

To add a credential type, subclass :class:`StandardCredentials` for the
value object and :class:`CredentialsDescriptor` for its descriptor, then
register the descriptor with a
:class:`~patcred.credentials.registry.CredentialsRegistry`.

See Also:
    :mod:`patcred.credentials.registry` for registration and lookup.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional, Union

from patcred.models import CredentialsScope
from patcred.validation import FormValidation


class StandardCredentials(ABC):
    """Identity metadata shared by all credential types.

    Credentials are immutable: every attribute is exposed through a
    read-only property. Two credentials are equal when they have the same
    type and the same id, whatever else they hold.

    Args:
        scope: Visibility scope, as an enum member or its name. ``None``
            means :attr:`CredentialsScope.GLOBAL`.
        id: Unique id within the owning store. A random UUID is assigned
            when omitted.
        description: Free-text label.

    Raises:
        ValueError: If *scope* is a string that names no scope.
    """

    type_name: ClassVar[str] = ""

    def __init__(
        self,
        scope: Union[CredentialsScope, str, None] = None,
        id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        if scope is None:
            scope = CredentialsScope.GLOBAL
        self._scope = CredentialsScope(scope)
        self._id = id or str(uuid.uuid4())
        self._description = description or ""

    @property
    def scope(self) -> CredentialsScope:
        return self._scope

    @property
    def id(self) -> str:
        return self._id

    @property
    def description(self) -> str:
        return self._description

    @property
    def display_name(self) -> str:
        """The description when one is set, otherwise the id."""
        return self._description or self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StandardCredentials):
            return NotImplemented
        return type(self) is type(other) and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(scope={self._scope.value}, id={self._id!r}, "
            f"description={self._description!r})"
        )


class CredentialsDescriptor(ABC):
    """Describes a credential type to the registry.

    Subclasses provide:

    1. :attr:`type_name` -- a unique, lowercase identifier.
    2. :attr:`display_name` -- the human-readable name.
    3. :meth:`new_instance` -- a factory for the credential.
    4. Optionally one ``do_check_<field>(value)`` method per form field,
       returning a :class:`~patcred.validation.FormValidation`.
    """

    @property
    @abstractmethod
    def type_name(self) -> str:
        """Return the unique credential type identifier.

        Returns:
            A lowercase string such as ``"gitlab_personal_access_token"``.
        """
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @abstractmethod
    def new_instance(self, **fields: Any) -> StandardCredentials:
        """Build a credential of this type from form field values."""
        ...

    def check_field(self, field: str, value: Optional[str]) -> FormValidation:
        """Run the check for *field* against *value*.

        Dispatches to ``do_check_<field>``. Fields without a check method
        are always OK.

        Args:
            field: The form field name, e.g. ``"token"``.
            value: The value currently in the field.

        Returns:
            The check's :class:`~patcred.validation.FormValidation`.
        """
        check = getattr(self, f"do_check_{field}", None)
        if check is None:
            return FormValidation.ok()
        return check(value)

"""Opaque secret wrapper and the cipher that encodes it at rest.

This module defines the two types every credential relies on:

- :class:`Secret` -- an immutable holder for a plaintext string. It never
  shows the plaintext through ``repr``, ``str``, ``==``, pickling, or
  copying; :meth:`Secret.reveal` is the only way to get it back.
- :class:`SecretCipher` -- encrypts a secret into an *encrypted blob*
  (``{<fernet token>}``) and decrypts such blobs back to plaintext using the
  master key from :func:`~patcred.config.load_master_key`.

:func:`parse_secret` ties them together: it accepts either freshly typed
plaintext or a previously encrypted blob and always yields the underlying
plaintext wrapped in a :class:`Secret`.

Example::

    cipher = SecretCipher.generate()
    blob = cipher.encrypt(Secret("glpat0123456789abcde"))
    assert parse_secret(blob, cipher).reveal() == "glpat0123456789abcde"
"""

from __future__ import annotations

import hmac
import logging
import re
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from patcred.exceptions import ConfigError

logger = logging.getLogger(__name__)

_MASK = "********"

_BLOB_RE = re.compile(r"^\{[A-Za-z0-9_\-=]+\}$")


def is_encrypted_blob(value: str) -> bool:
    """Return ``True`` if *value* has the shape of an encrypted secret blob.

    Only the shape is checked; the blob may still fail to decrypt.
    """
    return bool(_BLOB_RE.match(value))


class Secret:
    """An immutable, opaque wrapper around a plaintext string.

    Two secrets holding the same plaintext are *not* equal under ``==``;
    use :meth:`matches` to compare plaintexts explicitly.

    Args:
        plain_text: The value to wrap.
    """

    __slots__ = ("_plain_text",)

    def __init__(self, plain_text: str) -> None:
        object.__setattr__(self, "_plain_text", plain_text)

    @classmethod
    def from_string(
        cls, value: Optional[str], cipher: Optional["SecretCipher"] = None
    ) -> Optional["Secret"]:
        """Alias of :func:`parse_secret`."""
        return parse_secret(value, cipher)

    def reveal(self) -> str:
        """Return the plaintext."""
        return self._plain_text

    def matches(self, other: Union["Secret", str]) -> bool:
        """Compare plaintexts in constant time.

        Args:
            other: Another :class:`Secret` or a plaintext string.

        Returns:
            ``True`` if both plaintexts are identical.
        """
        other_text = other.reveal() if isinstance(other, Secret) else other
        return hmac.compare_digest(
            self._plain_text.encode("utf-8"), other_text.encode("utf-8")
        )

    def encrypted_value(self, cipher: "SecretCipher") -> str:
        """Return this secret as an encrypted blob produced by *cipher*."""
        return cipher.encrypt(self)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Secret is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("Secret is immutable")

    def __repr__(self) -> str:
        return f"Secret({_MASK!r})"

    def __str__(self) -> str:
        return _MASK

    def __copy__(self) -> "Secret":
        return self

    def __deepcopy__(self, memo: dict) -> "Secret":
        return self

    def __reduce__(self):
        raise TypeError(
            "Secret objects cannot be pickled; store SecretCipher.encrypt(secret) instead"
        )


class SecretCipher:
    """Encrypts secrets into blobs and decrypts blobs back to plaintext.

    Wraps a :class:`cryptography.fernet.Fernet` instance. Blobs are the
    Fernet token wrapped in braces so that they can be told apart from
    freshly typed plaintext.

    Args:
        key: A url-safe base64 encoded 32-byte Fernet key.

    Raises:
        ConfigError: If *key* is not a valid Fernet key.
    """

    def __init__(self, key: Union[bytes, str]) -> None:
        try:
            self._fernet = Fernet(key)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid master key: {exc}") from exc

    @classmethod
    def generate(cls) -> "SecretCipher":
        """Create a cipher with a fresh random key (handy for tests)."""
        return cls(Fernet.generate_key())

    @classmethod
    def from_config(cls, config=None) -> "SecretCipher":
        """Create a cipher from the master key of the effective configuration.

        Args:
            config: Optional :class:`~patcred.models.GlobalConfig`; resolved
                via :func:`~patcred.config.resolve_config` when omitted.

        Raises:
            ConfigError: If no usable master key can be resolved.
        """
        from patcred.config import load_master_key

        return cls(load_master_key(config))

    @classmethod
    def find(cls, config=None) -> Optional["SecretCipher"]:
        """Like :meth:`from_config`, but never generates a master key.

        Returns:
            The cipher, or ``None`` when no master key exists yet.

        Raises:
            ConfigError: If a configured key cannot be read or is invalid.
        """
        from patcred.config import find_master_key

        key = find_master_key(config)
        return cls(key) if key is not None else None

    def encrypt(self, secret: Union[Secret, str]) -> str:
        """Encrypt *secret* and return it as an encrypted blob."""
        plain_text = secret.reveal() if isinstance(secret, Secret) else secret
        token = self._fernet.encrypt(plain_text.encode("utf-8"))
        return "{" + token.decode("ascii") + "}"

    def decrypt(self, value: str) -> Optional[str]:
        """Decrypt an encrypted blob.

        Returns:
            The plaintext, or ``None`` if *value* is not a blob or cannot be
            decrypted with this cipher's key.
        """
        if not is_encrypted_blob(value):
            return None
        try:
            return self._fernet.decrypt(value[1:-1].encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeDecodeError):
            logger.debug("Value looks like an encrypted blob but does not decrypt")
            return None

    def __repr__(self) -> str:
        return "SecretCipher(key=<hidden>)"


def parse_secret(
    value: Optional[str], cipher: Optional[SecretCipher] = None
) -> Optional[Secret]:
    """Turn a stored or freshly entered value into a :class:`Secret`.

    * ``None`` yields ``None``.
    * An encrypted blob that decrypts yields its plaintext.
    * Anything else, including a blob that does not decrypt, is taken as
      plaintext.

    The default cipher is only looked up when *value* looks like a blob, and
    no master key is ever generated here. If no key exists, or it cannot be
    loaded, the blob is taken as plaintext, so parsing never raises.

    Args:
        value: The value to parse.
        cipher: Cipher used for blobs. Defaults to
            :meth:`SecretCipher.find`.

    Returns:
        The wrapped plaintext, or ``None`` when *value* is ``None``.
    """
    if value is None:
        return None
    if is_encrypted_blob(value):
        if cipher is None:
            try:
                cipher = SecretCipher.find()
            except ConfigError as exc:
                logger.warning("Cannot load master key, treating value as plaintext: %s", exc)
                return Secret(value)
            if cipher is None:
                logger.debug("No master key yet, treating value as plaintext")
                return Secret(value)
        plain_text = cipher.decrypt(value)
        if plain_text is not None:
            return Secret(plain_text)
    return Secret(value)

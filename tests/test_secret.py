"""Tests for patcred.secret -- opaque secrets, the cipher, and parsing."""

from __future__ import annotations

import copy
import pickle
from pathlib import Path

import pytest

from patcred.config import get_master_key_path
from patcred.exceptions import ConfigError
from patcred.secret import Secret, SecretCipher, is_encrypted_blob, parse_secret

VALID_TOKEN = "abcd1234abcd1234abcd"


class TestSecret:
    def test_reveal_returns_plain_text(self) -> None:
        assert Secret(VALID_TOKEN).reveal() == VALID_TOKEN

    def test_repr_and_str_are_masked(self) -> None:
        secret = Secret(VALID_TOKEN)
        assert VALID_TOKEN not in repr(secret)
        assert VALID_TOKEN not in str(secret)
        assert VALID_TOKEN not in f"{secret}"

    def test_equality_is_identity(self) -> None:
        a = Secret(VALID_TOKEN)
        b = Secret(VALID_TOKEN)
        assert a != b
        assert a == a

    def test_matches_compares_plain_text(self) -> None:
        a = Secret(VALID_TOKEN)
        assert a.matches(Secret(VALID_TOKEN))
        assert a.matches(VALID_TOKEN)
        assert not a.matches("something-else")

    def test_is_immutable(self) -> None:
        secret = Secret(VALID_TOKEN)
        with pytest.raises(AttributeError):
            secret._plain_text = "changed"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            del secret._plain_text
        assert secret.reveal() == VALID_TOKEN

    def test_cannot_be_pickled(self) -> None:
        with pytest.raises(TypeError, match="cannot be pickled"):
            pickle.dumps(Secret(VALID_TOKEN))

    def test_copy_returns_same_object(self) -> None:
        secret = Secret(VALID_TOKEN)
        assert copy.copy(secret) is secret
        assert copy.deepcopy(secret) is secret

    def test_encrypted_value(self, cipher: SecretCipher) -> None:
        blob = Secret(VALID_TOKEN).encrypted_value(cipher)
        assert is_encrypted_blob(blob)
        assert VALID_TOKEN not in blob
        assert cipher.decrypt(blob) == VALID_TOKEN


class TestSecretCipher:
    def test_encrypt_accepts_plain_string(self, cipher: SecretCipher) -> None:
        blob = cipher.encrypt("hello")
        assert blob.startswith("{") and blob.endswith("}")
        assert cipher.decrypt(blob) == "hello"

    def test_encryption_is_randomised(self, cipher: SecretCipher) -> None:
        assert cipher.encrypt(VALID_TOKEN) != cipher.encrypt(VALID_TOKEN)

    def test_decrypt_non_blob_returns_none(self, cipher: SecretCipher) -> None:
        assert cipher.decrypt(VALID_TOKEN) is None

    def test_decrypt_with_wrong_key_returns_none(
        self, cipher: SecretCipher, other_cipher: SecretCipher
    ) -> None:
        blob = cipher.encrypt(VALID_TOKEN)
        assert other_cipher.decrypt(blob) is None

    def test_decrypt_tampered_blob_returns_none(self, cipher: SecretCipher) -> None:
        blob = cipher.encrypt(VALID_TOKEN)
        i = len(blob) // 2
        tampered = blob[:i] + ("A" if blob[i] != "A" else "B") + blob[i + 1 :]
        assert cipher.decrypt(tampered) is None

    def test_invalid_key_raises_config_error(self) -> None:
        with pytest.raises(ConfigError, match="Invalid master key"):
            SecretCipher(b"not-a-fernet-key")

    def test_repr_hides_key(self) -> None:
        assert "hidden" in repr(SecretCipher.generate())

    def test_from_config_generates_key_once(self, isolated_config: Path) -> None:
        first = SecretCipher.from_config()
        second = SecretCipher.from_config()
        assert get_master_key_path().is_file()
        assert second.decrypt(first.encrypt(VALID_TOKEN)) == VALID_TOKEN


class TestIsEncryptedBlob:
    @pytest.mark.parametrize(
        "value",
        ["{gAAAAABk-abc_123=}", "{abc}"],
    )
    def test_blob_shapes(self, value: str) -> None:
        assert is_encrypted_blob(value)

    @pytest.mark.parametrize(
        "value",
        ["", "{}", VALID_TOKEN, "{abc", "abc}", "{a b}", "x{abc}"],
    )
    def test_non_blob_shapes(self, value: str) -> None:
        assert not is_encrypted_blob(value)


class TestParseSecret:
    def test_none_yields_none(self) -> None:
        assert parse_secret(None) is None

    def test_plain_text_passes_through(self) -> None:
        assert parse_secret(VALID_TOKEN).reveal() == VALID_TOKEN

    def test_empty_string_is_wrapped(self) -> None:
        assert parse_secret("").reveal() == ""

    def test_blob_is_decrypted(self, cipher: SecretCipher) -> None:
        blob = cipher.encrypt(VALID_TOKEN)
        assert parse_secret(blob, cipher).reveal() == VALID_TOKEN

    def test_undecryptable_blob_is_plain_text(
        self, cipher: SecretCipher, other_cipher: SecretCipher
    ) -> None:
        blob = cipher.encrypt(VALID_TOKEN)
        assert parse_secret(blob, other_cipher).reveal() == blob

    def test_from_string_alias(self, cipher: SecretCipher) -> None:
        blob = cipher.encrypt(VALID_TOKEN)
        assert Secret.from_string(blob, cipher).reveal() == VALID_TOKEN
        assert Secret.from_string(None) is None

    def test_blob_uses_configured_master_key(self, isolated_config: Path) -> None:
        blob = SecretCipher.from_config().encrypt(VALID_TOKEN)
        assert parse_secret(blob).reveal() == VALID_TOKEN

    def test_plain_text_does_not_create_master_key(self, isolated_config: Path) -> None:
        parse_secret(VALID_TOKEN)
        assert not get_master_key_path().exists()

    def test_unusable_master_key_falls_back_to_plain_text(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, cipher: SecretCipher
    ) -> None:
        monkeypatch.setenv("PATCRED_KEY_SOURCE", "env:PATCRED_TEST_MISSING_KEY")
        monkeypatch.delenv("PATCRED_TEST_MISSING_KEY", raising=False)
        blob = cipher.encrypt(VALID_TOKEN)
        assert parse_secret(blob).reveal() == blob

import pytest

from expense_tracker.services.credentials import CredentialStore


class TestCredentialStore:
    def test_hash_is_salted(self, credentials):
        first = credentials.hash("password123")
        second = credentials.hash("password123")
        assert first != second
        assert "password123" not in first

    def test_verify_matches_original_password(self, credentials):
        hashed = credentials.hash("password123")
        assert credentials.verify("password123", hashed) is True
        assert credentials.verify("password124", hashed) is False
        assert credentials.verify("", hashed) is False

    def test_verify_rejects_garbage_hash(self, credentials):
        assert credentials.verify("password123", "not-a-bcrypt-hash") is False

    def test_verify_rejects_overlong_password(self, credentials):
        hashed = credentials.hash("a" * 72)
        assert credentials.verify("a" * 73, hashed) is False

    def test_hash_refuses_input_beyond_bcrypt_limit(self, credentials):
        with pytest.raises(ValueError):
            credentials.hash("é" * 40)  # 80 bytes

    def test_no_user_verify_always_fails(self, credentials):
        assert credentials.no_user_verify() is False

    def test_rounds_are_used(self):
        store = CredentialStore(rounds=5)
        assert store.hash("password123").startswith("$2b$05$")

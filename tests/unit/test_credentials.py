"""Tests for credentials: key generation and Argon2 hashing."""

import pytest

from dashgate.common.config import DashgateSettings
from dashgate.credentials.generator import DEFAULT_PREFIX, generate_api_key
from dashgate.credentials.hasher import ApiKeyHasher


class TestGenerateApiKey:
    def test_default_prefix(self):
        assert generate_api_key().startswith(DEFAULT_PREFIX)

    def test_custom_prefix(self):
        assert generate_api_key("acme_").startswith("acme_")

    def test_token_length(self):
        # 32 random bytes -> 43 url-safe base64 chars
        key = generate_api_key()
        assert len(key) == len(DEFAULT_PREFIX) + 43

    def test_uniqueness(self):
        keys = {generate_api_key() for _ in range(200)}
        assert len(keys) == 200


class TestHashVerify:
    def test_verify_roundtrip(self, hasher):
        secret = generate_api_key()
        assert hasher.verify(secret, hasher.hash(secret)) is True

    def test_wrong_secret_rejected(self, hasher):
        stored = hasher.hash(generate_api_key())
        assert hasher.verify(generate_api_key(), stored) is False

    def test_near_miss_rejected(self, hasher):
        secret = "dgk_abcdefghijklmnop"
        stored = hasher.hash(secret)
        assert hasher.verify(secret[:-1] + "q", stored) is False
        assert hasher.verify(secret + " ", stored) is False

    def test_salted_hashes_differ(self, hasher):
        secret = generate_api_key()
        first, second = hasher.hash(secret), hasher.hash(secret)
        assert first != second
        assert hasher.verify(secret, first) is True
        assert hasher.verify(secret, second) is True

    def test_hash_is_argon2id_phc_string(self, hasher):
        secret = generate_api_key()
        stored = hasher.hash(secret)
        assert stored.startswith("$argon2id$")
        assert secret not in stored


class TestMalformedHashes:
    @pytest.mark.parametrize("stored", [
        "",
        "not-a-hash",
        "$argon2id$v=19$m=64,t=1,p=1$broken",
        "5e884898da28047151d0e56f8dc6292773603d0d6aabbdd62a11ef721d1542d8",
        "$argon2id$v=19$m=64,t=1,p=1$é$é",
    ])
    def test_malformed_hash_fails_closed(self, hasher, stored):
        assert hasher.verify("dgk_anything", stored) is False

    def test_empty_candidate_fails(self, hasher):
        assert hasher.verify("", hasher.hash("dgk_secret")) is False


class TestParameters:
    def test_hash_from_other_parameters_still_verifies(self, hasher):
        stronger = ApiKeyHasher(time_cost=2, memory_cost=128, parallelism=1)
        stored = stronger.hash("dgk_secret")
        assert hasher.verify("dgk_secret", stored) is True

    def test_needs_rehash(self, hasher):
        stronger = ApiKeyHasher(time_cost=2, memory_cost=128, parallelism=1)
        assert hasher.needs_rehash(hasher.hash("dgk_secret")) is False
        assert hasher.needs_rehash(stronger.hash("dgk_secret")) is True

    def test_needs_rehash_malformed(self, hasher):
        assert hasher.needs_rehash("garbage") is True

    def test_from_settings(self):
        settings = DashgateSettings(
            hash_time_cost=2, hash_memory_cost=128, hash_parallelism=1
        )
        stored = ApiKeyHasher.from_settings(settings).hash("dgk_secret")
        assert "m=128,t=2,p=1" in stored

"""
Tests for bcrypt password hashing.
"""

import pytest

from auth.errors import HashingFailure
from auth.password import PasswordHasher


class TestPasswordHasher:
    def test_same_password_hashes_differently(self, hasher):
        first = hasher.hash("secret123")
        second = hasher.hash("secret123")
        assert first != second
        assert hasher.verify("secret123", first)
        assert hasher.verify("secret123", second)

    def test_wrong_password_is_false(self, hasher):
        hashed = hasher.hash("secret123")
        assert hasher.verify("wrong", hashed) is False
        assert hasher.verify("", hashed) is False

    def test_hash_never_contains_plaintext(self, hasher):
        assert "secret123" not in hasher.hash("secret123")

    def test_work_factor_is_embedded(self):
        hashed = PasswordHasher(work_factor=5).hash("pw")
        assert hashed.startswith("$2b$05$")

    @pytest.mark.parametrize("bad", ["", "not-a-hash", "$2b$04$short"])
    def test_malformed_hash_raises(self, hasher, bad):
        with pytest.raises(HashingFailure):
            hasher.verify("secret123", bad)

    @pytest.mark.parametrize("factor", [3, 32])
    def test_rejects_out_of_range_work_factor(self, factor):
        with pytest.raises(ValueError):
            PasswordHasher(work_factor=factor)


class TestPasswordHasherAsync:
    @pytest.mark.asyncio
    async def test_async_round_trip(self, hasher):
        hashed = await hasher.hash_async("secret123")
        assert await hasher.verify_async("secret123", hashed)
        assert not await hasher.verify_async("nope", hashed)

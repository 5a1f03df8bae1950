"""
Test cases for asset fingerprints and their base32 encoding
"""

import base64
import hashlib

import pytest

from aftermarket_offchain.assets import AssetId
from aftermarket_offchain.fingerprint import (
    FingerprintResult,
    calculate_fingerprint,
    decode_base32,
    encode_base32,
    fingerprint_digest,
    fingerprint_of,
)

POLICY_ID = "0" * 56
ASSET_NAME = "4d794e4654"  # MyNFT


def rfc4648_lower(data: bytes) -> str:
    return base64.b32encode(data).decode().rstrip("=").lower()


class TestBase32:
    """Custom base32 alphabet and bit packing"""

    @pytest.mark.parametrize("data", [b"", b"\xff", b"\x00\x01", b"abc", b"hello world", bytes(range(20))])
    def test_matches_rfc4648_without_padding(self, data):
        assert encode_base32(data) == rfc4648_lower(data)

    def test_trailing_bits_are_left_shifted(self):
        # 11111111 -> 11111 111(00)
        assert encode_base32(b"\xff") == "74"

    def test_decode_inverts_encode_for_digests(self):
        digest = fingerprint_digest(POLICY_ID, ASSET_NAME)
        assert decode_base32(encode_base32(digest)) == digest

    def test_decode_rejects_unknown_characters(self):
        with pytest.raises(ValueError):
            decode_base32("abc1")


class TestCalculateFingerprint:
    """Fingerprint calculation"""

    def test_known_asset(self):
        digest = hashlib.blake2b(bytes.fromhex(POLICY_ID + ASSET_NAME), digest_size=20).digest()
        prefix = "asset1" if digest[0] < 128 else "asset"

        result = calculate_fingerprint(POLICY_ID, ASSET_NAME)

        assert not result.is_degraded
        assert result.value == prefix + rfc4648_lower(digest)
        assert len(result.value) == len(prefix) + 32

    def test_deterministic(self):
        assert calculate_fingerprint(POLICY_ID, ASSET_NAME) == calculate_fingerprint(POLICY_ID, ASSET_NAME)

    def test_prefix_follows_first_digest_byte(self):
        for name in ("00", "01", "02", "03", "04", "05", "06", "07"):
            digest = fingerprint_digest(POLICY_ID, name)
            value = calculate_fingerprint(POLICY_ID, name).value
            if digest[0] < 128:
                assert value.startswith("asset1")
            else:
                assert value.startswith("asset") and not value.startswith("asset1")

    def test_empty_asset_name(self):
        result = calculate_fingerprint(POLICY_ID, "")
        assert not result.is_degraded
        assert result.value.startswith("asset")

    def test_different_names_differ(self):
        assert calculate_fingerprint(POLICY_ID, "01").value != calculate_fingerprint(POLICY_ID, "02").value

    def test_invalid_hex_degrades(self):
        result = calculate_fingerprint("zz" * 28, ASSET_NAME)
        assert result.is_degraded
        assert result.value is None
        assert result.reason

    def test_degraded_never_matches(self):
        degraded = FingerprintResult.degraded("bad hex")
        assert not degraded.matches("asset1")
        assert not degraded.matches(None)

    def test_fingerprint_of_asset(self):
        asset = AssetId(bytes.fromhex(POLICY_ID), bytes.fromhex(ASSET_NAME))
        assert fingerprint_of(asset) == calculate_fingerprint(POLICY_ID, ASSET_NAME)

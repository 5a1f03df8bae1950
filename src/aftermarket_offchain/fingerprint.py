"""
Asset Fingerprints

Display fingerprints for (policy id, asset name) pairs.
The fingerprint is advisory: it labels assets in URLs and the UI and is
used to look assets up in a wallet, but it never goes on-chain.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from .assets import AssetId

logger = logging.getLogger(__name__)

FINGERPRINT_DIGEST_SIZE = 20
BASE32_ALPHABET = "abcdefghijklmnopqrstuvwxyz234567"
PREFIX_LOW = "asset1"
PREFIX_HIGH = "asset"


@dataclass(frozen=True)
class FingerprintResult:
    """Either a fingerprint or the reason it could not be computed"""

    value: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: str) -> "FingerprintResult":
        return cls(value=value)

    @classmethod
    def degraded(cls, reason: str) -> "FingerprintResult":
        return cls(reason=reason)

    @property
    def is_degraded(self) -> bool:
        return self.value is None

    def matches(self, fingerprint: str) -> bool:
        """Degraded results never match anything"""
        return not self.is_degraded and self.value == fingerprint


def encode_base32(data: bytes) -> str:
    """
    Encode bytes 5 bits at a time, most significant first

    A trailing partial group is left-shifted to fill 5 bits. No padding
    characters are emitted.
    """
    result = []
    bits = 0
    value = 0

    for byte in data:
        value = ((value << 8) | byte) & 0xFFFF
        bits += 8
        while bits >= 5:
            bits -= 5
            result.append(BASE32_ALPHABET[(value >> bits) & 31])

    if bits > 0:
        result.append(BASE32_ALPHABET[(value << (5 - bits)) & 31])

    return "".join(result)


def decode_base32(text: str) -> bytes:
    """
    Inverse of encode_base32

    Raises:
        ValueError: If the text contains a character outside the alphabet
    """
    result = bytearray()
    bits = 0
    value = 0

    for char in text:
        index = BASE32_ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"Invalid base32 character: {char!r}")
        value = ((value << 5) | index) & 0xFFFF
        bits += 5
        if bits >= 8:
            bits -= 8
            result.append((value >> bits) & 0xFF)

    return bytes(result)


def fingerprint_digest(policy_id_hex: str, asset_name_hex: str) -> bytes:
    """blake2b-160 of the raw policy id and asset name bytes"""
    asset_bytes = bytes.fromhex(policy_id_hex + asset_name_hex)
    return hashlib.blake2b(asset_bytes, digest_size=FINGERPRINT_DIGEST_SIZE).digest()


def calculate_fingerprint(policy_id_hex: str, asset_name_hex: str) -> FingerprintResult:
    """
    Calculate the display fingerprint of an asset

    Args:
        policy_id_hex: Issuing policy id as hex
        asset_name_hex: Asset name as hex, may be empty

    Returns:
        FingerprintResult holding the fingerprint, or the reason it failed
    """
    try:
        digest = fingerprint_digest(policy_id_hex, asset_name_hex)
    except (TypeError, ValueError) as e:
        logger.warning(f"Error calculating fingerprint for {policy_id_hex!r}{asset_name_hex!r}: {e}")
        return FingerprintResult.degraded(str(e))

    prefix = PREFIX_LOW if digest[0] < 128 else PREFIX_HIGH
    return FingerprintResult.success(prefix + encode_base32(digest))


def fingerprint_of(asset: AssetId) -> FingerprintResult:
    return calculate_fingerprint(asset.policy_id_hex, asset.asset_name_hex)

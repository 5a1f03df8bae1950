"""
Asset Identifiers

Units, asset ids and helpers for walking the native assets held in UTxOs.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple

import pycardano as pc

POLICY_ID_HEX_LENGTH = 56
MAX_ASSET_NAME_LENGTH = 32


@dataclass(frozen=True)
class AssetId:
    """Issuing policy and asset name of a native token"""

    policy_id: bytes
    asset_name: bytes

    def __post_init__(self):
        if len(self.policy_id) != POLICY_ID_HEX_LENGTH // 2:
            raise ValueError(f"Policy id must be 28 bytes, got {len(self.policy_id)}")
        if len(self.asset_name) > MAX_ASSET_NAME_LENGTH:
            raise ValueError(f"Asset name must be at most 32 bytes, got {len(self.asset_name)}")

    @classmethod
    def from_unit(cls, unit: str) -> "AssetId":
        """Split a unit string into its 56 hex char policy id and hex asset name"""
        if len(unit) < POLICY_ID_HEX_LENGTH:
            raise ValueError(f"Unit too short to hold a policy id: {unit}")
        return cls(
            policy_id=bytes.fromhex(unit[:POLICY_ID_HEX_LENGTH]),
            asset_name=bytes.fromhex(unit[POLICY_ID_HEX_LENGTH:]),
        )

    @property
    def policy_id_hex(self) -> str:
        return self.policy_id.hex()

    @property
    def asset_name_hex(self) -> str:
        return self.asset_name.hex()

    @property
    def unit(self) -> str:
        return self.policy_id_hex + self.asset_name_hex

    @property
    def display_name(self) -> str:
        """Asset name as text when it is valid UTF-8, hex otherwise"""
        try:
            return self.asset_name.decode("utf-8")
        except UnicodeDecodeError:
            return self.asset_name_hex

    def to_multi_asset(self, quantity: int = 1) -> pc.MultiAsset:
        return pc.MultiAsset(
            {pc.ScriptHash(self.policy_id): pc.Asset({pc.AssetName(self.asset_name): quantity})}
        )


class UnitBalance(NamedTuple):
    """A unit held by a single UTxO"""

    unit: str
    quantity: int
    utxo: pc.UTxO


def iter_unit_balances(utxos: Iterable[pc.UTxO]) -> Iterator[UnitBalance]:
    """
    Yield every native asset unit held by the UTxOs, in UTxO order

    Lovelace is skipped.
    """
    for utxo in utxos:
        multi_asset = utxo.output.amount.multi_asset
        if not multi_asset:
            continue
        for policy_id, assets in multi_asset.data.items():
            for asset_name, quantity in assets.data.items():
                unit = policy_id.payload.hex() + asset_name.payload.hex()
                yield UnitBalance(unit, quantity, utxo)

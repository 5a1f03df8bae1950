"""
Aftermarket Configuration

Immutable per-network deployment constants of the aftermarket scripts, plus
environment settings loaded from .env.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import pycardano as pc
from blockfrost import ApiUrls
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import UnsupportedNetwork

# Get the project root directory (two levels up from src/aftermarket_offchain/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_SALE_DEPOSIT = 5_000_000


@dataclass(frozen=True)
class ScriptReference:
    """Location of a script published on-chain for reuse by reference"""

    tx_id: str
    output_index: int

    def __str__(self) -> str:
        return f"{self.tx_id}#{self.output_index}"


@dataclass(frozen=True)
class MarketplaceDeployment:
    """Script hashes and references of one aftermarket deployment"""

    network: str
    cardano_network: pc.Network
    blockfrost_url: str
    explorer_url: str
    beacon_policy_id: str  # Beacon script hash, used as minting policy id
    aftermarket_script_hash: str  # Payment credential of every seller contract address
    aftermarket_observer_hash: str  # Observer script hash recorded in the datum
    proxy_script_hash: str
    beacon_script_reference: ScriptReference

    def explorer_tx_url(self, tx_id: str) -> str:
        return f"{self.explorer_url}/transaction/{tx_id}"


PREPROD_DEPLOYMENT = MarketplaceDeployment(
    network="testnet",
    cardano_network=pc.Network.TESTNET,
    blockfrost_url=ApiUrls.preprod.value,
    explorer_url="https://preprod.cardanoscan.io",
    beacon_policy_id="bdceb595b8754726b3efe3ab0f81c76cbda1a0a0d3653bb8fad89bb2",
    aftermarket_script_hash="e07ee8979776692ce3477b0c0d53b4c650ef6ccad75c2596da22847c",
    aftermarket_observer_hash="3e5528d9a7610aa5459a7deed9d3c1c2ee8b0310fae6642df4c37213",
    proxy_script_hash="bdceb595b8754726b3efe3ab0f81c76cbda1a0a0d3653bb8fad89bb2",
    beacon_script_reference=ScriptReference(
        tx_id="6c402050892c8cb0e3e54f803d7ae292d6f5f90745b7f76722f7c303c7085d50",
        output_index=0,
    ),
)

DEPLOYMENTS: Mapping[str, MarketplaceDeployment] = MappingProxyType(
    {
        "testnet": PREPROD_DEPLOYMENT,
        "preprod": PREPROD_DEPLOYMENT,
    }
)


def get_deployment(network: str) -> MarketplaceDeployment:
    """
    Look up the aftermarket deployment for a network

    Raises:
        UnsupportedNetwork: If the scripts are not deployed on that network
    """
    deployment = DEPLOYMENTS.get(network.lower())
    if deployment is None:
        raise UnsupportedNetwork(network)
    return deployment


class ListingSettings(BaseSettings):
    """
    Environment settings for the listing tool

    Loaded from the .env file at the project root, then from the process
    environment.
    """

    network: str = "testnet"
    blockfrost_api_key: Optional[str] = None
    wallet_mnemonic: Optional[str] = None
    sale_deposit: int = DEFAULT_SALE_DEPOSIT

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"), env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def deployment(self) -> MarketplaceDeployment:
        return get_deployment(self.network)

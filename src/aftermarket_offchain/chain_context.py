"""
Cardano Chain Context Management

Pure chain context functionality without console dependencies.
Resolves reference script outputs and submits listing transactions.
"""

import logging
from typing import List, Optional, Protocol

import pycardano as pc
from blockfrost import ApiError, BlockFrostApi

from .config import MarketplaceDeployment
from .errors import ChainQueryFailed, SubmissionRejected

logger = logging.getLogger(__name__)


class ListingChain(Protocol):
    """Ledger-query and submit collaborator used by the listing builder"""

    def get_context(self) -> pc.ChainContext:
        ...

    def get_explorer_url(self, tx_id: str) -> str:
        ...

    def resolve_outputs_by_reference(self, tx_id: str, output_index: int) -> List[pc.UTxO]:
        ...

    def submit(self, signed_tx: pc.Transaction) -> str:
        ...


class CardanoChainContext:
    """Ledger-query and submit collaborator backed by BlockFrost"""

    def __init__(self, deployment: MarketplaceDeployment, blockfrost_api_key: Optional[str] = None):
        """
        Initialize chain context

        Args:
            deployment: Aftermarket deployment for the target network
            blockfrost_api_key: BlockFrost API key for chain queries
        """
        self.deployment = deployment
        self.network = deployment.network
        self.cardano_network = deployment.cardano_network
        self.base_url = deployment.blockfrost_url
        self.blockfrost_api_key = blockfrost_api_key

        if not blockfrost_api_key:
            raise ValueError("BlockFrost API key required for chain context")

        self.api = BlockFrostApi(project_id=blockfrost_api_key, base_url=self.base_url)
        self.context = pc.BlockFrostChainContext(project_id=blockfrost_api_key, base_url=self.base_url)

    def get_context(self) -> pc.ChainContext:
        """Get the chain context"""
        return self.context

    def get_api(self) -> BlockFrostApi:
        """Get the BlockFrost API instance"""
        return self.api

    def get_explorer_url(self, tx_id: str) -> str:
        return self.deployment.explorer_tx_url(tx_id)

    def resolve_outputs_by_reference(self, tx_id: str, output_index: int) -> List[pc.UTxO]:
        """
        Resolve an unspent output by its transaction id and index

        Args:
            tx_id: Transaction id as hex
            output_index: Output index within the transaction

        Returns:
            List with the matching UTxO, empty if it does not exist or was spent

        Raises:
            ChainQueryFailed: If BlockFrost fails for any reason other than a missing transaction
        """
        try:
            tx_utxos = self.api.transaction_utxos(tx_id)
        except ApiError as e:
            if e.status_code == 404:
                logger.warning(f"Transaction {tx_id} not found while resolving reference output")
                return []
            raise ChainQueryFailed(f"Could not look up transaction {tx_id}: {e}") from e
        except OSError as e:
            raise ChainQueryFailed(f"Could not look up transaction {tx_id}: {e}") from e

        output_address = None
        for output in tx_utxos.outputs:
            if output.output_index == output_index:
                output_address = output.address
                break

        if output_address is None:
            return []

        try:
            utxos = self.context.utxos(output_address)
        except (ApiError, OSError, pc.PyCardanoException) as e:
            raise ChainQueryFailed(f"Could not query UTxOs at {output_address}: {e}") from e

        return [
            utxo
            for utxo in utxos
            if utxo.input.transaction_id.payload.hex() == tx_id and utxo.input.index == output_index
        ]

    def submit(self, signed_tx: pc.Transaction) -> str:
        """
        Submit a signed transaction to the network

        Returns:
            Transaction id as hex

        Raises:
            SubmissionRejected: If the network refuses the transaction
        """
        try:
            self.context.submit_tx(signed_tx)
        except (ApiError, OSError, pc.PyCardanoException) as e:
            logger.error(f"Transaction submission failed: {e}")
            raise SubmissionRejected(str(e)) from e

        return signed_tx.id.payload.hex()

from opshin.prelude import *
from pycardano import IndefiniteList

################################################
# Constants
################################################
BEACON_POLICY_PREFIX = b"\x00"
SPOT_BEACON_NAME = b"Spot"

# Action number the beacon policy expects when creating, closing or updating market UTxOs
CREATE_CLOSE_OR_UPDATE_MARKET_UTXOS = 8166


class DatumEncodingError(TypeError):
    """Raised when a datum is constructed with a field of the wrong shape"""


def _is_list_shaped(value) -> bool:
    return isinstance(value, (list, IndefiniteList))


################################################
# Aftermarket Data Types
################################################
@dataclass()
class SpotPrice(PlutusData):
    CONSTR_ID = 0
    amount: int  # Price in lovelace


@dataclass()
class SpotDatum(PlutusData):
    CONSTR_ID = 0
    beacon_id: bytes  # Beacon minting policy id
    aftermarket_observer_hash: bytes  # Observer script hash
    nft_policy_id: bytes  # Policy id shared by every listed NFT
    nft_names: List[bytes]  # Asset names of the listed NFTs
    payment_address: Address  # Where the buyer's payment goes
    sale_deposit: int  # Lovelace deposit held in the UTxO
    sale_price: List[SpotPrice]  # Price terms

    def __post_init__(self):
        # Field order and shape are read positionally by the validator
        if not _is_list_shaped(self.nft_names):
            raise DatumEncodingError(
                f"nft_names must be a list, got {type(self.nft_names).__name__}"
            )
        for name in self.nft_names:
            if not isinstance(name, bytes):
                raise DatumEncodingError(f"NFT name must be bytes, got {type(name).__name__}")
        if not _is_list_shaped(self.sale_price):
            raise DatumEncodingError(
                f"sale_price must be a list, got {type(self.sale_price).__name__}"
            )
        for price in self.sale_price:
            if not isinstance(price, SpotPrice):
                raise DatumEncodingError(f"Price term must be SpotPrice, got {type(price).__name__}")
        super().__post_init__()


@dataclass()
class MarketUTxOsRedeemer(PlutusData):
    CONSTR_ID = 0
    action: int


def create_close_or_update_redeemer() -> MarketUTxOsRedeemer:
    """Redeemer for the beacon policy when minting listing beacons"""
    return MarketUTxOsRedeemer(action=CREATE_CLOSE_OR_UPDATE_MARKET_UTXOS)

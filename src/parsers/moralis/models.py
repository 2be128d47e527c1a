from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class MoralisSwapLeg(BaseModel):
    """One side (bought or sold) of a swap."""

    address: str | None = None
    amount: Decimal = Decimal(0)
    usdAmount: Decimal = Decimal(0)

    model_config = {"extra": "ignore"}


class MoralisSwap(BaseModel):
    """Item of /token/mainnet/{address}/swaps."""

    transactionHash: str
    transactionType: str  # "buy" or "sell"
    blockTimestamp: datetime
    blockNumber: int | None = None
    walletAddress: str | None = None
    pairAddress: str | None = None
    exchangeName: str | None = None
    baseToken: str | None = None
    quoteToken: str | None = None
    bought: MoralisSwapLeg = MoralisSwapLeg()
    sold: MoralisSwapLeg = MoralisSwapLeg()

    model_config = {"extra": "ignore"}

    @property
    def is_buy(self) -> bool:
        return self.transactionType.lower() == "buy"

    @property
    def base_leg(self) -> MoralisSwapLeg:
        """A buy receives the base token; a sell gives it away."""
        return self.bought if self.is_buy else self.sold

    @property
    def quote_leg(self) -> MoralisSwapLeg:
        return self.sold if self.is_buy else self.bought

"""Pydantic models for Bitquery Solana instruction responses."""

from pydantic import BaseModel


class GraduatedToken(BaseModel):
    """pump.fun token whose PumpSwap pool was just created.

    creation_time is the pool-creation block time as reported (ISO 8601).
    """

    creator: str = ""
    success: bool = False
    pump_token: str = ""
    lp_token: str = ""
    creation_time: str = ""

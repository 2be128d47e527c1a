from src.models.base import Base
from src.models.monitor import TokenMonitor, TokenSwap
from src.models.token import CandidateToken, ScoredToken

__all__ = [
    "Base",
    "CandidateToken",
    "ScoredToken",
    "TokenMonitor",
    "TokenSwap",
]

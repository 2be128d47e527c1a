"""Pydantic models for Rugcheck.xyz API responses."""

from pydantic import BaseModel


class RugcheckRisk(BaseModel):
    """Individual risk detected by Rugcheck."""

    name: str
    description: str = ""
    level: str = "info"  # "warn", "danger", "info"
    score: int = 0


class RugcheckReport(BaseModel):
    """Summary report from Rugcheck.xyz.

    score: raw, unbounded risk sum.
    score_normalised: 0 = safest, 100 = most dangerous.
    """

    score: int = 0
    score_normalised: float = 0.0
    risks: list[RugcheckRisk] = []
    mint: str = ""

    @property
    def rounded_score(self) -> int:
        """Normalised score as an integer in 0..100."""
        return max(0, min(100, round(self.score_normalised)))

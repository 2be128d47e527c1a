"""Per-item outcomes for the batch stages.

Every processed input produces exactly one entry, so a caller can tell a
partial failure from a total one.
"""

from dataclasses import dataclass, field


@dataclass
class ItemResult:
    token_address: str
    success: bool
    score: int | None = None
    swaps_processed: int | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        d: dict = {"tokenAddress": self.token_address}
        if self.score is not None:
            d["score"] = self.score
        if self.swaps_processed is not None:
            d["swapsProcessed"] = self.swaps_processed
        if self.error is not None:
            d["error"] = self.error
        d["success"] = self.success
        return d


@dataclass
class StageSummary:
    results: list[ItemResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "processed": self.processed,
            "results": [r.to_dict() for r in self.results],
        }

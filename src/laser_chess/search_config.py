"""Pruning widths and deadline for the two-ply search."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SearchConfig:
    candidate_cap: int = 400
    top_k: int = 50
    reply_cap: int = 15
    reply_candidate_cap: int = 150
    deadline_ms: int = 500
    jitter: float = 5.0
    preset: str = "custom"

    def __post_init__(self) -> None:
        for name in ("candidate_cap", "top_k", "reply_cap", "reply_candidate_cap"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        if self.deadline_ms < 0:
            raise ValueError("deadline_ms must not be negative")
        if self.jitter < 0:
            raise ValueError("jitter must not be negative")


def preset_search_config(name: str) -> SearchConfig:
    preset = name.lower()
    if preset == "fast":
        return SearchConfig(
            candidate_cap=120,
            top_k=12,
            reply_cap=5,
            reply_candidate_cap=40,
            deadline_ms=150,
            jitter=5.0,
            preset="fast",
        )
    if preset == "slow":
        return SearchConfig(
            candidate_cap=800,
            top_k=80,
            reply_cap=25,
            reply_candidate_cap=300,
            deadline_ms=2000,
            jitter=5.0,
            preset="slow",
        )
    if preset == "default":
        return SearchConfig(preset="default")
    raise ValueError(f"Unknown search preset '{name}'")

"""
Pydantic schemas for the payout engine boundary.

``PayoutRequest`` validates caller-supplied wagers before any computation
runs.  ``WinResponse`` / ``SpinResponse`` are serialisable views of a spin
for whatever service embeds the engine.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, StrictInt


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class PayoutRequest(BaseModel):
    """
    Wager and line count for one payout computation.

    ``bet`` must be a real ``int`` (bools, floats and numeric strings are
    rejected) and non-negative.  ``n_lines`` limits evaluation to the first
    N paylines; ``None`` evaluates all of them.
    """

    bet: StrictInt = Field(..., ge=0, description="Wager amount in credits")
    n_lines: Optional[StrictInt] = Field(
        None, description="Evaluate only the first N paylines (None = all)"
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {"example": {"bet": 100, "n_lines": None}},
    }


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class WinResponse(BaseModel):
    """One matched (payline, symbol) combination."""
    symbol_id: int
    symbol_name: str
    occurrences: int
    pay: int
    line_index: int
    line_id: Optional[int]


class SpinResponse(BaseModel):
    """A drawn grid plus its resolved wins and payout."""
    machine_id: Optional[int]
    bet: int
    bet_multiplier: int
    payout: int
    grid: list[list[int]] = Field(..., description="Symbol ids, row-major")
    wins: list[WinResponse]

    model_config = {
        "json_schema_extra": {
            "example": {
                "machine_id": 1,
                "bet": 100,
                "bet_multiplier": 2,
                "payout": 20,
                "grid": [[1, 1, 1], [2, 3, 1], [3, 2, 2]],
                "wins": [
                    {
                        "symbol_id": 1,
                        "symbol_name": "Cherry",
                        "occurrences": 3,
                        "pay": 10,
                        "line_index": 0,
                        "line_id": 1,
                    }
                ],
            }
        }
    }

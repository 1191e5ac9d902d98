# User value: This file validates incoming estimate/training payloads so bad input is rejected with clear errors.
from pydantic import BaseModel, Field, model_validator
from typing import Optional

# Prices past this bound are typos or abuse; rejecting them keeps the trackers finite.
MAX_PRICE_USD = 1_000_000_000.0


class EstimateRequest(BaseModel):
    # User value: carries the AI guess so the service can return a tightened band for the category.
    label: Optional[str] = Field(default=None, max_length=64)
    ai_low: float = Field(allow_inf_nan=False, ge=-MAX_PRICE_USD, le=MAX_PRICE_USD)
    ai_high: float = Field(allow_inf_nan=False, ge=-MAX_PRICE_USD, le=MAX_PRICE_USD)

    @model_validator(mode="after")
    def _check_range(self):
        if not self.ai_low < self.ai_high:
            raise ValueError("ai_low must be less than ai_high")
        return self


class TrainRequest(BaseModel):
    # User value: captures a verified price (or a description with a budget) so the model can learn from it.
    label: Optional[str] = None
    price_usd: Optional[float] = Field(default=None, allow_inf_nan=False, ge=-MAX_PRICE_USD, le=MAX_PRICE_USD)
    description: Optional[str] = None

# User value: This file defines the persisted price-band document so learned pricing survives restarts intact.
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LABEL = "General"


class LabelStats(BaseModel):
    # User value: keeps per-category price history compact so estimates tighten as real prices arrive.
    model_config = ConfigDict(populate_by_name=True)

    n: int = Field(default=0, ge=0)
    q_low: Optional[float] = Field(default=None, alias="qL")
    q_high: Optional[float] = Field(default=None, alias="qH")
    mean: Optional[float] = None

    @property
    def is_warm(self) -> bool:
        return self.q_low is not None and self.q_high is not None


class PrecisionModel(BaseModel):
    # User value: holds every category's learned price band in one document so nothing is partially saved.
    labels: Dict[str, LabelStats] = Field(default_factory=dict)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

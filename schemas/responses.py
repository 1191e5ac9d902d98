# User value: This file keeps estimate responses stable so clients can render price bands consistently.
from pydantic import BaseModel, Field
from typing import Literal, Optional


class PriceBandResponse(BaseModel):
    # User value: returns the calibrated band plus where it came from so users know how much to trust it.
    label: Optional[str]
    low: float
    high: float
    source: Literal["model", "passthrough"]


class MediaInfo(BaseModel):
    mimetype: str
    kind: Literal["image", "video", "audio"]


class EstimateCardResponse(BaseModel):
    # User value: gives the uploader one card with the category and the tightened price range.
    id: str
    created_at: str
    label: str
    ai_low: float
    ai_high: float
    # User value: keeps the untouched AI range visible for support and calibration audits.
    raw_low: float
    raw_high: float
    source: Literal["model", "passthrough"]
    media: MediaInfo


class LearnedPrice(BaseModel):
    label: str
    price_usd: float


class TrainResponse(BaseModel):
    # User value: confirms whether the submitted price was learned so trainers see immediate feedback.
    ok: bool = True
    learned: Optional[LearnedPrice] = None
    fields: dict = Field(default_factory=dict)

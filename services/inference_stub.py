# User value: This file stands in for the vision model so uploads always get a label and a starting range.
import os

STUB_LABELS = ("Irrigation Repair", "Sod Install", "Tree Trim", "General Repair", "Hardscape")


# User value: derives a stable seed from the file name so the same upload always gets the same guess.
def _seed(filename: str | None) -> int:
    base = os.path.basename(str(filename or "").replace("\\", "/"))
    return sum(ord(c) for c in base) or 137


# User value: returns a label and raw price range that the precision model can then tighten.
def infer_from_media(filename: str | None) -> dict:
    seed = _seed(filename)
    low = 120 + (seed % 140)
    high = low + 160 + (seed % 90)
    return {
        "ai_low": low,
        "ai_high": high,
        "label": STUB_LABELS[seed % len(STUB_LABELS)],
        "notes": "stub-range",
    }

# User value: This file pulls a budget hint out of a job description so it can still teach the price model.
import re

BUDGET_RE = re.compile(r"\$?\s*(\d{2,5})\s*(budget|bucks|dollars)")
IRRIGATION_RE = re.compile(r"irrigation|valve|sprinkler")


# User value: turns free text into a budget and category so spoken or typed details are not lost.
def extract_fields(text: str | None) -> dict:
    t = str(text or "").lower()
    match = BUDGET_RE.search(t)
    return {
        "budget_hint_usd": int(match.group(1)) if match else None,
        "label": "Irrigation Repair" if IRRIGATION_RE.search(t) else "General Repair",
    }

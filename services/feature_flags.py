# User value: This file lets operators switch training and band tightening on or off without a deploy.
import os

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


# User value: supports _flag so estimate behavior is predictable from configuration alone.
def _flag(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, "1" if default else "0")).strip().lower()
    return raw in TRUE_VALUES


FEATURE_DEV_TRAINING = _flag("FEATURE_DEV_TRAINING", True)
FEATURE_PRECISION_TIGHTEN = _flag("FEATURE_PRECISION_TIGHTEN", True)


# User value: keeps the training endpoint closed where verified prices should not be accepted.
def is_dev_training_enabled() -> bool:
    return FEATURE_DEV_TRAINING


# User value: allows falling back to raw AI ranges if learned bands ever need to be bypassed.
def is_precision_tighten_enabled() -> bool:
    return FEATURE_PRECISION_TIGHTEN

"""
Named pipeline stages, logged as `stage=` on every "Stage complete" event.
"""
from enum import Enum


class Stage(str, Enum):
    DECODED = "decoded"
    PRE_NORMALIZED = "pre_normalized"
    INFERRED = "inferred"
    MASK_RESAMPLED = "mask_resampled"
    MASK_REFINED = "mask_refined"
    ALPHA_COMPOSITED = "alpha_composited"
    SCALED = "scaled_padded"
    STROKED = "stroked"
    ENCODED = "encoded"

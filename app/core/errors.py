"""
Typed failures surfaced by the background removal pipeline.
"""


class SilhouetteError(Exception):
    """Base class for every failure raised by the pipeline."""


class UninitializedInference(SilhouetteError):
    """The inference session was used before initialize() or after cleanup()."""


class DecodeFailure(SilhouetteError):
    """The input bytes are not a decodable image."""


class UnexpectedInferenceOutput(SilhouetteError):
    """The model returned something other than a single-channel probability grid."""


class BufferAccessFailure(SilhouetteError):
    """Raw RGBA pixels could not be materialized from an image."""

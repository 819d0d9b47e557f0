"""
Exception hierarchy for the sum-relation proof pipeline.

Every stage of the pipeline raises its own subclass of ZKError so callers
can tell field conversion, synthesis, setup and proving failures apart.
"""


class ZKError(Exception):
    """Base exception for ZK operations"""
    pass


class FieldConversionError(ZKError):
    """Hash output could not be encoded as a field element"""
    pass


class SynthesisError(ZKError):
    """Constraint system construction failed"""
    pass


class SetupError(ZKError):
    """Random parameter generation failed"""
    pass


class ProvingError(ZKError):
    """Proof construction failed"""
    pass


class MissingInputError(ZKError):
    """Required request fields are absent"""
    pass

"""
Error kinds raised (or warned) by the simulation and estimation pipeline.

Fatal kinds are exceptions; the degenerate-but-recoverable kinds are warnings
so a long analysis run keeps going and the caller can still filter on them.
"""


class RtValidationError(Exception):
    """Base class for all fatal errors in this package."""


class InvalidParameters(RtValidationError, ValueError):
    """Malformed simulation or estimator inputs."""


class InsufficientData(RtValidationError, ValueError):
    """Window or estimator preconditions are not met by the data."""


class EmptyInput(UserWarning):
    """An all-zero series was passed where incidence was expected."""


class NumericalInstability(RuntimeWarning):
    """A negative or non-finite intermediate count was clamped."""

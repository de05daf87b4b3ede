class IntegrationError(Exception):
    """Base class of every error raised by the hypercube estimators."""


class InvalidBounds(IntegrationError, ValueError):
    def __init__(self, lower, upper, reason=None):
        if reason is None:
            reason = f"upper bound {upper} must be finite and larger than lower bound {lower}"
        super().__init__(f"ERR: {reason}")
        self.lower = lower
        self.upper = upper


class InvalidDimension(IntegrationError, ValueError):
    def __init__(self, dimensions):
        super().__init__(f"ERR: dimensions must be a positive integer, got {dimensions}")
        self.dimensions = dimensions


class InvalidSampleCount(IntegrationError, ValueError):
    def __init__(self, sample_count):
        super().__init__(f"ERR: sample count must be a positive integer, got {sample_count}")
        self.sample_count = sample_count


class WorkerFailure(IntegrationError, RuntimeError):
    """A worker could not finish its accumulation; no partial result is returned."""

    def __init__(self, ordinal, reason=None):
        message = f"ERR: worker {ordinal} failed during accumulation"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.ordinal = ordinal

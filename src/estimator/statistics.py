import math
import numbers
from dataclasses import dataclass, field

from scipy.stats import norm

from estimator.errors import InvalidBounds, InvalidDimension, InvalidSampleCount
from utils.constants import DEFAULT_SEED


def _is_count(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _hypercube_volume(lower, upper, dimensions):
    try:
        return (upper - lower) ** dimensions
    except OverflowError:
        return math.inf


@dataclass(frozen=True)
class IntegrationRequest:
    lower: float
    upper: float
    dimensions: int
    sample_count: int
    seed: int = DEFAULT_SEED

    def __post_init__(self):
        if not _is_count(self.dimensions) or self.dimensions < 1:
            raise InvalidDimension(self.dimensions)
        if not _is_count(self.sample_count) or self.sample_count < 1:
            raise InvalidSampleCount(self.sample_count)
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)) or self.upper <= self.lower:
            raise InvalidBounds(self.lower, self.upper)
        volume = _hypercube_volume(self.lower, self.upper, self.dimensions)
        if not (math.isfinite(volume) and volume > 0):
            raise InvalidBounds(self.lower, self.upper,
                                f"volume of [{self.lower}, {self.upper}]^{self.dimensions} is not a finite positive double")
        object.__setattr__(self, "dimensions", int(self.dimensions))
        object.__setattr__(self, "sample_count", int(self.sample_count))
        object.__setattr__(self, "lower", float(self.lower))
        object.__setattr__(self, "upper", float(self.upper))

    @property
    def volume(self) -> float:
        return _hypercube_volume(self.lower, self.upper, self.dimensions)


@dataclass(frozen=True)
class WorkerRange:
    """Half-open interval [start, end) of sample indices owned by one worker."""
    start: int
    end: int

    def __len__(self):
        return self.end - self.start

    @property
    def empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class PartialStatistics:
    """First and second moment sums of the integrand over a set of samples."""
    sum: float = 0.0
    sum_squares: float = 0.0

    def __add__(self, other):
        if not isinstance(other, PartialStatistics):
            return NotImplemented
        return PartialStatistics(self.sum + other.sum, self.sum_squares + other.sum_squares)


# Same layout, but only ever held by the coordinating thread or rank
GlobalStatistics = PartialStatistics


def reduce_partials(partials):
    """Element-wise sum of the partial statistics, in the order given."""
    total = GlobalStatistics()
    for partial in partials:
        total = total + partial
    return total


@dataclass(frozen=True)
class IntegrationResult:
    integral: float
    standard_error: float
    variance: float
    volume: float
    sample_count: int = 0
    workers: int = 1
    elapsed_time: float = field(default=0.0, compare=False)

    def confidence_interval(self, level=0.95):
        """Two sided normal-approximation interval around the estimate."""
        assert 0 < level < 1, "confidence level should have value between 0 and 1"
        z = norm.ppf(0.5 + level / 2)
        return self.integral - z * self.standard_error, self.integral + z * self.standard_error


def finalize(statistics, request):
    """Turn the reduced moment sums into the integral estimate and its standard error."""
    n = request.sample_count
    if n == 0:
        raise InvalidSampleCount(n)
    if request.upper <= request.lower:
        raise InvalidBounds(request.lower, request.upper)

    volume = request.volume
    mean = statistics.sum / n
    mean_of_squares = statistics.sum_squares / n
    # cancellation can leave a tiny negative value for near constant integrands
    variance = max(mean_of_squares - mean * mean, 0.0)

    return IntegrationResult(
        integral=mean * volume,
        standard_error=volume * math.sqrt(variance / n),
        variance=variance,
        volume=volume,
        sample_count=n,
    )

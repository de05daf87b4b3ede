import dataclasses

import numpy as np
import pytest

from estimator.MC_integration import HypercubeMCEstimator, integrate
from estimator.errors import InvalidBounds, InvalidDimension, InvalidSampleCount, WorkerFailure
from estimator.partition import partition_samples
from estimator.sampling import WorkerTask, accumulate_task
from estimator.seeding import derive_worker_seed
from estimator.statistics import IntegrationRequest, finalize, reduce_partials
from utils.commons import generate_default_configuration, reference_gaussian_integral

REFERENCE = reference_gaussian_integral(0.0, 1.0, 3)


def test_reference_value_of_the_unit_cube():
    assert REFERENCE == pytest.approx(0.416538, abs=1e-6)


@pytest.mark.parametrize("workers", [1, 8])
def test_unit_cube_estimate_within_standard_error_band(workers):
    result = integrate(0.0, 1.0, 3, 400_000, worker_count=workers)

    assert result.workers == workers
    assert result.sample_count == 400_000
    assert result.volume == 1.0
    assert abs(result.integral - REFERENCE) < 5 * result.standard_error
    assert 0 < result.standard_error < 1e-3


def test_same_seed_and_workers_reproduce_the_estimate():
    first = integrate(0.0, 1.0, 3, 100_000, worker_count=4, global_seed=2024)
    second = integrate(0.0, 1.0, 3, 100_000, worker_count=4, global_seed=2024)

    assert first.integral == second.integral
    assert first.variance == second.variance


def test_different_seeds_give_different_estimates():
    first = integrate(0.0, 1.0, 3, 10_000, worker_count=2, global_seed=1)
    second = integrate(0.0, 1.0, 3, 10_000, worker_count=2, global_seed=2)
    assert first.integral != second.integral


def test_estimate_matches_manual_pipeline():
    request = IntegrationRequest(lower=-1.0, upper=2.0, dimensions=2, sample_count=5003)
    ranges = partition_samples(request.sample_count, 3)
    partials = [
        accumulate_task(WorkerTask(i, r, derive_worker_seed(request.seed, i), request))
        for i, r in enumerate(ranges)
    ]
    expected = finalize(reduce_partials(partials), request)

    result = integrate(-1.0, 2.0, 2, 5003, worker_count=3)

    assert result == dataclasses.replace(expected, workers=3)


def test_fewer_samples_than_workers():
    result = integrate(0.0, 1.0, 3, 3, worker_count=8)

    request = IntegrationRequest(lower=0.0, upper=1.0, dimensions=3, sample_count=3)
    partials = [
        accumulate_task(WorkerTask(i, r, derive_worker_seed(request.seed, i), request))
        for i, r in enumerate(partition_samples(3, 3))
    ]
    assert result.integral == pytest.approx(finalize(reduce_partials(partials), request).integral)
    assert result.workers == 8
    assert result.variance >= 0


def test_worker_count_does_not_change_total_samples():
    evaluated = []

    def counting_kernel(points):
        evaluated.append(points.shape[0])
        return np.exp(-np.sum(points ** 2, axis=1))

    for workers in (1, 3, 7):
        evaluated.clear()
        integrate(0.0, 1.0, 2, 9_999, worker_count=workers, integrand=counting_kernel)
        assert sum(evaluated) == 9_999


@pytest.mark.parametrize("workers", [1, 5])
def test_samples_stay_uniform_for_any_partitioning(workers):
    # mean of the first coordinate over [0, 2) is 1, so its integral over [0, 2)^2 is 4
    result = integrate(0.0, 2.0, 2, 200_000, worker_count=workers, integrand=lambda points: points[:, 0])
    assert result.integral == pytest.approx(4.0, abs=5 * result.standard_error)


def test_standard_error_shrinks_like_inverse_square_root():
    ratios = []
    for seed in range(5):
        small = integrate(0.0, 1.0, 3, 20_000, worker_count=2, global_seed=seed)
        large = integrate(0.0, 1.0, 3, 320_000, worker_count=2, global_seed=seed)
        ratios.append(small.standard_error / large.standard_error)

    assert np.mean(ratios) == pytest.approx(4.0, rel=0.1)


def test_constant_integrand_has_zero_variance():
    result = integrate(0.0, 3.0, 2, 10_000, worker_count=3, integrand=lambda points: np.full(points.shape[0], 0.1))

    assert result.variance >= 0
    assert result.standard_error == pytest.approx(0.0, abs=1e-9)
    assert result.integral == pytest.approx(0.9)


@pytest.mark.parametrize("lower, upper, dimensions, sample_count, error", [
    (1.0, 0.0, 3, 10, InvalidBounds),
    (0.0, 1.0, 0, 10, InvalidDimension),
    (0.0, 1.0, 3, 0, InvalidSampleCount),
    (0.0, 1e10, 40, 10, InvalidBounds),
])
def test_invalid_requests_fail_before_any_worker_starts(lower, upper, dimensions, sample_count, error):
    started = []

    def spy(points):
        started.append(points.shape[0])
        return np.zeros(points.shape[0])

    with pytest.raises(error):
        integrate(lower, upper, dimensions, sample_count, worker_count=2, integrand=spy)
    assert started == []


def test_worker_failure_aborts_the_estimate():
    def broken(points):
        raise FloatingPointError("overflow")

    estimator = HypercubeMCEstimator(dict(generate_default_configuration(0.0, 1.0, 3, 1000, workers=4),
                                          integrand=broken))
    with pytest.raises(WorkerFailure) as excinfo:
        estimator.estimate()

    assert isinstance(excinfo.value.__cause__, FloatingPointError)
    assert estimator.output_ is None


def test_estimator_keeps_its_output():
    estimator = HypercubeMCEstimator(generate_default_configuration(0.0, 1.0, 2, 5000, workers=2))
    result = estimator.estimate()

    assert estimator.output_ is result
    assert result.elapsed_time >= 0
    low, high = result.confidence_interval()
    assert low < result.integral < high


def test_unknown_backend():
    with pytest.raises(ValueError):
        integrate(0.0, 1.0, 3, 100, backend="gpu")


def test_integrand_with_wrong_shape_fails_the_worker():
    with pytest.raises(WorkerFailure) as excinfo:
        integrate(0.0, 1.0, 3, 100, worker_count=2, integrand=lambda points: points)

    assert isinstance(excinfo.value.__cause__, ValueError)

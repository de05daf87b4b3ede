import numpy as np
from scipy import special

from utils.constants import WORKERS, DEFAULT_BACKEND, DEFAULT_SEED, CHUNK_SIZE


def generate_default_configuration(lower, upper, dimensions, sample_count, workers=WORKERS,
                                   backend=DEFAULT_BACKEND, seed=DEFAULT_SEED):
    integration_settings = {
        'lower': lower,
        'upper': upper,
        'dimensions': dimensions,
        'sample_count': sample_count,
        'seed': seed,
    }

    kwargs = {
        'integration_settings': integration_settings,
        'workers': workers,
        'backend': backend,
        'chunk_size': CHUNK_SIZE,
    }
    return kwargs


def gaussian_kernel(points):
    """exp(-sum x_i^2) for every row of a (m, d) array of points"""
    return np.exp(-np.einsum('ij,ij->i', points, points))


def hypercube_volume(lower, upper, dimensions):
    return (upper - lower) ** dimensions


def reference_gaussian_integral(lower, upper, dimensions):
    """
    Closed form of the Gaussian kernel over [lower, upper]^d.

    The kernel is product separable, so the integral is the d-th power of
    the one dimensional one: sqrt(pi)/2 * (erf(upper) - erf(lower)).
    """
    one_dimension = np.sqrt(np.pi) / 2 * (special.erf(upper) - special.erf(lower))
    return float(one_dimension ** dimensions)


def geometric_sequence_generating_function(multiplier, first_element, length=64):
    """this function generates first_element, first_element*multiplier, first_element*multiplier^2, ..."""
    assert multiplier > 1, "multiplier must be larger than 1"
    assert first_element > 0, "first_element must be positive"
    element = first_element
    for _ in range(length):
        yield element
        element *= multiplier

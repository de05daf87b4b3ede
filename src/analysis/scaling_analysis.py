import copy
import logging
import time

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from estimator.MC_integration import HypercubeMCEstimator
from utils.commons import generate_default_configuration, geometric_sequence_generating_function


def _with_settings(kwargs, workers=None, **settings):
    run_kwargs = copy.copy(kwargs)
    run_kwargs["integration_settings"] = dict(kwargs["integration_settings"], **settings)
    if workers is not None:
        run_kwargs["workers"] = workers
    return run_kwargs


def compute_experimental_scaling(kwargs, workers_list):
    """rerun the same integral for every worker count and record (workers, elapsed seconds)"""
    assert len(workers_list) > 0, "ERR: expect at least one worker count"
    assert kwargs.get("backend") != "mpi", "ERR: the MPI worker count is fixed by the communicator size"

    records = []
    for workers in workers_list:
        result = HypercubeMCEstimator(_with_settings(kwargs, workers=int(workers))).estimate()
        if result is None:
            continue
        records.append((result.workers, result.elapsed_time))
        logging.info(f"{result.workers} workers took {result.elapsed_time:0.4f}s")

    return records


def compute_speedup(records):
    """speedup relative to the first record, normally the single worker run"""
    assert len(records) > 0, "ERR: no timing records"
    baseline = records[0][1]
    return [(workers, elapsed, baseline / elapsed if elapsed > 0 else float("inf")) for workers, elapsed in records]


def compute_experimental_error(kwargs, sample_counts, n_repetitions=8):
    """mean reported standard error per sample count, each repetition with its own seed"""
    assert isinstance(sample_counts, np.ndarray), "ERR: expect np.ndarray data type for sample_counts"
    assert sample_counts.ndim == 1, "ERR: expect one dimensional row vector"
    assert kwargs.get("backend") != "mpi", "ERR: repeated error runs need every rank to see the result"

    base_seed = kwargs["integration_settings"]["seed"]
    experimental_error_list = []
    for n in sample_counts:
        tic = time.perf_counter()
        errors = [
            HypercubeMCEstimator(_with_settings(kwargs, sample_count=int(n), seed=base_seed + i)).estimate().standard_error
            for i in range(n_repetitions)
        ]
        error = float(np.mean(errors))
        experimental_error_list.append(error)
        toc = time.perf_counter()
        logging.info(f"{n} is computed, standard error is {error}, time cost: {toc - tic:0.4f}s")

    return np.array(experimental_error_list)


def compute_theoretical_error(kwargs, sample_counts, pilot_samples=10 ** 6):
    """volume * sigma / sqrt(N), sigma taken from one large pilot run"""
    assert isinstance(sample_counts, np.ndarray), "ERR: expect np.ndarray data type for sample_counts"

    pilot = HypercubeMCEstimator(_with_settings(kwargs, sample_count=pilot_samples)).estimate()
    sigma = np.sqrt(pilot.variance)
    return pilot.volume * sigma / np.sqrt(sample_counts.astype(np.float64))


def plot_scaling(records, file_name):
    speedup = compute_speedup(records)
    workers = [w for w, _, _ in speedup]

    fig = plt.figure()
    plt.title(r'Monte Carlo integration strong scaling')
    plt.xlabel("workers")
    plt.ylabel("speedup")
    plt.grid()
    plt.plot(workers, [s for _, _, s in speedup], color="red", marker="o", label=r"measured")
    plt.plot(workers, [w / workers[0] for w in workers], color="blue", linestyle="--", label=r"ideal")
    plt.legend(loc='upper left')
    plt.savefig(file_name, bbox_inches='tight', dpi=150)
    plt.close(fig)
    return file_name


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    kwargs = generate_default_configuration(lower=0.0, upper=1.0, dimensions=3, sample_count=10 ** 7)

    records = compute_experimental_scaling(kwargs, [1, 2, 4, 8])
    plot_scaling(records, "scaling.png")

    gen = geometric_sequence_generating_function(multiplier=4, first_element=10000)
    sample_counts = np.array([next(gen) for i in range(5)])
    experimental_error_list = compute_experimental_error(kwargs, sample_counts)
    theoretical_error_list = compute_theoretical_error(kwargs, sample_counts)

    plt.figure()
    plt.title(r'Standard error against sample count')
    plt.xlabel(r"$N$")
    plt.ylabel("standard error")
    plt.xscale("log")
    plt.yscale("log")
    plt.grid()
    plt.plot(sample_counts, experimental_error_list, color="red", label=r"experimental SE")
    plt.plot(sample_counts, theoretical_error_list, color="blue", label=r"theoretical SE")
    plt.legend(loc='upper right')
    plt.savefig("standard_error.png", bbox_inches='tight', dpi=150)

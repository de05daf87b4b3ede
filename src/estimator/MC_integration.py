import dataclasses
import logging

from estimator.partition import partition_samples
from estimator.sampling import WorkerTask
from estimator.seeding import derive_worker_seed
from estimator.statistics import IntegrationRequest, finalize
from reducer.factory import get_reducer
from utils.commons import gaussian_kernel, generate_default_configuration
from utils.constants import WORKERS, DEFAULT_SEED, DEFAULT_BACKEND, CHUNK_SIZE


class HypercubeMCEstimator:
    """
    Plain Monte Carlo estimate of an integral over [lower, upper]^d.

    The sample budget is split into contiguous ranges, every worker draws from
    its own MT19937 stream seeded from (seed, ordinal), and the per-worker
    moment sums are reduced by the configured backend before the estimate and
    its standard error are computed.
    """

    def __init__(self, kwargs):
        settings = kwargs["integration_settings"]
        # raises the domain errors before any worker exists
        self.request = IntegrationRequest(
            lower=settings["lower"],
            upper=settings["upper"],
            dimensions=settings["dimensions"],
            sample_count=settings["sample_count"],
            seed=settings.get("seed", DEFAULT_SEED),
        )

        self.workers = kwargs.get("workers", WORKERS)
        assert self.workers >= 1, "ERR: expect at least one worker"
        self.backend = kwargs.get("backend", DEFAULT_BACKEND)
        self.chunk_size = kwargs.get("chunk_size", CHUNK_SIZE)
        self.integrand = kwargs.get("integrand") or gaussian_kernel

        self.reducer = None
        self.output_ = None

    def build_tasks(self, workers):
        ranges = partition_samples(self.request.sample_count, workers)
        return [
            WorkerTask(
                ordinal=i,
                worker_range=worker_range,
                seed=derive_worker_seed(self.request.seed, i),
                request=self.request,
                chunk_size=self.chunk_size,
                integrand=self.integrand,
            )
            for i, worker_range in enumerate(ranges)
        ]

    def estimate(self):
        """Returns the IntegrationResult, or None on a rank that is not the coordinator."""
        self.reducer = get_reducer(self.backend, self.workers)
        workers = self.reducer.workers
        tasks = self.build_tasks(workers)

        logging.info(f"Integrate over [{self.request.lower}, {self.request.upper}]^{self.request.dimensions} with "
                     f"{self.request.sample_count} samples on {workers} {self.reducer.name} workers")
        tic = self.reducer.wall_time()
        statistics = self.reducer.execute(tasks)
        toc = self.reducer.wall_time()

        if not self.reducer.is_coordinator:
            return None

        logging.info(f"Accumulate {self.request.sample_count} samples cost {toc - tic:0.4f} seconds")

        result = finalize(statistics, self.request)
        self.output_ = dataclasses.replace(result, workers=workers, elapsed_time=toc - tic)
        logging.info(f"Estimated integral {self.output_.integral} with standard error "
                     f"{self.output_.standard_error}")
        return self.output_


def integrate(lower, upper, dimensions, sample_count, worker_count=WORKERS, global_seed=DEFAULT_SEED,
              backend=DEFAULT_BACKEND, integrand=None, chunk_size=CHUNK_SIZE):
    kwargs = generate_default_configuration(lower, upper, dimensions, sample_count, workers=worker_count,
                                            backend=backend, seed=global_seed)
    kwargs["chunk_size"] = chunk_size
    kwargs["integrand"] = integrand
    return HypercubeMCEstimator(kwargs).estimate()

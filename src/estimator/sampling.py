from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.random import Generator, MT19937

from estimator.statistics import IntegrationRequest, PartialStatistics, WorkerRange
from utils.commons import gaussian_kernel
from utils.constants import CHUNK_SIZE, CHUNK_ELEMENTS


@dataclass(frozen=True)
class WorkerTask:
    """Everything one worker needs; identical on every process, so it can be rebuilt or pickled."""
    ordinal: int
    worker_range: WorkerRange
    seed: int
    request: IntegrationRequest
    chunk_size: int = CHUNK_SIZE
    integrand: Callable = gaussian_kernel


class WorkerContext:
    """
    Private state of one worker: its MT19937 stream and a reusable point buffer.

    Nothing here is shared with other workers, so the accumulation loop
    needs no locking.
    """

    def __init__(self, ordinal, seed, request, chunk_size=CHUNK_SIZE):
        assert chunk_size >= 1, "ERR: chunk size must be positive"
        self.ordinal = ordinal
        self.request = request
        self.rng = Generator(MT19937(seed))
        rows = max(1, min(chunk_size, CHUNK_ELEMENTS // request.dimensions, request.sample_count))
        self.points = np.empty((rows, request.dimensions), dtype=np.float64)

    def sample_points(self, num_points):
        """
            Fill the first num_points rows of the buffer with points uniform in [lower, upper)^d.
            Generator.random draws 53 bit doubles in [0, 1) from the full 64 bit output, so scaling
            them introduces no modulo bias.
        """
        assert num_points <= self.points.shape[0], "ERR: requested more points than the buffer holds"
        view = self.points[:num_points]
        self.rng.random(out=view)
        view *= self.request.upper - self.request.lower
        view += self.request.lower
        return view

    def accumulate(self, worker_range, integrand=gaussian_kernel):
        total = 0.0
        total_squares = 0.0

        chunk_size = self.points.shape[0]
        pointer = worker_range.start
        while pointer < worker_range.end:
            num_points = min(chunk_size, worker_range.end - pointer)
            values = np.asarray(integrand(self.sample_points(num_points)), dtype=np.float64)
            if values.shape != (num_points,):
                raise ValueError(f"ERR: integrand must return one value per point, got shape {values.shape}")

            total += float(values.sum())
            total_squares += float(np.dot(values, values))

            # update pointer
            pointer += num_points

        return PartialStatistics(total, total_squares)


def accumulate_task(task):
    """Run one worker's share of the samples; empty ranges cost nothing."""
    if task.worker_range.empty:
        return PartialStatistics()
    context = WorkerContext(task.ordinal, task.seed, task.request, task.chunk_size)
    return context.accumulate(task.worker_range, task.integrand)

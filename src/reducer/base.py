import logging
import time

from estimator.errors import WorkerFailure
from estimator.statistics import reduce_partials


class _GeneralReducer:
    """
    Runs the worker tasks and sums their partial statistics into one total.

    Subclasses decide where the tasks run and how the partial statistics
    travel to the coordinator; the sum itself is always element-wise.
    """
    name = None

    def __init__(self, workers):
        assert workers >= 1, "ERR: expect at least one worker"
        self.workers = workers

    @property
    def is_coordinator(self):
        return True

    @staticmethod
    def wall_time():
        return time.perf_counter()

    def execute(self, tasks):
        raise NotImplementedError

    @staticmethod
    def fan_in(partials):
        """Sum in ordinal order, so a fixed worker count always gives the same bits."""
        return reduce_partials(partials)

    @staticmethod
    def worker_failed(ordinal, exc):
        logging.critical(f"worker {ordinal} failed: {exc!r}")
        return WorkerFailure(ordinal, exc)

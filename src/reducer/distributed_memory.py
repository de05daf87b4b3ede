import logging

import numpy as np
from mpi4py import MPI

from estimator.sampling import accumulate_task
from estimator.statistics import GlobalStatistics
from reducer.base import _GeneralReducer

COORDINATOR_RANK = 0


class MPIReducer(_GeneralReducer):
    """
    One worker per MPI rank. Each rank accumulates only its own task and the
    (sum, sum_squares) pair is combined with a blocking collective reduction;
    only the coordinator rank receives the total.
    """
    name = "mpi"

    def __init__(self, workers=None, comm=None):
        self.comm = MPI.COMM_WORLD if comm is None else comm
        self.rank = self.comm.Get_rank()
        size = self.comm.Get_size()
        if workers is not None and workers != size:
            logging.warning(f"requested {workers} workers but the communicator has {size} ranks, using {size}")
        super().__init__(size)

    @property
    def is_coordinator(self):
        return self.rank == COORDINATOR_RANK

    @staticmethod
    def wall_time():
        return MPI.Wtime()

    def execute(self, tasks):
        assert len(tasks) == self.workers, "ERR: expect one task per rank"
        task = tasks[self.rank]

        try:
            partial = accumulate_task(task)
        except Exception as exc:
            failure = self.worker_failed(task.ordinal, exc)
            if self.workers > 1:
                # the other ranks are already blocked in the reduction
                self.comm.Abort(1)
            raise failure from exc

        local = np.array([partial.sum, partial.sum_squares], dtype=np.float64)
        total = self.comm.reduce(local, op=MPI.SUM, root=COORDINATOR_RANK)

        if not self.is_coordinator:
            return None
        return GlobalStatistics(float(total[0]), float(total[1]))

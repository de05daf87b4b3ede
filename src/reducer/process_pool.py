import multiprocessing

from estimator.sampling import accumulate_task
from reducer.base import _GeneralReducer


class ProcessReducer(_GeneralReducer):
    """
    Same fan-out/fan-in as the thread pool, but every worker is a separate
    process. Tasks and integrands must therefore be picklable.
    """
    name = "process"

    def execute(self, tasks):
        assert len(tasks) == self.workers, "ERR: expect one task per worker"

        with multiprocessing.Pool(processes=self.workers) as pool:
            async_results = [pool.apply_async(accumulate_task, (task,)) for task in tasks]

            partials = []
            for task, async_result in zip(tasks, async_results):
                try:
                    partials.append(async_result.get())
                except Exception as exc:
                    pool.terminate()
                    raise self.worker_failed(task.ordinal, exc) from exc

        return self.fan_in(partials)

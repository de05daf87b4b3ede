import concurrent.futures

from estimator.sampling import accumulate_task
from reducer.base import _GeneralReducer


class ThreadReducer(_GeneralReducer):
    """Fork a pool of threads, join it, then fan the partial statistics in."""
    name = "thread"

    def execute(self, tasks):
        assert len(tasks) == self.workers, "ERR: expect one task per worker"

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(accumulate_task, task) for task in tasks]

            partials = []
            for task, future in zip(tasks, futures):
                try:
                    partials.append(future.result())
                except Exception as exc:
                    for pending in futures:
                        pending.cancel()
                    raise self.worker_failed(task.ordinal, exc) from exc

        return self.fan_in(partials)

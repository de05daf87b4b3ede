from utils.constants import BACKENDS


def get_reducer(backend, workers):
    """Pick the reduction backend by name; mpi4py is only imported when MPI is requested."""
    if backend == "thread":
        from reducer.shared_memory import ThreadReducer
        return ThreadReducer(workers)
    if backend == "process":
        from reducer.process_pool import ProcessReducer
        return ProcessReducer(workers)
    if backend == "mpi":
        from reducer.distributed_memory import MPIReducer
        return MPIReducer(workers)
    raise ValueError(f"ERR: unknown backend {backend!r}, expect one of {', '.join(BACKENDS)}")

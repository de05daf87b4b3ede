from estimator.statistics import WorkerRange


def partition_samples(num_samples, workers):
    """
    Split [0, num_samples) into `workers` contiguous half-open ranges.

    The first num_samples % workers workers get one extra sample. When
    num_samples < workers the trailing workers get an empty range.
    """
    if workers < 1:
        raise ValueError(f"ERR: expect at least one worker, got {workers}")
    assert num_samples >= 0, "ERR: negative sample count"

    base, remainder = divmod(num_samples, workers)

    ranges = []
    start = 0
    for i in range(workers):
        size = base + 1 if i < remainder else base
        ranges.append(WorkerRange(start, start + size))
        start += size

    assert start == num_samples, "ERR: partition does not cover every sample"
    return ranges

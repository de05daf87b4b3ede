import pytest

from estimator.partition import partition_samples


@pytest.mark.parametrize("num_samples", [0, 1, 7, 8, 9, 100, 10_000_001])
@pytest.mark.parametrize("workers", [1, 2, 3, 8, 13])
def test_ranges_cover_without_gaps_or_overlaps(num_samples, workers):
    ranges = partition_samples(num_samples, workers)

    assert len(ranges) == workers
    assert ranges[0].start == 0
    assert ranges[-1].end == num_samples
    for left, right in zip(ranges, ranges[1:]):
        assert left.end == right.start
    assert sum(len(r) for r in ranges) == num_samples


def test_remainder_goes_to_first_workers():
    sizes = [len(r) for r in partition_samples(10, 4)]
    assert sizes == [3, 3, 2, 2]


def test_sizes_differ_by_at_most_one():
    sizes = [len(r) for r in partition_samples(1_000_003, 7)]
    assert max(sizes) - min(sizes) <= 1


def test_fewer_samples_than_workers_leaves_trailing_ranges_empty():
    ranges = partition_samples(3, 8)
    assert [len(r) for r in ranges] == [1, 1, 1, 0, 0, 0, 0, 0]
    assert all(r.empty for r in ranges[3:])
    assert all(r.start == r.end == 3 for r in ranges[3:])


def test_partition_is_deterministic():
    assert partition_samples(12345, 6) == partition_samples(12345, 6)


def test_zero_workers_rejected():
    with pytest.raises(ValueError):
        partition_samples(10, 0)

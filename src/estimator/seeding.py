from utils.constants import SEED_MULTIPLIER, SEED_MASK


def derive_worker_seed(seed, ordinal):
    """
    seed XOR (SEED_MULTIPLIER * ordinal), truncated to 64 bits.

    Multiplying by an odd constant is a bijection modulo 2^64, so distinct
    ordinals below 2^64 always give distinct seeds, and consecutive ordinals
    differ in most bits.
    """
    assert ordinal >= 0, "ERR: worker ordinal must be non negative"
    return (seed ^ (SEED_MULTIPLIER * ordinal)) & SEED_MASK


def derive_worker_seeds(seed, workers):
    return [derive_worker_seed(seed, i) for i in range(workers)]

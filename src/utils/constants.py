import os

# Seed used by every driver unless the caller overrides it
DEFAULT_SEED = 12345

WORKERS = os.cpu_count() or 1

# Points drawn per vectorized batch inside one worker
CHUNK_SIZE = 2 ** 16

# Upper bound on the float64 entries of one point buffer, so wide cubes use fewer rows
CHUNK_ELEMENTS = 2 ** 20

# Odd multiplier (2^64 / golden ratio) mixed into the per-worker seed
SEED_MULTIPLIER = 0x9E3779B97F4A7C15
SEED_MASK = (1 << 64) - 1

BACKENDS = ("thread", "process", "mpi")
DEFAULT_BACKEND = "thread"

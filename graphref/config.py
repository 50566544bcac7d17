"""Algorithm defaults and sentinel values."""

# BFS depth of vertices the source cannot reach (Java Long.MAX_VALUE).
UNREACHABLE_DISTANCE = 2**63 - 1

# SSSP distance of vertices the source cannot reach.
INFINITE_DISTANCE = float("inf")

DEFAULT_PAGERANK_DAMPING = 0.85
DEFAULT_PAGERANK_ITERATIONS = 20
DEFAULT_CDLP_ITERATIONS = 10

# Relative tolerance for real-valued results (PR, LCC, SSSP).
DEFAULT_EPSILON = 1e-4

ALGORITHM_NAMES = ["bfs", "wcc", "pr", "lcc", "sssp", "cdlp"]

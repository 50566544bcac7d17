"""Write result maps in the Graphalytics output format."""

import math
from pathlib import Path
from typing import Union


def format_value(value) -> str:
    """Format one result value: integers as-is, reals with full precision."""
    if isinstance(value, float):
        if math.isinf(value):
            return "infinity" if value > 0 else "-infinity"
        if math.isnan(value):
            return "nan"
        return repr(value)
    return str(int(value))


def write_output(path: Union[str, Path], results: dict) -> int:
    """Write ``<vertexId> <value>`` lines, one per vertex, sorted by id.

    Returns the number of lines written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        for vertex_id in sorted(results):
            f.write(f"{vertex_id} {format_value(results[vertex_id])}\n")

    return len(results)

"""HTTP service running reference algorithms on a preloaded graph."""

import logging
import math
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
from fastapi import BackgroundTasks, FastAPI, HTTPException

from graphref.diagnostics import graph_summary
from graphref.dispatch import Algorithm, parameters_from_dict, run_algorithm
from graphref.errors import (
    InvalidGraph,
    InvalidParameter,
    UnsupportedAlgorithm,
    VertexNotFound,
)
from graphref.graph import PropertyGraph
from graphref.loader import load_dataset

GRAPH = None

# Configuration via environment variables
GRAPH_PATH = os.environ.get("GRAPHREF_GRAPH_PATH", "graph")
GRAPH_FORMAT = os.environ.get("GRAPHREF_GRAPH_FORMAT", "auto")  # "auto", "mmap" or "dataset"
# Only consulted for datasets; "" keeps what the properties file says
GRAPH_DIRECTED = os.environ.get("GRAPHREF_DIRECTED", "")

logger = logging.getLogger(__name__)


def load_graph(path: str, format: str = "auto", directed: Optional[bool] = None) -> PropertyGraph:
    """
    Load graph from disk.

    Args:
        path: Directory holding an mmap graph or an LDBC dataset
        format: "auto" (detect from directory contents), "mmap" or "dataset"
        directed: Directedness override for datasets

    Returns:
        Loaded PropertyGraph
    """
    path = Path(path)

    if format == "auto":
        if (path / "metadata.pkl").exists():
            format = "mmap"
        elif (path / f"{path.name}.v").exists():
            format = "dataset"
        else:
            raise ValueError(f"Cannot auto-detect format for: {path}")

    if format == "mmap":
        return PropertyGraph.load_mmap(path)
    elif format == "dataset":
        return load_dataset(path, directed=directed).graph
    else:
        raise ValueError(f"Unknown format: {format}")


def _directed_override():
    if not GRAPH_DIRECTED:
        return None
    return GRAPH_DIRECTED.lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the graph on startup."""
    global GRAPH
    logger.info("Loading graph from %s (format=%s)...", GRAPH_PATH, GRAPH_FORMAT)
    GRAPH = load_graph(GRAPH_PATH, GRAPH_FORMAT, _directed_override())
    logger.info("Server ready with %r", GRAPH)
    yield
    GRAPH = None


APP = FastAPI(
    title="graphref",
    lifespan=lifespan,
)


def _json_value(value):
    """JSON has no infinity; unreachable distances become null."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def execute(request: dict) -> dict:
    """Run the algorithm described by ``request`` on the loaded graph."""
    if GRAPH is None:
        raise HTTPException(503, "graph not loaded")
    if "algorithm" not in request:
        raise HTTPException(400, "request must have property 'algorithm'")

    try:
        algorithm = Algorithm.from_name(request["algorithm"])
        parameters = parameters_from_dict(algorithm, request.get("parameters"))
        results = run_algorithm(GRAPH, algorithm, parameters)
    except UnsupportedAlgorithm as e:
        raise HTTPException(404, str(e))
    except (InvalidParameter, VertexNotFound) as e:
        raise HTTPException(400, str(e))
    except InvalidGraph as e:
        raise HTTPException(422, str(e))

    return {
        "algorithm": algorithm.value,
        "results": {str(vid): _json_value(value) for vid, value in results.items()},
    }


@APP.get("/graph")
def describe_graph():
    """Summary statistics of the loaded graph."""
    if GRAPH is None:
        raise HTTPException(503, "graph not loaded")
    return graph_summary(GRAPH)


@APP.post("/run")
def sync_run(request: dict):
    """Run an algorithm and return its results."""
    return execute(request)


def async_run(callback_url: str, request: dict):
    """Run an algorithm and post the results to ``callback_url``."""
    try:
        response = execute(request)
    except HTTPException as e:
        response = {"algorithm": request.get("algorithm"), "error": e.detail}

    try:
        with httpx.Client(timeout=httpx.Timeout(timeout=600.0)) as client:
            res = client.post(callback_url, json=response)
            res.raise_for_status()
            logger.info("Posted to %s with code %d", callback_url, res.status_code)
    except httpx.HTTPError as e:
        logger.error("Callback to %s failed with: %s", callback_url, e)


@APP.post("/asyncrun")
def async_query(background_tasks: BackgroundTasks, request: dict):
    """Handle an asynchronous run request."""
    callback = request.get("callback")
    if not callback:
        raise HTTPException(400, "request must have property 'callback'")
    if "algorithm" not in request:
        raise HTTPException(400, "request must have property 'algorithm'")

    logger.info("Doing async run for %s", callback)
    background_tasks.add_task(async_run, callback, request)
    return {"status": "accepted"}

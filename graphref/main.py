"""Start a single FastAPI uvicorn worker for development.

The graph to serve is read from ``GRAPHREF_GRAPH_PATH`` (default ``graph``),
``GRAPHREF_GRAPH_FORMAT`` (``auto``, ``mmap`` or ``dataset``) and, for
datasets, ``GRAPHREF_DIRECTED``. See ``graphref.server``.
"""
import uvicorn


if __name__ == "__main__":
    uvicorn.run(
        "graphref.server:APP",
        host="0.0.0.0",
        port=6430,
        reload=True,
        reload_dirs=["graphref"],
    )

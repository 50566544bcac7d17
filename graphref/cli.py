"""Command line interface: build, run, validate and inspect graphs."""

import argparse
import logging
import sys
import time
from pathlib import Path

from graphref.config import ALGORITHM_NAMES, DEFAULT_EPSILON
from graphref.diagnostics import print_graph_summary
from graphref.dispatch import Algorithm, parameters_from_dict, run_algorithm
from graphref.errors import GraphrefError
from graphref.graph import PropertyGraph
from graphref.loader import load_dataset, load_reference
from graphref.output import write_output
from graphref.validation import validate_output


def _load(path: Path, directed=None):
    """Load an mmap graph or an LDBC dataset directory.

    Returns ``(graph, dataset)``; ``dataset`` is None for mmap graphs.
    """
    if (path / "metadata.pkl").exists():
        return PropertyGraph.load_mmap(path), None
    dataset = load_dataset(path, directed=directed)
    return dataset.graph, dataset


def build(args):
    """Convert an LDBC dataset directory to the mmap format."""
    dataset = load_dataset(args.dataset_dir, directed=args.directed)
    dataset.graph.save_mmap(args.output_dir)


def run(args):
    """Run one algorithm, optionally writing and validating its output."""
    graph, dataset = _load(args.graph, directed=args.directed)
    algorithm = Algorithm.from_name(args.algorithm)

    # Dataset defaults first, command line values override
    values = dataset.algorithm_parameters(algorithm.value) if dataset else {}
    overrides = {
        "source_vertex": args.source_vertex,
        "damping_factor": args.damping_factor,
        "iterations": args.iterations,
    }
    if args.iterations is not None:
        values.pop("num_iterations", None)
        values.pop("max_iterations", None)
    values.update({k: v for k, v in overrides.items() if v is not None})
    parameters = parameters_from_dict(algorithm, values)

    print(f"Running {algorithm.name} with {parameters}")
    t0 = time.perf_counter()
    results = run_algorithm(graph, algorithm, parameters)
    t1 = time.perf_counter()
    print(f"Processed {len(results):,} vertices in {t1 - t0:.3f}s")

    if args.output:
        count = write_output(args.output, results)
        print(f"Wrote {count:,} lines to {args.output}")

    if args.reference:
        reference = load_reference(args.reference)
        validation = validate_output(algorithm, results, reference, epsilon=args.epsilon)
        print(validation.summary())
        if not validation.valid:
            sys.exit(2)


def info(args):
    """Print summary statistics of a graph."""
    graph, _ = _load(args.graph, directed=args.directed)
    print_graph_summary(graph)


def _add_directed_flags(parser):
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--directed", dest="directed", action="store_true", default=None,
        help="Treat the dataset as directed (overrides the properties file)",
    )
    group.add_argument(
        "--undirected", dest="directed", action="store_false",
        help="Treat the dataset as undirected (overrides the properties file)",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Reference implementations of the Graphalytics algorithms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a dataset to the fast-loading mmap format
  graphref build datasets/example-directed graphs/example-directed

  # Run BFS with the source vertex from the dataset properties
  graphref run datasets/example-directed --algorithm bfs --output bfs.out

  # Run PageRank and validate against reference output
  graphref run graphs/example-directed --algorithm pr --iterations 2 \\
      --reference datasets/example-directed/example-directed-PR
        """,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log algorithm iterations"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build_parser = subparsers.add_parser(
        "build", help="Convert an LDBC dataset to memory-mapped format"
    )
    build_parser.add_argument("dataset_dir", type=Path, help="LDBC dataset directory")
    build_parser.add_argument("output_dir", type=Path, help="Directory for mmap output files")
    _add_directed_flags(build_parser)

    run_parser = subparsers.add_parser("run", help="Run an algorithm")
    run_parser.add_argument(
        "graph", type=Path, help="mmap graph directory or LDBC dataset directory"
    )
    run_parser.add_argument(
        "--algorithm", "-a", required=True, type=str.lower, choices=ALGORITHM_NAMES,
        help="Algorithm to run",
    )
    run_parser.add_argument("--source-vertex", type=int, help="Source vertex (BFS, SSSP)")
    run_parser.add_argument("--damping-factor", type=float, help="Damping factor (PR)")
    run_parser.add_argument(
        "--iterations", type=int, help="Iterations (PR) or maximum iterations (CDLP)"
    )
    run_parser.add_argument("--output", "-o", type=Path, help="Output file for results")
    run_parser.add_argument("--reference", type=Path, help="Reference output to validate against")
    run_parser.add_argument(
        "--epsilon", type=float, default=DEFAULT_EPSILON,
        help=f"Relative tolerance for real results (default: {DEFAULT_EPSILON})",
    )
    _add_directed_flags(run_parser)

    info_parser = subparsers.add_parser("info", help="Print graph statistics")
    info_parser.add_argument(
        "graph", type=Path, help="mmap graph directory or LDBC dataset directory"
    )
    _add_directed_flags(info_parser)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"build": build, "run": run, "info": info}
    if args.command not in commands:
        parser.print_help()
        sys.exit(1)

    try:
        commands[args.command](args)
    except (GraphrefError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

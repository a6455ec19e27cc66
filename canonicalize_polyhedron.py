"""
Command line tool that canonicalizes a seed polyhedron or a mesh file.
"""

import argparse
import logging
import os
import sys

import numpy as np
import trimesh

from canonicalization import (
    adjust_xyz,
    calculate_center_offset,
    calculate_planarity_error_vectorized,
    calculate_tangency_error_vectorized,
    canonical_xyz,
    canonicalize_with_report,
    rescale,
)
from data_types import Polyhedron, seed_from_name


DEFAULT_METHOD = "canonicalize"
DEFAULT_ITERATIONS = 200
METHODS = ("canonicalize", "canonical-xyz", "adjust-xyz")

logger = logging.getLogger("canonicalize_polyhedron")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Canonicalize a polyhedron: tangent edges, planar faces, centred.")
    parser.add_argument("source", type=str,
                        help="Seed name (T, C, O, I, D, Pn, An, Yn) or path to a mesh file trimesh can load")
    parser.add_argument("--method", choices=METHODS, default=DEFAULT_METHOD, help="Canonicalization strategy")
    parser.add_argument("--iterations", "-n", type=int, default=DEFAULT_ITERATIONS, help="Iteration budget")
    parser.add_argument("--rescale", action="store_true",
                        help="Scale the result so the farthest vertex lies on the unit sphere")
    parser.add_argument("--output", "-o", type=str, default=None,
                        help="Where to save the result: .npy for the vertex buffer, any trimesh format otherwise")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging and progress bars")
    return parser.parse_args(argv)


def load_polyhedron(source: str) -> Polyhedron:
    """Build a seed by name, or load a mesh file with trimesh."""
    if not os.path.isfile(source):
        return seed_from_name(source)

    mesh = trimesh.load(source, force="mesh")
    name = os.path.splitext(os.path.basename(source))[0]
    return Polyhedron.from_trimesh(mesh, name=name)


def save_polyhedron(polyhedron: Polyhedron, output_path: str) -> None:
    if output_path.lower().endswith(".npy"):
        np.save(output_path, np.array(polyhedron.vertices))
    else:
        polyhedron.to_trimesh().export(output_path)


def run(polyhedron: Polyhedron, method: str, iterations: int, verbose: bool = False) -> Polyhedron:
    if method == "canonicalize":
        result, report = canonicalize_with_report(polyhedron, iterations, verbose=verbose)
        print(f"Status: {report.status.value} after {report.iterations} iterations")
        return result
    if method == "canonical-xyz":
        return canonical_xyz(polyhedron, iterations, verbose=verbose)
    return adjust_xyz(polyhedron, iterations, verbose=verbose)


def print_summary(polyhedron: Polyhedron) -> None:
    edges = polyhedron.edges()
    magnitudes = np.linalg.norm(polyhedron.vertices, axis=1)
    print(f"{polyhedron.name}: {len(polyhedron.vertices)} vertices, {len(edges)} edges, {len(polyhedron.faces)} faces")
    print(f"  tangency error:  {calculate_tangency_error_vectorized(polyhedron.vertices, edges):.3e}")
    print(f"  planarity error: {calculate_planarity_error_vectorized(polyhedron.vertices, polyhedron.faces):.3e}")
    print(f"  centre offset:   {calculate_center_offset(polyhedron.vertices, edges):.3e}")
    print(f"  vertex radius:   {magnitudes.min():.6f} - {magnitudes.max():.6f}")


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(name)s - %(levelname)s - %(message)s")

    if args.iterations < 0:
        print(f"Error: --iterations must be non-negative. Got: {args.iterations}")
        sys.exit(1)

    if args.output and not os.path.isdir(os.path.dirname(os.path.abspath(args.output))):
        print(f"Error: The directory for {args.output} does not exist.")
        sys.exit(1)

    try:
        polyhedron = load_polyhedron(args.source)
        result = run(polyhedron, args.method, args.iterations, verbose=args.verbose)
        if args.rescale:
            result = result.with_vertices(rescale(result.vertices))
    except ValueError as e:
        logger.error("Canonicalization of %s failed: %s", args.source, e)
        sys.exit(1)

    print_summary(result)

    if args.output:
        save_polyhedron(result, args.output)
        print(f"Saved {args.output}")


if __name__ == "__main__":
    main()

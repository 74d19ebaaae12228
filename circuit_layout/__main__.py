import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from circuit_layout import (
    CircuitTopology,
    InvalidGraphError,
    LayoutOptions,
    TopologyFormatError,
    calculate_layout,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _build_options(args: argparse.Namespace) -> LayoutOptions:
    return LayoutOptions(
        use_pattern_recognition=not args.no_patterns,
        prioritize_planarity=not args.no_planarity,
        annealing_iterations=args.annealing_iterations,
        use_optimization=args.optimize,
        random_seed=args.seed,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Compute a 2-D layout for a circuit topology")
    parser.add_argument("path", help="Path to the topology JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=123,
        help="Random seed used for annealing (default: 123)",
    )
    parser.add_argument(
        "--annealing-iterations",
        type=int,
        default=1000,
        help="Simulated annealing steps for planarity placement (default: 1000)",
    )
    parser.add_argument(
        "--no-patterns",
        action="store_true",
        help="Disable motif detection and super-node placement",
    )
    parser.add_argument(
        "--no-planarity",
        action="store_true",
        help="Place the reduced graph without simulated annealing",
    )
    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Use the multi-variant optimization pipeline (only with --no-patterns)",
    )
    parser.add_argument(
        "--output",
        help="Write the layout JSON to this path instead of stdout",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Reading topology from %s", args.path)
    with open(args.path) as fin:
        payload = json.load(fin)

    try:
        topology = CircuitTopology.from_dict(payload)
        layout = calculate_layout(topology, _build_options(args))
    except (InvalidGraphError, TopologyFormatError) as exc:
        logger.error("Cannot lay out %s: %s", args.path, exc)
        raise SystemExit(1)

    rendered = json.dumps(layout.to_dict(), indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing layout to %s", output_path)
        output_path.write_text(rendered + "\n", encoding="utf-8")
    else:
        print(rendered)


if __name__ == "__main__":
    main(sys.argv[1:])

"""Command-line interface for terrain generation."""

import argparse
import logging
import time
from pathlib import Path

import structlog


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for terrain generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural island with rivers and moisture"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default="default",
        help="Config name in configs/ or path to a TOML file (default: default)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Override the config seed")
    parser.add_argument(
        "--size", type=int, default=None, help="Override the config map size"
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="saves/island.npz",
        help="Output path (default: saves/island.npz)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure structlog
    level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )

    logger = structlog.get_logger()

    # Import here to avoid slow startup for --help
    from .config import config_from_mapping, find_config, load_config
    from .exceptions import ConfigError
    from .generator import generate_terrain
    from .harbor import find_best_harbor
    from .persistence import save_terrain
    from .validation import validate_terrain

    try:
        config_path = find_config(args.config)
    except FileNotFoundError as e:
        logger.error("config_not_found", name=args.config, reason=str(e))
        raise SystemExit(1)

    try:
        config = load_config(config_path)
        overrides = {}
        if args.seed is not None:
            overrides["seed"] = args.seed
        if args.size is not None:
            overrides["map_size"] = args.size
        if overrides:
            config = config_from_mapping({**config.model_dump(), **overrides})
    except ConfigError as e:
        logger.error("config_invalid", path=str(config_path), reason=str(e))
        raise SystemExit(1)

    logger.info(
        "config_loaded", path=str(config_path), seed=config.seed, map_size=config.map_size
    )

    start_time = time.time()
    result = generate_terrain(config)
    gen_time = time.time() - start_time

    logger.info("generation_complete", seconds=round(gen_time, 2), rivers=len(result.rivers))

    validation = validate_terrain(result)
    if not validation.passed:
        raise SystemExit(1)

    harbor = find_best_harbor(result)
    logger.info("best_harbor", x=harbor.x, y=harbor.y)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_terrain(output_path, result)


if __name__ == "__main__":
    main()

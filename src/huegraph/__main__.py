"""Connect to a bridge, mirror its resources and keep following the event stream.

    python -m huegraph --tree
"""

import argparse
import json
import logging
import sys

from huegraph.config import BridgeSettings
from huegraph.engine import HueEngine
from huegraph.errors import ConfigurationError

logger = logging.getLogger("huegraph")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="huegraph", description="Mirror a Hue bridge's v2 resource graph")
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: INFO)",
    )
    parser.add_argument("--tree", action="store_true", help="print the resource tree once loaded")
    parser.add_argument("--table", action="store_true", help="print the device table once loaded")
    parser.add_argument("--full", action="store_true", help="include services in the device table")
    parser.add_argument("--once", action="store_true", help="exit after loading instead of streaming")
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        settings = BridgeSettings.from_env()
    except ConfigurationError as e:
        logger.error("%s", e)
        return 2

    engine = HueEngine(settings)

    def ready():
        logger.info("Bridge ready, %d resources", len(engine.registry))
        if args.tree:
            print(engine.repository.render_tree())
        if args.table:
            print(json.dumps(engine.repository.device_table(full=args.full), indent=2))
        if args.once:
            engine.stop()

    engine.start(on_ready=ready)
    try:
        engine.run_forever()
    except KeyboardInterrupt:
        engine.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())

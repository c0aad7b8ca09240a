import argparse
import logging
import sys

import uvicorn

from tokenring.config import NodeConfig
from tokenring.server.node import RingNode

logger = logging.getLogger("tokenring")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tokenring",
        description="Run one node of the token ring health check.",
    )
    parser.add_argument("--id", dest="node_id", help="ID of this node (required)")
    parser.add_argument("--addr", dest="listen_addr", help="Address to listen on (e.g., :8080)")
    parser.add_argument(
        "--public-addr",
        dest="public_addr",
        help="Publicly reachable URL (defaults to http://localhost + addr)",
    )
    parser.add_argument(
        "--neighbor",
        help="Full address of the next node in the ring (e.g., http://localhost:8081)",
    )
    parser.add_argument(
        "--initiator",
        action="store_true",
        default=None,
        help="Issue tokens periodically from this node",
    )
    parser.add_argument("--interval", dest="issue_interval", type=float, help="Seconds between tokens")
    parser.add_argument("--startup-delay", dest="startup_delay", type=float, help="Seconds before the first token")
    parser.add_argument("--timeout", dest="request_timeout", type=float, help="Per-hop delivery timeout in seconds")
    parser.add_argument("--log-level", dest="log_level", help="Logging level: critical, error, warning, info, debug or trace (default info)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = NodeConfig.from_env(**vars(args))
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("Invalid configuration: %s", e)
        parser.print_usage(sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level_number,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    logger.info("Starting node with config: %s", config.describe())

    node = RingNode(config)
    node.start()

    logger.info(
        "Starting server on %s. API endpoint: /status, P2P endpoint: /token",
        config.listen_addr,
    )

    try:
        uvicorn.run(
            node.app,
            host=config.listen_host,
            port=config.listen_port,
            log_level=config.log_level.lower(),
        )
    finally:
        node.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())

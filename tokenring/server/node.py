from typing import Optional

import logging

from tokenring.config import NodeConfig
from tokenring.connectors.base import TokenTransport
from tokenring.connectors.rest_connector import RestTransport
from tokenring.ring.circulator import TokenCirculator
from tokenring.ring.scheduler import IssueScheduler
from tokenring.ring.status import RingStatus
from tokenring.server.app import create_app

logger = logging.getLogger("tokenring.server")


class RingNode:
    """
    Server-owned node assembler.
    SINGLE source of truth for one process.

    This class wires together:
        RingStatus
        TokenTransport
        TokenCirculator
        IssueScheduler (initiators only)
        FastAPI app
    """

    def __init__(self, config: NodeConfig, transport: Optional[TokenTransport] = None):
        logger.info("[NODE] Initializing | %s", config.describe())

        self.config = config
        self.status = RingStatus()
        self.transport = transport or RestTransport(timeout_seconds=config.request_timeout)
        self.circulator = TokenCirculator(config, self.transport, self.status)
        self.app = create_app(self.circulator, self.status, config)

        self.scheduler: Optional[IssueScheduler] = None
        if config.initiator:
            self.scheduler = IssueScheduler(
                self.circulator.issue,
                interval=config.issue_interval,
                startup_delay=config.startup_delay,
                name=f"token-issuer-{config.node_id}",
            )

        if not config.has_neighbor:
            logger.info("[NODE] No neighbor specified. This node is the end of the chain.")

        logger.info("[NODE] Ready")

    def start(self) -> None:
        if self.scheduler is not None:
            self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop(timeout=self.config.request_timeout * 2)
        self.transport.shutdown()

from __future__ import annotations

import logging
from typing import Optional

from ..config import NodeConfig
from ..connectors.base import TokenTransport, TransportError, token_url
from ..models import Token
from .status import RingStatus

logger = logging.getLogger(__name__)


# Delivery outcomes
FORWARDED = "forwarded"
RETURNED = "returned"
CLOSED = "closed"
DROPPED = "dropped"


class TokenCirculator:
    """
    Forwarding and fallback logic of a single ring node.

    A token either closes its loop here (this node issued it) or is
    signed and passed to the configured neighbor. When the neighbor
    cannot be reached the token goes straight back to its issuer,
    never to a third node, so a broken link costs at most one extra
    hop and can't make a token loop forever.

    The circulator keeps no per-token state: every call works only
    from the token it is given and the static node configuration.
    """

    def __init__(
        self,
        config: NodeConfig,
        transport: TokenTransport,
        status: Optional[RingStatus] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._status = status

    @property
    def node_id(self) -> str:
        return self._config.node_id

    @property
    def public_addr(self) -> str:
        return self._config.public_addr

    # ============================================================
    # ISSUE
    # ============================================================

    def issue(self) -> Token:
        logger.info("[CIRCULATOR] Node %s is issuing a new token", self.node_id)

        token = Token(issuer=self.node_id, signers=[self.public_addr])
        self.forward(token)
        return token

    # ============================================================
    # RECEIVE
    # ============================================================

    def receive(self, token: Token) -> str:
        logger.info(
            "[CIRCULATOR] Node %s received token | issuer=%s | hops=%d",
            self.node_id,
            token.issuer,
            len(token.signers),
        )

        if token.issuer == self.node_id:
            logger.info(
                "[CIRCULATOR] Token has completed its journey and returned to issuer %s",
                self.node_id,
            )
            self._close(token)
            return CLOSED

        if not token.signers:
            logger.error(
                "[CIRCULATOR] Dropping token from %s: signers list is empty",
                token.issuer,
            )
            return DROPPED

        token.sign(self.public_addr)
        return self.forward(token)

    # ============================================================
    # FORWARD
    # ============================================================

    def forward(self, token: Token) -> str:
        neighbor = self._config.neighbor

        if not neighbor:
            logger.info("[CIRCULATOR] Node %s has no neighbor", self.node_id)
            return self.return_to_issuer(token)

        logger.info(
            "[CIRCULATOR] Node %s is attempting to forward token to neighbor %s",
            self.node_id,
            token_url(neighbor),
        )

        try:
            status_code = self._transport.deliver(neighbor, token)
        except TransportError as e:
            logger.warning("[CIRCULATOR] Neighbor %s is unreachable: %s", neighbor, e)
            return self.return_to_issuer(token)

        if not 200 <= status_code < 300:
            # Reachable but not acknowledged: logged only, the hop still counts
            logger.warning(
                "[CIRCULATOR] Neighbor %s returned non-OK status | status=%d",
                neighbor,
                status_code,
            )
        else:
            logger.info("[CIRCULATOR] Token successfully forwarded to neighbor %s", neighbor)

        return FORWARDED

    # ============================================================
    # FALLBACK
    # ============================================================

    def return_to_issuer(self, token: Token) -> str:
        if not token.signers:
            logger.error(
                "[CIRCULATOR] Cannot return token to issuer %s: signers list is empty",
                token.issuer,
            )
            return DROPPED

        issuer_addr = token.issuer_address

        if issuer_addr == self.public_addr and token.issuer != self.node_id:
            # signers[0] is this node but the token is not ours: it would come straight back
            logger.error(
                "[CIRCULATOR] Dropping token from %s: issuer address %s belongs to node %s",
                token.issuer,
                issuer_addr,
                self.node_id,
            )
            return DROPPED

        logger.info("[CIRCULATOR] Returning token to issuer at %s", token_url(issuer_addr))

        try:
            self._transport.deliver(issuer_addr, token)
        except TransportError as e:
            logger.error(
                "[CIRCULATOR] Failed to return token to issuer %s, token dropped: %s",
                issuer_addr,
                e,
            )
            return DROPPED

        logger.info("[CIRCULATOR] Token successfully returned to issuer")
        return RETURNED

    # ============================================================
    # CLOSURE
    # ============================================================

    def _close(self, token: Token) -> None:
        logger.info("--- Ring Health Check Result ---")
        logger.info("Token issued by %s.", token.issuer)
        logger.info("Path taken before returning: %s", token.signers)
        logger.info("---------------------------------")

        if self._status is None:
            return

        try:
            self._status.record(token)
        except Exception:
            logger.exception("[CIRCULATOR] Failed to record completed traversal")

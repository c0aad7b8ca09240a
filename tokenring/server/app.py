from fastapi import BackgroundTasks, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictInt
from typing import List, Optional

from tokenring.config import NodeConfig
from tokenring.models import Token
from tokenring.ring.circulator import TokenCirculator
from tokenring.ring.status import RingStatus

import logging

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "No token has completed a full circle yet."


# ============================================================
# Models
# ============================================================

class TokenPayload(BaseModel):
    issuer: str
    issued_at: StrictInt
    signers: List[str]

    def to_token(self) -> Token:
        return Token(
            issuer=self.issuer,
            issued_at=self.issued_at,
            signers=list(self.signers),
        )


class TokenAck(BaseModel):
    status: str


class StatusResponse(BaseModel):
    status: str
    message: Optional[str] = None
    issuer: Optional[str] = None
    issued_at: Optional[int] = None
    last_completed_at: Optional[str] = None
    signers: Optional[List[str]] = None


class HealthResponse(BaseModel):
    status: str
    node_id: str
    public_addr: str
    neighbor: Optional[str]
    initiator: bool
    completed_traversals: int


# ============================================================
# App Factory
# ============================================================

def create_app(
    circulator: TokenCirculator,
    ring_status: RingStatus,
    config: NodeConfig,
) -> FastAPI:
    """
    Build the HTTP surface of one ring node.

    Each node gets its own FastAPI instance (and route table); nothing
    is registered on a process-wide router.
    """

    app = FastAPI(title=f"Token Ring Node {config.node_id}", version="1.0")

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError):
        logger.warning(
            "[SERVER] Rejected malformed payload | path=%s | errors=%d",
            request.url.path,
            len(exc.errors()),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid token format"},
        )

    # ------------------------------------------------------------
    # P2P
    # ------------------------------------------------------------

    @app.post("/token", response_model=TokenAck)
    def receive_token(payload: TokenPayload, background_tasks: BackgroundTasks):
        # Runs after the response: a request only ever waits on one hop
        background_tasks.add_task(handle_token, payload.to_token())
        return TokenAck(status="accepted")

    def handle_token(token: Token) -> None:
        outcome = circulator.receive(token)
        logger.debug("[SERVER] Token handled | outcome=%s", outcome)

    # ------------------------------------------------------------
    # API
    # ------------------------------------------------------------

    @app.get("/status", response_model=StatusResponse, response_model_exclude_none=True)
    def ring_status_endpoint():
        last = ring_status.read()

        if last is None:
            return StatusResponse(status="pending", message=PENDING_MESSAGE)

        return StatusResponse(
            status="ok",
            issuer=last.issuer,
            issued_at=last.issued_at,
            last_completed_at=last.completed_at_iso,
            signers=list(last.signers),
        )

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(
            status="ok",
            node_id=config.node_id,
            public_addr=config.public_addr,
            neighbor=config.neighbor,
            initiator=config.initiator,
            completed_traversals=ring_status.completed_count,
        )

    return app

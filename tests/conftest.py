import threading
from typing import Dict, List, Tuple, Union

import pytest

from tokenring.config import NodeConfig
from tokenring.connectors.base import LoopbackTransport, TokenTransport, TransportError
from tokenring.models import Token
from tokenring.ring.circulator import TokenCirculator
from tokenring.ring.status import RingStatus


class ScriptedTransport(TokenTransport):
    """Records every delivery and answers per address with a status code or an error."""

    def __init__(self, responses: Dict[str, Union[int, Exception]] = None, default=200):
        self.responses = responses or {}
        self.default = default
        self.calls: List[Tuple[str, dict]] = []

    def deliver(self, address: str, token: Token) -> int:
        self.calls.append((address, token.to_payload()))
        response = self.responses.get(address, self.default)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def addresses(self) -> List[str]:
        return [address for address, _ in self.calls]


class RecordingStatus(RingStatus):
    """RingStatus that also keeps the signers of every closure it was handed."""

    def __init__(self) -> None:
        super().__init__()
        self.closures: List[List[str]] = []
        self._closures_lock = threading.Lock()

    def record(self, token: Token):
        with self._closures_lock:
            self.closures.append(list(token.signers))
        return super().record(token)


def unreachable(address: str) -> TransportError:
    return TransportError(f"connection refused: {address}")


def addr(port: int) -> str:
    return f"http://localhost:{port}"


def build_ring(ids, transport=None, status_factory=RingStatus):
    """Wire ``ids`` into a closed ring A → B → ... → A over a loopback transport."""
    transport = transport or LoopbackTransport()
    ports = {node_id: 9000 + i for i, node_id in enumerate(ids)}
    nodes = {}

    for i, node_id in enumerate(ids):
        next_id = ids[(i + 1) % len(ids)]
        config = NodeConfig(
            node_id,
            listen_addr=f":{ports[node_id]}",
            neighbor=addr(ports[next_id]),
        )
        status = status_factory()
        circulator = TokenCirculator(config, transport, status)
        transport.register(config.public_addr, circulator)
        nodes[node_id] = (config, circulator, status)

    return transport, nodes


@pytest.fixture
def ring3():
    return build_ring(["A", "B", "C"])

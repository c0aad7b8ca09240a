import os
from typing import Optional, Tuple

from uvicorn.config import LOG_LEVELS


DEFAULT_LISTEN_ADDR = ":8080"
DEFAULT_ISSUE_INTERVAL = 15.0
DEFAULT_STARTUP_DELAY = 3.0
DEFAULT_REQUEST_TIMEOUT = 5.0

ENV_PREFIX = "TOKENRING_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_listen_addr(addr: str) -> Tuple[str, int]:
    """
    Split a listen address into host and port.

    ``":8080"`` binds every interface; ``"127.0.0.1:8080"`` binds one.
    """
    if not addr or ":" not in addr:
        raise ValueError(f"Invalid listen address: {addr!r} (expected host:port)")

    host, _, port = addr.rpartition(":")

    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address: {addr!r}")

    if not 0 < port_number < 65536:
        raise ValueError(f"Port out of range in listen address: {addr!r}")

    return host or "0.0.0.0", port_number


def default_public_addr(listen_addr: str) -> str:
    """Local URL other nodes on this machine can dial back to."""
    _, port = parse_listen_addr(listen_addr)
    return f"http://localhost:{port}"


class NodeConfig:
    """
    Static identity and runtime settings of a single ring node.

    Nothing here changes after startup: the circulator only reads it.
    """

    def __init__(
        self,
        node_id: str,
        listen_addr: str = DEFAULT_LISTEN_ADDR,
        public_addr: Optional[str] = None,
        neighbor: Optional[str] = None,
        initiator: bool = False,
        issue_interval: float = DEFAULT_ISSUE_INTERVAL,
        startup_delay: float = DEFAULT_STARTUP_DELAY,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        log_level: str = "INFO",
    ):
        self.node_id = node_id
        self.listen_addr = listen_addr
        self.public_addr = (public_addr or default_public_addr(listen_addr)).rstrip("/")
        self.neighbor = neighbor.rstrip("/") if neighbor else None
        self.initiator = initiator
        self.issue_interval = issue_interval
        self.startup_delay = startup_delay
        self.request_timeout = request_timeout
        self.log_level = log_level.upper()

        self._validate()

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "NodeConfig":
        """
        Build a config from ``TOKENRING_*`` variables.

        Explicit keyword overrides that are not None take precedence.
        """
        env = os.environ if environ is None else environ

        def read(name, default=None):
            return env.get(ENV_PREFIX + name, default)

        values = {
            "node_id": read("ID", ""),
            "listen_addr": read("ADDR", DEFAULT_LISTEN_ADDR),
            "public_addr": read("PUBLIC_ADDR") or None,
            "neighbor": read("NEIGHBOR") or None,
            "initiator": str(read("INITIATOR", "")).lower() in _TRUE_VALUES,
            "issue_interval": float(read("INTERVAL", DEFAULT_ISSUE_INTERVAL)),
            "startup_delay": float(read("STARTUP_DELAY", DEFAULT_STARTUP_DELAY)),
            "request_timeout": float(read("TIMEOUT", DEFAULT_REQUEST_TIMEOUT)),
            "log_level": read("LOG_LEVEL", "INFO"),
        }

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    # ------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------

    @property
    def listen_host(self) -> str:
        return parse_listen_addr(self.listen_addr)[0]

    @property
    def listen_port(self) -> int:
        return parse_listen_addr(self.listen_addr)[1]

    @property
    def log_level_number(self) -> int:
        return LOG_LEVELS[self.log_level.lower()]

    @property
    def has_neighbor(self) -> bool:
        return bool(self.neighbor)

    def describe(self) -> str:
        return (
            f"id={self.node_id}, addr={self.listen_addr}, "
            f"public.addr={self.public_addr}, neighbor={self.neighbor or ''}, "
            f"initiator={self.initiator}"
        )

    def _validate(self):
        if not self.node_id or not isinstance(self.node_id, str):
            raise ValueError("Node id is required")

        parse_listen_addr(self.listen_addr)

        if self.issue_interval <= 0:
            raise ValueError(f"issue_interval must be positive: {self.issue_interval}")

        if self.startup_delay < 0:
            raise ValueError(f"startup_delay must not be negative: {self.startup_delay}")

        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive: {self.request_timeout}")

        if self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(
                f"Unknown log level: {self.log_level} (expected one of {', '.join(LOG_LEVELS)})"
            )

"""
Configuration for tcplink clients.

Values are resolved in order of precedence: explicit arguments, then
``TCPLINK_*`` environment variables, then the defaults declared on
:class:`ClientConfig`.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Union

from tcplink.errors import ConfigurationError

ENV_PREFIX = "TCPLINK_"


def get_env_config(key: str, prefix: str = ENV_PREFIX) -> Optional[str]:
    """Get a configuration value from the environment.

    Args:
        key: The configuration key, e.g. ``"backoff_interval"``
        prefix: The environment variable prefix

    Returns:
        The raw string value, or None if the variable is not set
    """
    return os.environ.get(f"{prefix}{key.upper()}")


def get_env_bool(name: str, default: bool = False) -> bool:
    """
    Get a boolean value from an environment variable.

    Args:
        name: The name of the environment variable
        default: The default value if the environment variable is not set

    Returns:
        The boolean value
    """
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "y", "t")


def merge_configs(*configs: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge configuration dictionaries; later ones win. None entries are skipped."""
    merged: Dict[str, Any] = {}
    for config in configs:
        if config:
            merged.update({k: v for k, v in config.items() if v is not None})
    return merged


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "y", "t")


def _parse_delimiter(value: str) -> Optional[int]:
    if value == "" or value.lower() == "none":
        return None
    return int(value, 0)


_ENV_PARSERS = {
    "port": str,
    "dial_timeout": float,
    "delimiter": _parse_delimiter,
    "idle_flush_timeout": float,
    "backoff_interval": float,
    "hello": lambda value: value.encode("utf-8"),
    "telnet": _parse_bool,
    "debug": _parse_bool,
    "read_buffer_size": int,
}


@dataclass(frozen=True)
class ClientConfig:
    """Settings for a :class:`~tcplink.client.TcpClient`.

    Attributes:
        host: Remote host name or address.
        port: Remote port; digit strings are normalised to int.
        dial_timeout: Seconds allowed for establishing the TCP connection.
        delimiter: Byte value that ends a message, or None for no delimiter
            (messages are then only emitted by idle or EOF flushes).
        idle_flush_timeout: Per-read deadline. A read that times out with a
            non-empty partial message flushes it.
        backoff_interval: Fixed wait between the end of one connection cycle
            and the next dial.
        hello: Bytes written once after every successful connect.
        telnet: Whether to send the fixed telnet negotiation after connect.
        debug: Whether diagnostic logging is emitted.
        name: Human-readable name used to correlate log lines.
        read_buffer_size: Maximum number of bytes requested per read.
    """

    host: str
    port: Union[int, str]
    dial_timeout: float = 3.0
    delimiter: Optional[int] = None
    idle_flush_timeout: float = 0.01
    backoff_interval: float = 3.0
    hello: Optional[bytes] = None
    telnet: bool = False
    debug: bool = False
    name: str = ""
    read_buffer_size: int = 4096

    def __post_init__(self):
        if not self.host or not str(self.host).strip():
            raise ConfigurationError("host must be a non-empty string")

        port = self.port
        if isinstance(port, str):
            port = port.strip()
            if not port:
                raise ConfigurationError("port must be a non-empty string")
            if port.isdigit():
                port = int(port)
        if isinstance(port, int) and not 0 <= port <= 65535:
            raise ConfigurationError(f"port must be in 0..65535, got {port}")
        object.__setattr__(self, "port", port)

        delimiter = self.delimiter
        if isinstance(delimiter, (bytes, bytearray)):
            if len(delimiter) != 1:
                raise ConfigurationError(
                    f"delimiter must be a single byte, got {len(delimiter)} bytes"
                )
            delimiter = delimiter[0]
        if delimiter is not None and not 0 <= delimiter <= 255:
            raise ConfigurationError(f"delimiter must be in 0..255, got {delimiter}")
        object.__setattr__(self, "delimiter", delimiter)

        if isinstance(self.hello, str):
            object.__setattr__(self, "hello", self.hello.encode("utf-8"))
        elif self.hello is not None:
            object.__setattr__(self, "hello", bytes(self.hello))

        for name in ("dial_timeout", "idle_flush_timeout", "backoff_interval"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.read_buffer_size <= 0:
            raise ConfigurationError(
                f"read_buffer_size must be positive, got {self.read_buffer_size}"
            )

    @property
    def address(self) -> str:
        """The ``host:port`` pair, for logging."""
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(
        cls,
        host: Optional[str] = None,
        port: Optional[Union[int, str]] = None,
        prefix: str = ENV_PREFIX,
        **overrides: Any,
    ) -> "ClientConfig":
        """Build a config from explicit values, falling back to the environment.

        Args:
            host: Remote host; read from ``{prefix}HOST`` when omitted.
            port: Remote port; read from ``{prefix}PORT`` when omitted.
            prefix: The environment variable prefix.
            **overrides: Any other :class:`ClientConfig` field.

        Returns:
            A validated configuration.

        Raises:
            ConfigurationError: If a value is missing, unknown or invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        env_values: Dict[str, Any] = {}
        for name in known:
            raw = get_env_config(name, prefix)
            if raw is None:
                continue
            parser = _ENV_PARSERS.get(name, str)
            try:
                env_values[name] = parser(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {prefix}{name.upper()}: {raw!r}") from e

        values = merge_configs(env_values, {"host": host, "port": port}, overrides)
        if "host" not in values or "port" not in values:
            raise ConfigurationError(f"host and port are required (or set {prefix}HOST/{prefix}PORT)")
        return cls(**values)

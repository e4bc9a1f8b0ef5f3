"""collectd network protocol client over UDP."""

import logging
import socket
import struct
from typing import Optional, Protocol, runtime_checkable

from ..config.models import CollectdConfig
from ..utils.metrics import Sample
from ..utils.status import DataType

# Part type codes of the collectd binary protocol
PART_HOST = 0x0000
PART_TIME = 0x0001
PART_PLUGIN = 0x0002
PART_PLUGIN_INSTANCE = 0x0003
PART_TYPE = 0x0004
PART_TYPE_INSTANCE = 0x0005
PART_VALUES = 0x0006
PART_INTERVAL = 0x0007

VALUE_TYPE_CODES = {
    DataType.COUNTER: 0,
    DataType.GAUGE: 1,
}

MAX_NAME_LENGTH = 63  # collectd DATA_MAX_NAME_LEN minus the terminating NUL

_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


class CollectdTransportError(ConnectionError):
    """Raised when a sample cannot be handed to the daemon."""


@runtime_checkable
class TransportClient(Protocol):
    """
    Connection owner the reporter sends samples through.

    ``connect`` and ``send`` raise on failure; the reporter abandons the
    cycle when they do.
    """

    def is_connected(self) -> bool:
        ...

    def connect(self) -> None:
        ...

    def send(self, sample: Sample) -> None:
        ...

    def close(self) -> None:
        ...


def _string_part(part_type: int, value: str) -> bytes:
    encoded = value.encode('utf-8')[:MAX_NAME_LENGTH] + b'\x00'
    return struct.pack('>HH', part_type, 4 + len(encoded)) + encoded


def _numeric_part(part_type: int, value: int) -> bytes:
    return struct.pack('>HHQ', part_type, 12, value & _UINT64_MASK)


def _values_part(kind: DataType, value) -> bytes:
    header = struct.pack('>HHHB', PART_VALUES, 4 + 2 + 1 + 8, 1, VALUE_TYPE_CODES[kind])
    if kind is DataType.COUNTER:
        # Counters are network byte order, gauges are x86 byte order
        return header + struct.pack('>Q', int(value) & _UINT64_MASK)
    return header + struct.pack('<d', float(value))


def encode_sample(sample: Sample, hostname: str) -> bytes:
    """
    Encode one sample as a collectd value list packet.

    The identifier becomes the plugin name, the sub-field the type
    instance, and the data type ("gauge" or "counter") the collectd type.

    Args:
        sample: Sample to encode
        hostname: Value of the host part

    Returns:
        bytes: Datagram payload
    """
    return b''.join((
        _string_part(PART_HOST, hostname),
        _numeric_part(PART_TIME, sample.timestamp),
        _numeric_part(PART_INTERVAL, sample.interval),
        _string_part(PART_PLUGIN, sample.identifier),
        _string_part(PART_PLUGIN_INSTANCE, ''),
        _string_part(PART_TYPE, sample.kind.value),
        _string_part(PART_TYPE_INSTANCE, sample.sub_field or ''),
        _values_part(sample.kind, sample.value),
    ))


class CollectdClient:
    """
    Sends samples to a collectd network plugin, one datagram per sample.

    UDP has no handshake, so "connected" means a socket bound to the
    resolved daemon address exists.
    """

    def __init__(self, config: CollectdConfig, logger: logging.Logger = None):
        """
        Initialize collectd client.

        Args:
            config: Daemon address and host field
            logger: Optional logger instance
        """
        self.host = config.host
        self.port = config.port
        self.hostname = config.hostname or socket.getfqdn()
        self.timeout_s = config.timeout_s
        self.logger = logger or logging.getLogger(__name__)
        self._socket: Optional[socket.socket] = None

    @property
    def target(self) -> str:
        """Daemon address as host:port."""
        return f"{self.host}:{self.port}"

    def is_connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        """
        Open a UDP socket to the daemon.

        Raises:
            OSError: If the address cannot be resolved or the socket opened
        """
        self.close()

        family, sock_type, proto, _, address = socket.getaddrinfo(
            self.host, self.port, type=socket.SOCK_DGRAM
        )[0]
        sock = socket.socket(family, sock_type, proto)
        try:
            sock.settimeout(self.timeout_s)
            sock.connect(address)
        except OSError:
            sock.close()
            raise

        self._socket = sock
        self.logger.info(f"Connected to collectd at {self.target} as host {self.hostname}")

    def send(self, sample: Sample) -> None:
        """
        Send one sample.

        Args:
            sample: Sample to send

        Raises:
            CollectdTransportError: If not connected or the datagram was cut short
            OSError: If the socket write fails
        """
        if self._socket is None:
            raise CollectdTransportError(f"Not connected to collectd at {self.target}")

        packet = encode_sample(sample, self.hostname)
        try:
            sent = self._socket.send(packet)
            if sent != len(packet):
                raise CollectdTransportError(f"Short write to {self.target}: {sent}/{len(packet)} bytes")
        except OSError:
            # Drop the socket so the next cycle reconnects and re-resolves
            self.close()
            raise

    def close(self) -> None:
        """Close the socket if open."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None

"""Address families, connection records and messages shared by the TCP helpers."""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class IPType(IntEnum):
    """Address family a client or server works with."""

    IPV4 = 0
    IPV6 = 1

    @property
    def family(self) -> socket.AddressFamily:
        return socket.AF_INET6 if self is IPType.IPV6 else socket.AF_INET


class TCPError(ConnectionError):
    """Raised when a TCP operation fails."""


@dataclass(eq=False)
class TCPClient:
    """A connection accepted by a server, with the peer's address and port."""

    socket: socket.socket
    address: str = ""
    port: int = 0

    @property
    def is_open(self) -> bool:
        return self.socket.fileno() != -1


@dataclass
class TCPMessage:
    """Data received from a client, stamped with the time it arrived."""

    client: TCPClient
    data: bytes
    time: datetime = field(default_factory=datetime.now)
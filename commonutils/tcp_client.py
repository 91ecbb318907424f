"""A blocking TCP client holding a single connection to a server."""

from __future__ import annotations

import socket
from typing import Optional, Union

from commonutils.tcp_types import IPType, TCPError

_RECV_SIZE = 65536


def _as_bytes(data: Union[str, bytes]) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


class SingleTCPClient:
    """Connects to one server and exchanges data with it."""

    def __init__(
        self,
        server_address: str = "127.0.0.1",
        port: int = 1717,
        ip_type: IPType = IPType.IPV4,
    ) -> None:
        self.server_address = server_address
        self.port = port
        self.ip_type = IPType(ip_type)
        self._sock: Optional[socket.socket] = None

    @property
    def is_connected(self) -> bool:
        return self._sock is not None and self._sock.fileno() != -1

    def connect(self) -> None:
        """Resolve the server address and connect to its first endpoint."""
        self.close()
        try:
            infos = socket.getaddrinfo(
                self.server_address, self.port, self.ip_type.family, socket.SOCK_STREAM
            )
        except socket.gaierror as exc:
            raise TCPError(f"Resolution failed: {exc}") from exc
        family, kind, proto, _, address = infos[0]
        sock = socket.socket(family, kind, proto)
        try:
            sock.connect(address)
        except OSError as exc:
            sock.close()
            raise TCPError(f"Connection failed: {exc}") from exc
        self._sock = sock

    def _open_socket(self) -> socket.socket:
        if not self.is_connected:
            raise TCPError("Client socket not open")
        assert self._sock is not None
        return self._sock

    def send(self, data: Union[str, bytes]) -> None:
        """Send all of ``data``; text is encoded as UTF-8."""
        sock = self._open_socket()
        payload = _as_bytes(data)
        if not payload:
            raise ValueError("Data is empty")
        try:
            sock.sendall(payload)
        except OSError as exc:
            raise TCPError(f"Failed to send data: {exc}") from exc

    def receive(self) -> bytes:
        """Block until at least one byte arrives and return what was read."""
        sock = self._open_socket()
        try:
            data = sock.recv(_RECV_SIZE)
        except OSError as exc:
            raise TCPError(f"Failed to receive data: {exc}") from exc
        if not data:
            raise TCPError("Server disconnected.")
        return data

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "SingleTCPClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
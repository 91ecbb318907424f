"""A TCP server that accepts and reads clients on a background I/O thread."""

from __future__ import annotations

import ipaddress
import logging
import selectors
import socket
import threading
from collections import deque
from typing import Callable, Deque, List, Optional, Union

from commonutils.message_queue import MessageQueue
from commonutils.tcp_types import IPType, TCPClient, TCPError, TCPMessage

_log = logging.getLogger(__name__)

_READ_SIZE = 1024
_RECV_SIZE = 65536
_ACCEPT = object()
_WAKE = object()


def _as_bytes(data: Union[str, bytes]) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


class AsyncTCPServer:
    """Listens on an address, collecting everything clients send as messages.

    The socket is bound on construction; ``start`` begins listening and runs
    the accept/read loop on a background thread. Received data is queued and
    fetched with ``get_message``.
    """

    def __init__(
        self,
        port: int = 1717,
        server_address: str = "127.0.0.1",
        ip_type: IPType = IPType.IPV4,
        max_clients: int = 1024,
    ) -> None:
        self.server_address = server_address
        self.ip_type = IPType(ip_type)
        self.max_clients = max_clients
        self._messages: MessageQueue[TCPMessage] = MessageQueue()
        self._clients: List[TCPClient] = []
        self._clients_lock = threading.Lock()
        self._tasks: Deque[Callable[[], None]] = deque()
        self._tasks_lock = threading.Lock()
        self._stopping = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        self._listener = self._bind(port)
        self.port = self._listener.getsockname()[1]
        self._selector = selectors.DefaultSelector()
        self._wake_recv, self._wake_send = socket.socketpair()

    def _bind(self, port: int) -> socket.socket:
        try:
            if self.ip_type is IPType.IPV6:
                family = socket.AF_INET6
                if not isinstance(ipaddress.ip_address(self.server_address), ipaddress.IPv6Address):
                    raise ValueError(f"not an IPv6 address: {self.server_address}")
            else:
                address = ipaddress.ip_address(self.server_address)
                family = socket.AF_INET6 if address.version == 6 else socket.AF_INET
        except ValueError as exc:
            raise TCPError(f"Failed to create server: {exc}") from exc
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.server_address, port))
        except OSError as exc:
            sock.close()
            raise TCPError(f"Failed to bind socket: {exc}") from exc
        return sock

    @property
    def clients(self) -> List[TCPClient]:
        with self._clients_lock:
            return list(self._clients)

    def start(self) -> None:
        """Listen for clients and start the background I/O thread."""
        if self._closed:
            raise TCPError("Server is closed")
        if self._thread is not None:
            raise TCPError("Server already started")
        try:
            self._listener.listen(self.max_clients)
        except OSError as exc:
            raise TCPError(f"Listen failed: {exc}") from exc
        self._selector.register(self._listener, selectors.EVENT_READ, _ACCEPT)
        self._selector.register(self._wake_recv, selectors.EVENT_READ, _WAKE)
        self._thread = threading.Thread(target=self._run, name="AsyncTCPServer", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopping.is_set():
            for key, _ in self._selector.select(timeout=0.5):
                if key.data is _ACCEPT:
                    self._accept()
                elif key.data is _WAKE:
                    try:
                        self._wake_recv.recv(_READ_SIZE)
                    except OSError:
                        pass
                else:
                    self._read(key.data)
            self._run_tasks()

    def _run_tasks(self) -> None:
        while True:
            with self._tasks_lock:
                if not self._tasks:
                    return
                task = self._tasks.popleft()
            task()

    def _accept(self) -> None:
        try:
            conn, peer = self._listener.accept()
        except OSError as exc:
            _log.error("Failed to accept client: %s", exc)
            return
        client = TCPClient(conn, peer[0], peer[1])
        with self._clients_lock:
            self._clients.append(client)
        self._selector.register(conn, selectors.EVENT_READ, client)

    def _read(self, client: TCPClient) -> None:
        try:
            data = client.socket.recv(_READ_SIZE)
        except (ConnectionResetError, ConnectionAbortedError):
            data = b""
        except OSError as exc:
            _log.error("Read error: %s", exc)
            data = b""
        if not data:
            self._close_client(client)
            return
        self._messages.push(TCPMessage(client=client, data=data))

    def _close_client(self, client: TCPClient) -> None:
        if client.is_open:
            try:
                self._selector.unregister(client.socket)
            except (KeyError, ValueError):
                pass
            try:
                client.socket.shutdown(socket.SHUT_RDWR)
            except OSError as exc:
                _log.debug("Shutdown error: %s", exc)
            client.socket.close()
        with self._clients_lock:
            if client in self._clients:
                self._clients.remove(client)

    def send(self, data: Union[str, bytes], client: TCPClient) -> None:
        """Send all of ``data`` to ``client``; on failure the client is closed."""
        if client is None or not client.is_open:
            raise TCPError("Client socket not open")
        payload = _as_bytes(data)
        if not payload:
            raise ValueError("Data is empty")
        try:
            client.socket.sendall(payload)
        except OSError as exc:
            self.post_close_client(client)
            raise TCPError(f"Failed to send data: {exc}") from exc

    def receive(self, client: TCPClient) -> bytes:
        """Block until ``client`` sends at least one byte and return it."""
        if client is None or not client.is_open:
            raise TCPError("Client socket not open")
        try:
            data = client.socket.recv(_RECV_SIZE)
        except OSError as exc:
            raise TCPError(f"Failed to receive data: {exc}") from exc
        if not data:
            raise TCPError("Client disconnected.")
        return data

    def get_message(self) -> Optional[TCPMessage]:
        """Return the oldest received message, or None if there is none."""
        if self._messages.empty():
            return None
        return self._messages.pop()

    def post_close_client(self, client: TCPClient) -> None:
        """Close ``client`` on the I/O thread (directly if it is not running)."""
        if client is None:
            return
        thread = self._thread
        if thread is None or not thread.is_alive() or thread is threading.current_thread():
            self._close_client(client)
            return
        with self._tasks_lock:
            self._tasks.append(lambda: self._close_client(client))
        try:
            self._wake_send.send(b"\0")
        except OSError:
            pass

    def close(self) -> None:
        """Stop the I/O thread and close the listener and every client."""
        if self._closed:
            return
        self._closed = True
        self._stopping.set()
        try:
            self._wake_send.send(b"\0")
        except OSError:
            pass
        if self._thread is not None:
            self._thread.join()
        for client in self.clients:
            self._close_client(client)
        self._selector.close()
        self._listener.close()
        self._wake_recv.close()
        self._wake_send.close()

    def __enter__(self) -> "AsyncTCPServer":
        return self

    def __exit__(self, *args) -> None:
        self.close()
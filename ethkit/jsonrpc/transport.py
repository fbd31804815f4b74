"""Transports that carry JSON-RPC calls over HTTP, IPC sockets and websockets."""

from __future__ import annotations

import codecs
import itertools
import json
import logging
import os
import queue
import socket
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

import requests
import websocket
from requests.adapters import HTTPAdapter

from .codec import Request, Response, Subscription

logger = logging.getLogger(__name__)

_WS_PREFIXES = ("ws://", "wss://")


class TransportTimeout(TimeoutError):
    """Raised when a streamed request gets no answer in time."""

    def __init__(self, message: str = "ws timeout") -> None:
        super().__init__(message)


def _unwrap(response: Response) -> Any:
    if response.error is not None:
        raise response.error
    if not response.has_result:
        raise ValueError("response has no result")
    return response.result


class Transport(ABC):
    """Sends JSON-RPC requests and returns their decoded results."""

    @abstractmethod
    def call(self, method: str, *args: Any) -> Any:
        """Make a request and return the decoded result."""

    @abstractmethod
    def set_max_conns_per_host(self, count: int) -> None:
        """Limit the number of connections opened to the host."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class PubSubTransport(ABC):
    """A transport that supports subscriptions."""

    @abstractmethod
    def subscribe(self, method: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Start a subscription; returns a function that cancels it."""


class HTTPTransport(Transport):
    """Posts each request to an HTTP endpoint."""

    def __init__(
        self,
        addr: str,
        headers: dict[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.addr = addr
        self.headers = dict(headers or {})
        self.session = session or requests.Session()

    def call(self, method: str, *args: Any) -> Any:
        request = Request(method=method, params=list(args) if args else None)
        headers = {"Content-Type": "application/json", **self.headers}
        reply = self.session.post(
            self.addr, data=request.to_json().encode("utf-8"), headers=headers
        )
        return _unwrap(Response.from_json(reply.content))

    def set_max_conns_per_host(self, count: int) -> None:
        adapter = HTTPAdapter(pool_maxsize=count, pool_block=True)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def close(self) -> None:
        self.session.close()


class Codec(ABC):
    """Reads and writes whole JSON messages on a connection."""

    @abstractmethod
    def read(self) -> bytes:
        """Block until a full message arrives and return it."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Send one message."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""


class IPCCodec(Codec):
    """Exchanges JSON values over a stream socket, such as a node's IPC endpoint."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._decoder = json.JSONDecoder()
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    def read(self) -> bytes:
        while True:
            text = self._buffer.lstrip()
            if text:
                try:
                    _, end = self._decoder.raw_decode(text)
                except json.JSONDecodeError:
                    pass
                else:
                    self._buffer = text[end:]
                    return text[:end].encode("utf-8")
            chunk = self._sock.recv(65536)
            if not chunk:
                raise EOFError("ipc connection closed")
            self._buffer = text + self._text.decode(chunk)

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()


class WebsocketCodec(Codec):
    """Exchanges text messages over a websocket connection."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    def read(self) -> bytes:
        message = self._conn.recv()
        if isinstance(message, str):
            return message.encode("utf-8")
        return bytes(message)

    def write(self, data: bytes) -> None:
        self._conn.send(bytes(data).decode("utf-8"))

    def close(self) -> None:
        self._conn.close()


class Stream(Transport, PubSubTransport):
    """Multiplexes calls and subscriptions over a message codec."""

    def __init__(self, codec: Codec, timeout: float = 15.0) -> None:
        self._codec = codec
        self._timeout = timeout
        self._seq = itertools.count(1)
        self._seq_lock = threading.Lock()
        self._handlers: dict[int, queue.Queue] = {}
        self._handler_lock = threading.Lock()
        self._dead: Exception | None = None
        self._subs: dict[str, Callable[[Any], None]] = {}
        self._subs_lock = threading.Lock()
        self._closed = threading.Event()
        self._events: queue.Queue = queue.Queue()
        threading.Thread(target=self._listen, daemon=True).start()
        threading.Thread(target=self._dispatch, daemon=True).start()

    def _next_seq(self) -> int:
        with self._seq_lock:
            return next(self._seq)

    def _listen(self) -> None:
        reason: Exception = ConnectionError("stream closed")
        try:
            while True:
                try:
                    raw = self._codec.read()
                except Exception as exc:  # any read failure ends the stream
                    if not self._closed.is_set():
                        logger.debug("stream read failed: %s", exc)
                        reason = ConnectionError(f"stream read failed: {exc}")
                    break
                try:
                    response = Response.from_json(raw)
                    if response.id:
                        self._handle_response(response)
                        continue
                    request = Request.from_json(raw)
                except ValueError as exc:
                    reason = ConnectionError(f"malformed message: {exc}")
                    break
                if request.method == "eth_subscription":
                    self._events.put(request.params)
        finally:
            self._fail_pending(reason)
            self._events.put(None)

    def _handle_response(self, response: Response) -> None:
        with self._handler_lock:
            ack = self._handlers.pop(response.id, None)
        if ack is not None:
            ack.put_nowait(response)

    def _fail_pending(self, reason: Exception) -> None:
        with self._handler_lock:
            self._dead = reason
            pending = list(self._handlers.values())
            self._handlers.clear()
        for ack in pending:
            ack.put_nowait(reason)

    def _dispatch(self) -> None:
        while True:
            params = self._events.get()
            if params is None:
                return
            if not isinstance(params, dict):
                continue
            sub = Subscription.from_dict(params)
            with self._subs_lock:
                callback = self._subs.get(sub.id)
            if callback is None:
                continue
            try:
                callback(sub.result)
            except Exception:
                logger.exception("subscription callback failed")

    def call(self, method: str, *args: Any) -> Any:
        if self._closed.is_set():
            raise ConnectionError("stream closed")
        seq = self._next_seq()
        request = Request(method=method, params=list(args) if args else None, id=seq)
        ack: queue.Queue = queue.Queue(maxsize=1)
        with self._handler_lock:
            if self._dead is not None:
                raise self._dead
            self._handlers[seq] = ack
        try:
            self._codec.write(request.to_json().encode("utf-8"))
            try:
                outcome = ack.get(timeout=self._timeout)
            except queue.Empty:
                raise TransportTimeout() from None
        finally:
            with self._handler_lock:
                self._handlers.pop(seq, None)
        if isinstance(outcome, Exception):
            raise outcome
        return _unwrap(outcome)

    def _unsubscribe(self, sub_id: str) -> None:
        with self._subs_lock:
            if sub_id not in self._subs:
                raise LookupError(f"subscription {sub_id} not found")
            del self._subs[sub_id]
        if not self.call("eth_unsubscribe", sub_id):
            raise RuntimeError("failed to unsubscribe")

    def subscribe(self, method: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        sub_id = self.call("eth_subscribe", method)
        with self._subs_lock:
            self._subs[sub_id] = callback

        def cancel() -> None:
            self._unsubscribe(sub_id)

        return cancel

    def set_max_conns_per_host(self, count: int) -> None:
        """Streams use a single connection; the limit has no effect."""

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._codec.close()


def _dial_ipc(path: str) -> Stream:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(path)
    except OSError:
        sock.close()
        raise
    return Stream(IPCCodec(sock))


def _dial_websocket(url: str, headers: dict[str, str]) -> Stream:
    conn = websocket.create_connection(url, header=[f"{k}: {v}" for k, v in headers.items()])
    return Stream(WebsocketCodec(conn))


def new_transport(url: str, headers: dict[str, str] | None = None) -> Transport:
    """Pick a transport from the url: websocket, IPC socket path, or HTTP."""
    headers = dict(headers or {})
    if url.startswith(_WS_PREFIXES):
        return _dial_websocket(url, headers)
    if os.path.exists(url):
        return _dial_ipc(url)
    return HTTPTransport(url, headers)
import json
import queue
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from ethkit.jsonrpc.codec import ErrorObject
from ethkit.jsonrpc.transport import (
    Codec,
    HTTPTransport,
    IPCCodec,
    Stream,
    TransportTimeout,
    WebsocketCodec,
    new_transport,
)


@pytest.fixture
def http_node():
    state = {"reply": {"jsonrpc": "2.0", "id": 0, "result": "0x1"}, "requests": [], "headers": []}

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            body = self.rfile.read(int(self.headers["Content-Length"]))
            state["requests"].append(json.loads(body))
            state["headers"].append({k.lower(): v for k, v in self.headers.items()})
            payload = json.dumps(state["reply"]).encode()
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}", state
    server.shutdown()
    server.server_close()


def test_http_call_returns_result_and_sends_params(http_node):
    url, state = http_node
    transport = HTTPTransport(url, {"X-Client": "tests"})
    assert transport.call("eth_getBalance", "0x01", "latest") == "0x1"
    assert state["requests"][0] == {
        "jsonrpc": "2.0",
        "id": 0,
        "method": "eth_getBalance",
        "params": ["0x01", "latest"],
    }
    headers = state["headers"][0]
    assert headers["content-type"] == "application/json"
    assert headers["x-client"] == "tests"


def test_http_call_without_params_sends_null(http_node):
    url, state = http_node
    state["reply"] = {"jsonrpc": "2.0", "id": 0, "result": "0x2a"}
    assert HTTPTransport(url).call("eth_blockNumber") == "0x2a"
    assert state["requests"][0]["params"] is None


def test_http_error_is_raised(http_node):
    url, state = http_node
    state["reply"] = {"jsonrpc": "2.0", "id": 0, "error": {"code": -32601, "message": "missing"}}
    with pytest.raises(ErrorObject) as info:
        HTTPTransport(url).call("nope")
    assert info.value.code == -32601
    assert info.value.message == "missing"


def test_http_missing_result_raises(http_node):
    url, state = http_node
    state["reply"] = {"jsonrpc": "2.0", "id": 0}
    with pytest.raises(ValueError):
        HTTPTransport(url).call("eth_blockNumber")


def test_http_max_conns(http_node):
    url, _ = http_node
    transport = HTTPTransport(url)
    transport.set_max_conns_per_host(3)
    adapter = transport.session.get_adapter(url)
    assert adapter.poolmanager.connection_pool_kw["maxsize"] == 3
    assert transport.call("x") == "0x1"


class FakeNode(Codec):
    def __init__(self, handler):
        self.handler = handler
        self.incoming = queue.Queue()
        self.written = []
        self.closed = False

    def push(self, message):
        self.incoming.put(json.dumps(message).encode())

    def read(self):
        item = self.incoming.get()
        if item is None:
            raise EOFError("closed")
        return item

    def write(self, data):
        request = json.loads(data)
        self.written.append(request)
        for reply in self.handler(request, self):
            self.push(reply)

    def close(self):
        self.closed = True
        self.incoming.put(None)


def echo(request, node):
    return [{"jsonrpc": "2.0", "id": request["id"], "result": request["params"]}]


def test_stream_call_and_sequence_ids():
    node = FakeNode(echo)
    stream = Stream(node)
    try:
        assert stream.call("a", 1, "x") == [1, "x"]
        assert stream.call("b") is None
        assert [req["id"] for req in node.written] == [1, 2]
        assert node.written[1]["params"] is None
    finally:
        stream.close()
    assert node.closed is True


def test_stream_ignores_unknown_ids():
    node = FakeNode(echo)
    node.push({"jsonrpc": "2.0", "id": 99, "result": "stale"})
    stream = Stream(node)
    try:
        assert stream.call("a", 5) == [5]
    finally:
        stream.close()


def test_stream_error_response():
    def failing(request, node):
        return [{"id": request["id"], "error": {"code": 7, "message": "bad"}}]

    stream = Stream(FakeNode(failing))
    try:
        with pytest.raises(ErrorObject) as info:
            stream.call("a")
        assert info.value.code == 7
    finally:
        stream.close()


def test_stream_timeout():
    stream = Stream(FakeNode(lambda request, node: []), timeout=0.05)
    try:
        with pytest.raises(TransportTimeout) as info:
            stream.call("slow")
        assert str(info.value) == "ws timeout"
    finally:
        stream.close()


def test_stream_fails_pending_when_connection_drops():
    def drop(request, node):
        node.incoming.put(None)
        return []

    stream = Stream(FakeNode(drop), timeout=5)
    with pytest.raises(ConnectionError):
        stream.call("a")
    with pytest.raises(ConnectionError):
        stream.call("b")


def test_stream_call_after_close():
    stream = Stream(FakeNode(echo))
    stream.close()
    with pytest.raises(ConnectionError):
        stream.call("a")


def subscription_node(unsubscribe_result=True):
    def handler(request, node):
        if request["method"] == "eth_subscribe":
            return [{"id": request["id"], "result": "0xab"}]
        if request["method"] == "eth_unsubscribe":
            return [{"id": request["id"], "result": unsubscribe_result}]
        return []

    return FakeNode(handler)


def notification(result):
    return {
        "jsonrpc": "2.0",
        "method": "eth_subscription",
        "params": {"subscription": "0xab", "result": result},
    }


def test_stream_subscribe_and_cancel():
    node = subscription_node()
    stream = Stream(node)
    received = queue.Queue()
    try:
        cancel = stream.subscribe("newHeads", received.put)
        assert node.written[0]["params"] == ["newHeads"]
        node.push(notification({"number": "0x1"}))
        node.push(notification({"number": "0x2"}))
        assert received.get(timeout=2) == {"number": "0x1"}
        assert received.get(timeout=2) == {"number": "0x2"}

        cancel()
        assert node.written[-1] == {
            "jsonrpc": "2.0",
            "id": 2,
            "method": "eth_unsubscribe",
            "params": ["0xab"],
        }
        node.push(notification({"number": "0x3"}))
        with pytest.raises(queue.Empty):
            received.get(timeout=0.1)
        with pytest.raises(LookupError):
            cancel()
    finally:
        stream.close()


def test_stream_unsubscribe_rejected():
    stream = Stream(subscription_node(unsubscribe_result=False))
    try:
        cancel = stream.subscribe("newHeads", lambda value: None)
        with pytest.raises(RuntimeError):
            cancel()
    finally:
        stream.close()


def test_ipc_codec_splits_concatenated_values():
    left, right = socket.socketpair()
    codec = IPCCodec(left)
    try:
        right.sendall(b'{"a":1}{"b":[2,')
        assert json.loads(codec.read()) == {"a": 1}
        right.sendall(b'3]}  \n{"c":"x"}')
        assert json.loads(codec.read()) == {"b": [2, 3]}
        assert json.loads(codec.read()) == {"c": "x"}
        right.close()
        with pytest.raises(EOFError):
            codec.read()
    finally:
        codec.close()


def test_ipc_codec_write_and_read_reply():
    left, right = socket.socketpair()
    codec = IPCCodec(left)
    try:
        codec.write(b'{"id":1}')
        assert right.recv(64) == b'{"id":1}'
        right.sendall(b'{"id":1,"result":true}')
        assert json.loads(codec.read()) == {"id": 1, "result": True}
    finally:
        codec.close()
        right.close()


def test_stream_over_ipc_socket():
    left, right = socket.socketpair()

    def serve():
        server = IPCCodec(right)
        request = json.loads(server.read())
        reply = {"jsonrpc": "2.0", "id": request["id"], "result": request["params"][0] * 2}
        server.write(json.dumps(reply).encode())

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    stream = Stream(IPCCodec(left))
    try:
        assert stream.call("double", 21) == 42
    finally:
        stream.close()
        thread.join(timeout=2)
        right.close()


class FakeConn:
    def __init__(self, messages):
        self.messages = list(messages)
        self.sent = []
        self.closed = False

    def recv(self):
        return self.messages.pop(0)

    def send(self, text):
        self.sent.append(text)

    def close(self):
        self.closed = True


def test_websocket_codec():
    conn = FakeConn(['{"id":1}', b'{"id":2}'])
    codec = WebsocketCodec(conn)
    assert codec.read() == b'{"id":1}'
    assert codec.read() == b'{"id":2}'
    codec.write(b'{"method":"m"}')
    assert conn.sent == ['{"method":"m"}']
    codec.close()
    assert conn.closed is True


def test_new_transport_http_for_urls_and_missing_paths(tmp_path):
    transport = new_transport("http://localhost:8545", {"X-Client": "tests"})
    assert isinstance(transport, HTTPTransport)
    assert transport.addr == "http://localhost:8545"
    assert transport.headers == {"X-Client": "tests"}
    missing = new_transport(str(tmp_path / "absent.ipc"), None)
    assert isinstance(missing, HTTPTransport)


def test_new_transport_ipc_for_existing_socket(tmp_path):
    path = str(tmp_path / "n.ipc")
    server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    server.bind(path)
    server.listen(1)
    accepted = []

    def serve():
        conn, _ = server.accept()
        accepted.append(conn)
        codec = IPCCodec(conn)
        request = json.loads(codec.read())
        reply = {"jsonrpc": "2.0", "id": request["id"], "result": "pong"}
        codec.write(json.dumps(reply).encode())

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    try:
        transport = new_transport(path, {})
        try:
            assert isinstance(transport, Stream)
            assert transport.call("ping") == "pong"
        finally:
            transport.close()
    finally:
        thread.join(timeout=2)
        for conn in accepted:
            conn.close()
        server.close()
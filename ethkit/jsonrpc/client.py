"""JSON-RPC client with the web3, eth, net and debug namespaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ..types import Hash
from .eth import Eth
from .transport import HTTPTransport, PubSubTransport, Transport, new_transport
from .util import encode_to_hex, parse_hex_bytes, parse_uint64_or_hex


@dataclass
class StructLog:
    depth: int = 0
    gas: int = 0
    gas_cost: int = 0
    op: str = ""
    pc: int = 0
    memory: list[str] = field(default_factory=list)
    stack: list[str] = field(default_factory=list)
    storage: dict[str, str] = field(default_factory=dict)


@dataclass
class TransactionTrace:
    gas: int = 0
    return_value: str = ""
    struct_logs: list[StructLog] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransactionTrace:
        return cls(
            gas=int(data.get("gas") or 0),
            return_value=data.get("returnValue") or "",
            struct_logs=[
                StructLog(
                    depth=int(item.get("depth") or 0),
                    gas=int(item.get("gas") or 0),
                    gas_cost=int(item.get("gasCost") or 0),
                    op=item.get("op") or "",
                    pc=int(item.get("pc") or 0),
                    memory=list(item.get("memory") or []),
                    stack=list(item.get("stack") or []),
                    storage=dict(item.get("storage") or {}),
                )
                for item in data.get("structLogs") or []
            ],
        )


class Web3:
    """Calls in the ``web3`` namespace."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def client_version(self) -> str:
        return self._client.call("web3_clientVersion")

    def sha3(self, data: bytes) -> bytes:
        """Return Keccak-256 of ``data`` as computed by the node."""
        return parse_hex_bytes(self._client.call("web3_sha3", encode_to_hex(data)))


class Net:
    """Calls in the ``net`` namespace."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def version(self) -> int:
        return parse_uint64_or_hex(self._client.call("net_version"))

    def listening(self) -> bool:
        return bool(self._client.call("net_listening"))

    def peer_count(self) -> int:
        return parse_uint64_or_hex(self._client.call("net_peerCount"))


class Debug:
    """Calls in the ``debug`` namespace."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def trace_transaction(self, txn_hash: Hash) -> TransactionTrace | None:
        result = self._client.call("debug_traceTransaction", txn_hash)
        return None if result is None else TransactionTrace.from_dict(result)


class Client:
    """A JSON-RPC client over HTTP, websocket or IPC."""

    def __init__(
        self,
        addr: str = "",
        headers: dict[str, str] | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.transport = transport if transport is not None else new_transport(addr, headers)
        self._web3 = Web3(self)
        self._eth = Eth(self)
        self._net = Net(self)
        self._debug = Debug(self)

    def eth(self) -> Eth:
        return self._eth

    def web3(self) -> Web3:
        return self._web3

    def net(self) -> Net:
        return self._net

    def debug(self) -> Debug:
        return self._debug

    def call(self, method: str, *args: Any) -> Any:
        return self.transport.call(method, *args)

    def close(self) -> None:
        self.transport.close()

    def set_max_conns_limit(self, count: int) -> None:
        self.transport.set_max_conns_per_host(count)

    def is_http(self) -> bool:
        return isinstance(self.transport, HTTPTransport)

    def subscription_enabled(self) -> bool:
        return isinstance(self.transport, PubSubTransport)

    def subscribe(self, method: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Start a subscription; returns a function that cancels it."""
        if not isinstance(self.transport, PubSubTransport):
            raise TypeError("transport does not support the subscribe method")
        return self.transport.subscribe(method, callback)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
"""JSON-RPC 2.0 message types."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..types import Address, Hash


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (Address, Hash)):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _dumps(value: Any) -> str:
    return json.dumps(value, default=_json_default, separators=(",", ":"))


def _loads_object(data: str | bytes) -> dict[str, Any]:
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    obj = json.loads(data)
    if not isinstance(obj, dict):
        raise ValueError("JSON-RPC message must be a JSON object")
    return obj


@dataclass
class Request:
    """A JSON-RPC request; ``params`` holds the decoded parameter list or None."""

    method: str = ""
    params: Any = None
    id: int = 0
    jsonrpc: str = "2.0"

    def to_json(self) -> str:
        return _dumps(
            {
                "jsonrpc": self.jsonrpc,
                "id": self.id,
                "method": self.method,
                "params": self.params,
            }
        )

    @classmethod
    def from_json(cls, data: str | bytes) -> Request:
        obj = _loads_object(data)
        return cls(
            method=obj.get("method") or "",
            params=obj.get("params"),
            id=obj.get("id") or 0,
            jsonrpc=obj.get("jsonrpc") or "",
        )


@dataclass
class ErrorObject(Exception):
    """A JSON-RPC error returned by the remote end."""

    code: int = 0
    message: str = ""
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorObject:
        return cls(
            code=data.get("code", 0),
            message=data.get("message", ""),
            data=data.get("data"),
        )

    def __str__(self) -> str:
        try:
            return _dumps(self.to_dict())
        except TypeError as exc:
            return f"jsonrpc.internal marshal error: {exc}"


@dataclass
class Response:
    """A JSON-RPC response; ``has_result`` tells whether a result member was present."""

    id: int = 0
    result: Any = None
    error: ErrorObject | None = None
    has_result: bool = False

    @classmethod
    def from_json(cls, data: str | bytes) -> Response:
        obj = _loads_object(data)
        raw_error = obj.get("error")
        error = ErrorObject.from_dict(raw_error) if isinstance(raw_error, dict) else None
        return cls(
            id=obj.get("id") or 0,
            result=obj.get("result"),
            error=error,
            has_result="result" in obj,
        )


@dataclass
class Subscription:
    """The params of an ``eth_subscription`` notification."""

    id: str = ""
    result: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subscription:
        return cls(id=data.get("subscription") or "", result=data.get("result"))
import json

import pytest

from ethkit.jsonrpc.codec import ErrorObject, Request, Response, Subscription
from ethkit.types import Address, Hash


def test_request_without_params_encodes_null():
    encoded = json.loads(Request(method="eth_blockNumber").to_json())
    assert encoded == {"jsonrpc": "2.0", "id": 0, "method": "eth_blockNumber", "params": None}


def test_request_round_trip():
    request = Request(method="eth_getBalance", params=["0x01", "latest"], id=7)
    assert Request.from_json(request.to_json()) == request


def test_request_encodes_addresses_hashes_and_bytes():
    addr = Address.from_hex("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
    digest = Hash.from_hex("0x1")
    request = Request(method="m", params=[addr, digest, b"\x01\x02"])
    params = json.loads(request.to_json())["params"]
    assert params == ["0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed", str(digest), "0x0102"]


def test_request_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        Request.from_json("[1, 2]")


def test_error_object_string_is_compact_json():
    error = ErrorObject(code=-32000, message="boom")
    assert str(error) == '{"code":-32000,"message":"boom"}'


def test_error_object_includes_data_when_set():
    error = ErrorObject(code=3, message="reverted", data="0x00")
    assert json.loads(str(error)) == {"code": 3, "message": "reverted", "data": "0x00"}


def test_error_object_dict_round_trip_and_raise():
    error = ErrorObject.from_dict({"code": -1, "message": "bad", "data": {"k": 1}})
    assert ErrorObject.from_dict(error.to_dict()) == error
    with pytest.raises(ErrorObject) as info:
        raise error
    assert info.value.code == -1


def test_response_with_result():
    response = Response.from_json(b'{"jsonrpc":"2.0","id":4,"result":"0x10"}')
    assert (response.id, response.result, response.error, response.has_result) == (
        4,
        "0x10",
        None,
        True,
    )


def test_response_with_null_result_has_result():
    response = Response.from_json('{"id":1,"result":null}')
    assert response.has_result is True
    assert response.result is None


def test_response_with_error():
    response = Response.from_json('{"id":2,"error":{"code":-32601,"message":"no method"}}')
    assert response.error == ErrorObject(code=-32601, message="no method")
    assert response.has_result is False


def test_notification_has_zero_id():
    raw = '{"jsonrpc":"2.0","method":"eth_subscription","params":{"subscription":"0xab","result":1}}'
    assert Response.from_json(raw).id == 0
    request = Request.from_json(raw)
    assert request.method == "eth_subscription"
    sub = Subscription.from_dict(request.params)
    assert (sub.id, sub.result) == ("0xab", 1)
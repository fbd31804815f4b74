"""The ``eth`` namespace of the JSON-RPC interface."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Protocol

from ..encoding import decode_to_hex
from ..types import (
    ZERO_ADDRESS,
    ZERO_HASH,
    AccessEntry,
    Address,
    Block,
    BlockNumber,
    CallMsg,
    Hash,
    Log,
    LogFilter,
    OverrideAccount,
    Receipt,
    Transaction,
    TransactionType,
)
from .util import encode_to_hex, encode_uint_to_hex, parse_big_int, parse_hex_bytes, parse_uint64_or_hex

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


class Caller(Protocol):
    def call(self, method: str, *args: Any) -> Any: ...


def _location(block: Any) -> str:
    if hasattr(block, "location"):
        return block.location()
    return BlockNumber(block).location()


def _quantity(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return int(value)
    text = str(value)
    if text.startswith("0x"):
        return int(text[2:] or "0", 16)
    return int(text)


def _opt_quantity(value: Any) -> int | None:
    return None if value is None else _quantity(value)


def _data(value: Any) -> bytes:
    return decode_to_hex(value) if value else b""


def _hash(value: Any) -> Hash:
    return Hash(decode_to_hex(value)) if value else ZERO_HASH


def _address(value: Any) -> Address:
    return Address(decode_to_hex(value)) if value else ZERO_ADDRESS


def _opt_address(value: Any) -> Address | None:
    return None if value is None else _address(value)


def _access_list(value: Any) -> list[AccessEntry]:
    return [
        AccessEntry(
            address=_address(entry.get("address")),
            storage=[_hash(key) for key in entry.get("storageKeys") or []],
        )
        for entry in value or []
    ]


def _transaction_from_dict(data: dict[str, Any]) -> Transaction:
    return Transaction(
        type=TransactionType(_quantity(data.get("type"))),
        hash=_hash(data.get("hash")),
        from_=_address(data.get("from")),
        to=_opt_address(data.get("to")),
        input=_data(data.get("input")),
        gas_price=_quantity(data.get("gasPrice")),
        gas=_quantity(data.get("gas")),
        value=_opt_quantity(data.get("value")),
        nonce=_quantity(data.get("nonce")),
        v=_data(data.get("v")),
        r=_data(data.get("r")),
        s=_data(data.get("s")),
        block_hash=_hash(data.get("blockHash")),
        block_number=_quantity(data.get("blockNumber")),
        txn_index=_quantity(data.get("transactionIndex")),
        chain_id=_opt_quantity(data.get("chainId")),
        access_list=_access_list(data.get("accessList")),
        max_priority_fee_per_gas=_opt_quantity(data.get("maxPriorityFeePerGas")),
        max_fee_per_gas=_opt_quantity(data.get("maxFeePerGas")),
    )


def _block_from_dict(data: dict[str, Any]) -> Block:
    transactions: list[Transaction] = []
    hashes: list[Hash] = []
    for item in data.get("transactions") or []:
        if isinstance(item, str):
            hashes.append(_hash(item))
        else:
            transactions.append(_transaction_from_dict(item))
    nonce = _data(data.get("nonce")).rjust(8, b"\x00")[-8:]
    return Block(
        number=_quantity(data.get("number")),
        hash=_hash(data.get("hash")),
        parent_hash=_hash(data.get("parentHash")),
        sha3_uncles=_hash(data.get("sha3Uncles")),
        transactions_root=_hash(data.get("transactionsRoot")),
        state_root=_hash(data.get("stateRoot")),
        receipts_root=_hash(data.get("receiptsRoot")),
        miner=_address(data.get("miner")),
        difficulty=_opt_quantity(data.get("difficulty")),
        extra_data=_data(data.get("extraData")),
        gas_limit=_quantity(data.get("gasLimit")),
        gas_used=_quantity(data.get("gasUsed")),
        timestamp=_quantity(data.get("timestamp")),
        mix_hash=_hash(data.get("mixHash")),
        nonce=nonce,
        transactions=transactions,
        transactions_hashes=hashes,
        uncles=[_hash(uncle) for uncle in data.get("uncles") or []],
    )


def _log_from_dict(data: dict[str, Any]) -> Log:
    return Log(
        removed=bool(data.get("removed", False)),
        log_index=_quantity(data.get("logIndex")),
        transaction_index=_quantity(data.get("transactionIndex")),
        transaction_hash=_hash(data.get("transactionHash")),
        block_hash=_hash(data.get("blockHash")),
        block_number=_quantity(data.get("blockNumber")),
        address=_address(data.get("address")),
        topics=[_hash(topic) for topic in data.get("topics") or []],
        data=_data(data.get("data")),
    )


def _receipt_from_dict(data: dict[str, Any]) -> Receipt:
    return Receipt(
        transaction_hash=_hash(data.get("transactionHash")),
        transaction_index=_quantity(data.get("transactionIndex")),
        contract_address=_address(data.get("contractAddress")),
        block_hash=_hash(data.get("blockHash")),
        from_=_address(data.get("from")),
        block_number=_quantity(data.get("blockNumber")),
        gas_used=_quantity(data.get("gasUsed")),
        cumulative_gas_used=_quantity(data.get("cumulativeGasUsed")),
        logs_bloom=_data(data.get("logsBloom")),
        logs=[_log_from_dict(log) for log in data.get("logs") or []],
        status=_quantity(data.get("status")),
        to=_opt_address(data.get("to")),
    )


def _encode_call_msg(msg: CallMsg) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if msg.from_ != ZERO_ADDRESS:
        out["from"] = str(msg.from_)
    if msg.to is not None:
        out["to"] = str(msg.to)
    if msg.data:
        out["data"] = encode_to_hex(msg.data)
    if msg.gas_price:
        out["gasPrice"] = encode_uint_to_hex(msg.gas_price)
    if msg.gas is not None:
        out["gas"] = encode_uint_to_hex(msg.gas)
    if msg.value is not None:
        out["value"] = encode_uint_to_hex(msg.value)
    return out


def _encode_transaction(txn: Transaction) -> dict[str, Any]:
    out: dict[str, Any] = {"from": str(txn.from_)}
    if txn.type != TransactionType.LEGACY:
        out["type"] = encode_uint_to_hex(int(txn.type))
    if txn.to is not None:
        out["to"] = str(txn.to)
    if txn.input:
        out["data"] = encode_to_hex(txn.input)
    if txn.gas_price:
        out["gasPrice"] = encode_uint_to_hex(txn.gas_price)
    if txn.gas:
        out["gas"] = encode_uint_to_hex(txn.gas)
    if txn.value is not None:
        out["value"] = encode_uint_to_hex(txn.value)
    if txn.nonce:
        out["nonce"] = encode_uint_to_hex(txn.nonce)
    if txn.chain_id is not None:
        out["chainId"] = encode_uint_to_hex(txn.chain_id)
    if txn.access_list:
        out["accessList"] = [
            {"address": str(entry.address), "storageKeys": [str(key) for key in entry.storage]}
            for entry in txn.access_list
        ]
    if txn.max_priority_fee_per_gas is not None:
        out["maxPriorityFeePerGas"] = encode_uint_to_hex(txn.max_priority_fee_per_gas)
    if txn.max_fee_per_gas is not None:
        out["maxFeePerGas"] = encode_uint_to_hex(txn.max_fee_per_gas)
    return out


def _encode_topic_position(position: list[Hash | None]) -> Any:
    values = [None if topic is None else str(topic) for topic in position]
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def _encode_log_filter(log_filter: LogFilter) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if log_filter.address:
        out["address"] = [str(addr) for addr in log_filter.address]
    if log_filter.topics:
        out["topics"] = [_encode_topic_position(pos) for pos in log_filter.topics]
    if log_filter.block_hash is not None:
        out["blockHash"] = str(log_filter.block_hash)
    if log_filter.from_ is not None:
        out["fromBlock"] = str(BlockNumber(log_filter.from_))
    if log_filter.to is not None:
        out["toBlock"] = str(BlockNumber(log_filter.to))
    return out


def _encode_account(account: OverrideAccount) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if account.nonce is not None:
        out["nonce"] = encode_uint_to_hex(account.nonce)
    if account.code is not None:
        out["code"] = encode_to_hex(account.code)
    if account.balance is not None:
        out["balance"] = encode_uint_to_hex(account.balance)
    if account.state is not None:
        out["state"] = {str(k): str(v) for k, v in account.state.items()}
    if account.state_diff is not None:
        out["stateDiff"] = {str(k): str(v) for k, v in account.state_diff.items()}
    return out


def _encode_override(override: dict[Address, OverrideAccount] | None) -> dict[str, Any] | None:
    if override is None:
        return None
    return {str(addr): _encode_account(account) for addr, account in override.items()}


def _arg_big(value: Any) -> int:
    return int.from_bytes(parse_hex_bytes(value), "big")


@dataclass
class FeeHistory:
    """The result of ``eth_feeHistory``."""

    oldest_block: int | None = None
    reward: list[list[int]] | None = None
    base_fee: list[int] | None = None
    gas_used_ratio: list[float] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeeHistory:
        oldest = data.get("oldestBlock")
        reward = data.get("reward")
        base_fee = data.get("baseFeePerGas")
        return cls(
            oldest_block=None if oldest is None else _arg_big(oldest),
            reward=None if reward is None else [[_arg_big(i) for i in row] for row in reward],
            base_fee=None if base_fee is None else [_arg_big(i) for i in base_fee],
            gas_used_ratio=data.get("gasUsedRatio"),
        )


class Eth:
    """Calls in the ``eth`` namespace."""

    def __init__(self, client: Caller) -> None:
        self._client = client

    def get_code(self, address: Address, block: Any) -> str:
        return self._client.call("eth_getCode", address, _location(block))

    def accounts(self) -> list[Address]:
        return [_address(item) for item in self._client.call("eth_accounts") or []]

    def get_storage_at(self, address: Address, slot: Hash, block: Any) -> Hash:
        return _hash(self._client.call("eth_getStorageAt", address, slot, _location(block)))

    def block_number(self) -> int:
        return parse_uint64_or_hex(self._client.call("eth_blockNumber"))

    def get_block_by_number(self, number: int, full: bool) -> Block | None:
        result = self._client.call("eth_getBlockByNumber", str(BlockNumber(number)), full)
        return None if result is None else _block_from_dict(result)

    def get_block_by_hash(self, block_hash: Hash, full: bool) -> Block | None:
        result = self._client.call("eth_getBlockByHash", block_hash, full)
        return None if result is None else _block_from_dict(result)

    def get_filter_changes(self, filter_id: str) -> list[Log]:
        return [_log_from_dict(item) for item in self._client.call("eth_getFilterChanges", filter_id) or []]

    def get_transaction_by_hash(self, txn_hash: Hash) -> Transaction | None:
        result = self._client.call("eth_getTransactionByHash", txn_hash)
        return None if result is None else _transaction_from_dict(result)

    def get_filter_changes_block(self, filter_id: str) -> list[Hash]:
        return [_hash(item) for item in self._client.call("eth_getFilterChanges", filter_id) or []]

    def new_filter(self, log_filter: LogFilter) -> str:
        return self._client.call("eth_newFilter", _encode_log_filter(log_filter))

    def new_block_filter(self) -> str:
        return self._client.call("eth_newBlockFilter", None)

    def uninstall_filter(self, filter_id: str) -> bool:
        return bool(self._client.call("eth_uninstallFilter", filter_id))

    def send_raw_transaction(self, data: bytes) -> Hash:
        return _hash(self._client.call("eth_sendRawTransaction", encode_to_hex(data)))

    def send_transaction(self, txn: Transaction) -> Hash:
        return _hash(self._client.call("eth_sendTransaction", _encode_transaction(txn)))

    def get_transaction_receipt(self, txn_hash: Hash) -> Receipt | None:
        result = self._client.call("eth_getTransactionReceipt", txn_hash)
        return None if result is None else _receipt_from_dict(result)

    def get_nonce(self, address: Address, block: Any) -> int:
        return parse_uint64_or_hex(self._client.call("eth_getTransactionCount", address, _location(block)))

    def get_balance(self, address: Address, block: Any) -> int:
        out = self._client.call("eth_getBalance", address, _location(block))
        digits = str(out)[2:]
        if not _HEX_RE.fullmatch(digits):
            raise ValueError("failed to convert to big.int")
        return int(digits, 16)

    def gas_price(self) -> int:
        return parse_uint64_or_hex(self._client.call("eth_gasPrice"))

    def call(
        self,
        msg: CallMsg,
        block: int,
        override: dict[Address, OverrideAccount] | None = None,
    ) -> str:
        return self._client.call(
            "eth_call", _encode_call_msg(msg), str(BlockNumber(block)), _encode_override(override)
        )

    def estimate_gas_contract(self, code: bytes) -> int:
        out = self._client.call("eth_estimateGas", {"data": encode_to_hex(code)})
        return parse_uint64_or_hex(out)

    def estimate_gas(self, msg: CallMsg) -> int:
        return parse_uint64_or_hex(self._client.call("eth_estimateGas", _encode_call_msg(msg)))

    def get_logs(self, log_filter: LogFilter) -> list[Log]:
        result = self._client.call("eth_getLogs", _encode_log_filter(log_filter))
        return [_log_from_dict(item) for item in result or []]

    def chain_id(self) -> int:
        return parse_big_int(self._client.call("eth_chainId"))

    def fee_history(self, start: int, end: int) -> FeeHistory | None:
        result = self._client.call(
            "eth_feeHistory", str(BlockNumber(start)), str(BlockNumber(end)), None
        )
        return None if result is None else FeeHistory.from_dict(result)
"""Core Ethereum value types: addresses, hashes, blocks, transactions and logs."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum

from .encoding import decode_to_hex
from .keccak import keccak256


class Network(IntEnum):
    """Chain identifiers of well-known networks."""

    MAINNET = 1
    ROPSTEN = 3
    RINKEBY = 4
    GOERLI = 5


def complete_hex(text: str, size: int) -> str:
    """Left-pad or truncate hex text so it holds exactly ``size`` bytes."""
    digits = size * 2
    value = text.removeprefix("0x")
    if len(value) < digits:
        value = value.rjust(digits, "0")
    else:
        value = value[len(value) - digits:]
    return "0x" + value


def _fixed_from_hex(size: int, text: str) -> bytes:
    return decode_to_hex(complete_hex(text, size))


def _fixed_from_bytes(size: int, data: bytes) -> bytes:
    data = bytes(data)[-size:] if data else b""
    return data.rjust(size, b"\x00")


class _FixedBytes(bytes):
    SIZE = 0

    def __new__(cls, data: bytes = b""):
        data = bytes(data)
        if not data:
            data = bytes(cls.SIZE)
        if len(data) != cls.SIZE:
            raise ValueError(f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}")
        return super().__new__(cls, data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class Address(_FixedBytes):
    """A 20-byte Ethereum address."""

    SIZE = 20

    @classmethod
    def from_hex(cls, text: str) -> Address:
        """Build from hex text, padding short values and keeping the low bytes of long ones."""
        return cls(_fixed_from_hex(cls.SIZE, text))

    @classmethod
    def from_bytes(cls, data: bytes) -> Address:
        """Build from bytes, keeping the last 20 bytes and left-padding with zeros."""
        return cls(_fixed_from_bytes(cls.SIZE, data))

    @property
    def address(self) -> Address:
        return self

    def sign(self, digest: bytes) -> bytes:
        raise TypeError("an address cannot sign messages")

    def checksum(self) -> str:
        """Return the mixed-case checksummed hex form."""
        lowered = self.hex()
        digest = keccak256(lowered.encode("ascii")).hex()
        chars = (
            char.upper() if int(nibble, 16) > 7 else char
            for char, nibble in zip(lowered, digest)
        )
        return "0x" + "".join(chars)

    def __str__(self) -> str:
        return self.checksum()


class Hash(_FixedBytes):
    """A 32-byte Ethereum hash."""

    SIZE = 32

    @classmethod
    def from_hex(cls, text: str) -> Hash:
        """Build from hex text, padding short values and keeping the low bytes of long ones."""
        return cls(_fixed_from_hex(cls.SIZE, text))

    @classmethod
    def from_bytes(cls, data: bytes) -> Hash:
        """Build from bytes, keeping the last 32 bytes and left-padding with zeros."""
        return cls(_fixed_from_bytes(cls.SIZE, data))

    def location(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return "0x" + self.hex()


ZERO_ADDRESS = Address()
ZERO_HASH = Hash()


def hex_to_address(text: str) -> Address:
    return Address.from_hex(text)


def bytes_to_address(data: bytes) -> Address:
    return Address.from_bytes(data)


def hex_to_hash(text: str) -> Hash:
    return Hash.from_hex(text)


def bytes_to_hash(data: bytes) -> Hash:
    return Hash.from_bytes(data)


class BlockNumber(int):
    """A block number, or one of the LATEST, EARLIEST and PENDING tags."""

    LATEST: BlockNumber
    EARLIEST: BlockNumber
    PENDING: BlockNumber

    def location(self) -> str:
        return str(self)

    def __str__(self) -> str:
        tag = _BLOCK_TAGS.get(int(self))
        if tag is not None:
            return tag
        if self < 0:
            raise ValueError(f"negative block number: {int(self)}")
        return f"0x{int(self):x}"

    def __repr__(self) -> str:
        return f"BlockNumber({int(self)})"


_BLOCK_TAGS = {-1: "latest", -2: "earliest", -3: "pending"}

BlockNumber.LATEST = LATEST = BlockNumber(-1)
BlockNumber.EARLIEST = EARLIEST = BlockNumber(-2)
BlockNumber.PENDING = PENDING = BlockNumber(-3)


def encode_block(*args: int) -> BlockNumber:
    """Return the single block given, or LATEST when none or several are given."""
    if len(args) != 1:
        return LATEST
    return BlockNumber(args[0])


class TransactionType(IntEnum):
    LEGACY = 0
    ACCESS_LIST = 1  # eip-2930
    DYNAMIC_FEE = 2  # eip-1559


@dataclass
class AccessEntry:
    address: Address = ZERO_ADDRESS
    storage: list[Hash] = field(default_factory=list)


def copy_access_list(access_list: list[AccessEntry] | None) -> list[AccessEntry]:
    """Return a copy of an access list whose entries share no lists with the original."""
    return [AccessEntry(entry.address, list(entry.storage)) for entry in access_list or ()]


@dataclass
class Transaction:
    type: TransactionType = TransactionType.LEGACY
    hash: Hash = ZERO_HASH
    from_: Address = ZERO_ADDRESS
    to: Address | None = None
    input: bytes = b""
    gas_price: int = 0
    gas: int = 0
    value: int | None = None
    nonce: int = 0
    v: bytes = b""
    r: bytes = b""
    s: bytes = b""
    block_hash: Hash = ZERO_HASH
    block_number: int = 0
    txn_index: int = 0
    chain_id: int | None = None
    access_list: list[AccessEntry] = field(default_factory=list)
    max_priority_fee_per_gas: int | None = None
    max_fee_per_gas: int | None = None

    def copy(self) -> Transaction:
        return dataclasses.replace(self, access_list=copy_access_list(self.access_list))


@dataclass
class Block:
    number: int = 0
    hash: Hash = ZERO_HASH
    parent_hash: Hash = ZERO_HASH
    sha3_uncles: Hash = ZERO_HASH
    transactions_root: Hash = ZERO_HASH
    state_root: Hash = ZERO_HASH
    receipts_root: Hash = ZERO_HASH
    miner: Address = ZERO_ADDRESS
    difficulty: int | None = None
    extra_data: bytes = b""
    gas_limit: int = 0
    gas_used: int = 0
    timestamp: int = 0
    mix_hash: Hash = ZERO_HASH
    nonce: bytes = bytes(8)
    transactions: list[Transaction] = field(default_factory=list)
    transactions_hashes: list[Hash] = field(default_factory=list)
    uncles: list[Hash] = field(default_factory=list)

    def copy(self) -> Block:
        return dataclasses.replace(
            self,
            transactions=[txn.copy() for txn in self.transactions],
            transactions_hashes=list(self.transactions_hashes),
            uncles=list(self.uncles),
        )


@dataclass
class CallMsg:
    from_: Address = ZERO_ADDRESS
    to: Address | None = None
    data: bytes = b""
    gas_price: int = 0
    gas: int | None = None
    value: int | None = None


@dataclass
class LogFilter:
    address: list[Address] = field(default_factory=list)
    topics: list[list[Hash | None]] = field(default_factory=list)
    block_hash: Hash | None = None
    from_: BlockNumber | None = None
    to: BlockNumber | None = None

    def set_from(self, number: int) -> None:
        self.from_ = BlockNumber(number)

    def set_to(self, number: int) -> None:
        self.to = BlockNumber(number)


@dataclass
class Log:
    removed: bool = False
    log_index: int = 0
    transaction_index: int = 0
    transaction_hash: Hash = ZERO_HASH
    block_hash: Hash = ZERO_HASH
    block_number: int = 0
    address: Address = ZERO_ADDRESS
    topics: list[Hash] = field(default_factory=list)
    data: bytes = b""

    def copy(self) -> Log:
        return dataclasses.replace(self, topics=list(self.topics))


@dataclass
class Receipt:
    transaction_hash: Hash = ZERO_HASH
    transaction_index: int = 0
    contract_address: Address = ZERO_ADDRESS
    block_hash: Hash = ZERO_HASH
    from_: Address = ZERO_ADDRESS
    block_number: int = 0
    gas_used: int = 0
    cumulative_gas_used: int = 0
    logs_bloom: bytes = b""
    logs: list[Log] = field(default_factory=list)
    status: int = 0
    to: Address | None = None

    def copy(self) -> Receipt:
        return dataclasses.replace(self, logs=[log.copy() for log in self.logs])


@dataclass
class OverrideAccount:
    nonce: int | None = None
    code: bytes | None = None
    balance: int | None = None
    state: dict[Hash, Hash] | None = None
    state_diff: dict[Hash, Hash] | None = None


StateOverride = dict[Address, OverrideAccount]
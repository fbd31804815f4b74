"""Client for the Etherscan HTTP API."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

import requests

from .jsonrpc.codec import Response
from .jsonrpc.eth import _block_from_dict, _log_from_dict
from .jsonrpc.util import parse_uint64_or_hex
from .types import Address, Block, BlockNumber, Log, LogFilter, Network

_NETWORK_URLS = {
    Network.MAINNET: "https://api.etherscan.io",
    Network.ROPSTEN: "https://ropsten.etherscan.io",
    Network.RINKEBY: "https://rinkeby.etherscan.io",
    Network.GOERLI: "https://goerli.etherscan.io",
}

_BLOCK_TAGS = {-1: "latest", -2: "earliest", -3: "pending"}
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


class EtherscanError(RuntimeError):
    """Raised when an Etherscan reply cannot be used."""


def _field(obj: dict[str, Any], name: str) -> Any:
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _block_param(number: int) -> str:
    tag = _BLOCK_TAGS.get(int(number))
    if tag is not None:
        return tag
    if number < 0:
        raise ValueError(f"negative block number: {int(number)}")
    return str(int(number))


@dataclass
class ContractCode:
    """Verified source information of a contract."""

    source_code: str = ""
    contract_name: str = ""
    runs: str = ""
    compiler_version: str = ""
    constructor_arguments: str = ""

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> ContractCode:
        return cls(
            source_code=_text(_field(data, "SourceCode")),
            contract_name=_text(_field(data, "ContractName")),
            runs=_text(_field(data, "Runs")),
            compiler_version=_text(_field(data, "CompilerVersion")),
            constructor_arguments=_text(_field(data, "ConstructorArguments")),
        )


class Etherscan:
    """Queries the Etherscan API at ``url``."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.session = session or requests.Session()

    @classmethod
    def from_network(cls, network: int, api_key: str = "") -> Etherscan:
        """Create a client for a well-known network id."""
        try:
            url = _NETWORK_URLS[Network(network)]
        except (ValueError, KeyError):
            raise EtherscanError(f"unknown network id {int(network)}") from None
        return cls(url, api_key)

    def query(self, module: str, action: str, params: dict[str, str] | None = None) -> Any:
        """Send a query and return the decoded ``result`` member of the reply."""
        url = f"{self.url}/api?module={module}&action={action}"
        if params:
            url += "&" + "&".join(f"{key}={value}" for key, value in params.items())
        if self.api_key:
            url += "&apikey=" + self.api_key

        body = self.session.get(url).content
        if module == "proxy":
            try:
                response = Response.from_json(body)
            except ValueError as exc:
                raise EtherscanError(f"invalid response: {exc}") from exc
            if response.error is not None:
                raise response.error
            if not response.has_result:
                raise EtherscanError("response has no result")
            return response.result

        try:
            obj = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise EtherscanError(f"invalid response: {exc}") from exc
        if not isinstance(obj, dict):
            raise EtherscanError("response must be a JSON object")
        result = _field(obj, "Result")
        if result is None:
            raise EtherscanError("response has no result")
        return result

    def block_number(self) -> int:
        """Return the number of the most recent block."""
        out = self.query("proxy", "eth_blockNumber")
        if not isinstance(out, str):
            raise EtherscanError("block number must be a string")
        return parse_uint64_or_hex(out)

    def get_block_by_number(self, number: int, full: bool) -> Block | None:
        """Return a block by its number, or None when it is unknown."""
        params = {
            "tag": str(BlockNumber(number)),
            "boolean": "true" if full else "false",
        }
        result = self.query("proxy", "eth_getBlockByNumber", params)
        if result is None:
            return None
        if not isinstance(result, dict):
            raise EtherscanError("block must be a JSON object")
        return _block_from_dict(result)

    def get_contract_code(self, address: Address) -> ContractCode:
        """Return the verified source of the contract at ``address``."""
        out = self.query("contract", "getsourcecode", {"address": str(address)})
        if not isinstance(out, list) or len(out) != 1 or not isinstance(out[0], dict):
            raise EtherscanError("incorrect values")
        return ContractCode._from_dict(out[0])

    def gas_price(self) -> int:
        """Return the last block number reported by the gas oracle."""
        out = self.query("gastracker", "gasoracle", {})
        if not isinstance(out, dict):
            raise EtherscanError("gas oracle result must be a JSON object")
        last_block = out.get("LastBlock")
        if not isinstance(last_block, str) or not _DECIMAL_RE.fullmatch(last_block):
            raise EtherscanError(f"invalid LastBlock value: {last_block!r}")
        return int(last_block)

    def get_logs(self, log_filter: LogFilter) -> list[Log]:
        """Return the logs of the first filtered address within the block range."""
        if not log_filter.address:
            raise EtherscanError("an address to filter is required")
        params = {"address": str(log_filter.address[0])}
        if log_filter.from_ is not None:
            params["fromBlock"] = _block_param(log_filter.from_)
        if log_filter.to is not None:
            params["toBlock"] = _block_param(log_filter.to)
        out = self.query("logs", "getLogs", params)
        if not isinstance(out, list):
            raise EtherscanError("logs must be a JSON array")
        return [_log_from_dict(item) for item in out]
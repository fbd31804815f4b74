"""Ethereum toolkit: core types, JSON-RPC client, keystores, Etherscan and Solidity tooling."""

__version__ = "0.1.3"
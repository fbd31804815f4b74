# ethkit

A toolkit for working with Ethereum nodes and data from Python.

It provides:

- **Core types** in `ethkit.types`: `Address`, `Hash`, `Block`, `Transaction`,
  `Receipt`, `Log`, `LogFilter`, `CallMsg`, `OverrideAccount`, `BlockNumber`
  and `Network`, with checksummed address text.
- **Keccak-256** hashing through `ethkit.keccak.keccak256`.
- **Hex encoding helpers** for quantities and byte strings in `ethkit.encoding`
  and `ethkit.jsonrpc.util`.
- **A JSON-RPC client** (`ethkit.jsonrpc.client.Client`) speaking HTTP,
  WebSocket or IPC, with the `eth`, `net`, `web3` and `debug` namespaces and
  subscriptions on streaming transports.
- **Keystores** in `ethkit.keystore`: encrypt and decrypt secrets in the
  version 3 and version 4 formats.
- **Etherscan** queries in `ethkit.etherscan`.
- **Solidity compilation** by running a local `solc` binary, and downloading
  its static release, in `ethkit.compiler`.

## Installation

```
pip install ethkit
```

To run the test suite, install the `test` extra and run `pytest`.

## Addresses and hashes

```python
from ethkit.keccak import keccak256
from ethkit.types import hex_to_address, hex_to_hash

addr = hex_to_address("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
print(addr.checksum())   # 0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed

h = hex_to_hash("1")
print(h.location())      # 0x000...0001

digest = keccak256(b"hello", b" ", b"world")
```

Short hex strings are left-padded with zeros; long ones keep their rightmost
bytes. `Block`, `Transaction`, `Receipt` and `Log` have a `copy()` method that
returns a copy sharing no lists with the original.

## Talking to a node

```python
from ethkit.jsonrpc.client import Client
from ethkit.types import BlockNumber

client = Client("http://localhost:8545")
print(client.eth().block_number())
print(client.eth().chain_id())

block = client.eth().get_block_by_number(BlockNumber.LATEST, False)
client.close()
```

Addresses starting with `ws://` or `wss://` open a WebSocket; an existing
filesystem path is treated as an IPC socket; anything else is used as an HTTP
endpoint. JSON-RPC errors from the node are raised as
`ethkit.jsonrpc.codec.ErrorObject`; a streamed call that gets no answer within
15 seconds raises `ethkit.jsonrpc.transport.TransportTimeout`.

WebSocket and IPC transports support subscriptions. The callback receives the
decoded `result` of each notification:

```python
cancel = client.subscribe("newHeads", lambda payload: print(payload))
...
cancel()
```

`client.subscribe` raises `TypeError` on an HTTP transport.

## Keystores

```python
from ethkit.keystore import decrypt_v3, encrypt_v3

password = "password"
blob = encrypt_v3(b"\x01\x02", password)
assert decrypt_v3(blob, password) == b"\x01\x02"
```

`encrypt_v3` takes optional `scrypt_n` and `scrypt_p` arguments (defaults
2**18 and 1). `encrypt_v4` and `decrypt_v4` work the same way and normalise
the password first (`normalize_password`: NFKD form, control characters
removed). Decryption supports the `scrypt` and `pbkdf2` (hmac-sha256) key
derivations; failures raise `ethkit.keystore.KeystoreError`.

## Etherscan

```python
from ethkit.etherscan import Etherscan
from ethkit.types import Network

scan = Etherscan.from_network(Network.MAINNET, api_key="placeholder")
print(scan.block_number())
```

`Etherscan` also offers `get_block_by_number`, `get_contract_code`,
`gas_price` (the oracle's last block number) and `get_logs`, which requires
at least one address in the filter and uses the first one.

## Compiling Solidity

```python
from ethkit.compiler import Solidity, download_solidity

download_solidity("0.5.5", "/tmp/solc")          # writes /tmp/solc/solidity
output = Solidity("/tmp/solc/solidity").compile_code("pragma solidity >0.0.0; contract foo{}")
print(list(output.contracts))
```

`Solidity.compile(*files)` compiles files instead. Failures raise
`ethkit.compiler.CompilerError` carrying the compiler's error output.

## Command line

```
ethkit version
```

prints the installed version. Any other command prints the list of available
commands and exits with status 127.

## What it does not do

ethkit does not hold private keys, sign transactions or messages, or encode
transactions for `eth_sendRawTransaction`; `Address.sign` always raises
`TypeError`. It has no contract ABI encoding, no name-service resolution and
no typed-data hashing. The command line tool has only the `version` command.
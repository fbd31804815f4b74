"""Driving the solc compiler and fetching its static release binary."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from typing import Any

import requests

_RELEASES_URL = "https://github.com/ethereum/solidity/releases/download"
_COMBINED_OUTPUTS = "bin,bin-runtime,srcmap-runtime,abi,srcmap,ast"


class CompilerError(RuntimeError):
    """Raised when compiling or fetching the compiler fails."""


def _field(obj: dict[str, Any], name: str) -> Any:
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


@dataclass
class Artifact:
    """One compiled contract."""

    abi: str = ""
    bin: str = ""
    bin_runtime: str = ""
    src_map: str = ""
    src_map_runtime: str = ""

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Artifact:
        return cls(
            abi=_text(_field(data, "abi")),
            bin=_text(_field(data, "bin")),
            bin_runtime=_text(_field(data, "bin-runtime")),
            src_map=_text(_field(data, "srcmap")),
            src_map_runtime=_text(_field(data, "srcmap-runtime")),
        )


@dataclass
class Source:
    """One compiled source file and its syntax tree."""

    ast: dict[str, Any] | None = None


@dataclass
class Output:
    """The combined-json output of a compiler run."""

    contracts: dict[str, Artifact] = field(default_factory=dict)
    sources: dict[str, Source] = field(default_factory=dict)
    version: str = ""

    @classmethod
    def from_json(cls, data: str | bytes) -> Output:
        try:
            obj = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CompilerError(f"invalid compiler output: {exc}") from exc
        if not isinstance(obj, dict):
            raise CompilerError("compiler output must be a JSON object")
        contracts = _field(obj, "contracts") or {}
        sources = _field(obj, "sources") or {}
        return cls(
            contracts={
                name: Artifact._from_dict(entry or {}) for name, entry in contracts.items()
            },
            sources={
                name: Source(ast=_field(entry or {}, "AST")) for name, entry in sources.items()
            },
            version=_text(_field(obj, "version")),
        )


class Solidity:
    """The solidity compiler found at ``path``."""

    def __init__(self, path: str) -> None:
        self.path = path

    def compile_code(self, code: str) -> Output:
        """Compile solidity source given as text."""
        if not code:
            raise CompilerError("code is empty")
        return self._compile(code)

    def compile(self, *args: str) -> Output:
        """Compile the given solidity files."""
        if not args:
            raise CompilerError("no input files")
        return self._compile("", *args)

    def _compile(self, code: str, *files: str) -> Output:
        command = [self.path, "--combined-json", _COMBINED_OUTPUTS]
        if code:
            command.append("-")
        command.extend(files)

        stdin_kwargs: dict[str, Any] = (
            {"input": code.encode("utf-8")} if code else {"stdin": subprocess.DEVNULL}
        )
        try:
            result = subprocess.run(command, capture_output=True, check=False, **stdin_kwargs)
        except OSError:
            raise CompilerError("failed to compile: ") from None
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise CompilerError(f"failed to compile: {stderr}")
        return Output.from_json(result.stdout)


def download_solidity(version: str, dst: str, rename_dst: bool = False) -> None:
    """Download the static solc release for ``version`` into directory ``dst``."""
    url = f"{_RELEASES_URL}/v{version}/solc-static-linux"

    if os.path.lexists(dst):
        if os.path.isfile(dst):
            raise CompilerError("dst is a file")
    else:
        try:
            os.makedirs(dst, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise CompilerError(f"cannot create dst path: {exc}") from exc

    name = "solidity"
    if rename_dst:
        name += "-" + version

    with tempfile.TemporaryDirectory(prefix="solc-") as tmp_dir:
        path = os.path.join(tmp_dir, name)
        response = requests.get(url, stream=True, timeout=60)
        try:
            response.raise_for_status()
            with open(path, "wb") as out:
                for chunk in response.iter_content(chunk_size=65536):
                    if chunk:
                        out.write(chunk)
        finally:
            response.close()

        os.chmod(path, 0o755)
        shutil.move(path, os.path.join(dst, name))
# src/forkpoc/core/explorer.py
import json
from typing import Any, Dict, List

import requests

from forkpoc.config import REQUEST_TIMEOUT, Settings
from forkpoc.errors import ExplorerError
from forkpoc.models import SourceFile, VerifiedSource


def parse_source_code(source_code: str, contract_name: str) -> List[SourceFile]:
    """
    Unpacks the explorer's SourceCode field. It comes in three shapes:
    plain Solidity, a JSON object of path -> {"content": ...}, or a
    standard-JSON input, the latter usually wrapped in an extra pair of braces.
    """
    text = source_code.strip()
    if not text:
        raise ExplorerError("Explorer returned empty source code (contract not verified?)")

    if text.startswith("{{") and text.endswith("}}"):
        text = text[1:-1]

    if not text.startswith("{"):
        return [SourceFile(path=f"{contract_name or 'Contract'}.sol", content=source_code)]

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ExplorerError(f"Could not decode multi-file source code: {e}")

    sources = payload.get("sources", payload) if isinstance(payload, dict) else None
    if not isinstance(sources, dict) or not sources:
        raise ExplorerError("Multi-file source code has no sources")

    files: List[SourceFile] = []
    for path, entry in sources.items():
        content = entry.get("content") if isinstance(entry, dict) else entry
        if not isinstance(content, str):
            raise ExplorerError(f"Source '{path}' has no content")
        files.append(SourceFile(path=path.lstrip("/"), content=content))
    return files


class ExplorerClient:
    """Etherscan-compatible getsourcecode client."""

    def __init__(self, settings: Settings):
        self.base_url = settings.explorer_url
        self.api_key = settings.api_key
        self.chain_id = settings.chain_id

    def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        query = {"chainid": self.chain_id, **params, "apikey": self.api_key}
        try:
            response = requests.get(self.base_url, params=query, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise ExplorerError(f"Explorer request failed: {e}")
        except ValueError as e:
            raise ExplorerError(f"Explorer returned a non-JSON body: {e}")

        if not isinstance(body, dict):
            raise ExplorerError("Explorer returned an unexpected payload")
        if str(body.get("status")) == "0":
            raise ExplorerError(f"Explorer error: {body.get('message')}: {body.get('result')}")
        return body

    def fetch_source(self, address: str) -> VerifiedSource:
        print(f"Fetching verified source for {address} (chain {self.chain_id})")
        body = self._get({"module": "contract", "action": "getsourcecode", "address": address})

        result = body.get("result")
        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            raise ExplorerError(f"No source record returned for {address}")
        record = result[0]

        contract_name = (record.get("ContractName") or "").strip()
        if not contract_name:
            raise ExplorerError(f"Contract {address} is not verified")

        files = parse_source_code(record.get("SourceCode") or "", contract_name)
        print(f"Downloaded {len(files)} source file(s) for {contract_name}")
        return VerifiedSource(
            contract_name=contract_name,
            compiler_version=(record.get("CompilerVersion") or "").strip(),
            files=tuple(files),
        )

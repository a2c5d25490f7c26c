# staking_indexer/contracts/abi_loader.py

import json
from pathlib import Path
from typing import Optional, List, Dict, Any

from ..core.logging import LoggingMixin
from ..types import DecodeError

DEFAULT_ABI_DIR = Path(__file__).parent / "abis"


class ABILoader(LoggingMixin):
    """Loads contract ABIs from filesystem with caching"""

    def __init__(self, abi_base_path: Optional[Path] = None):
        self.abi_base_path = Path(abi_base_path) if abi_base_path else DEFAULT_ABI_DIR
        self._abi_cache: Dict[str, List[Dict[str, Any]]] = {}

        self.log_debug("ABI loader initialized", abi_base_path=str(self.abi_base_path))

    def load_abi(self, abi_file: str) -> List[Dict[str, Any]]:
        """Load ABI from filesystem with caching; raises DecodeError when unusable"""
        if abi_file in self._abi_cache:
            return self._abi_cache[abi_file]

        abi_path = self.abi_base_path / abi_file

        if not abi_path.exists():
            self.log_error("ABI file not found", abi_path=str(abi_path))
            raise DecodeError(f"ABI file not found: {abi_path}")

        try:
            with open(abi_path, 'r') as f:
                abi_data = json.load(f)
        except json.JSONDecodeError as e:
            self.log_error("Invalid JSON in ABI file",
                           abi_path=str(abi_path),
                           error=str(e))
            raise DecodeError(f"Invalid JSON in ABI file {abi_path}: {e}") from e

        # Handle different ABI file formats
        if isinstance(abi_data, dict) and 'abi' in abi_data:
            abi_data = abi_data['abi']

        if not isinstance(abi_data, list):
            self.log_error("ABI is not a list",
                           abi_path=str(abi_path),
                           abi_type=type(abi_data).__name__)
            raise DecodeError(f"ABI in {abi_path} is not a list")

        self._abi_cache[abi_file] = abi_data

        self.log_debug("ABI loaded successfully",
                       abi_path=str(abi_path),
                       abi_functions=len([item for item in abi_data if item.get('type') == 'function']),
                       abi_events=len([item for item in abi_data if item.get('type') == 'event']))

        return abi_data

    def clear_cache(self):
        """Clear the ABI cache"""
        self._abi_cache.clear()

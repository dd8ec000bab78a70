"""
Configuration module for escrowgate.

Settings come from environment variables, read once at import. The
contract parameter file is loaded through a cache that reparses it when
the file changes on disk or its entry outlives CONFIG_CACHE_TTL.
"""

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Dict, Optional, Tuple

from .contract import ContractParameters

logger = logging.getLogger(__name__)


def _flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("ESCROWGATE_ENV", "dev")  # dev|stage|prod

CONTRACT_PATH = os.getenv("ESCROWGATE_CONTRACT_PATH", "contract.json")

LOG_LEVEL = os.getenv("ESCROWGATE_LOG_LEVEL", "INFO")
LOG_JSON = _flag("ESCROWGATE_LOG_JSON", "true")
LOG_FILE = os.getenv("ESCROWGATE_LOG_FILE") or None

# Cache TTL (seconds)
CONFIG_CACHE_TTL = int(os.getenv("CONFIG_CACHE_TTL", "60"))


# ============================================================
# Contract Loading
# ============================================================

class ContractCache:
    """
    Thread-safe cache of parsed contract files.

    An entry is reused while the file's modification time is unchanged and
    the entry is younger than ``ttl_seconds``.
    """

    def __init__(self, ttl_seconds: int = 60):
        self._entries: Dict[str, Tuple[float, float, ContractParameters]] = {}
        self._lock = threading.RLock()
        self._ttl = ttl_seconds

    def get(self, path: str, force_reload: bool = False) -> ContractParameters:
        """
        Raises:
            FileNotFoundError: the contract file does not exist
            ContractParameterError: the file does not describe a valid contract
            json.JSONDecodeError: the file is not JSON
        """
        key = str(Path(path).resolve())
        mtime = os.stat(key).st_mtime

        with self._lock:
            entry = self._entries.get(key)
            if entry and not force_reload:
                loaded_at, loaded_mtime, params = entry
                if loaded_mtime == mtime and time.monotonic() - loaded_at <= self._ttl:
                    return params

            with open(key, "r", encoding="utf-8") as f:
                params = ContractParameters.from_dict(json.load(f))

            self._entries[key] = (time.monotonic(), mtime, params)
            logger.info("Loaded contract %s from %s", params.fingerprint(), key)
            return params

    def invalidate(self, path: Optional[str] = None) -> None:
        with self._lock:
            if path:
                self._entries.pop(str(Path(path).resolve()), None)
            else:
                self._entries.clear()


_contract_cache = ContractCache(ttl_seconds=CONFIG_CACHE_TTL)


def load_contract(path: Optional[str] = None) -> ContractParameters:
    """Load and validate contract parameters from ``path`` (default CONTRACT_PATH)."""
    return _contract_cache.get(path or CONTRACT_PATH)


def invalidate_config_cache() -> None:
    _contract_cache.invalidate()


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """Check that configured files exist. Returns name -> exists."""
    checks = {"contract": Path(CONTRACT_PATH).exists()}
    if LOG_FILE:
        checks["log_dir"] = Path(LOG_FILE).resolve().parent.is_dir()
    return checks


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    return ENV == "prod"


def is_debug() -> bool:
    return _flag("ESCROWGATE_DEBUG")

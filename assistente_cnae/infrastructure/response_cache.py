# assistente_cnae/infrastructure/response_cache.py
from __future__ import annotations

import copy
import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

_ESPACOS = re.compile(r"\s+")


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """Cache TTL em memoria para respostas do chat.

    Cada worker tem o seu proprio cache. Entradas expiradas sao descartadas na
    leitura; nao ha thread de limpeza. Valores sao copiados na entrada e na
    saida para que o chamador nao altere o que esta guardado.
    """

    def __init__(self, ttl_seconds: float = 300, relogio: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._relogio = relogio
        self._data: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._relogio():
                self._data.pop(key, None)
                return None
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = CacheEntry(
                value=copy.deepcopy(value),
                expires_at=self._relogio() + self.ttl_seconds,
            )


def normalizar_pergunta(pergunta: str) -> str:
    return _ESPACOS.sub(" ", (pergunta or "").strip().lower())

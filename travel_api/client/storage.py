"""
Stockage clé/valeur injecté (remplace localStorage) et préférence de devise.
"""
from typing import Dict, Optional, Protocol

from travel_api.currency import RateTable

# module travel_api.client.storage
class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class CurrencyPreference:
    """
    Devise choisie par l'acheteur, persistée via le storage injecté.
    - Valeur absente ou non supportée => devise de base de la table.
    """

    def __init__(self, storage: KeyValueStorage, table: RateTable, key: str = "currency"):
        self.storage = storage
        self.table = table
        self.key = key

    def get(self) -> str:
        code = (self.storage.get(self.key) or "").upper()
        return code if self.table.supports(code) else self.table.base

    def set(self, code: str) -> str:
        code = (code or "").upper()
        if not self.table.supports(code):
            code = self.table.base
        self.storage.set(self.key, code)
        return code

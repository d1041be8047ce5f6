"""
Catalogue des forfaits (données de référence statiques, non persistées).
Sert de prix faisant foi pour le checkout: le montant envoyé par le navigateur
n'est qu'un indice d'affichage lorsque le forfait est connu.
"""
import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from travel_api.currency import RateTable, convert, round_money

logger = logging.getLogger(__name__)

# module travel_api.payments.catalog
@dataclass(frozen=True)
class Package:
    id: str
    name: str
    price_base: float


class PackageCatalog:
    def __init__(self, packages: Iterable[Package] = ()):
        self._by_id: Dict[str, Package] = {p.id: p for p in packages}

    def get(self, package_id) -> Optional[Package]:
        return self._by_id.get(str(package_id))

    def quote(self, package_id, currency: str, table: RateTable) -> Optional[float]:
        """
        Prix faisant foi d'un forfait dans la devise demandée (arrondi 2 décimales).
        - None si le forfait est inconnu.
        """
        package = self.get(package_id)
        if package is None:
            return None
        return round_money(convert(package.price_base, table.base, currency, table))

    def __contains__(self, package_id) -> bool:
        return str(package_id) in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)


def load_catalog(path: Path) -> PackageCatalog:
    """
    Charge [{id, name, price}] depuis un fichier JSON.
    - Lignes invalides ignorées; fichier absent/illisible => catalogue vide (warning).
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("payments.catalog unreadable file=%s, using empty catalog", path)
        return PackageCatalog()

    packages: List[Package] = []
    for row in raw if isinstance(raw, list) else []:
        if not isinstance(row, dict):
            continue
        package_id = str(row.get("id") or "").strip()
        name = str(row.get("name") or "").strip()
        try:
            price = float(row.get("price") or 0)
        except (TypeError, ValueError):
            price = 0.0
        if not package_id or not name or price <= 0:
            logger.warning("payments.catalog skipping invalid row=%s", row)
            continue
        packages.append(Package(id=package_id, name=name, price_base=price))
    return PackageCatalog(packages)


@lru_cache(maxsize=4)
def _cached_catalog(path: str) -> PackageCatalog:
    return load_catalog(Path(path))


def get_package_catalog() -> PackageCatalog:
    """Dépendance FastAPI: catalogue chargé une fois par chemin configuré."""
    from travel_api import config

    return _cached_catalog(str(config.PACKAGES_FILE))

"""
Table de taux de change (objet de configuration explicite, pas de global mutable).
- Chaque taux est un multiplicateur relatif à une devise de base (taux de base = 1).
- Table figée pour la durée du process.
"""
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

# module travel_api.currency.rates
class RateTable:
    """
    Taux de change figés, ancrés sur une devise de base.
    - base: code ISO de la devise de référence (ex: "USD")
    - rates: {code: multiplicateur}; rates[base] doit valoir 1
    """

    def __init__(self, base: str, rates: Mapping[str, float]):
        normalized: Dict[str, float] = {}
        for code, value in (rates or {}).items():
            rate = float(value)
            if rate <= 0:
                raise ValueError(f"Taux invalide pour {code}: {value}")
            normalized[str(code).strip().upper()] = rate
        base = (base or "").strip().upper()
        if normalized.get(base) != 1.0:
            raise ValueError(f"La devise de base {base} doit avoir un taux de 1")
        self._base = base
        self._rates = MappingProxyType(normalized)

    @property
    def base(self) -> str:
        return self._base

    @property
    def rates(self) -> Mapping[str, float]:
        return self._rates

    @property
    def codes(self) -> Iterable[str]:
        return tuple(self._rates.keys())

    def supports(self, code: str | None) -> bool:
        return bool(code) and str(code).upper() in self._rates

    def rate(self, code: str) -> float:
        return self._rates[str(code).upper()]

    def rebased(self, base: str) -> "RateTable":
        """
        Même table exprimée relativement à une autre devise de base.
        - Retourne self si la base est déjà la bonne.
        """
        base = (base or "").strip().upper()
        if base == self._base:
            return self
        anchor = self.rate(base)
        return RateTable(base, {code: rate / anchor for code, rate in self._rates.items()})

    def as_dict(self) -> Dict[str, object]:
        return {"base": self._base, "rates": dict(self._rates)}

    def __repr__(self) -> str:
        return f"RateTable(base={self._base!r}, codes={list(self._rates)})"


# Taux simplifiés du site vitrine (USD = 1)
DEFAULT_RATES = RateTable(
    "USD",
    {
        "USD": 1.0,
        "EUR": 0.92,
        "GBP": 0.79,
        "JPY": 149.50,
        "AUD": 1.52,
        "CAD": 1.36,
    },
)


def get_rate_table() -> RateTable:
    """
    Dépendance FastAPI: table de taux utilisée par les handlers.
    Surchargée dans les tests via app.dependency_overrides.
    - Rebase la table sur BASE_CURRENCY si cette devise est connue.
    """
    from travel_api import config

    if DEFAULT_RATES.supports(config.BASE_CURRENCY):
        return DEFAULT_RATES.rebased(config.BASE_CURRENCY)
    return DEFAULT_RATES

"""
Conversion et formatage de montants (logique pure, pas de réseau ni de DB).
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from .rates import DEFAULT_RATES, RateTable

# Symboles façon Intl.NumberFormat('en-US', {style: 'currency'})
CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "CA$",
}

_CENT = Decimal("0.01")

# module travel_api.currency.converter
def convert(amount: float, from_code: str, to_code: str, table: RateTable = DEFAULT_RATES) -> float:
    """
    Convertit amount de from_code vers to_code via la devise de base:
    amount / rate[from] * rate[to].
    - Code inconnu (source ou cible): retourne amount inchangé, sans erreur,
      pour ne jamais bloquer l’UI.
    """
    if not table.supports(from_code) or not table.supports(to_code):
        return amount
    return amount / table.rate(from_code) * table.rate(to_code)


def _to_decimal(value: float) -> Decimal:
    # str() évite l'expansion binaire du float (19.995 -> 19.99499999...)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Montant invalide: {value!r}")


def round_money(value: float) -> float:
    """Arrondi commercial (half-up) à 2 décimales."""
    return float(_to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_minor_units(amount: float) -> int:
    """
    Montant en unités mineures (centimes) pour Stripe.
    - Arrondi à l’entier le plus proche après *100 (19.995 -> 2000).
    """
    return int((_to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(amount: float, code: str) -> str:
    """
    Rend un montant au format monétaire en-US avec exactement 2 décimales.
    - Toutes les devises sont affichées avec 2 décimales (JPY compris).
    - Devise sans symbole connu: "<CODE> 1,234.00".
    """
    code = (code or "").upper()
    value = _to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{digits}"
    return f"{sign}{code} {digits}"

"""
Currency identity table.

A currency is treated as USD when its ISO code says so, when the backend
marks it as the base currency, or (legacy records only) when its display
name is "dollar"/"dólar".
"""

USD_ISO_CODES = frozenset({"USD"})

# Legacy records carry no ISO code, only a display name.
USD_NAMES = frozenset({"dollar", "dólar"})


def is_usd_name(name: str | None) -> bool:
    if not name:
        return False
    return name.strip().lower() in USD_NAMES


def is_usd_currency(name: str | None, iso_code: str | None = None, is_base: bool | None = None) -> bool:
    """Resolve whether a currency record denotes US dollars.

    Explicit data wins: an ISO code or a base-currency flag decides on its own.
    The name match is only used when neither is present.
    """
    if iso_code:
        return iso_code.strip().upper() in USD_ISO_CODES
    if is_base is not None:
        return bool(is_base)
    return is_usd_name(name)

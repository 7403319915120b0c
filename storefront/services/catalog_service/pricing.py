import math
from typing import Mapping, Optional


def convert_price(
    price: int,
    from_code: Optional[str],
    to_code: Optional[str],
    rates: Mapping[str, float],
) -> int:
    """Convert an amount in minor units between two currencies.

    ``rates`` maps currency codes to their rate against the base currency.
    The amount goes through the base currency and is rounded half up. When
    either code is missing or unknown the price is returned untouched.
    """
    if not from_code or not to_code or from_code == to_code:
        return price

    from_rate = rates.get(from_code)
    to_rate = rates.get(to_code)
    if not from_rate or to_rate is None:
        return price

    return int(math.floor((price / from_rate) * to_rate + 0.5))

# app/core/pricing.py
from dataclasses import dataclass

# Quantity bounds of a cart line (1, 2 or 3 figurines per pack)
MIN_QUANTITY = 1
MAX_QUANTITY = 3


@dataclass(frozen=True)
class PriceTier:
    """
    One of the three Stripe products sold by the storefront.

    A tier is picked by quantity; its price is the price of the whole
    pack, not a unit price.
    """

    quantity: int
    price_id: str
    name: str
    description: str
    price: float
    mode: str = "payment"


STARTER_PACK_1X = PriceTier(
    quantity=1,
    price_id="price_1RDtLhR6UU7oxZFBNZ2Y8SF4",
    name="Starter Pack x 1 ex.",
    description="Pack de démarrage pour l'impression 3D - 1 exemplaire",
    price=29.50,
)

STARTER_PACK_2X = PriceTier(
    quantity=2,
    price_id="price_1RE9E3R6UU7oxZFBy3Ured1g",
    name="Starter Pack x 2 ex.",
    description="Pack de démarrage pour l'impression 3D - 2 exemplaires",
    price=49.50,
)

STARTER_PACK_3X = PriceTier(
    quantity=3,
    price_id="price_1RE9GBR6UU7oxZFBIA1KsRPt",
    name="Starter Pack x 3 ex.",
    description="Pack de démarrage pour l'impression 3D - 3 exemplaires",
    price=69.50,
)

PRICE_TIERS: dict[int, PriceTier] = {
    1: STARTER_PACK_1X,
    2: STARTER_PACK_2X,
    3: STARTER_PACK_3X,
}


def tier_for_quantity(quantity: int) -> PriceTier:
    """Tier for a quantity; anything outside 1..3 falls back to the 1x pack."""
    return PRICE_TIERS.get(quantity, STARTER_PACK_1X)


def is_valid_quantity(quantity: int) -> bool:
    return MIN_QUANTITY <= quantity <= MAX_QUANTITY


def normalize_quantity(quantity: int) -> int:
    """Quantity as stored for a new line: out-of-range values become 1."""
    return quantity if is_valid_quantity(quantity) else MIN_QUANTITY


def clamp_quantity(quantity: int) -> int:
    """Clamp a merged quantity into the supported tiers."""
    return max(MIN_QUANTITY, min(MAX_QUANTITY, quantity))

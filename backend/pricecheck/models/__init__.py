from pricecheck.models.product import Product
from pricecheck.models.observation import PriceObservation
from pricecheck.models.store import Store

__all__ = [
    "Product",
    "PriceObservation",
    "Store",
]

"""
storefront — cart pricing and checkout engine.

    from storefront import cart        # Cart ledger with stock clamping
    from storefront import catalog     # Products and price resolution
    from storefront import voucher as V
    from storefront import checkout as CO
"""

from storefront import catalog
from storefront import cart
from storefront import voucher
from storefront import orders
from storefront import checkout
from storefront import lift
from storefront import shipping
from storefront._types import Clock

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "cart",
    "voucher",
    "orders",
    "checkout",
    "lift",
    "shipping",
    "Clock",
)

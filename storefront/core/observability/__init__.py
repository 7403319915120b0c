from .setup import configure_logging, configure_tracing, setup_observability
from .metrics import (
    storefront_cart_mutations_total,
    storefront_checkout_duration_seconds,
    storefront_checkout_step_failures_total,
    storefront_checkout_total,
    storefront_orders_created_total,
)

from prometheus_client import Counter, Histogram

# Business Metrics
storefront_checkout_total = Counter(
    "storefront_checkout_total",
    "Total checkout attempts by outcome",
    ["status"]  # Labels: 'completed', 'needs_shipping_address', 'needs_billing_address', 'failed'
)

storefront_checkout_duration_seconds = Histogram(
    "storefront_checkout_duration_seconds",
    "Checkout duration in seconds"
)

storefront_checkout_step_failures_total = Counter(
    "storefront_checkout_step_failures_total",
    "Checkout runs aborted by an error, per pipeline step",
    ["step_name"]  # Labels: 'snapshot_cart', 'create_order', etc.
)

storefront_cart_mutations_total = Counter(
    "storefront_cart_mutations_total",
    "Cart writes by operation",
    ["operation"]  # Labels: 'add', 'update', 'remove'
)

storefront_orders_created_total = Counter(
    "storefront_orders_created_total",
    "Orders created by the atomic order procedure"
)

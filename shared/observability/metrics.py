from prometheus_client import Counter

# Business Metrics
ecomm_orders_created_total = Counter(
    "ecomm_orders_created_total",
    "Total orders placed at checkout",
    ["payment_method"] # Labels: 'card', 'upi', 'cod', 'wallet'
)

ecomm_order_status_transitions_total = Counter(
    "ecomm_order_status_transitions_total",
    "Total order status changes recorded in order history",
    ["status"] # Labels: 'Processing', 'Shipped', 'Delivered', ...
)

ecomm_notification_dispatch_total = Counter(
    "ecomm_notification_dispatch_total",
    "Order notifications attempted after a status change",
    ["outcome"] # Labels: 'sent', 'failed', 'skipped'
)

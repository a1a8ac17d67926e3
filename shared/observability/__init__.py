from .setup import setup_observability
from .metrics import (
    ecomm_orders_created_total,
    ecomm_order_status_transitions_total,
    ecomm_notification_dispatch_total
)

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders.events import (
            OrderCancelled,
            OrderPlaced,
            OrderReceiptConfirmed,
            OrderUpdatedByAdmin,
        )
        from modules.orders.handlers import (
            order_cancelled_handler,
            order_placed_handler,
            order_receipt_confirmed_handler,
            order_updated_by_admin_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderPlaced, order_placed_handler)
        event_bus.subscribe(OrderUpdatedByAdmin, order_updated_by_admin_handler)
        event_bus.subscribe(OrderReceiptConfirmed, order_receipt_confirmed_handler)
        event_bus.subscribe(OrderCancelled, order_cancelled_handler)

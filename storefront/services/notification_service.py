# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order confirmations for shoppers.
    Queued on Celery so checkout never waits for delivery.
    """

    @staticmethod
    def send_order_confirmation(user_id: int, order_id: int):
        send_order_confirmation_task.delay(user_id, order_id)


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(user_id: int, order_id: int):
    """
    Celery task: a real deployment would hand this to an email/SMS provider,
    here it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} received, payment on delivery")

    return {"user_id": user_id, "order_id": order_id, "status": "sent"}

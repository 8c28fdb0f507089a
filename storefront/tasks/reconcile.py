# storefront/tasks/reconcile.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def reconcile_carts(db) -> dict:
    """
    Stock can shrink between visits, so cart lines are pulled back under it:
    quantity clamped to current stock, lines of sold out products removed.
    """
    repo = CartRepo(db)
    lines = repo.get_lines_over_stock()

    logger.info(f"Found {len(lines)} cart line(s) above current stock")

    clamped = removed = 0
    for line in lines:
        stock = line.product.stock
        if stock <= 0:
            logger.info(f"Removing line {line.id} of user {line.user_id}, product {line.product_id} sold out")
            db.delete(line)
            removed += 1
        else:
            logger.info(f"Clamping line {line.id} of user {line.user_id} from {line.quantity} to {stock}")
            line.quantity = stock
            clamped += 1

    repo.commit()
    return {"clamped": clamped, "removed": removed}


@celery_app.task(name="storefront.tasks.reconcile.reconcile_carts_task")
def reconcile_carts_task():
    logger.info("Reconcile carts task started")

    db = SessionLocal()
    try:
        return reconcile_carts(db)
    except Exception:
        db.rollback()
        logger.exception("Reconcile carts task failed")
        raise
    finally:
        db.close()

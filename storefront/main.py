# storefront/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from storefront.api.routers import admin_coupons, cart, health, orders, products
from storefront.data.database import init_db
from storefront.domain.errors import ErrorCode
from storefront.domain.schemas import field_errors
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # same envelope as the domain errors, one message per field
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": "Request is invalid",
                "fields": field_errors(exc.errors()),
            }
        },
    )


def create_app(create_tables: bool = True) -> FastAPI:
    if create_tables:
        logger.info("Initializing database tables")
        init_db()

    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(orders.router)
    app.include_router(admin_coupons.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)

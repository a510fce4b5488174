# foodorder/api/__init__.py
from fastapi import FastAPI

from foodorder.api.routers import carts, health, notifications, orders, promos, restaurants, users, views


def create_app() -> FastAPI:
    app = FastAPI(
        title="Food Order Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(restaurants.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(promos.router)
    app.include_router(notifications.router)
    app.include_router(views.router)

    return app

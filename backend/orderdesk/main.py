"""
Order Desk – FastAPI application entry point.

Run with:
    uvicorn orderdesk.main:app --reload --host 0.0.0.0 --port 5000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from orderdesk.api.routes import master_router, router
from orderdesk.api.order_routes import order_router
from orderdesk.core.config import settings
from orderdesk.core.database import create_db_and_tables
from orderdesk.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown hooks."""
    setup_logging()
    logger.info("Starting Order Desk backend …")
    create_db_and_tables()
    logger.info("Database tables ready")
    yield
    logger.info("Order Desk backend shut down")


app = FastAPI(
    title="Order Desk API",
    description="Sales order management: order lines, customers, stock items",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS – allow frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Clients expect 400 {error, details}, not FastAPI's 422
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


app.include_router(router)
app.include_router(master_router)
app.include_router(order_router)


@app.get("/")
def root():
    return {"message": "Order Desk API", "docs": "/docs"}

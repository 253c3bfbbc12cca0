"""Main application entry point for the kitchen order service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from dotenv import load_dotenv
from fastapi import FastAPI

from kitchen_order_service.handlers.api_handler import create_app
from kitchen_order_service.observability import configure_logging, setup_observability
from kitchen_order_service.repositories.database import Database
from kitchen_order_service.services.backup_service import BackupService
from kitchen_order_service.services.menu_service import MenuService
from kitchen_order_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///kitchen.db"


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def get_s3_client() -> Any | None:
    """Create an S3 client for backup uploads when a bucket is configured.

    Returns:
        Boto3 S3 client, or None if BACKUP_S3_BUCKET is not set
    """
    if not os.getenv("BACKUP_S3_BUCKET"):
        return None

    endpoint_url = os.getenv("S3_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        # Local S3-compatible storage (e.g. MinIO)
        logger.info(f"Using local S3 endpoint at {endpoint_url}")
        return boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )
    else:
        logger.info(f"Using AWS S3 in region {region}")
        # boto3 resolves credentials through its default chain
        return boto3.client("s3", region_name=region)


def create_database() -> Database:
    """Create the database handle and make sure the schema exists."""
    database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    database = Database.from_url(database_url, echo=env_flag("DATABASE_ECHO"))
    database.create_schema()

    logger.info(f"Database configured - backend: {database.engine.url.get_backend_name()}")
    return database


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the database handle and schema
    3. Creates services
    4. Optionally seeds the sample menu
    5. Creates FastAPI app with the ordering endpoints
    6. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing kitchen order service...")

    database = create_database()

    menu_service = MenuService(database=database)
    order_service = OrderService(database=database)
    backup_service = BackupService(
        database=database,
        backup_dir=os.getenv("BACKUP_DIR", "backups"),
        s3_client=get_s3_client(),
        s3_bucket=os.getenv("BACKUP_S3_BUCKET"),
        s3_prefix=os.getenv("BACKUP_S3_PREFIX", "kitchen-backups/"),
    )

    logger.info("Services initialized")

    if env_flag("SEED_SAMPLE_MENU"):
        menu_service.seed_sample_menu()

    environment = os.getenv("ENVIRONMENT", "production")
    app = create_app(
        menu_service=menu_service,
        order_service=order_service,
        backup_service=backup_service,
        database=database,
        expose_errors=environment == "development",
    )

    if env_flag("ENABLE_TELEMETRY"):
        setup_observability(app)

    logger.info("Kitchen order service initialized successfully")

    return app


load_dotenv()

# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "3000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting server on {host}:{port}")
    logger.info(f"Health check available at http://{host}:{port}/api/health")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )

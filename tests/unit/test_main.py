"""Unit tests for main application entry point."""

import logging
import os
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.main import create_application, create_database, env_flag, get_s3_client


@pytest.mark.unit
class TestEnvFlag:
    """Tests for env_flag function."""

    @patch.dict(os.environ, {"SEED_SAMPLE_MENU": "True"}, clear=True)
    def test_true_is_case_insensitive(self) -> None:
        """Test that boolean flags accept any casing of true."""
        assert env_flag("SEED_SAMPLE_MENU") is True

    @patch.dict(os.environ, {"SEED_SAMPLE_MENU": "yes"}, clear=True)
    def test_other_values_are_false(self) -> None:
        """Test that only "true" enables a flag."""
        assert env_flag("SEED_SAMPLE_MENU") is False

    @patch.dict(os.environ, {}, clear=True)
    def test_default_used_when_unset(self) -> None:
        """Test that the default applies to missing variables."""
        assert env_flag("ENABLE_TELEMETRY") is False
        assert env_flag("ENABLE_TELEMETRY", default="true") is True


@pytest.mark.unit
class TestGetS3Client:
    """Tests for get_s3_client function."""

    @patch.dict(os.environ, {}, clear=True)
    @patch("src.main.boto3.client")
    def test_returns_none_without_bucket(self, mock_boto3_client: Mock) -> None:
        """Test that no client is created when backups stay local."""
        assert get_s3_client() is None
        mock_boto3_client.assert_not_called()

    @patch.dict(
        os.environ, {"BACKUP_S3_BUCKET": "kitchen-bucket", "AWS_REGION": "us-west-2"}, clear=True
    )
    @patch("src.main.boto3.client")
    def test_creates_aws_client_when_no_endpoint(self, mock_boto3_client: Mock) -> None:
        """Test that an AWS S3 client is created when no local endpoint is configured."""
        mock_client = MagicMock()
        mock_boto3_client.return_value = mock_client

        result = get_s3_client()

        mock_boto3_client.assert_called_once_with("s3", region_name="us-west-2")
        assert result == mock_client

    @patch.dict(
        os.environ,
        {
            "BACKUP_S3_BUCKET": "kitchen-bucket",
            "S3_ENDPOINT": "http://localhost:9000",
            "AWS_ACCESS_KEY_ID": "minio",
            "AWS_SECRET_ACCESS_KEY": "minio-secret",
        },
        clear=True,
    )
    @patch("src.main.boto3.client")
    def test_creates_local_client_when_endpoint_provided(self, mock_boto3_client: Mock) -> None:
        """Test that a local S3-compatible client is created when an endpoint is configured."""
        get_s3_client()

        mock_boto3_client.assert_called_once_with(
            "s3",
            endpoint_url="http://localhost:9000",
            region_name="us-east-1",
            aws_access_key_id="minio",
            aws_secret_access_key="minio-secret",
        )


@pytest.mark.unit
class TestCreateDatabase:
    """Tests for create_database function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults_to_local_sqlite_file(self, tmp_path: Path, monkeypatch) -> None:
        """Test that the default database is kitchen.db in the working directory."""
        monkeypatch.chdir(tmp_path)

        database = create_database()

        assert database.sqlite_path is not None
        assert database.sqlite_path.name == "kitchen.db"
        assert (tmp_path / "kitchen.db").exists()
        database.dispose()

    @patch.dict(os.environ, {"DATABASE_URL": "sqlite://"}, clear=True)
    def test_uses_database_url(self) -> None:
        """Test that DATABASE_URL selects the store."""
        database = create_database()

        assert database.sqlite_path is None
        assert database.ping() is True
        database.dispose()


@pytest.mark.unit
class TestCreateApplication:
    """Tests for create_application function."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self) -> None:
        """Undo the JSON logging setup performed by create_application."""
        root_logger = logging.getLogger()
        handlers, level = root_logger.handlers[:], root_logger.level
        yield
        root_logger.handlers[:] = handlers
        root_logger.setLevel(level)

    @patch.dict(
        os.environ,
        {"DATABASE_URL": "sqlite://", "SEED_SAMPLE_MENU": "true", "ENVIRONMENT": "test"},
        clear=True,
    )
    def test_creates_app_with_seeded_menu(self) -> None:
        """Test that the application serves the sample menu when seeding is enabled."""
        app = create_application()

        assert isinstance(app, FastAPI)
        assert app.title == "Kitchen Order Service API"

        response = TestClient(app).get("/api/menu")
        assert response.status_code == 200
        assert len(response.json()["data"]) == 6

    @patch.dict(os.environ, {"DATABASE_URL": "sqlite://", "ENVIRONMENT": "test"}, clear=True)
    def test_creates_app_with_empty_menu(self) -> None:
        """Test that the menu starts empty without seeding."""
        app = create_application()

        response = TestClient(app).get("/api/menu")
        assert response.json()["data"] == []

    @patch.dict(
        os.environ,
        {"DATABASE_URL": "sqlite://", "BACKUP_S3_BUCKET": "kitchen-bucket", "ENVIRONMENT": "test"},
        clear=True,
    )
    @patch("src.main.boto3.client")
    def test_backup_service_gets_s3_client(self, mock_boto3_client: Mock) -> None:
        """Test that a configured bucket enables backup uploads."""
        app = create_application()

        backup_service = app.state.backup_service
        assert backup_service.uploads_enabled is True
        assert backup_service.s3_bucket == "kitchen-bucket"
        assert backup_service.s3_prefix == "kitchen-backups/"

    @patch.dict(
        os.environ,
        {"DATABASE_URL": "sqlite://", "ENABLE_TELEMETRY": "true", "ENVIRONMENT": "test"},
        clear=True,
    )
    @patch("src.main.setup_observability")
    def test_sets_up_observability_when_enabled(self, mock_setup: Mock) -> None:
        """Test that telemetry is wired in only when enabled."""
        app = create_application()

        mock_setup.assert_called_once_with(app)

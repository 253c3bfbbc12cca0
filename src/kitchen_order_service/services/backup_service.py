"""Backup service for copying the kitchen database.

Backups are plain file copies of the SQLite database written to a local
directory, optionally uploaded to S3 so they survive the host.
"""

import logging
import shutil
from datetime import UTC, datetime
from pathlib import Path

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_s3.client import S3Client

from kitchen_order_service.exceptions import BackupFailed
from kitchen_order_service.observability.decorators import traced
from kitchen_order_service.observability.metrics import record_backup
from kitchen_order_service.repositories.database import Database

logger = logging.getLogger(__name__)


class BackupService:
    """Service for creating database backups."""

    def __init__(
        self,
        database: Database,
        backup_dir: Path | str,
        s3_client: S3Client | None = None,
        s3_bucket: str | None = None,
        s3_prefix: str = "kitchen-backups/",
    ) -> None:
        """Initialize the BackupService.

        Args:
            database: Store handle whose file is backed up
            backup_dir: Directory receiving local backup copies
            s3_client: Optional boto3 S3 client for off-host copies
            s3_bucket: Bucket to upload to (uploads are skipped when unset)
            s3_prefix: Key prefix for uploaded backups
        """
        self.database = database
        self.backup_dir = Path(backup_dir)
        self.s3_client = s3_client
        self.s3_bucket = s3_bucket
        self.s3_prefix = s3_prefix

    @property
    def uploads_enabled(self) -> bool:
        return self.s3_client is not None and bool(self.s3_bucket)

    @traced("create_backup")
    def create_backup(self) -> str:
        """Copy the database file to a timestamped backup.

        Returns:
            str: Path of the local backup file

        Raises:
            BackupFailed: If the store is not a SQLite file, or the copy or upload fails
        """
        try:
            backup_path = self._copy_database()
            if self.uploads_enabled:
                self._upload(backup_path)
        except BackupFailed:
            record_backup(success=False)
            raise

        record_backup(success=True)
        return str(backup_path)

    def _copy_database(self) -> Path:
        source = self.database.sqlite_path
        if source is None:
            raise BackupFailed("Backups are only supported for file-based SQLite databases")

        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
        destination = self.backup_dir / f"kitchen-backup-{timestamp}.db"

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as e:
            logger.error(f"Failed to copy database {source} to {destination}: {e}")
            raise BackupFailed("Database backup failed") from e

        logger.info(f"Database backed up to {destination}")
        return destination

    def _upload(self, backup_path: Path) -> None:
        key = f"{self.s3_prefix}{backup_path.name}"

        try:
            self.s3_client.upload_file(str(backup_path), self.s3_bucket, key)  # type: ignore[union-attr]
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            logger.error(f"Failed to upload backup to s3://{self.s3_bucket}/{key}: {e}")
            raise BackupFailed("Database backup upload failed") from e

        logger.info(f"Backup uploaded to s3://{self.s3_bucket}/{key}")

"""Unit tests for BackupService."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from kitchen_order_service.exceptions import BackupFailed
from kitchen_order_service.repositories.database import Database
from kitchen_order_service.services.backup_service import BackupService


@pytest.mark.unit
class TestBackupService:
    """Test suite for BackupService."""

    def test_create_backup_copies_database_file(
        self, file_database: Database, tmp_path: Path
    ) -> None:
        """Test that a backup is a copy of the database file."""
        backup_dir = tmp_path / "backups"
        service = BackupService(file_database, backup_dir)

        backup_path = Path(service.create_backup())

        assert backup_path.parent == backup_dir
        assert backup_path.name.startswith("kitchen-backup-")
        assert backup_path.suffix == ".db"
        assert backup_path.read_bytes() == (tmp_path / "kitchen.db").read_bytes()

    def test_backups_do_not_overwrite_each_other(
        self, file_database: Database, tmp_path: Path
    ) -> None:
        """Test that consecutive backups get distinct names."""
        service = BackupService(file_database, tmp_path / "backups")

        first = service.create_backup()
        second = service.create_backup()

        assert first != second
        assert len(list((tmp_path / "backups").iterdir())) == 2

    def test_in_memory_database_cannot_be_backed_up(
        self, database: Database, tmp_path: Path
    ) -> None:
        """Test that backing up an in-memory store fails cleanly."""
        service = BackupService(database, tmp_path / "backups")

        with pytest.raises(BackupFailed):
            service.create_backup()

    def test_unwritable_backup_dir_raises_backup_failed(
        self, file_database: Database, tmp_path: Path
    ) -> None:
        """Test that filesystem errors become BackupFailed."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")
        service = BackupService(file_database, blocker)

        with pytest.raises(BackupFailed):
            service.create_backup()

    def test_uploads_disabled_without_bucket(self, file_database: Database, tmp_path: Path) -> None:
        """Test that a client without a bucket does not upload."""
        s3_client = MagicMock()
        service = BackupService(file_database, tmp_path / "backups", s3_client=s3_client)

        service.create_backup()

        assert service.uploads_enabled is False
        s3_client.upload_file.assert_not_called()

    def test_create_backup_uploads_to_s3(self, file_database: Database, tmp_path: Path) -> None:
        """Test that the backup file is uploaded under the configured prefix."""
        s3_client = MagicMock()
        service = BackupService(
            file_database,
            tmp_path / "backups",
            s3_client=s3_client,
            s3_bucket="kitchen-bucket",
            s3_prefix="nightly/",
        )

        backup_path = Path(service.create_backup())

        s3_client.upload_file.assert_called_once_with(
            str(backup_path), "kitchen-bucket", f"nightly/{backup_path.name}"
        )

    def test_upload_error_raises_backup_failed(
        self, file_database: Database, tmp_path: Path
    ) -> None:
        """Test that S3 errors become BackupFailed."""
        s3_client = MagicMock()
        s3_client.upload_file.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )
        service = BackupService(
            file_database, tmp_path / "backups", s3_client=s3_client, s3_bucket="kitchen-bucket"
        )

        with pytest.raises(BackupFailed) as exc_info:
            service.create_backup()

        assert "upload" in exc_info.value.message

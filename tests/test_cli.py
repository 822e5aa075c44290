# ==============================================
# Tests for CLI
# ==============================================

import json

import pytest

from user_ingest.cli import main
from user_ingest.upload_processor import UploadProcessor


@pytest.fixture
def processor(app_config, store):
    return UploadProcessor(app_config, store_factory=lambda: store)


class TestCli:
    def test_upload(self, processor, store, users_csv, capsys):
        assert main(["upload", str(users_csv)], processor=processor) == 0
        assert len(store.users) == 4
        assert "> 60: 25.00%" in capsys.readouterr().out

    def test_upload_failure_exit_status(self, processor, write_csv):
        path = write_csv("name.firstName,name.lastName,age\nA,B,x\n")
        assert main(["upload", str(path)], processor=processor) == 1

    def test_report_json(self, processor, users_csv, capsys):
        main(["upload", str(users_csv)], processor=processor)
        capsys.readouterr()

        assert main(["report", "--json"], processor=processor) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_users"] == 4
        assert data["percentages"]["under_20"] == 25.0

    def test_report_on_empty_store(self, processor, capsys):
        assert main(["report"], processor=processor) == 1
        assert "No user records" in capsys.readouterr().err

    def test_init(self, processor, store):
        assert main(["init"], processor=processor) == 0
        assert store.users_table_created

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])

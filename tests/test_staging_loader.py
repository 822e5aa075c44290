# ==============================================
# Tests for Staging Loader
# ==============================================

import pytest

from user_ingest.errors import LoadError, SourceReadError, StoreError
from user_ingest.schema import SchemaDiscovery
from user_ingest.staging import StagingLoader
from user_ingest.staging.loader import STAGING_TABLE_PREFIX

HEADER = "name.firstName,name.lastName,age,zip\n"


def _schema(path):
    return SchemaDiscovery().discover(path)


class TestReadRows:
    """Tests for parsing the CSV body."""

    def test_values_are_verbatim_strings(self, store, write_csv):
        path = write_csv(HEADER + 'Ada,Lovelace,036,00501\nAlan,"Turing, Jr",41,\n')
        rows = StagingLoader(store).read_rows(path, _schema(path))

        assert rows == [
            ("Ada", "Lovelace", "036", "00501"),
            ("Alan", "Turing, Jr", "41", ""),
        ]

    def test_row_count_excludes_header(self, store, users_csv):
        rows = StagingLoader(store).read_rows(users_csv, _schema(users_csv))
        assert len(rows) == 4

    def test_header_only(self, store, write_csv):
        path = write_csv(HEADER)
        assert StagingLoader(store).read_rows(path, _schema(path)) == []

    def test_row_with_extra_fields(self, store, write_csv):
        path = write_csv(HEADER + "A,B,1,x\nC,D,2,y,extra\nE,F,3,z\n")
        with pytest.raises(LoadError, match="Malformed CSV body"):
            StagingLoader(store).read_rows(path, _schema(path))

    def test_row_with_missing_fields(self, store, write_csv):
        path = write_csv(HEADER + "A,B,1,x\nC,D\n")
        with pytest.raises(LoadError, match="data row 2"):
            StagingLoader(store).read_rows(path, _schema(path))

    def test_row_missing_only_trailing_fields(self, store, write_csv):
        path = write_csv(HEADER + "A,B,1,x\nC,D,2\n")
        with pytest.raises(LoadError, match="data row 2 has 3 fields, expected 4"):
            StagingLoader(store).read_rows(path, _schema(path))

    def test_blank_lines_do_not_count_as_rows(self, store, write_csv):
        path = write_csv(HEADER + "A,B,1,x\n\nC,D,2\n")
        with pytest.raises(LoadError, match="data row 2"):
            StagingLoader(store).read_rows(path, _schema(path))

    def test_quoted_newline_is_one_field(self, store, write_csv):
        path = write_csv(HEADER + 'A,B,1,"line one\nline two"\n')
        assert StagingLoader(store).read_rows(path, _schema(path)) == [
            ("A", "B", "1", "line one\nline two"),
        ]

    def test_unterminated_quote(self, store, write_csv):
        path = write_csv(HEADER + 'A,B,1,"never closed\n')
        with pytest.raises(LoadError):
            StagingLoader(store).read_rows(path, _schema(path))

    def test_file_removed_after_discovery(self, store, write_csv):
        path = write_csv(HEADER + "A,B,1,x\n")
        schema = _schema(path)
        path.unlink()
        with pytest.raises(SourceReadError):
            StagingLoader(store).read_rows(path, schema)


class TestStage:
    """Tests for the staging table lifecycle."""

    def test_stage_loads_every_row(self, store, users_csv):
        schema = _schema(users_csv)
        with StagingLoader(store).stage(users_csv, schema) as staging:
            assert staging.table_name.startswith(STAGING_TABLE_PREFIX)
            assert staging.row_count == 4
            assert store.staging[staging.table_name]["columns"] == schema.staging_columns()
            assert staging.fetch_rows()[0][:3] == ("Ada", "Lovelace", "19")

    def test_staging_table_dropped_on_exit(self, store, users_csv):
        with StagingLoader(store).stage(users_csv, _schema(users_csv)) as staging:
            table_name = staging.table_name
        assert store.staging == {}
        assert store.dropped == [table_name]

    def test_staging_table_dropped_on_error(self, store, users_csv):
        with pytest.raises(RuntimeError):
            with StagingLoader(store).stage(users_csv, _schema(users_csv)):
                raise RuntimeError("boom")
        assert store.staging == {}
        assert len(store.dropped) == 1

    def test_each_stage_gets_a_fresh_table(self, store, users_csv):
        loader = StagingLoader(store)
        schema = _schema(users_csv)
        with loader.stage(users_csv, schema) as first:
            with loader.stage(users_csv, schema) as second:
                assert first.table_name != second.table_name

    def test_failed_load_drops_table(self, store, users_csv):
        def reject(*args, **kwargs):
            raise StoreError("Loading staging rows failed: gone away")

        store.load_staging_rows = reject
        with pytest.raises(StoreError):
            StagingLoader(store).stage(users_csv, _schema(users_csv))
        assert store.staging == {}

    def test_malformed_body_never_creates_table(self, store, write_csv):
        path = write_csv(HEADER + "A,B,1,x\nC,D\n")
        with pytest.raises(LoadError):
            StagingLoader(store).stage(path, _schema(path))
        assert store.staging == {}
        assert store.dropped == []

import tempfile
import zipfile
from datetime import date

import pytest

from onboardkit.errors import DraftFormatError, DraftNotFoundError
from onboardkit.portable import export_archive_stem, export_draft, import_draft

TODAY = date(2026, 2, 22)


@pytest.fixture
def draft(store):
    record = store.create("Jane", "Smith")
    record.status = "finalized"
    record.exported_pdf_path = "/shared/Smith_Jane.pdf"
    record.exported_json_path = "/shared/Smith_Jane.json"
    record.department = "Leasing"
    store.save(record, 5)
    return record


def test_archive_name_uses_safe_names():
    from onboardkit.models import OnboardingRecord

    record = OnboardingRecord(employee_first_name="Mary Ann", employee_last_name="O'Neil/Jr")
    assert export_archive_stem(record, TODAY) == "Onboarding_Draft_O'NeilJr_Mary_Ann_20260222"
    assert export_archive_stem(OnboardingRecord(), TODAY) == "Onboarding_Draft_Unknown_Unknown_20260222"


def test_export_writes_single_draft_member(store, draft, tmp_path):
    archive = export_draft(store, draft.record_id, tmp_path / "out", today=TODAY)

    assert archive.name == "Onboarding_Draft_Smith_Jane_20260222.zip"
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == [f"{draft.record_id}_draft.json"]


def test_second_export_same_day_gets_suffix(store, draft, tmp_path):
    first = export_draft(store, draft.record_id, tmp_path, today=TODAY)
    second = export_draft(store, draft.record_id, tmp_path, today=TODAY)

    assert first.exists() and second.exists()
    assert second.name == "Onboarding_Draft_Smith_Jane_20260222_1.zip"


def test_export_missing_draft(store, tmp_path):
    with pytest.raises(DraftNotFoundError):
        export_draft(store, "missing", tmp_path)
    assert list(tmp_path.glob("*.zip")) == []


def test_import_creates_new_local_draft(store, draft, tmp_path):
    archive = export_draft(store, draft.record_id, tmp_path, today=TODAY)

    imported = import_draft(store, archive)

    assert imported.record_id != draft.record_id
    assert imported.status == "draft"
    assert imported.exported_pdf_path is None
    assert imported.exported_json_path is None
    assert imported.finalized_at is None
    assert imported.department == "Leasing"

    loaded = store.load(imported.record_id)
    assert loaded is not None and loaded.employee_last_name == "Smith"
    entries = {e.record_id: e for e in store.list_all()}
    assert entries[imported.record_id].last_page_index == 0
    assert draft.record_id in entries


def test_importing_twice_yields_two_drafts(store, draft, tmp_path):
    archive = export_draft(store, draft.record_id, tmp_path, today=TODAY)
    a = import_draft(store, archive)
    b = import_draft(store, archive)
    assert a.record_id != b.record_id
    assert len(store.list_all()) == 3


def test_import_missing_archive(store, tmp_path):
    with pytest.raises(DraftNotFoundError):
        import_draft(store, tmp_path / "nope.zip")


def test_import_archive_without_draft(store, tmp_path):
    archive = tmp_path / "empty.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("readme.txt", "hello")

    with pytest.raises(DraftFormatError, match="No valid draft file"):
        import_draft(store, archive)
    assert store.list_all() == []


def test_import_corrupt_draft_leaves_nothing_behind(store, tmp_path, monkeypatch):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))

    archive = tmp_path / "bad.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("abc_draft.json", "{not json")

    with pytest.raises(DraftFormatError):
        import_draft(store, archive)
    assert store.list_all() == []
    assert list(store.drafts_dir.iterdir()) == []
    assert list(scratch.iterdir()) == []


def test_import_rejects_non_zip(store, tmp_path):
    bogus = tmp_path / "bogus.zip"
    bogus.write_text("plain text")
    with pytest.raises(DraftFormatError):
        import_draft(store, bogus)


def test_export_never_replaces_file_created_after_name_check(store, draft, tmp_path, monkeypatch):
    import onboardkit.portable as portable

    taken = tmp_path / "Onboarding_Draft_Smith_Jane_20260222.zip"
    real_unique_path = portable.unique_path
    calls = []

    def racing_unique_path(directory, stem, suffix):
        calls.append(stem)
        if len(calls) == 1:
            taken.write_text("someone else's file")
            return taken
        return real_unique_path(directory, stem, suffix)

    monkeypatch.setattr(portable, "unique_path", racing_unique_path)
    archive = export_draft(store, draft.record_id, tmp_path, today=TODAY)

    assert taken.read_text() == "someone else's file"
    assert archive.name == "Onboarding_Draft_Smith_Jane_20260222_1.zip"
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == [f"{draft.record_id}_draft.json"]

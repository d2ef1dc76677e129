import zipfile

import pytest
from typer.testing import CliRunner

from onboardkit.cli import app
from onboardkit.config import load_config
from onboardkit.drafts import get_draft_store

runner = CliRunner()


@pytest.fixture(autouse=True)
def onboardkit_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("ONBOARDKIT_HOME", str(home))
    monkeypatch.setenv("ONBOARDKIT_CONFIG", str(home / "config.yaml"))
    return home


def _new_draft(first="Jane", last="Smith") -> str:
    result = runner.invoke(app, ["draft", "new", first, last])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    return result.output.split("\t")[0].replace("Created draft ", "").strip()


def test_new_and_list_drafts():
    result = runner.invoke(app, ["draft", "list"])
    assert result.exit_code == 0
    assert "No drafts found" in result.output

    result = runner.invoke(app, ["draft", "new", "Jane", "Smith"])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert "Smith, Jane" in result.output
    assert "jsmith@arnotrealty.com" in result.output

    result = runner.invoke(app, ["draft", "list"])
    assert result.exit_code == 0
    assert "Smith, Jane" in result.output
    assert "page 1" in result.output


def test_new_requires_names():
    result = runner.invoke(app, ["draft", "new", "Jane", " "])
    assert result.exit_code == 1
    assert "Both first and last name are required" in result.output


def test_show_and_missing():
    record_id = _new_draft()

    result = runner.invoke(app, ["draft", "show", record_id])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert f"Draft {record_id}: Smith, Jane (draft)" in result.output
    assert '"employeeFirstName": "Jane"' in result.output

    result = runner.invoke(app, ["draft", "show", "missing-id"])
    assert result.exit_code == 1
    assert "Draft not found" in result.output


def test_delete_asks_for_confirmation():
    record_id = _new_draft()

    result = runner.invoke(app, ["draft", "delete", record_id], input="n\n")
    assert result.exit_code == 1
    assert get_draft_store(load_config()).load(record_id) is not None

    result = runner.invoke(app, ["draft", "delete", record_id, "--yes"])
    assert result.exit_code == 0
    assert f"Deleted draft {record_id}" in result.output
    assert get_draft_store(load_config()).list_all() == []


def test_export_import_round_trip(tmp_path):
    record_id = _new_draft()
    dest = tmp_path / "transfer"

    result = runner.invoke(app, ["draft", "export", record_id, "--dest", str(dest)])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    archives = list(dest.glob("Onboarding_Draft_Smith_Jane_*.zip"))
    assert len(archives) == 1
    with zipfile.ZipFile(archives[0]) as zf:
        assert zf.namelist() == [f"{record_id}_draft.json"]
    assert load_config().settings.last_draft_export_directory == str(dest.resolve())

    result = runner.invoke(app, ["draft", "import", str(archives[0])])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert "Smith, Jane" in result.output
    assert record_id not in result.output
    assert len(get_draft_store(load_config()).list_all()) == 2
    assert load_config().settings.last_draft_import_directory == str(dest.resolve())


def test_export_and_import_failures(tmp_path):
    result = runner.invoke(app, ["draft", "export", "missing-id", "--dest", str(tmp_path)])
    assert result.exit_code == 1
    assert "Export failed" in result.output

    result = runner.invoke(app, ["draft", "import", str(tmp_path / "nope.zip")])
    assert result.exit_code == 1
    assert "Import failed" in result.output


def test_reconcile_reindexes_lost_index(onboardkit_home):
    _new_draft()
    _new_draft("John", "Doe")
    (onboardkit_home / "draft-index.json").unlink()

    result = runner.invoke(app, ["draft", "reconcile"])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert "Removed 0, added 2, skipped 0" in result.output


def test_record_list_empty():
    result = runner.invoke(app, ["record", "list"])
    assert result.exit_code == 0
    assert "No records found" in result.output

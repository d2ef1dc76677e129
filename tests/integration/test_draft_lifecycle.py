"""End-to-end draft lifecycle on a real event loop."""

import asyncio

import pytest

from onboardkit.drafts import get_draft_store
from onboardkit.portable import export_draft, import_draft
from onboardkit.wizard import WizardController, build_default_pages


@pytest.mark.asyncio
async def test_edit_autosave_resume_and_transfer(config, tmp_path):
    store = get_draft_store(config)
    saves = []

    wizard = WizardController.start_new(
        store,
        build_default_pages(config),
        "Jane",
        "Smith",
        debounce_ms=20,
        naming=config.customer,
        on_saved=lambda: saves.append(1),
    )
    record_id = wizard.record.record_id
    assert wizard.next() is None
    assert wizard.next() is None

    page = wizard.current_page
    for title in ("Leasing Agent", "Leasing Agent II", "Senior Leasing Agent"):
        page.set_value("title", title)
        await asyncio.sleep(0.002)
    await asyncio.sleep(0.1)

    assert len(saves) == 1
    assert store.load(record_id).title == "Senior Leasing Agent"
    wizard.save_and_close()

    entry = store.list_all()[0]
    assert entry.last_page_index == 2
    resumed = WizardController.resume(
        store, build_default_pages(config), record_id, entry.last_page_index, debounce_ms=20
    )
    assert resumed.current_index == 2
    assert resumed.current_page.get_value("title") == "Senior Leasing Agent"
    assert resumed.current_page.get_value("email_address") == "jsmith@arnotrealty.com"
    resumed.close()

    archive = export_draft(store, record_id, tmp_path / "usb")
    copy = import_draft(store, archive)
    assert copy.title == "Senior Leasing Agent"
    assert {e.record_id for e in store.list_all()} == {record_id, copy.record_id}

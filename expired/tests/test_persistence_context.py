import json
from datetime import date, timedelta

import pytest

from expired.domain.Product import Product
from expired.infra.Persistence_Context import (
    FetchRequest,
    PersistenceContext,
    PersistenceError,
    SortDescriptor,
    preview_context,
)

TODAY = date.today()


def _by_expiry():
    return FetchRequest(sort_descriptors=[SortDescriptor("expiry_date")])


def test_missing_file_is_empty_store(tmp_path):
    context = PersistenceContext(tmp_path / "products.json")
    assert context.fetch() == []
    assert not context.has_changes


def test_insert_save_and_reopen(tmp_path):
    store_file = tmp_path / "products.json"
    context = PersistenceContext(store_file)
    context.insert(Product("Milk", TODAY + timedelta(days=3), "Top shelf"))
    assert context.has_changes
    context.save()
    assert not context.has_changes

    rows = json.loads(store_file.read_text(encoding="utf-8"))
    assert [r["title"] for r in rows] == ["Milk"]

    reopened = PersistenceContext(store_file)
    fetched = reopened.fetch()
    assert len(fetched) == 1
    assert fetched[0].memo == "Top shelf"


def test_fetch_includes_pending_changes_and_keeps_identity(tmp_path):
    context = PersistenceContext(tmp_path / "products.json")
    milk = context.insert(Product("Milk", TODAY))
    assert context.fetch() == [milk]
    context.save()
    first = context.fetch()[0]
    assert first is milk
    context.delete(milk)
    assert context.fetch() == []


def test_sort_and_predicate(tmp_path):
    context = PersistenceContext(tmp_path / "products.json")
    late = context.insert(Product("Late", TODAY + timedelta(days=9)))
    early = context.insert(Product("Early", TODAY + timedelta(days=1)))
    undated = context.insert(Product("Undated"))
    hidden = context.insert(Product("Hidden", TODAY, archived=True))
    context.save()

    assert context.fetch(_by_expiry()) == [hidden, early, late, undated]
    request = FetchRequest(predicate=lambda p: not p.archived,
                           sort_descriptors=[SortDescriptor("expiry_date", ascending=False)])
    assert context.fetch(request) == [late, early, undated]


def test_edit_marks_changes_and_rollback_restores(tmp_path):
    context = PersistenceContext(tmp_path / "products.json")
    milk = context.insert(Product("Milk", TODAY))
    context.save()
    milk.title = "Oat milk"
    assert context.has_changes
    context.rollback()
    assert milk.title == "Milk"
    assert not context.has_changes


def test_delete_pending_insert_forgets_it(tmp_path):
    context = PersistenceContext(tmp_path / "products.json")
    milk = context.insert(Product("Milk", TODAY))
    context.delete(milk)
    assert not context.has_changes
    assert context.fetch() == []


def test_delete_is_persisted(tmp_path):
    store_file = tmp_path / "products.json"
    context = PersistenceContext(store_file)
    milk = context.insert(Product("Milk", TODAY))
    bread = context.insert(Product("Bread", TODAY))
    context.save()
    context.delete(milk)
    context.save()
    rows = json.loads(store_file.read_text(encoding="utf-8"))
    assert [r["id"] for r in rows] == [bread.id]


def test_corrupt_file_raises(tmp_path):
    store_file = tmp_path / "products.json"
    store_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        PersistenceContext(store_file).fetch()


def test_rows_without_id_get_a_stable_id(tmp_path):
    store_file = tmp_path / "products.json"
    store_file.write_text(json.dumps([{"title": "Eggs", "expiry_date": "01-01-2030"}]), encoding="utf-8")
    first = PersistenceContext(store_file).fetch()[0]
    second = PersistenceContext(store_file).fetch()[0]
    assert first.id == second.id
    assert first.expiry_date == date(2030, 1, 1)


def test_fetch_never_rewrites_the_file(tmp_path):
    store_file = tmp_path / "products.json"
    store_file.write_text(json.dumps(["legacy", {"title": "Eggs"}, {"title": "Eggs"}]), encoding="utf-8")
    before = store_file.read_bytes()

    context = PersistenceContext(store_file)
    fetched = context.fetch()

    assert store_file.read_bytes() == before
    assert [p.title for p in fetched] == ["Eggs", "Eggs"]
    assert fetched[0].id != fetched[1].id
    assert not context.has_changes


def test_save_keeps_rows_it_cannot_parse(tmp_path):
    store_file = tmp_path / "products.json"
    store_file.write_text(json.dumps([
        "legacy",
        {"title": "Eggs", "expiry_date": "sometime", "origin": "farm"},
        {"id": "rice", "title": "Rice", "expiry_date": "01-01-2030"},
    ]), encoding="utf-8")
    context = PersistenceContext(store_file)
    context.fetch()
    rice = context.get("rice")
    rice.memo = "Basmati"
    context.insert(Product("Milk", TODAY))
    context.save()

    rows = json.loads(store_file.read_text(encoding="utf-8"))
    assert rows[0] == "legacy"
    assert rows[1] == {"title": "Eggs", "expiry_date": "sometime", "origin": "farm"}
    assert rows[2]["memo"] == "Basmati"
    assert rows[3]["title"] == "Milk"


def test_edited_row_without_id_keeps_its_identity(tmp_path):
    store_file = tmp_path / "products.json"
    store_file.write_text(json.dumps([{"title": "Eggs", "expiry_date": "01-01-2030"}]), encoding="utf-8")
    context = PersistenceContext(store_file)
    eggs = context.fetch()[0]
    eggs.memo = "Free range"
    context.save()

    rows = json.loads(store_file.read_text(encoding="utf-8"))
    assert rows == [eggs.to_dict()]
    assert PersistenceContext(store_file).fetch()[0].id == eggs.id


def test_preview_context():
    context = preview_context()
    titles = {p.title for p in context.fetch()}
    assert titles == {"Milk", "Yogurt", "Cheddar", "Bread"}
    assert not context.has_changes

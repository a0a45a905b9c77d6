import pytest

import database
from database import create_document, get_database, get_documents
from schemas import Vehicle


def test_create_document_stamps_times(mongo):
    new_id = create_document("vehicles", Vehicle(plate="BAA1234", status="active"), mongo)
    docs = get_documents("vehicles", {"plate": "BAA1234"}, database=mongo)
    assert len(docs) == 1
    assert str(docs[0]["_id"]) == new_id
    assert docs[0]["created_at"] == docs[0]["updated_at"]


def test_get_documents_limit(mongo):
    for n in range(4):
        create_document("vehicles", {"plate": f"B{n}", "status": "active"}, mongo)
    assert len(get_documents("vehicles", limit=2, database=mongo)) == 2
    assert len(get_documents("vehicles", database=mongo)) == 4


def test_get_database_without_configuration(monkeypatch):
    monkeypatch.setattr(database, "db", None)
    with pytest.raises(RuntimeError):
        get_database()

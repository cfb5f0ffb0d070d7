"""Tests for flashcard_client against the Flask app."""

from unittest.mock import MagicMock
from urllib.parse import urlsplit

import pytest
import requests

from conftest import write_subject
from flashcard_client import (
    EMPTY,
    CategoryNotFound,
    FlashcardClient,
    FlashcardClientError,
    FlashcardData,
    flatten_subjects,
)


class FlaskSession:
    """Routes requests.Session.get calls into a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        r = self.test_client.get(urlsplit(url).path, query_string=params or {})
        resp = requests.Response()
        resp.status_code = r.status_code
        resp.reason = r.status.split(" ", 1)[1] if " " in r.status else ""
        resp._content = r.get_data()
        resp.encoding = "utf-8"
        resp.url = url
        for k, v in r.headers.items():
            resp.headers[k] = v
        return resp


@pytest.fixture
def api(client):
    return FlashcardClient("http://flashcards.test/", session=FlaskSession(client))


@pytest.fixture
def offline():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("connection refused")
    return FlashcardClient("http://flashcards.test", session=session)


def test_base_url_is_normalised(api):
    api.load_all()
    assert api.session.calls[0][0] == "http://flashcards.test/api/flashcards"


def test_load_all_categories(api, sample_tree):
    data = api.load_all()
    assert data.kind == "categories"
    assert [c["category"] for c in data.items] == ["Machine Learning", "Statistics"]


def test_load_all_flat(api, content_dir):
    write_subject(content_dir, "a.yml", "Alpha")
    data = api.load_all()
    assert data == FlashcardData("subjects", data.items)
    assert [s["subject"] for s in data.items] == ["Alpha"]


def test_load_all_server_error(api, app, tmp_path):
    app.config["FLASHCARDS_DIR"] = str(tmp_path / "missing")
    assert api.load_all() == EMPTY


def test_load_all_offline(offline):
    assert offline.load_all() == EMPTY
    assert offline.load_all_subjects() == []


def test_load_all_combined(api, sample_tree):
    data = api.load_all_combined()
    assert len(data) == 1
    assert data[0]["subject"] == "All Flashcards"
    assert len(data[0]["cards"]) == 6
    assert api.session.calls[0][1] == {"mode": "all"}


def test_load_all_combined_offline(offline):
    assert offline.load_all_combined() == []


def test_load_category(api, content_dir):
    write_subject(content_dir / "My Category", "s.yml", "Inside", cards=2)
    subjects = api.load_category("my-category")
    assert [s["subject"] for s in subjects] == ["Inside"]


def test_load_category_not_found(api, sample_tree):
    with pytest.raises(CategoryNotFound, match="Category not found"):
        api.load_category("nonexistent")


def test_load_category_server_error(api, app, tmp_path):
    app.config["FLASHCARDS_DIR"] = str(tmp_path / "missing")
    with pytest.raises(FlashcardClientError):
        api.load_category("anything")


def test_load_category_offline(offline):
    with pytest.raises(FlashcardClientError) as exc:
        offline.load_category("statistics")
    assert not isinstance(exc.value, CategoryNotFound)


def test_load_subject(api, sample_tree):
    subject = api.load_subject("machine-learning", "optimisation")
    assert subject["subject"] == "Optimisation"
    assert len(subject["cards"]) == 2
    assert api.load_subject("machine-learning", "probability") is None


def test_load_subject_unknown_category(api, sample_tree):
    with pytest.raises(CategoryNotFound):
        api.load_subject("nonexistent", "optimisation")


def test_load_all_subjects_and_by_name(api, sample_tree):
    subjects = api.load_all_subjects()
    assert [s["subject"] for s in subjects] == ["Optimisation", "Basics", "Probability"]
    assert api.load_subject_by_name("basics")["subject"] == "Basics"
    assert api.load_subject_by_name("missing") is None


def test_flatten_subjects():
    categories = FlashcardData("categories", [
        {"category": "A", "subjects": [{"subject": "a1"}, {"subject": "a2"}]},
        {"category": "B", "subjects": [{"subject": "b1"}]},
    ])
    assert [s["subject"] for s in flatten_subjects(categories)] == ["a1", "a2", "b1"]

    subjects = FlashcardData("subjects", [{"subject": "x"}])
    assert flatten_subjects(subjects) == [{"subject": "x"}]
    assert flatten_subjects(EMPTY) == []

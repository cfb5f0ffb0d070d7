"""Shared test fixtures."""

import os
import sys
import textwrap

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from flask_app import app as flask_app


def write_file(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


def write_subject(directory, fname, name, cards=1, place=None, description=None):
    lines = [f"subject: {name}"]
    lines.append(f"description: {description if description is not None else name + ' cards'}")
    if place is not None:
        lines.append(f"place: {place}")
    lines.append("cards:")
    for i in range(cards):
        lines.append(f"  - front: {name} Q{i + 1}")
        lines.append(f"    back: {name} A{i + 1}")
    if not cards:
        lines[-1] = "cards: []"
    return write_file(directory / fname, "\n".join(lines) + "\n")


@pytest.fixture
def content_dir(tmp_path):
    """Empty content root."""
    root = tmp_path / "flashcards"
    root.mkdir()
    return root


@pytest.fixture
def sample_tree(content_dir):
    """Two categories, one ranked by _category.yml, plus an invalid file."""
    ml = content_dir / "Machine Learning"
    write_file(ml / "_category.yml", "place: 1\n")
    write_subject(ml, "optim.yml", "Optimisation", cards=2, place=1)
    write_subject(ml, "basics.YAML", "Basics", cards=1)
    write_file(ml / "broken.yml", "subject: Broken\ncards: not-a-list\n")

    stats = content_dir / "Statistics"
    write_subject(stats, "prob.yml", "Probability", cards=3)
    write_file(stats / "notes.txt", "not yaml content\n")
    return content_dir


@pytest.fixture
def app(content_dir):
    flask_app.config.update(TESTING=True, FLASHCARDS_DIR=str(content_dir))
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()

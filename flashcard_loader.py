# flashcard_loader.py
import datetime
import json
import math
import os
import re
from collections import namedtuple

import yaml

SUBJECT_EXTENSIONS = (".yml", ".yaml")
CATEGORY_META_FILES = ("_category.yml", "_category.yaml")
ALL_FLASHCARDS = "All Flashcards"

KIND_CATEGORIES = "categories"
KIND_SUBJECTS = "subjects"

# kind: KIND_CATEGORIES or KIND_SUBJECTS (flat layout)
LoadResult = namedtuple("LoadResult", ["kind", "items", "warnings"])


class FlashcardError(Exception):
    pass


class ContentRootError(FlashcardError):
    pass


class CategoryNotFound(FlashcardError):
    def __init__(self, name):
        super().__init__(f"Category not found: {name}")
        self.name = name


# -----------------------------
# Helpers
# -----------------------------
def slugify(name: str):
    """'My Category' -> 'my-category'"""
    return re.sub(r"\s+", "-", (name or "").strip().lower())


def _place_of(item: dict):
    place = item.get("place")
    if isinstance(place, bool) or not isinstance(place, (int, float)):
        return None
    if math.isnan(place):
        return None
    return place


def sort_by_place(items, name_key: str):
    """Ranked items first (ascending place), then the rest alphabetically."""
    def keyfn(item):
        name = str(item.get(name_key) or "")
        place = _place_of(item)
        if place is None:
            return (1, 0, name.lower(), name)
        return (0, place, name.lower(), name)

    return sorted(items, key=keyfn)


def _is_subject_file(fname: str):
    lo = fname.lower()
    if fname.startswith("."):
        return False
    if lo in CATEGORY_META_FILES:
        return False
    return lo.endswith(SUBJECT_EXTENSIONS)


def _list_dir(path: str):
    try:
        return sorted(os.listdir(path))
    except OSError as e:
        raise ContentRootError(f"Cannot read content directory {path}: {e}") from e


def _read_yaml(path: str, warnings: list):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f), True
    except (OSError, UnicodeDecodeError) as e:
        warnings.append(f"Skipping {path}: cannot read file ({e})")
    except yaml.YAMLError as e:
        warnings.append(f"Skipping {path}: invalid YAML ({e})")
    return None, False


def _check_place(item: dict, path: str, warnings: list):
    if "place" in item and item["place"] is not None and _place_of(item) is None:
        warnings.append(f"{path}: ignoring non-numeric place {item['place']!r}")


def _json_default(o):
    # YAML timestamps; Flask serialises these itself
    if isinstance(o, (datetime.date, datetime.datetime)):
        return o.isoformat()
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


# -------- Subjects --------
def parse_subject_file(path: str, warnings: list):
    """
    Expected keys:
      subject, description, place (optional), cards: [{front, back}, ...]
    Returns the parsed mapping, or None when the file is rejected.
    """
    data, ok = _read_yaml(path, warnings)
    if not ok:
        return None

    if not isinstance(data, dict):
        warnings.append(f"Skipping {path}: expected a mapping at the top level")
        return None

    name = data.get("subject")
    if not isinstance(name, str) or not name.strip():
        warnings.append(f"Skipping {path}: missing subject name")
        return None

    if not isinstance(data.get("cards"), list):
        warnings.append(f"Skipping {path}: 'cards' must be a list")
        return None

    try:
        json.dumps(data, sort_keys=True, default=_json_default)
    except (TypeError, ValueError) as e:
        warnings.append(f"Skipping {path}: cannot be served as JSON ({e})")
        return None

    description = data.get("description")
    if description is None:
        data["description"] = ""
    elif not isinstance(description, str):
        data["description"] = str(description)
    _check_place(data, path, warnings)
    return data


def load_subjects(directory: str, warnings: list):
    subjects = []
    for fname in _list_dir(directory):
        full = os.path.join(directory, fname)
        if not _is_subject_file(fname) or not os.path.isfile(full):
            continue
        subject = parse_subject_file(full, warnings)
        if subject is not None:
            subjects.append(subject)
    return sort_by_place(subjects, "subject")


def find_subject(subjects, name: str):
    wanted = slugify(name)
    return next((s for s in subjects if slugify(s.get("subject")) == wanted), None)


# -------- Categories --------
def read_category_meta(category_dir: str, warnings: list):
    path = next(
        (os.path.join(category_dir, f) for f in CATEGORY_META_FILES
         if os.path.isfile(os.path.join(category_dir, f))),
        None,
    )
    if not path:
        return {}

    data, ok = _read_yaml(path, warnings)
    if not ok or data is None:
        return {}
    if not isinstance(data, dict):
        warnings.append(f"Ignoring {path}: expected a mapping")
        return {}

    _check_place(data, path, warnings)
    place = _place_of(data)
    return {"place": place} if place is not None else {}


def load_tree(root: str):
    warnings = []
    names = _list_dir(root)
    category_dirs = [
        n for n in names
        if not n.startswith(".") and os.path.isdir(os.path.join(root, n))
    ]

    # Flat layout: subject files straight under the root
    if not category_dirs:
        return LoadResult(KIND_SUBJECTS, load_subjects(root, warnings), warnings)

    categories = []
    for name in category_dirs:
        category_dir = os.path.join(root, name)
        meta = read_category_meta(category_dir, warnings)
        try:
            subjects = load_subjects(category_dir, warnings)
        except ContentRootError as e:
            warnings.append(str(e))
            continue
        if not subjects:
            warnings.append(f"Category {name!r} has no valid subjects; skipped")
            continue
        category = {"category": name}
        category.update(meta)
        category["subjects"] = subjects
        categories.append(category)

    return LoadResult(KIND_CATEGORIES, sort_by_place(categories, "category"), warnings)


def list_categories(root: str):
    result = load_tree(root)
    return result.items, result.warnings


def get_category(root: str, name: str):
    result = load_tree(root)
    if result.kind == KIND_CATEGORIES:
        wanted = slugify(name)
        for category in result.items:
            if slugify(category["category"]) == wanted:
                return category["subjects"], result.warnings
    raise CategoryNotFound(name)


def get_all_combined(root: str):
    result = load_tree(root)
    if result.kind == KIND_CATEGORIES:
        subjects = [s for c in result.items for s in c["subjects"]]
        description = (
            f"All flashcards from {len(subjects)} subjects "
            f"across {len(result.items)} categories"
        )
    else:
        subjects = result.items
        description = f"All flashcards from {len(subjects)} subjects"

    combined = {
        "subject": ALL_FLASHCARDS,
        "description": description,
        "cards": [card for s in subjects for card in s["cards"]],
    }
    return combined, result.warnings

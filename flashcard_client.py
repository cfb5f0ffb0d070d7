# flashcard_client.py
import logging
from collections import namedtuple

import requests

from flashcard_loader import KIND_CATEGORIES, KIND_SUBJECTS, find_subject

logger = logging.getLogger(__name__)

API_PATH = "/api/flashcards"
KIND_HEADER = "X-Flashcards-Kind"

# kind: "categories" or "subjects", taken from the server's kind header
FlashcardData = namedtuple("FlashcardData", ["kind", "items"])

EMPTY = FlashcardData(KIND_SUBJECTS, [])


class FlashcardClientError(Exception):
    pass


class CategoryNotFound(FlashcardClientError):
    pass


def flatten_subjects(data: FlashcardData):
    if data.kind == KIND_CATEGORIES:
        return [s for c in data.items for s in c.get("subjects") or []]
    return list(data.items)


class FlashcardClient:
    """Thin wrapper around the flashcards API.

    Listing calls fail closed to an empty result; targeted lookups raise.
    """

    def __init__(self, base_url: str, session=None, timeout=10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, params=None):
        resp = self.session.get(self.base_url + API_PATH, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp, resp.json()

    def load_all(self):
        try:
            resp, data = self._get()
        except (requests.RequestException, ValueError) as e:
            logger.error("Error loading flashcards: %s", e)
            return EMPTY

        kind = resp.headers.get(KIND_HEADER)
        if kind not in (KIND_CATEGORIES, KIND_SUBJECTS) or not isinstance(data, list):
            logger.error("Unexpected flashcards response (kind=%r)", kind)
            return EMPTY
        return FlashcardData(kind, data)

    def load_all_combined(self):
        try:
            _, data = self._get({"mode": "all"})
        except (requests.RequestException, ValueError) as e:
            logger.error("Error loading all flashcards: %s", e)
            return []
        return data if isinstance(data, list) else []

    def load_category(self, name: str):
        try:
            resp = self.session.get(
                self.base_url + API_PATH, params={"category": name}, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error("Error loading category %r: %s", name, e)
            raise FlashcardClientError(f"Failed to fetch category flashcards: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and "error" in data:
            if resp.status_code == 404:
                raise CategoryNotFound(data["error"])
            raise FlashcardClientError(data["error"])
        if not resp.ok:
            raise FlashcardClientError(f"Failed to fetch category flashcards: {resp.reason}")
        if not isinstance(data, list):
            raise FlashcardClientError("Unexpected response for category flashcards")
        return data

    def load_subject(self, category: str, name: str):
        return find_subject(self.load_category(category), name)

    def load_all_subjects(self):
        return flatten_subjects(self.load_all())

    def load_subject_by_name(self, name: str):
        return find_subject(self.load_all_subjects(), name)

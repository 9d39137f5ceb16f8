"""Test configuration and fixtures"""

import tempfile
from pathlib import Path

import pytest

from catbreeds.api.models import CatBreed, CatImage
from catbreeds.core.config import SyncSettings
from catbreeds.core.database import Database
from catbreeds.core.exceptions import TransportError
from catbreeds.sync.engine import CatalogSyncEngine


class FakeCatalog:
    """In-memory stand-in for CatApiClient with switchable failures."""

    def __init__(self, breeds: list[dict], images: dict[str, dict]):
        self.breeds = breeds
        self.images = images
        self.offline = False
        self.failing_images: set[str] = set()
        self.calls: list[tuple] = []

    def _check(self, path: str) -> None:
        if self.offline:
            raise TransportError(f"Network connection error while fetching {path}")

    def list_page(self, limit, page):
        self.calls.append(("list_page", limit, page))
        self._check("breeds")
        window = self.breeds[page * limit:(page + 1) * limit]
        return [CatBreed.from_api(p) for p in window]

    def list_all(self):
        self.calls.append(("list_all",))
        self._check("breeds")
        return [CatBreed.from_api(p) for p in self.breeds]

    def search(self, query):
        self.calls.append(("search", query))
        self._check("breeds/search")
        return [
            CatBreed.from_api(p) for p in self.breeds
            if query.lower() in p["name"].lower()
        ]

    def get_image(self, image_id):
        self.calls.append(("get_image", image_id))
        self._check(f"images/{image_id}")
        if image_id in self.failing_images or image_id not in self.images:
            raise TransportError(f"Failed to fetch images/{image_id}: HTTP 404 Not Found")
        return CatImage.from_api(self.images[image_id])

    def close(self):
        pass

    def remote_calls(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def database(temp_dir):
    """Empty SQLite cache in a temporary directory"""
    db = Database(temp_dir / "breeds.db")
    yield db
    db.close()


@pytest.fixture
def sample_breed_payloads():
    """Breeds as returned by GET breeds, in remote (not name) order"""
    return [
        {
            "id": "siam",
            "name": "Siamese",
            "description": "Vocal and affectionate.",
            "origin": "Thailand",
            "temperament": "Active, Agile, Clever, Sociable",
            "life_span": "12 - 15",
            "reference_image_id": "ai6Jps4sx",
        },
        {
            "id": "abys",
            "name": "Abyssinian",
            "description": "Active and energetic.",
            "origin": "Egypt",
            "temperament": "Active, Energetic, Independent",
            "life_span": "14 - 15",
            "reference_image_id": "0XYvRd7oD",
        },
        {
            "id": "beng",
            "name": "Bengal",
            "description": "Wild look, domestic heart.",
            "origin": "United States",
            "temperament": "Alert, Agile, Energetic",
            "life_span": "12 - 15",
            "reference_image_id": "O3btzLlsO",
        },
        {
            "id": "aege",
            "name": "Aegean",
            "description": "Natural cat from the Greek islands.",
            "origin": "Greece",
            "temperament": "Affectionate, Social",
            "life_span": "9 - 12",
        },
    ]


@pytest.fixture
def sample_image_payloads():
    """GET images/{id} responses keyed by image id"""
    return {
        "ai6Jps4sx": {"id": "ai6Jps4sx", "url": "https://cdn2.thecatapi.com/images/ai6Jps4sx.jpg",
                      "width": 1200, "height": 800, "mime_type": "image/jpeg"},
        "0XYvRd7oD": {"id": "0XYvRd7oD", "url": "https://cdn2.thecatapi.com/images/0XYvRd7oD.jpg",
                      "width": 1204, "height": 1445},
        "O3btzLlsO": {"id": "O3btzLlsO", "url": "https://cdn2.thecatapi.com/images/O3btzLlsO.png",
                      "width": 1100, "height": 739},
    }


@pytest.fixture
def fake_remote(sample_breed_payloads, sample_image_payloads):
    return FakeCatalog(sample_breed_payloads, sample_image_payloads)


@pytest.fixture
def sync_settings():
    return SyncSettings(page_size=2, assumed_total=67, max_image_workers=4)


@pytest.fixture
def engine(fake_remote, database, sync_settings):
    return CatalogSyncEngine(fake_remote, database, sync_settings)

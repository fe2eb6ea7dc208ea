"""Shared fakes and fixtures for the pipeline tests."""

import pytest

from pixilator.core.engine import GenerationOrchestrator
from pixilator.core.errors import SynthesisError
from pixilator.image.service import to_data_uri
from pixilator.safety.rate_limiter import RateLimiter
from pixilator.storage.gateway import PersistenceGateway


FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


class FakeClock:
    """Manually advanced clock usable as both wall and monotonic source."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeRefiner:
    def __init__(self, suffix=", highly detailed", fail=False):
        self.suffix = suffix
        self.fail = fail
        self.calls = []

    def refine(self, raw_prompt):
        self.calls.append(raw_prompt)
        if self.fail:
            return raw_prompt
        return raw_prompt + self.suffix


class FakeSynthesizer:
    def __init__(self, image=FAKE_PNG, fail=False):
        self.image = image
        self.fail = fail
        self.calls = []

    def synthesize(self, prompt, negative_prompt, aspect_ratio_id, model_id):
        self.calls.append((prompt, negative_prompt, aspect_ratio_id, model_id))
        if self.fail:
            raise SynthesisError("provider returned 503")
        return to_data_uri(self.image)


class FakeObjectStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploads = {}

    def upload(self, key, data, content_type):
        if self.fail:
            raise RuntimeError("storage unavailable")
        self.uploads[key] = (data, content_type)

    def public_url(self, key):
        return f"https://cdn.example.test/generated-images/{key}"


class FakeTable:
    def __init__(self, fail=False, rows=None):
        self.fail = fail
        self.inserted = []
        self.rows = rows or []
        self.queries = []

    def insert(self, record):
        if self.fail:
            raise RuntimeError("database unavailable")
        self.inserted.append(record)
        return {"id": f"gen-{len(self.inserted)}", **record}

    def query(self, filters, order, offset, limit):
        if self.fail:
            raise RuntimeError("database unavailable")
        self.queries.append((filters, order, offset, limit))
        rows = [
            r for r in self.rows
            if all(v is None or r.get(k) == v for k, v in filters.items())
        ]
        return rows[offset:offset + limit]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(max_requests=10, window_seconds=3600, clock=clock)


@pytest.fixture
def refiner():
    return FakeRefiner()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def table():
    return FakeTable()


@pytest.fixture
def make_orchestrator(rate_limiter, refiner, synthesizer, object_store, table, clock):
    """Build an orchestrator; keyword overrides replace individual collaborators."""

    def _make(**overrides):
        persistence = overrides.pop(
            "persistence",
            PersistenceGateway(
                object_store=overrides.pop("object_store", object_store),
                table=overrides.pop("table", table),
            ),
        )
        return GenerationOrchestrator(
            rate_limiter=overrides.pop("rate_limiter", rate_limiter),
            refiner=overrides.pop("refiner", refiner),
            synthesizer=overrides.pop("synthesizer", synthesizer),
            persistence=persistence,
            clock=clock,
            monotonic=clock,
        )

    return _make

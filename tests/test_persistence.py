"""Tests for the persistence gateway, Supabase adapters and library reads."""

import re
from unittest.mock import MagicMock, patch

import pytest
import requests

from pixilator.core.schemas import GenerationMetadata
from pixilator.image.service import to_data_uri
from pixilator.storage import supabase_client
from pixilator.storage.gateway import PersistenceGateway, make_object_key
from pixilator.storage.library import GenerationLibrary
from pixilator.storage.supabase_client import SupabaseStorage, SupabaseTable

from conftest import FAKE_PNG, FakeObjectStore, FakeTable


IMAGE_URI = to_data_uri(FAKE_PNG)


@pytest.fixture
def metadata():
    return GenerationMetadata(
        original_prompt="a cat",
        refined_prompt="a fluffy cat",
        negative_prompt="blurry",
        style="realistic",
        aspect_ratio="1:1",
        model_version="model-x",
        processing_time_ms=1200,
    )


def test_persist_uploads_and_inserts(metadata):
    store, table = FakeObjectStore(), FakeTable()
    result = PersistenceGateway(store, table).persist(IMAGE_URI, metadata)

    assert result.id == "gen-1"
    (key, (data, content_type)), = store.uploads.items()
    assert data == FAKE_PNG
    assert content_type == "image/png"
    assert result.public_url == store.public_url(key)

    row = table.inserted[0]
    assert row["image_url"] == result.public_url
    assert row["user_id"] == "public"
    assert row["original_prompt"] == "a cat"
    assert row["processing_time"] == 1200


def test_upload_failure_still_inserts_with_inline_image(metadata):
    table = FakeTable()
    result = PersistenceGateway(FakeObjectStore(fail=True), table).persist(IMAGE_URI, metadata)

    assert result.public_url == IMAGE_URI
    assert result.id == "gen-1"
    assert table.inserted[0]["image_url"] == IMAGE_URI


def test_insert_failure_keeps_public_url(metadata):
    store = FakeObjectStore()
    result = PersistenceGateway(store, FakeTable(fail=True)).persist(IMAGE_URI, metadata)

    assert result.id is None
    assert result.public_url.startswith("https://cdn.example.test/")


def test_both_failures_degrade(metadata):
    result = PersistenceGateway(FakeObjectStore(fail=True), FakeTable(fail=True)).persist(IMAGE_URI, metadata)
    assert result.id is None
    assert result.public_url == IMAGE_URI


@pytest.mark.parametrize("row", [None, [], ["gen-1"], {"name": "no id"}])
def test_insert_without_usable_row_degrades(metadata, row):
    table = MagicMock()
    table.insert.return_value = row

    result = PersistenceGateway(FakeObjectStore(), table).persist(IMAGE_URI, metadata)

    assert result.id is None
    assert result.public_url.startswith("https://cdn.example.test/")


def test_unconfigured_backend_degrades(metadata):
    result = PersistenceGateway(None, None).persist(IMAGE_URI, metadata)
    assert result.id is None
    assert result.public_url == IMAGE_URI


def test_malformed_data_uri_skips_upload_but_inserts(metadata):
    store, table = FakeObjectStore(), FakeTable()
    result = PersistenceGateway(store, table).persist("not-a-data-uri", metadata)

    assert store.uploads == {}
    assert result.public_url == "not-a-data-uri"
    assert result.id == "gen-1"


def test_object_keys_are_unique_and_timestamped():
    keys = {make_object_key(1700000000000) for _ in range(50)}
    assert len(keys) == 50
    for key in keys:
        assert re.fullmatch(r"generation-1700000000000-[0-9a-f]{13}\.png", key)


# =========================================================
# Supabase REST adapters
# =========================================================

def test_storage_upload_request():
    response = MagicMock()
    storage = SupabaseStorage("https://proj.supabase.co/", "anon", bucket="generated-images")

    with patch.object(supabase_client.requests, "post", return_value=response) as post:
        storage.upload("generation-1.png", b"bytes", "image/png")

    assert post.call_args.args[0] == "https://proj.supabase.co/storage/v1/object/generated-images/generation-1.png"
    headers = post.call_args.kwargs["headers"]
    assert headers["Content-Type"] == "image/png"
    assert headers["apikey"] == "anon"
    assert headers["x-upsert"] == "false"
    assert post.call_args.kwargs["data"] == b"bytes"
    response.raise_for_status.assert_called_once()
    assert storage.public_url("generation-1.png") == (
        "https://proj.supabase.co/storage/v1/object/public/generated-images/generation-1.png"
    )


def test_table_insert_returns_first_row():
    response = MagicMock()
    response.json.return_value = [{"id": "abc", "style": "realistic"}]
    table = SupabaseTable("https://proj.supabase.co", "anon")

    with patch.object(supabase_client.requests, "post", return_value=response) as post:
        row = table.insert({"style": "realistic"})

    assert row["id"] == "abc"
    assert post.call_args.args[0] == "https://proj.supabase.co/rest/v1/generations"
    assert post.call_args.kwargs["headers"]["Prefer"] == "return=representation"


def test_table_insert_without_row_raises():
    response = MagicMock()
    response.json.return_value = []
    with patch.object(supabase_client.requests, "post", return_value=response):
        with pytest.raises(RuntimeError):
            SupabaseTable("https://proj.supabase.co", "anon").insert({})


def test_table_query_params():
    response = MagicMock()
    response.json.return_value = [{"id": 1}]
    table = SupabaseTable("https://proj.supabase.co", "anon")

    with patch.object(supabase_client.requests, "get", return_value=response) as get:
        rows = table.query({"user_id": "public", "style": None}, "created_at.desc", 10, 5)

    assert rows == [{"id": 1}]
    params = get.call_args.kwargs["params"]
    assert params["user_id"] == "eq.public"
    assert "style" not in params
    assert params["order"] == "created_at.desc"
    assert (params["offset"], params["limit"]) == (10, 5)


def test_table_query_http_error_propagates():
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 relation does not exist")
    with patch.object(supabase_client.requests, "get", return_value=response):
        with pytest.raises(requests.exceptions.HTTPError):
            SupabaseTable("https://proj.supabase.co", "anon").query({}, "created_at.desc", 0, 10)


def test_create_stores_unconfigured(monkeypatch):
    monkeypatch.setattr(supabase_client, "SUPABASE_URL", "")
    assert supabase_client.create_supabase_stores() == (None, None)


# =========================================================
# Library
# =========================================================

def _row(i, style="realistic", model="model-x", user="public"):
    return {
        "id": f"id-{i}",
        "user_id": user,
        "original_prompt": f"prompt {i}",
        "refined_prompt": f"refined {i}",
        "negative_prompt": "blurry",
        "image_url": f"https://cdn.example.test/{i}.png",
        "style": style,
        "aspect_ratio": "1:1",
        "model_version": model,
        "processing_time": 900,
        "created_at": "2025-01-01T00:00:00+00:00",
    }


def test_library_page_maps_rows():
    table = FakeTable(rows=[_row(1), _row(2, style="cinematic"), _row(3, user="someone")])
    page = GenerationLibrary(table).fetch_page(limit=2, offset=0)

    assert [img["id"] for img in page["images"]] == ["id-1", "id-2"]
    assert page["images"][0]["imageUrl"] == "https://cdn.example.test/1.png"
    assert page["images"][0]["processingTimeMs"] == 900
    assert page["total"] == 2
    assert page["hasMore"] is True
    filters, order, offset, limit = table.queries[0]
    assert filters["user_id"] == "public"
    assert order == "created_at.desc"


def test_library_filters():
    table = FakeTable(rows=[_row(1), _row(2, style="cinematic", model="other")])
    page = GenerationLibrary(table).fetch_page(style="cinematic", model_version="other")
    assert [img["id"] for img in page["images"]] == ["id-2"]
    assert page["hasMore"] is False


def test_library_unconfigured_returns_empty_page():
    page = GenerationLibrary(None).fetch_page()
    assert page == {"images": [], "total": 0, "hasMore": False, "error": "Database not configured"}


def test_library_query_failure_returns_empty_page():
    page = GenerationLibrary(FakeTable(fail=True)).fetch_page()
    assert page["images"] == []
    assert page["total"] == 0
    assert page["hasMore"] is False
    assert "error" in page

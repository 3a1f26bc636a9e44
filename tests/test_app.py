import io

import pytest

from chart_collage.app.main import create_app
from chart_collage.core.config import CollageConfig

from tests.helpers import COLORS, png_bytes


@pytest.fixture()
def client(in_place_store, config):
    app = create_app(store=in_place_store, config=config)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def post_images(client, payloads, path="/api/images"):
    data = {"images": [(io.BytesIO(p), f"chart_{i}.png", "image/png") for i, p in enumerate(payloads)]}
    return client.post(path, data=data, content_type="multipart/form-data")


def test_post_composes_batch(client, in_place_store):
    response = post_images(client, [png_bytes(c) for c in COLORS[:4]])

    assert response.status_code == 201
    body = response.get_json()
    assert body["message"] == "Success"
    assert body["result"]["id"] == "test-collages/img_0004"
    assert (body["result"]["width"], body["result"]["height"]) == (800, 800)
    assert "warnings" not in body
    assert in_place_store.calls["store"] == 4


def test_post_keeps_submission_order(client, in_place_store):
    post_images(client, [png_bytes(c) for c in COLORS[:3]])

    img = in_place_store.get_image("test-collages/img_0003")
    # Last part is the base, first part lands in the right-hand tile
    assert img.getpixel((200, 200)) == (0, 0, 255, 255)
    assert img.getpixel((600, 200)) == (255, 0, 0, 255)
    assert img.getpixel((200, 600)) == (0, 255, 0, 255)


def test_post_without_images_is_rejected(client, in_place_store):
    response = client.post("/api/images")

    assert response.status_code == 400
    body = response.get_json()
    assert body["message"] == "Error"
    assert body["error"]["type"] == "EmptyBatchError"
    assert in_place_store.calls["store"] == 0


def test_post_with_invalid_image_is_rejected(client, in_place_store):
    response = post_images(client, [png_bytes(COLORS[0]), b"not an image"])

    assert response.status_code == 400
    assert response.get_json()["error"]["type"] == "InvalidImageError"
    assert in_place_store.calls["store"] == 0


def test_post_upload_failure(client, in_place_store):
    in_place_store.fail_store_calls = {2}

    response = post_images(client, [png_bytes(c) for c in COLORS[:3]])

    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["type"] == "StoreError"
    assert error["batch_index"] == 1
    assert in_place_store.calls["compose"] == 0


def test_post_compose_failure(client, in_place_store):
    in_place_store.fail_compose = True

    response = post_images(client, [png_bytes(c) for c in COLORS[:2]])

    assert response.status_code == 400
    assert response.get_json()["error"]["type"] == "ComposeError"


def test_post_reports_cleanup_warnings(client, in_place_store):
    in_place_store.fail_delete_ids = {"img_0001"}

    response = post_images(client, [png_bytes(c) for c in COLORS[:3]])

    assert response.status_code == 201
    warnings = response.get_json()["warnings"]
    assert warnings[0]["type"] == "CleanupPartialFailure"
    assert warnings[0]["failed_ids"] == ["img_0001"]


def test_get_lists_collages(client):
    post_images(client, [png_bytes(c) for c in COLORS[:2]])
    post_images(client, [png_bytes(c) for c in COLORS[:3]], path="/images")

    response = client.get("/api/images")

    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "Success"
    assert sorted(item["id"] for item in body["result"]) == [
        "test-collages/img_0002",
        "test-collages/img_0005",
    ]


def test_get_listing_failure(client, in_place_store):
    in_place_store.fail_list = True

    response = client.get("/api/images")

    assert response.status_code == 400
    assert response.get_json()["message"] == "Error"


@pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"])
@pytest.mark.parametrize("path", ["/api/images", "/images"])
def test_other_methods_not_allowed(client, method, path):
    response = client.open(path, method=method)

    assert response.status_code == 405
    assert response.get_json() == {"message": "Method not allowed"}


def test_head_is_not_allowed(client, in_place_store):
    response = client.head("/api/images")

    assert response.status_code == 405
    assert in_place_store.calls["list"] == 0


def test_oversized_upload_gets_json_error(in_place_store):
    # Roughly 1 KB limit
    config = CollageConfig(folder="test-collages", max_upload_mb=0.001)
    app = create_app(store=in_place_store, config=config)

    with app.test_client() as client:
        response = post_images(client, [b"x" * 5000])

    assert response.status_code == 413
    body = response.get_json()
    assert body["message"] == "Error"
    assert body["error"]["type"] == "RequestEntityTooLarge"
    assert in_place_store.calls["store"] == 0

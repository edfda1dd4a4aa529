"""
HTTP-level tests through Django's test client: status codes, ETag and
Location headers, conditional requests and JSON error bodies.
"""
import json

import pytest

pytestmark = pytest.mark.integration


def post_json(client, path, payload, **headers):
    return client.post(path, data=json.dumps(payload), content_type="application/json", **headers)


def patch_json(client, path, payload, **headers):
    return client.patch(path, data=json.dumps(payload), content_type="application/json", **headers)


@pytest.fixture
def created(client):
    resp = post_json(client, "/orders", {"userId": "u1", "amount": 100})
    assert resp.status_code == 201
    return resp


def test_create_returns_201_with_location_and_etag(created):
    body = created.json()
    assert body["status"] == "created"
    assert body["version"] == 1
    assert body["userId"] == "u1"
    assert "canceledAt" not in body
    assert created["Location"] == f"/orders/{body['id']}"
    assert created["ETag"] == 'W/"1"'


@pytest.mark.parametrize("payload", [
    {"amount": 1},
    {"userId": "  ", "amount": 1},
    {"userId": "u1", "amount": -1},
    {"userId": "u1", "amount": "12"},
    {"userId": "u1", "amount": 1, "status": "shipped"},
])
def test_create_validation_errors_are_422(client, payload):
    resp = post_json(client, "/orders", payload)
    assert resp.status_code == 422
    assert "error" in resp.json()
    assert client.get("/orders").json() == []


def test_malformed_json_is_400(client):
    resp = client.post("/orders", data="{oops", content_type="application/json")
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_get_and_conditional_get(client, created):
    order_id = created.json()["id"]
    resp = client.get(f"/orders/{order_id}")
    assert resp.status_code == 200
    assert resp.json() == created.json()

    cached = client.get(f"/orders/{order_id}", HTTP_IF_NONE_MATCH=resp["ETag"])
    assert cached.status_code == 304
    assert cached["ETag"] == resp["ETag"]


def test_get_unknown_is_404(client):
    resp = client.get("/orders/o_missing")
    assert resp.status_code == 404
    assert resp.json()["error"].startswith("order not found")


def test_list_and_conditional_list(client, created):
    resp = client.get("/orders")
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [created.json()["id"]]

    assert client.get("/orders", HTTP_IF_NONE_MATCH=resp["ETag"]).status_code == 304

    post_json(client, "/orders", {"userId": "u2", "amount": 5})
    assert client.get("/orders", HTTP_IF_NONE_MATCH=resp["ETag"]).status_code == 200


def test_patch_with_if_match(client, created):
    order_id = created.json()["id"]
    t1 = created["ETag"]

    resp = patch_json(client, f"/orders/{order_id}", {"status": "paid"}, HTTP_IF_MATCH=t1)
    assert resp.status_code == 200
    assert resp.json()["version"] == 2
    assert resp["ETag"] != t1

    stale = patch_json(client, f"/orders/{order_id}", {"amount": 1}, HTTP_IF_MATCH=t1)
    assert stale.status_code == 412
    assert client.get(f"/orders/{order_id}").json()["amount"] == 100


def test_patch_illegal_transition_is_409(client, created):
    order_id = created.json()["id"]
    patch_json(client, f"/orders/{order_id}", {"status": "paid"})
    resp = patch_json(client, f"/orders/{order_id}", {"status": "created"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "cannot modify a paid order"


def test_patch_invalid_field_is_422(client, created):
    order_id = created.json()["id"]
    resp = patch_json(client, f"/orders/{order_id}", {"status": "paid", "amount": -3})
    assert resp.status_code == 422
    assert client.get(f"/orders/{order_id}").json()["version"] == 1


def test_cancel_flow(client, created):
    order_id = created.json()["id"]
    first = client.post(f"/orders/{order_id}/cancel")
    assert first.status_code == 200
    assert first.json()["status"] == "canceled"
    assert "canceledAt" in first.json()

    second = client.post(f"/orders/{order_id}/cancel")
    assert second.status_code == 200
    assert second.json() == first.json()

    reopen = patch_json(client, f"/orders/{order_id}", {"status": "created"})
    assert reopen.status_code == 409
    assert reopen.json()["error"] == "cannot reopen a canceled order"


def test_cancel_paid_is_409(client, created):
    order_id = created.json()["id"]
    patch_json(client, f"/orders/{order_id}", {"status": "paid"})
    resp = client.post(f"/orders/{order_id}/cancel")
    assert resp.status_code == 409
    assert client.get(f"/orders/{order_id}").json()["version"] == 2


def test_delete(client, created):
    order_id = created.json()["id"]
    assert client.delete(f"/orders/{order_id}").status_code == 204
    assert client.delete(f"/orders/{order_id}").status_code == 404
    assert client.get(f"/orders/{order_id}").status_code == 404


def test_method_not_allowed(client, created):
    assert client.put(f"/orders/{created.json()['id']}").status_code == 405
    assert client.get(f"/orders/{created.json()['id']}/cancel").status_code == 405


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_health(client, created):
    resp = client.get("/health")
    assert resp.json() == {"status": "ok", "orders": 1}


def test_create_with_very_large_integer_amount(client):
    body = '{"userId": "u1", "amount": 1' + "0" * 400 + "}"
    resp = client.post("/orders", data=body, content_type="application/json")
    assert resp.status_code == 201
    assert resp.json()["amount"] == 10 ** 400


def test_patch_with_very_large_integer_amount(client, created):
    order_id = created.json()["id"]
    body = '{"amount": 1' + "0" * 400 + "}"
    resp = client.patch(f"/orders/{order_id}", data=body, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["version"] == 2


def test_invalid_field_reported_before_missing_order(client):
    # the body is validated before the order is looked up
    resp = patch_json(client, "/orders/o_missing", {"amount": -1})
    assert resp.status_code == 422


def test_invalid_field_reported_before_stale_tag(client, created):
    order_id = created.json()["id"]
    resp = patch_json(client, f"/orders/{order_id}", {"status": "shipped"}, HTTP_IF_MATCH='W/"99"')
    assert resp.status_code == 422
    assert client.get(f"/orders/{order_id}").json()["version"] == 1


def test_stale_tag_reported_before_lifecycle_conflict(client, created):
    order_id = created.json()["id"]
    t1 = created["ETag"]
    patch_json(client, f"/orders/{order_id}", {"status": "paid"}, HTTP_IF_MATCH=t1)
    resp = patch_json(client, f"/orders/{order_id}", {"status": "created"}, HTTP_IF_MATCH=t1)
    assert resp.status_code == 412

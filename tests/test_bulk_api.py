"""
Tests de los endpoints de operaciones masivas
"""
import base64
from decimal import Decimal

from sqlalchemy import select

from app.crud import create_user
from app.models.catalog import Product, ProductVariant

BULK_URL = "/admin/products/bulk"


def upload(client, headers, operation, content):
    return client.post(
        BULK_URL,
        headers=headers,
        files={"file": ("products.csv", content, "text/csv")},
        data={"operation": operation},
    )


def test_submit_requires_credentials(app_client):
    response = upload(app_client, {}, "IMPORT", b"name,price,stock\nA,1,1\n")

    assert response.status_code == 401
    assert response.text == "Unauthorized"


def test_submit_rejects_wrong_password(app_client, admin_user):
    token = base64.b64encode(b"admin:wrong").decode()

    response = upload(app_client, {"Authorization": f"Basic {token}"}, "IMPORT", b"name\n")

    assert response.status_code == 401


def test_submit_rejects_non_admin(app_client, session_factory):
    with session_factory() as session:
        create_user(session, username="clerk", email="clerk@example.com", password="clerk123")
    token = base64.b64encode(b"clerk:clerk123").decode()

    response = upload(app_client, {"Authorization": f"Basic {token}"}, "IMPORT", b"name\n")

    assert response.status_code == 401


def test_submit_missing_fields(app_client, auth_headers):
    response = app_client.post(BULK_URL, headers=auth_headers, data={"operation": "IMPORT"})

    assert response.status_code == 400
    assert response.text == "Missing required fields"


def test_submit_invalid_operation(app_client, auth_headers):
    response = upload(app_client, auth_headers, "DELETE_EVERYTHING", b"id\n1\n")

    assert response.status_code == 400
    assert response.text == "Invalid operation"


def test_submit_unparseable_file(app_client, auth_headers):
    response = upload(app_client, auth_headers, "IMPORT", b"name,price\nA,1,2,3\n")

    assert response.status_code == 400


def test_import_runs_to_completion(app_client, auth_headers, session_factory):
    csv_content = (
        b"name,price,stock,status\n"
        b"Trail Boot,89.90,4,ACTIVE\n"
        b"Road Shoe,not-a-price,2,\n"
        b"Wool Sock,5,10,\n"
    )

    response = upload(app_client, auth_headers, "import", csv_content)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["operationId"].startswith("bulk_import_")
    assert "3 records" in body["message"]

    status_response = app_client.get(f"{BULK_URL}/operations/{body['operationId']}")
    assert status_response.status_code == 200
    snapshot = status_response.json()
    assert snapshot["status"] == "COMPLETED"
    assert snapshot["processed"] == 3
    assert snapshot["total"] == 3
    assert [r["success"] for r in snapshot["results"]] == [True, False, True]
    assert snapshot["results"][1]["identifier"] == "Road Shoe"

    with session_factory() as session:
        slugs = sorted(session.scalars(select(Product.slug)))
    assert slugs == ["trail-boot", "wool-sock"]


def test_price_update_and_history(app_client, auth_headers, make_products):
    ids = make_products(3)
    csv_content = "id,price\n" + "".join(f"{i},15.00\n" for i in ids)

    response = upload(app_client, auth_headers, "PRICE_UPDATE", csv_content.encode())
    operation_id = response.json()["operationId"]

    history = app_client.get("/admin/bulk-operations", headers=auth_headers)
    assert history.status_code == 200
    [entry] = history.json()
    assert entry["operation_id"] == operation_id
    assert entry["kind"] == "PRICE_UPDATE"
    assert entry["status"] == "COMPLETED"
    assert entry["processed"] == 3
    assert entry["failed_count"] == 0

    filtered = app_client.get(
        "/admin/bulk-operations", headers=auth_headers, params={"status": "failed"}
    )
    assert filtered.json() == []


def test_unknown_operation_is_404(app_client):
    response = app_client.get(f"{BULK_URL}/operations/bulk_import_0_deadbeef")

    assert response.status_code == 404
    assert response.text == "Operation not found"


def test_export_download(app_client, auth_headers, make_products):
    make_products(2)

    response = app_client.get(f"{BULK_URL}/export", headers=auth_headers, params={"type": "all"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment; filename=products-all-")
    assert disposition.endswith(".csv")
    assert len(response.text.strip().splitlines()) == 3


def test_export_invalid_type(app_client, auth_headers):
    response = app_client.get(f"{BULK_URL}/export", headers=auth_headers, params={"type": "orders"})

    assert response.status_code == 400
    assert response.text == "Invalid type: orders"


def test_export_requires_credentials(app_client):
    response = app_client.get(f"{BULK_URL}/export")

    assert response.status_code == 401


def test_bulk_delete_variants(app_client, auth_headers, db, make_products, session_factory):
    [product_id, other_id] = make_products(2)
    variants = [
        ProductVariant(product_id=product_id, sku=f"V-{i}", price=Decimal("1"), options={})
        for i in range(3)
    ]
    foreign = ProductVariant(product_id=other_id, sku="OTHER", price=Decimal("1"), options={})
    db.add_all(variants + [foreign])
    db.commit()

    response = app_client.request(
        "DELETE",
        f"/admin/products/{product_id}/variants/bulk",
        headers=auth_headers,
        json={"variantIds": [variants[0].id, variants[1].id, foreign.id]},
    )

    assert response.status_code == 204
    with session_factory() as session:
        remaining = sorted(session.scalars(select(ProductVariant.sku)))
    assert remaining == ["OTHER", "V-2"]


def test_bulk_delete_variants_invalid_body(app_client, auth_headers, make_products):
    [product_id] = make_products(1)
    url = f"/admin/products/{product_id}/variants/bulk"

    empty = app_client.request("DELETE", url, headers=auth_headers, json={"variantIds": []})
    garbage = app_client.request("DELETE", url, headers=auth_headers, json={"variantIds": ["x"]})
    missing = app_client.request("DELETE", url, headers=auth_headers, json={})

    assert empty.status_code == 400
    assert garbage.status_code == 400
    assert garbage.text == "Invalid variant IDs"
    assert missing.status_code == 400


def test_bulk_delete_variants_rejects_non_integer_ids(app_client, auth_headers, db, make_products,
                                                     session_factory):
    [product_id] = make_products(1)
    variants = [
        ProductVariant(product_id=product_id, sku=f"V-{i}", price=Decimal("1"), options={})
        for i in range(2)
    ]
    db.add_all(variants)
    db.commit()
    url = f"/admin/products/{product_id}/variants/bulk"

    fractional = app_client.request(
        "DELETE", url, headers=auth_headers, json={"variantIds": [variants[1].id + 0.7]}
    )
    boolean = app_client.request("DELETE", url, headers=auth_headers, json={"variantIds": [True]})

    assert fractional.status_code == 400
    assert fractional.text == "Invalid variant IDs"
    assert boolean.status_code == 400
    with session_factory() as session:
        assert sorted(session.scalars(select(ProductVariant.sku))) == ["V-0", "V-1"]


def test_bulk_delete_variants_accepts_numeric_strings(app_client, auth_headers, db, make_products,
                                                      session_factory):
    [product_id] = make_products(1)
    variant = ProductVariant(product_id=product_id, sku="V-0", price=Decimal("1"), options={})
    db.add(variant)
    db.commit()

    response = app_client.request(
        "DELETE",
        f"/admin/products/{product_id}/variants/bulk",
        headers=auth_headers,
        json={"variantIds": [str(variant.id)]},
    )

    assert response.status_code == 204
    with session_factory() as session:
        assert list(session.scalars(select(ProductVariant))) == []

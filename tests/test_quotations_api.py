from datetime import date, timedelta
from decimal import Decimal

import pytest


@pytest.fixture
async def quotation(client, admin_headers, catalog, dealer_customer):
    res = await client.post(
        "/admin/quotations/",
        json={
            "customer_id": dealer_customer.id,
            "items": [
                {"product_id": catalog["bat"].id, "quantity": 2},
                {"product_id": catalog["ball"].id, "quantity": 1, "is_detailed": True},
            ],
            "reference_number": "PO-4411",
        },
        headers=admin_headers,
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def test_create_prices_lines_from_customer_tier(quotation):
    prefix, day, sequence = quotation["quotation_number"].split("-")
    assert prefix == "QT"
    assert len(day) == 8
    assert sequence == "0001"
    assert quotation["status"] == "draft"

    bat, ball = quotation["items"]
    # dealer tier +10%: 1000 -> 1100, 1200 -> 1320
    assert Decimal(bat["unit_price"]) == Decimal("1100.00")
    assert bat["price_mode"] == "dealer"
    assert Decimal(bat["line_total"]) == Decimal("2200.00")
    assert Decimal(ball["unit_price"]) == Decimal("1320.00")
    assert ball["is_detailed"] is True
    assert bat["category_name"] == "Cricket"

    assert Decimal(quotation["subtotal"]) == Decimal("3520.00")
    assert Decimal(quotation["tax"]) == Decimal("633.60")
    assert Decimal(quotation["total_amount"]) == Decimal("4153.60")
    assert quotation["customer_snapshot"]["company_name"] == "Kumar Sports"
    assert date.fromisoformat(quotation["valid_until"]) == date.fromisoformat(quotation["issue_date"]) + timedelta(days=30)


async def test_per_line_overrides(client, admin_headers, catalog, retail_customer):
    res = await client.post(
        "/admin/quotations/",
        json={
            "customer_id": retail_customer.id,
            "items": [
                {"product_id": catalog["ball"].id, "custom_price": "1800"},
                {"product_id": catalog["bat"].id, "discount": "20", "quantity": 3},
            ],
            "tax_rate": "12",
        },
        headers=admin_headers,
    )
    assert res.status_code == 201
    ball, bat = res.json()["data"]["items"]
    assert Decimal(ball["unit_price"]) == Decimal("1800.00")
    assert Decimal(ball["discount"]) == Decimal("10")
    assert Decimal(bat["unit_price"]) == Decimal("1200.00")
    assert Decimal(res.json()["data"]["tax"]) == Decimal("648.00")


async def test_duplicate_product_is_skipped(client, admin_headers, catalog, dealer_customer):
    bat_id = catalog["bat"].id
    res = await client.post(
        "/admin/quotations/",
        json={"customer_id": dealer_customer.id, "items": [{"product_id": bat_id}, {"product_id": bat_id, "quantity": 5}]},
        headers=admin_headers,
    )
    assert res.status_code == 201
    items = res.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 1


async def test_create_validates_customer_and_items(client, admin_headers, catalog, dealer_customer):
    res = await client.post("/admin/quotations/", json={"customer_id": dealer_customer.id, "items": []}, headers=admin_headers)
    assert res.status_code == 400
    res = await client.post(
        "/admin/quotations/", json={"customer_id": 999, "items": [{"product_id": catalog["bat"].id}]}, headers=admin_headers
    )
    assert res.status_code == 404
    res = await client.post(
        "/admin/quotations/", json={"customer_id": dealer_customer.id, "items": [{"product_id": 999}]}, headers=admin_headers
    )
    assert res.status_code == 404


async def test_preview_does_not_persist(client, admin_headers, catalog, dealer_customer):
    res = await client.post(
        "/admin/quotations/preview",
        json={
            "customer_id": dealer_customer.id,
            "items": [{"product_id": catalog["bat"].id}, {"product_id": catalog["bat"].id}],
        },
        headers=admin_headers,
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert len(data["items"]) == 1
    assert Decimal(data["items"][0]["line_total"]) == Decimal("1100.00")
    assert Decimal(data["totals"]["total"]) == Decimal("1298.00")
    assert data["notices"][0]["level"] == "warning"

    listed = await client.get("/admin/quotations/", headers=admin_headers)
    assert listed.json()["total"] == 0


async def test_batch_add_products(client, admin_headers, catalog, dealer_customer):
    payload = {
        "customer_id": dealer_customer.id,
        "items": [{"product_id": catalog["bat"].id, "quantity": 2}],
        "product_ids": [catalog["bat"].id, catalog["ball"].id],
    }
    preview = await client.post("/admin/quotations/preview", json=payload, headers=admin_headers)
    notice = preview.json()["data"]["notices"][-1]
    assert notice["message"] == "Added 1 products; skipped 1 already in the list"
    assert notice["level"] == "warning"

    res = await client.post("/admin/quotations/", json=payload, headers=admin_headers)
    assert res.status_code == 201
    bat, ball = res.json()["data"]["items"]
    assert bat["quantity"] == 2
    assert ball["quantity"] == 1
    assert Decimal(ball["unit_price"]) == Decimal("1320.00")

    only_batch = await client.post(
        "/admin/quotations/",
        json={"customer_id": dealer_customer.id, "product_ids": [catalog["ball"].id]},
        headers=admin_headers,
    )
    assert only_batch.status_code == 201


async def test_status_transitions(client, admin_headers, quotation):
    qid = quotation["id"]
    res = await client.patch(f"/admin/quotations/{qid}/status", json={"status": "sent"}, headers=admin_headers)
    assert res.json()["data"]["status"] == "sent"

    back = await client.patch(f"/admin/quotations/{qid}/status", json={"status": "draft"}, headers=admin_headers)
    assert back.status_code == 400

    res = await client.patch(f"/admin/quotations/{qid}/status", json={"status": "cancelled"}, headers=admin_headers)
    assert res.json()["data"]["status"] == "cancelled"

    edit = await client.put(f"/admin/quotations/{qid}", json={"notes": "too late"}, headers=admin_headers)
    assert edit.status_code == 400


async def test_update_notes_only_keeps_items(client, admin_headers, quotation):
    qid = quotation["id"]
    res = await client.put(f"/admin/quotations/{qid}", json={"notes": "Call before delivery"}, headers=admin_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["notes"] == "Call before delivery"
    assert len(data["items"]) == 2
    assert data["total_amount"] == quotation["total_amount"]


async def test_update_ignores_null_for_required_fields(client, admin_headers, quotation):
    qid = quotation["id"]
    res = await client.put(
        f"/admin/quotations/{qid}",
        json={"discount_value": None, "show_total": None, "notes": None},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    data = res.json()["data"]
    assert Decimal(data["discount_value"]) == Decimal(quotation["discount_value"])
    assert data["show_total"] is True
    assert data["notes"] is None

    stored = await client.get(f"/admin/quotations/{qid}", headers=admin_headers)
    assert Decimal(stored.json()["data"]["discount_value"]) == Decimal(quotation["discount_value"])


async def test_stored_totals_are_rounded_to_paise(client, admin_headers, catalog, dealer_customer):
    res = await client.post(
        "/admin/quotations/preview",
        json={"customer_id": dealer_customer.id, "items": [{"product_id": catalog["bat"].id, "custom_price": "10.05"}]},
        headers=admin_headers,
    )
    totals = res.json()["data"]["totals"]
    assert Decimal(totals["tax"]) == Decimal("1.809")
    assert Decimal(totals["total"]) == Decimal("11.859")

    res = await client.post(
        "/admin/quotations/",
        json={"customer_id": dealer_customer.id, "items": [{"product_id": catalog["bat"].id, "custom_price": "10.05"}]},
        headers=admin_headers,
    )
    data = res.json()["data"]
    assert Decimal(data["tax"]) == Decimal("1.81")
    assert Decimal(data["total_amount"]) == Decimal("11.86")


async def test_update_replaces_snapshot(client, admin_headers, catalog, quotation):
    qid = quotation["id"]
    res = await client.put(
        f"/admin/quotations/{qid}",
        json={"items": [{"product_id": catalog["ball"].id, "quantity": 4}], "status": "sent"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["status"] == "sent"
    assert [i["product_id"] for i in data["items"]] == [catalog["ball"].id]
    assert Decimal(data["subtotal"]) == Decimal("5280.00")

    fetched = await client.get(f"/admin/quotations/{qid}", headers=admin_headers)
    assert len(fetched.json()["data"]["items"]) == 1


async def test_list_filters(client, admin_headers, quotation, retail_customer, catalog):
    await client.post(
        "/admin/quotations/",
        json={"customer_id": retail_customer.id, "items": [{"product_id": catalog["bat"].id}], "status": "sent"},
        headers=admin_headers,
    )
    res = await client.get("/admin/quotations/", params={"status": "sent"}, headers=admin_headers)
    assert res.json()["total"] == 1
    res = await client.get("/admin/quotations/", params={"customer_id": quotation["customer_id"]}, headers=admin_headers)
    assert [q["id"] for q in res.json()["data"]] == [quotation["id"]]


async def test_pdf_export(client, admin_headers, quotation):
    res = await client.get(f"/admin/quotations/{quotation['id']}/pdf", headers=admin_headers)
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert quotation["quotation_number"] in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF")


async def test_delete_keeps_activity_history(client, admin_headers, quotation):
    qid = quotation["id"]
    assert (await client.delete(f"/admin/quotations/{qid}", headers=admin_headers)).status_code == 200
    assert (await client.get(f"/admin/quotations/{qid}", headers=admin_headers)).status_code == 404

    history = await client.get(
        "/activities/", params={"customer_id": quotation["customer_id"]}, headers=admin_headers
    )
    events = [a["event_type"] for a in history.json()["data"]]
    assert "quotation_created" in events
    assert "quotation_deleted" in events

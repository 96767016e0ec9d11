from decimal import Decimal


async def test_update_category_reslugs_and_rejects_duplicates(client, admin_headers, catalog):
    hockey = await client.post("/admin/categories", json={"name": "Hockey"}, headers=admin_headers)
    cid = hockey.json()["id"]

    res = await client.put(f"/admin/categories/{cid}", json={"name": "Field Hockey"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["slug"] == "field-hockey"

    res = await client.put(f"/admin/categories/{cid}", json={"is_active": False}, headers=admin_headers)
    assert res.status_code == 200
    public = await client.get("/store/categories")
    assert "field-hockey" not in [c["slug"] for c in public.json()]

    dup = await client.put(f"/admin/categories/{cid}", json={"name": "Cricket"}, headers=admin_headers)
    assert dup.status_code == 400
    missing = await client.put("/admin/categories/999", json={"name": "Ghost"}, headers=admin_headers)
    assert missing.status_code == 404


async def test_delete_category(client, admin_headers, catalog):
    cricket = catalog["bat"].category_id
    in_use = await client.delete(f"/admin/categories/{cricket}", headers=admin_headers)
    assert in_use.status_code == 400
    assert "3 product(s)" in in_use.json()["detail"]

    tennis = await client.post("/admin/categories", json={"name": "Tennis"}, headers=admin_headers)
    tid = tennis.json()["id"]
    await client.post("/admin/sub-categories", json={"category_id": tid, "name": "Rackets"}, headers=admin_headers)

    res = await client.delete(f"/admin/categories/{tid}", headers=admin_headers)
    assert res.status_code == 200
    subs = await client.get("/admin/sub-categories", params={"category_id": tid}, headers=admin_headers)
    assert subs.json() == []

    activities = await client.get("/activities/", params={"event_type": "category_deleted"}, headers=admin_headers)
    assert activities.json()["total"] == 1


async def test_sub_category_update_and_delete(client, admin_headers, catalog):
    bats = catalog["bat"].sub_category_id
    assert (await client.delete(f"/admin/sub-categories/{bats}", headers=admin_headers)).status_code == 400

    gloves = await client.post(
        "/admin/sub-categories", json={"category_id": catalog["bat"].category_id, "name": "Gloves"}, headers=admin_headers
    )
    gid = gloves.json()["id"]
    res = await client.put(f"/admin/sub-categories/{gid}", json={"name": "Batting Gloves"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["slug"] == "batting-gloves"

    football = await client.post("/admin/categories", json={"name": "Football"}, headers=admin_headers)
    moved = await client.put(
        f"/admin/sub-categories/{gid}", json={"category_id": football.json()["id"]}, headers=admin_headers
    )
    assert moved.json()["category_id"] == football.json()["id"]
    stuck = await client.put(
        f"/admin/sub-categories/{bats}", json={"category_id": football.json()["id"]}, headers=admin_headers
    )
    assert stuck.status_code == 400

    assert (await client.delete(f"/admin/sub-categories/{gid}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/admin/sub-categories/{gid}", headers=admin_headers)).status_code == 404


async def test_brand_update_and_delete(client, admin_headers, catalog):
    sg = catalog["bat"].brand_id
    res = await client.put(f"/admin/brands/{sg}", json={"logo_url": "/static/sg.png"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["logo_url"] == "/static/sg.png"
    assert res.json()["slug"] == "sg"

    assert (await client.delete(f"/admin/brands/{sg}", headers=admin_headers)).status_code == 400

    kookaburra = await client.post("/admin/brands", json={"name": "Kookaburra"}, headers=admin_headers)
    res = await client.delete(f"/admin/brands/{kookaburra.json()['id']}", headers=admin_headers)
    assert res.status_code == 200
    assert [b["name"] for b in (await client.get("/admin/brands", headers=admin_headers)).json()] == ["SG"]


async def test_tag_update_and_delete(client, admin_headers, catalog):
    junior = await client.post("/admin/tags", json={"name": "Junior"}, headers=admin_headers)
    spare = await client.post("/admin/tags", json={"name": "Clearance"}, headers=admin_headers)
    jid = junior.json()["id"]
    await client.put(f"/admin/products/{catalog['bat'].id}", json={"tag_ids": [jid]}, headers=admin_headers)

    res = await client.put(f"/admin/tags/{jid}", json={"name": "Junior Size"}, headers=admin_headers)
    assert res.json()["slug"] == "junior-size"

    in_use = await client.delete(f"/admin/tags/{jid}", headers=admin_headers)
    assert in_use.status_code == 400
    assert "1 product(s)" in in_use.json()["detail"]
    assert (await client.delete(f"/admin/tags/{spare.json()['id']}", headers=admin_headers)).status_code == 200


async def test_taxonomy_writes_are_admin_only(client, catalog):
    res = await client.put(f"/admin/brands/{catalog['bat'].brand_id}", json={"name": "X"})
    assert res.status_code == 401
    res = await client.post("/admin/products/bulk", json=[])
    assert res.status_code == 401


async def test_bulk_upload_creates_updates_and_reports_rows(client, admin_headers, catalog):
    rows = [
        {"sku": "SG-BAT-01", "name": "SG English Willow Bat", "mrp_price": "1550"},
        {
            "sku": "SG-GLV-01", "name": "SG Batting Gloves", "mrp_price": "900", "dealer_price": "600",
            "category": " cricket ", "sub_category": "BATS", "brand": "sg",
        },
        {"sku": "SG-HLM-01", "name": "SG Helmet"},
        {"sku": "SG-HLM-02", "name": "SG Helmet Pro", "mrp_price": "2500", "brand": "Gray-Nicolls"},
        {"sku": "SG-THG-01", "name": "SG Thigh Guard", "mrp_price": "700", "sub_category": "Bats"},
    ]
    res = await client.post("/admin/products/bulk", json=rows, headers=admin_headers)
    assert res.status_code == 200, res.text
    result = res.json()["data"]
    assert result["created"] == 1
    assert result["updated"] == 1
    assert [e.split(":")[0] for e in result["errors"]] == ["Row 3", "Row 4", "Row 5"]
    assert "Gray-Nicolls" in result["errors"][1]

    bat = await client.get(f"/admin/products/{catalog['bat'].id}", headers=admin_headers)
    assert Decimal(bat.json()["data"]["mrp_price"]) == Decimal("1550.00")
    assert Decimal(bat.json()["data"]["dealer_price"]) == Decimal("1000.00")

    listed = await client.get("/admin/products/", params={"search": "Gloves"}, headers=admin_headers)
    gloves = listed.json()["data"][0]
    assert gloves["slug"] == "sg-batting-gloves-sg-glv-01"
    assert gloves["category_name"] == "Cricket"
    assert gloves["sub_category_name"] == "Bats"
    assert gloves["brand_name"] == "SG"
    assert Decimal(gloves["gst_rate"]) == Decimal("18")

    activities = await client.get("/activities/", params={"event_type": "products_bulk_uploaded"}, headers=admin_headers)
    assert activities.json()["total"] == 1


async def test_bulk_upload_repeated_sku_updates_the_new_row(client, admin_headers, catalog):
    rows = [
        {"sku": "SG-STM-01", "name": "SG Stumps", "mrp_price": "1200"},
        {"sku": "SG-STM-01", "name": "SG Stumps Set", "mrp_price": "1300", "stock": 4},
    ]
    result = (await client.post("/admin/products/bulk", json=rows, headers=admin_headers)).json()["data"]
    assert (result["created"], result["updated"], result["errors"]) == (1, 1, [])

    listed = await client.get("/admin/products/", params={"search": "SG-STM-01"}, headers=admin_headers)
    stumps = listed.json()["data"][0]
    assert stumps["name"] == "SG Stumps Set"
    assert stumps["stock"] == 4

from decimal import Decimal


async def test_create_product_with_slug_and_taxonomy(client, admin_headers):
    cat = await client.post("/admin/categories", json={"name": "Football Gear"}, headers=admin_headers)
    assert cat.status_code == 201
    assert cat.json()["slug"] == "football-gear"
    brand = await client.post("/admin/brands", json={"name": "Nivia"}, headers=admin_headers)
    sub = await client.post(
        "/admin/sub-categories", json={"category_id": cat.json()["id"], "name": "Balls"}, headers=admin_headers
    )
    assert sub.status_code == 201
    tag = await client.post("/admin/tags", json={"name": "Match Grade"}, headers=admin_headers)

    res = await client.post(
        "/admin/products/",
        json={
            "sku": "NIV-FB-5",
            "name": "Nivia Storm Football",
            "mrp_price": "999.00",
            "dealer_price": "650.00",
            "category_id": cat.json()["id"],
            "sub_category_id": sub.json()["id"],
            "brand_id": brand.json()["id"],
            "tag_ids": [tag.json()["id"]],
        },
        headers=admin_headers,
    )
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["slug"] == "nivia-storm-football-niv-fb-5"
    assert data["category_name"] == "Football Gear"
    assert data["sub_category_name"] == "Balls"
    assert data["brand_name"] == "Nivia"
    assert Decimal(data["dealer_price"]) == Decimal("650.00")
    assert [t["name"] for t in data["tags"]] == ["Match Grade"]

    subs = await client.get("/admin/sub-categories", params={"category_id": cat.json()["id"]}, headers=admin_headers)
    assert [s["name"] for s in subs.json()] == ["Balls"]


async def test_duplicate_sku_rejected(client, admin_headers, catalog):
    res = await client.post(
        "/admin/products/", json={"sku": "SG-BAT-01", "name": "Another Bat"}, headers=admin_headers
    )
    assert res.status_code == 400


async def test_sub_category_must_match_category(client, admin_headers, catalog):
    other = await client.post("/admin/categories", json={"name": "Tennis"}, headers=admin_headers)
    bats_id = catalog["bat"].sub_category_id
    res = await client.post(
        "/admin/products/",
        json={"sku": "T-1", "name": "Racquet", "category_id": other.json()["id"], "sub_category_id": bats_id},
        headers=admin_headers,
    )
    assert res.status_code == 400


async def test_list_filters_and_search(client, admin_headers, catalog):
    res = await client.get("/admin/products/", params={"search": "ball"}, headers=admin_headers)
    assert res.status_code == 200
    assert [p["sku"] for p in res.json()["data"]] == ["SG-BALL-01"]

    res = await client.get("/admin/products/", params={"include_hidden": False}, headers=admin_headers)
    assert res.json()["total"] == 2

    res = await client.get("/admin/products/", params={"min_price": "1600", "sort_by": "mrp_price", "order": "asc"}, headers=admin_headers)
    assert [p["sku"] for p in res.json()["data"]] == ["SG-PAD-01", "SG-BALL-01"]


async def test_update_and_soft_delete(client, admin_headers, catalog):
    bat_id = catalog["bat"].id
    res = await client.put(f"/admin/products/{bat_id}", json={"mrp_price": "1600.00", "stock": 3}, headers=admin_headers)
    assert res.status_code == 200
    assert Decimal(res.json()["data"]["mrp_price"]) == Decimal("1600.00")
    assert res.json()["data"]["stock"] == 3

    assert (await client.delete(f"/admin/products/{bat_id}", headers=admin_headers)).status_code == 200
    listed = await client.get("/admin/products/", headers=admin_headers)
    assert bat_id not in [p["id"] for p in listed.json()["data"]]
    fetched = await client.get(f"/admin/products/{bat_id}", headers=admin_headers)
    assert fetched.json()["data"]["is_active"] is False

    activities = await client.get("/activities/", params={"event_type": "product_deleted"}, headers=admin_headers)
    assert activities.json()["total"] == 1


async def test_update_ignores_null_for_required_fields(client, admin_headers, catalog):
    ball_id = catalog["ball"].id
    res = await client.put(
        f"/admin/products/{ball_id}",
        json={"name": None, "stock": None, "gst_rate": None, "dealer_price": None},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    data = res.json()["data"]
    assert data["name"] == "SG Test Ball"
    assert data["stock"] == 50
    assert Decimal(data["gst_rate"]) == Decimal("18")
    assert data["dealer_price"] is None


async def test_catalog_admin_routes_are_role_gated(client, catalog):
    await client.post("/store/b2b/register", json={
        "name": "Shop Owner", "email": "owner@cornershop.in", "password": "secret-pass", "company_name": "Corner Shop",
    })
    token = (await client.post("/auth/login", json={"email": "owner@cornershop.in", "password": "secret-pass"})).json()
    headers = {"Authorization": f"Bearer {token['access_token']}"}

    assert (await client.get("/admin/products/", headers=headers)).status_code == 403
    assert (await client.get("/admin/products/")).status_code == 401

from decimal import Decimal


async def test_public_listing_hides_dealer_price_and_hidden_products(client, catalog):
    res = await client.get("/store/products")
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    for product in body["data"]:
        assert "dealer_price" not in product
        assert product["your_price"] is None
    assert "SG-PAD-01" not in [p["sku"] for p in body["data"]]


async def test_filter_by_category_slug(client, catalog):
    res = await client.get("/store/products", params={"category": "cricket", "search": "bat"})
    assert [p["slug"] for p in res.json()["data"]] == ["sg-english-willow-bat"]
    assert (await client.get("/store/products", params={"category": "hockey"})).status_code == 404


async def test_product_by_slug(client, catalog):
    res = await client.get("/store/products/sg-test-ball")
    assert res.status_code == 200
    assert res.json()["data"]["brand_name"] == "SG"
    assert (await client.get("/store/products/sg-batting-pads")).status_code == 404


async def test_approved_b2b_shopper_sees_tier_price(client, admin_headers, catalog, customer_types):
    reg = await client.post("/store/b2b/register", json={
        "name": "Club Buyer", "email": "club@cityclub.in", "password": "club-pass-1",
    })
    await client.patch(
        f"/admin/customers/{reg.json()['data']['id']}/status",
        json={"status": "approved", "customer_type_id": customer_types["dealer"].id},
        headers=admin_headers,
    )
    token = (await client.post("/auth/login", json={"email": "club@cityclub.in", "password": "club-pass-1"})).json()
    headers = {"Authorization": f"Bearer {token['access_token']}"}

    res = await client.get("/store/products/sg-english-willow-bat", headers=headers)
    assert Decimal(res.json()["data"]["your_price"]) == Decimal("1100.00")

    pricing = await client.get("/store/b2b/pricing", headers=headers)
    assert pricing.json()["data"]["description"] == "Dealer price + 10.00%"


async def test_categories_are_public(client, catalog):
    res = await client.get("/store/categories")
    assert res.status_code == 200
    assert res.json()[0]["slug"] == "cricket"
    assert [s["name"] for s in res.json()[0]["sub_categories"]] == ["Bats"]


async def test_enquiry_flow(client, admin_headers, catalog):
    res = await client.post("/store/enquiries/", json={
        "product_id": catalog["ball"].id, "name": "Coach Singh", "email": "coach@academy.in", "quantity": 24,
        "message": "Bulk price for 2 dozen?",
    })
    assert res.status_code == 201
    enquiry_id = res.json()["data"]["id"]
    assert res.json()["data"]["status"] == "new"

    listed = await client.get("/admin/enquiries", headers=admin_headers)
    assert listed.json()["total"] == 1
    stats = await client.get("/admin/dashboard", headers=admin_headers)
    assert stats.json()["data"]["open_enquiries"] == 1

    res = await client.patch(f"/admin/enquiries/{enquiry_id}/status", json={"status": "contacted"}, headers=admin_headers)
    assert res.json()["data"]["status"] == "contacted"
    bad = await client.patch(f"/admin/enquiries/{enquiry_id}/status", json={"status": "lost"}, headers=admin_headers)
    assert bad.status_code == 400


async def test_enquiry_for_unknown_product(client):
    res = await client.post("/store/enquiries/", json={"product_id": 404, "name": "X", "email": "x@xsports.in"})
    assert res.status_code == 404

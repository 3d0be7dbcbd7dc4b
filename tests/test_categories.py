def create_category(client, headers, name):
    res = client.post("/api/categories", json={"name": name}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def create_video(client, headers, title, category_id=None, url=None):
    body = {"title": title, "url": url or f"https://cdn.example.test/{title}.mp4"}
    if category_id:
        body["categoryId"] = category_id
    res = client.post("/api/videos", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_and_list(client, admin_headers):
    created = create_category(client, admin_headers, "Dance")
    assert created["name"] == "Dance"
    assert created["id"]
    res = client.get("/api/categories")
    assert res.status_code == 200
    assert [(c["name"], c["count"]) for c in res.json()] == [("Dance", 0)]


def test_list_is_public_and_sorted_by_name(client, admin_headers):
    for name in ["Zebra", "Alpha", "Mid"]:
        create_category(client, admin_headers, name)
    names = [c["name"] for c in client.get("/api/categories").json()]
    assert names == ["Alpha", "Mid", "Zebra"]


def test_counts_are_computed_on_read(client, admin_headers):
    x = create_category(client, admin_headers, "X")
    y = create_category(client, admin_headers, "Y")
    for i in range(3):
        create_video(client, admin_headers, f"x{i}", x["id"])
    create_video(client, admin_headers, "y0", y["id"])
    counts = {c["name"]: c["count"] for c in client.get("/api/categories").json()}
    assert counts == {"X": 3, "Y": 1}


def test_blank_name_rejected(client, admin_headers):
    res = client.post("/api/categories", json={"name": "   "}, headers=admin_headers)
    assert res.status_code == 400


def test_duplicate_name_rejected(client, admin_headers):
    create_category(client, admin_headers, "Dance")
    res = client.post("/api/categories", json={"name": "Dance"}, headers=admin_headers)
    assert res.status_code == 409


def test_delete_category_keeps_videos(client, admin_headers):
    cat = create_category(client, admin_headers, "Gone")
    video = create_video(client, admin_headers, "v", cat["id"])
    res = client.delete(f"/api/categories/{cat['id']}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert [c["name"] for c in client.get("/api/categories").json()] == []
    fetched = client.get(f"/api/videos/{video['id']}").json()
    assert fetched["category_id"] is None
    assert fetched["category_name"] is None


def test_delete_unknown_category(client, admin_headers):
    assert client.delete("/api/categories/missing", headers=admin_headers).status_code == 404

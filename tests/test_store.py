from conftest import expense, truck_log


def test_health(http):
    for path in ("/health", "/api/health"):
        resp = http.get(path)
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "OK"}


def test_create_assigns_id_and_timestamps(http):
    resp = http.post("/api/truck-logs", json=truck_log(id="client-chosen"))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["id"] and body["id"] != "client-chosen"
    assert body["createdAt"] == body["updatedAt"]
    assert body["licensePlate"] == "ABC1D23"
    assert body["finalKm"] == 1500.0


def test_list_is_newest_first(http):
    first = http.post("/api/expenses", json=expense(description="first")).get_json()
    second = http.post("/api/expenses", json=expense(description="second")).get_json()
    ids = [e["id"] for e in http.get("/api/expenses").get_json()]
    assert ids == [second["id"], first["id"]]


def test_create_rejects_missing_field(http):
    payload = truck_log()
    del payload["route"]
    resp = http.post("/api/truck-logs", json=payload)
    assert resp.status_code == 400
    assert "route" in resp.get_json()["error"]
    assert http.get("/api/truck-logs").get_json() == []


def test_create_rejects_bad_month_and_types(http):
    assert http.post("/api/expenses", json=expense(month="06/2024")).status_code == 400
    assert http.post("/api/expenses", json=expense(cost="12")).status_code == 400
    assert http.post("/api/expenses", json=expense(cost=True)).status_code == 400
    assert http.post("/api/expenses", data="not json", content_type="application/json").status_code == 400


def test_negative_values_are_accepted(http):
    resp = http.post("/api/truck-logs", json=truck_log(initialKm=900.0, finalKm=100.0))
    assert resp.status_code == 201


def test_partial_update(http):
    created = http.post("/api/truck-logs", json=truck_log()).get_json()
    resp = http.put(f"/api/truck-logs/{created['id']}", json={"finalKm": 1800})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["finalKm"] == 1800.0
    assert body["initialKm"] == 1000.0
    assert body["route"] == created["route"]
    assert body["createdAt"] == created["createdAt"]


def test_update_validation_and_not_found(http):
    created = http.post("/api/expenses", json=expense()).get_json()
    assert http.put(f"/api/expenses/{created['id']}", json={"cost": "free"}).status_code == 400
    resp = http.put("/api/expenses/does-not-exist", json={"cost": 1.0})
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_delete(http):
    created = http.post("/api/expenses", json=expense()).get_json()
    assert http.delete(f"/api/expenses/{created['id']}").status_code == 204
    assert http.get("/api/expenses").get_json() == []
    assert http.delete(f"/api/expenses/{created['id']}").status_code == 404


def test_collections_are_separate(http):
    http.post("/api/truck-logs", json=truck_log())
    assert http.get("/api/expenses").get_json() == []
    assert len(http.get("/api/truck-logs").get_json()) == 1


def test_cors_header_for_configured_origin(flask_app, http):
    flask_app.config["CORS_ORIGIN"] = "https://frota.example"
    resp = http.get("/api/health")
    assert resp.headers["Access-Control-Allow-Origin"] == "https://frota.example"


def test_unknown_route_is_json_404(http):
    resp = http.get("/api/trucks")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not found"}

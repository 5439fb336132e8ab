"""API tests for client CRUD."""


def test_create_and_get_client(client):
    created = client.post("/api/clients", json={
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "city": "London",
    })
    assert created.status_code == 200, created.text
    assert created.json()["message"] == "Client created"

    response = client.get(f"/api/clients/{created.json()['id']}")
    assert response.status_code == 200
    data = response.json()
    assert data["first_name"] == "Ada"
    assert data["city"] == "London"
    assert data["phone"] is None


def test_list_clients(client, jane):
    client.post("/api/clients", json={"first_name": "Sam"})

    response = client.get("/api/clients")
    assert response.status_code == 200
    assert [c["first_name"] for c in response.json()] == ["Jane", "Sam"]


def test_update_client(client, jane):
    response = client.put(f"/api/clients/{jane}", json={"first_name": "Janet", "last_name": "Doe"})
    assert response.status_code == 200
    assert response.json() == {"message": "Client updated", "affectedRows": 1}

    data = client.get(f"/api/clients/{jane}").json()
    assert data["first_name"] == "Janet"
    # PUT replaces every field
    assert data["email"] is None


def test_client_name_follows_client_updates(client, jane):
    created = client.post("/api/invoices", json={"client_id": jane}).json()
    client.put(f"/api/clients/{jane}", json={"first_name": "Janet", "last_name": "Smith"})

    assert client.get(f"/api/invoices/{created['id']}").json()["client_name"] == "Janet Smith"


def test_unknown_client_is_404(client):
    assert client.get("/api/clients/77").status_code == 404
    assert client.put("/api/clients/77", json={"first_name": "X"}).status_code == 404
    response = client.delete("/api/clients/77")
    assert response.status_code == 404
    assert response.json() == {"detail": "Client not found"}


def test_delete_client(client, jane):
    response = client.delete(f"/api/clients/{jane}")
    assert response.status_code == 200
    assert response.json() == {"message": "Client deleted", "affectedRows": 1}
    assert client.get(f"/api/clients/{jane}").status_code == 404

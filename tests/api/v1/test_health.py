def test_root_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_health_reports_dependencies(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "ledger_status": "healthy",
        "ipfs_status": "healthy",
    }


def test_health_with_node_down(client, ipfs_network):
    ipfs_network.node_up = False

    assert client.get("/api/v1/health").json()["ipfs_status"] == "degraded"


def test_unknown_route(client):
    response = client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.json()["success"] is False

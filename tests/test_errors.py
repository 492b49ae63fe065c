class TestErrorEnvelope:
    def test_validation_error_shape(self, client, auth_headers):
        resp = client.post("/documents", json={"title": ""}, headers=auth_headers)
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "validation_error"
        assert body["message"] == "Validation error"
        assert isinstance(body["details"], list)
        assert all("url" not in err for err in body["details"])

    def test_http_error_shape(self, client):
        resp = client.get("/auth/me")
        assert resp.json() == {
            "code": "http_401",
            "message": "No token provided",
            "details": None,
        }

    def test_unknown_route(self, client):
        assert client.get("/nowhere").status_code == 404


class TestHealthAndMetrics:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_metrics(self, client):
        client.get("/health")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "text/plain" in resp.headers["content-type"]

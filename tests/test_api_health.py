from tests.mocks import make_pdf


class TestServiceEndpoints:
    def test_health(self, client) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_request_id_is_echoed(self, client) -> None:
        resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client) -> None:
        resp = client.get("/health")
        assert resp.headers["X-Request-ID"]

    def test_metrics_exposes_upload_counter(self, client, auth_headers) -> None:
        client.post(
            "/upload",
            files={"file": ("m.pdf", make_pdf("metrics"), "application/pdf")},
            headers=auth_headers,
        )
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert 'neopdf_uploads_total{outcome="new"}' in resp.text
        assert "neopdf_http_request_duration_seconds" in resp.text

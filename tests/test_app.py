def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_security_headers_on_every_response(client):
    for resp in (client.get("/health"), client.get("/api/profile/me")):
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "Content-Security-Policy" in resp.headers


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_wrong_method_is_json_405(client):
    resp = client.get("/api/auth/login")
    assert resp.status_code == 405
    assert "error" in resp.get_json()


def test_unexpected_error_is_generic_500(app, caplog):
    @app.route("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    resp = app.test_client().get("/boom")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}
    assert "hunter2" not in resp.get_data(as_text=True)
    assert "Unhandled error" in caplog.text


def test_non_json_body_is_rejected(client):
    resp = client.post("/api/auth/login", data="email=a@b.co", content_type="application/x-www-form-urlencoded")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Request body must be a JSON object"

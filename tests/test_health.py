def test_health_ok(client, upload_dir):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "checks": {"app": "ok", "storage": "ok"}}
    assert not (upload_dir / ".health_check").exists()


def test_health_reports_broken_storage(client, upload_dir):
    upload_dir.rmdir()
    upload_dir.write_text("not a dir", encoding="utf-8")
    r = client.get("/health")
    assert r.status_code == 503
    data = r.json()
    assert data["status"] == "unhealthy"
    assert data["checks"]["storage"].startswith("error:")

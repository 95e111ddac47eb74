import pytest


@pytest.fixture()
def build_dir(tmp_path):
    build = tmp_path / "build"
    (build / "static").mkdir(parents=True)
    (build / "index.html").write_text("<html><div id=\"root\"></div></html>", encoding="utf-8")
    (build / "static" / "js").mkdir()
    (build / "static" / "js" / "main.js").write_text("render();", encoding="utf-8")
    (build / "static" / "app.js").write_text("console.log('todo');", encoding="utf-8")
    return build


@pytest.fixture()
def client(make_app, build_dir):
    app = make_app(SERVE_FRONTEND=True, FRONTEND_DIR=str(build_dir))
    with app.test_client() as c:
        yield c


def test_index_served(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'id="root"' in resp.get_data(as_text=True)


def test_static_asset_served(client):
    resp = client.get("/static/app.js")
    assert resp.status_code == 200
    assert "console.log" in resp.get_data(as_text=True)


def test_nested_bundle_asset_served(client):
    resp = client.get("/static/js/main.js")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "render();"


def test_client_routes_fall_back_to_index(client):
    resp = client.get("/todos/some/deep/link")
    assert resp.status_code == 200
    assert 'id="root"' in resp.get_data(as_text=True)


def test_api_still_wins(client):
    resp = client.post("/api/todos", json={"text": "t", "email": "e"})
    assert resp.status_code == 201
    assert client.get("/api/todos").get_json()[0]["text"] == "t"
    assert client.get("/health").get_json()["status"] == "ok"


def test_unknown_api_path_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not Found"}


def test_frontend_off_by_default(make_app):
    app = make_app()
    with app.test_client() as c:
        assert c.get("/").status_code == 404


def test_missing_bundle_is_404(make_app, tmp_path):
    app = make_app(SERVE_FRONTEND=True, FRONTEND_DIR=str(tmp_path / "nowhere"))
    with app.test_client() as c:
        assert c.get("/").status_code == 404

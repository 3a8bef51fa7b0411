import json

import pytest


@pytest.fixture
def client():
    from web.app import app

    app.config["TESTING"] = True
    return app.test_client()


def test_render_returns_svg(client):
    response = client.post("/render", json={
        "shape": "cylinder",
        "measurements": {"radius": 3, "height": 6},
        "unit": "cm",
        "config": {"showMeasurements": True},
    })

    assert response.status_code == 200
    assert response.mimetype == "image/svg+xml"
    body = response.get_data(as_text=True)
    assert "r = 3 cm" in body
    assert "X-Diagram-Warnings" not in response.headers


def test_render_png(client):
    response = client.post("/render?format=png", json={"shape": "square"})

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert response.data.startswith(b"\x89PNG")


def test_unknown_shape_reports_warning(client):
    response = client.post("/render", json={"shape": "dodecagon"})

    assert response.status_code == 200
    assert "dodecagon" in response.headers["X-Diagram-Warnings"]


def test_non_object_body_is_rejected(client):
    assert client.post("/render", json=[1, 2, 3]).status_code == 400
    assert client.post("/render", data="not json", content_type="text/plain").status_code == 400


def test_invalid_request_is_rejected(client):
    response = client.post("/render", json={"shape": "square", "config": {"showMeasurements": "sometimes"}})

    assert response.status_code == 400


def test_unsupported_format(client):
    assert client.post("/render?format=gif", json={"shape": "square"}).status_code == 400


def test_themes_and_sizes(client):
    themes = client.get("/themes").get_json()
    sizes = client.get("/sizes").get_json()

    assert set(themes) == {"educational", "blueprint", "minimal", "colorful"}
    assert sizes["square"]["medium"] == {"width": 350, "height": 350}


def test_shapes_listing(client):
    shapes = client.get("/shapes").get_json()

    assert shapes["sphere"] == "three-d"
    assert shapes["coordinate-plane"] == "coordinate"


def test_header_breaking_characters_are_escaped(client):
    response = client.post("/render", json={"shape": "bad\nX-Evil: 1", "svgId": "q1\r\nX-Evil: 2"})

    assert response.status_code == 200
    assert "X-Evil" not in response.headers
    assert json.loads(response.headers["X-Diagram-Warnings"]) == ["unknown shape 'bad\nX-Evil: 1'"]
    assert "\n" not in response.headers["X-Diagram-Id"]
    assert "\r" not in response.headers["X-Diagram-Id"]
    assert response.headers["X-Diagram-Id"] == "q1\\r\\nX-Evil: 2"


def test_warnings_header_is_a_json_list(client):
    response = client.post("/render", json={"shape": "tangent", "measurements": {"radius": 3, "distance": 2}})

    warnings = json.loads(response.headers["X-Diagram-Warnings"])
    assert len(warnings) == 1
    assert "inside the circle" in warnings[0]

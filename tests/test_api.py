"""
API integration tests for the v1 color endpoints.

Tests conversion, generation, simulation, export, extraction and the
session palette through the FastAPI test client.
"""

import io
from unittest.mock import patch

from PIL import Image

from prizm.config import Config
from prizm.services.colors.fetch import NetworkExtractionError
from prizm.services.store import session_stores


def _png_bytes(color=(52, 152, 219), size=(16, 16)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestConvertAPI:
    """Test the /v1/convert endpoint"""

    def test_convert_hex(self, test_client):
        response = test_client.post("/v1/convert", json={"color": "#3498db"})

        assert response.status_code == 200
        data = response.json()
        assert data["input"] == "#3498db"
        assert data["hex"] == "#3498db"
        assert data["rgb"] == "rgb(52, 152, 219)"
        assert data["rgba"] == "rgba(52, 152, 219, 1)"
        assert data["hsl"] == "hsl(204, 70%, 53%)"
        assert data["oklch"].startswith("oklch(")
        assert data["alpha"] == 1.0

    def test_convert_modern(self, test_client):
        response = test_client.post("/v1/convert", json={"color": "rgb(255 0 0 / 50%)", "modern": True})

        assert response.status_code == 200
        data = response.json()
        assert data["hex"] == "#ff000080"
        assert data["rgb"] == "rgb(255 0 0 / 0.5)"
        assert data["alpha"] == 0.5

    def test_unrecognized_color(self, test_client):
        response = test_client.post("/v1/convert", json={"color": "#XYZ"})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["reason"] == "unrecognized-syntax"
        assert detail["value"] == "#XYZ"

    def test_out_of_range_color(self, test_client):
        response = test_client.post("/v1/convert", json={"color": "rgb(300,0,0)"})

        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "out-of-range"

    def test_missing_body_field(self, test_client):
        response = test_client.post("/v1/convert", json={})
        assert response.status_code == 422


class TestGenerateAPI:
    """Test the /v1/generate endpoint"""

    def test_default_palette(self, test_client):
        response = test_client.post("/v1/generate", json={"color": "#3498db"})

        assert response.status_code == 200
        data = response.json()
        assert data["base"] == "#3498db"
        assert data["mode"] == "palette"
        assert data["variant"] == "analogous"
        assert len(data["colors"]) == 5
        assert data["colors"][0] == "#3498db"

    def test_triadic_scheme(self, test_client):
        response = test_client.post("/v1/generate", json={
            "color": "#3498db", "mode": "scheme", "scheme_type": "triadic"
        })

        assert response.status_code == 200
        assert len(response.json()["colors"]) == 3

    def test_swatch_in_oklch_space(self, test_client):
        response = test_client.post("/v1/generate", json={
            "color": "#3498db", "mode": "swatch", "space": "oklch", "format": "rgb"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["variant"] is None
        assert len(data["colors"]) == 9
        assert all(c.startswith("rgb(") for c in data["colors"])

    def test_invalid_mode(self, test_client):
        response = test_client.post("/v1/generate", json={"color": "#3498db", "mode": "gradient"})
        assert response.status_code == 422

    def test_invalid_color(self, test_client):
        response = test_client.post("/v1/generate", json={"color": "rgb(1,2)"})
        assert response.status_code == 422
        assert response.json()["detail"]["reason"] == "unrecognized-syntax"


class TestSimulateAPI:
    def test_simulate(self, test_client):
        response = test_client.post("/v1/simulate", json={
            "colors": ["#ff0000", "bogus"], "kind": "protanopia"
        })

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "protanopia"
        assert len(data["colors"]) == 2
        assert data["colors"][1] == "bogus"

    def test_normal_passthrough(self, test_client):
        response = test_client.post("/v1/simulate", json={"colors": ["red"], "kind": "normal"})
        assert response.json()["colors"] == ["red"]


class TestExportAPI:
    def test_css_export(self, test_client):
        response = test_client.post("/v1/export/css", json={
            "colors": ["#3498db", "red"], "names": ["Primary", "Danger"]
        })

        assert response.status_code == 200
        assert response.json()["content"] == (
            ":root {\n  --primary: #3498db;\n  --danger: #ff0000;\n}"
        )

    def test_tailwind_export(self, test_client):
        response = test_client.post("/v1/export/tailwind", json={"colors": ["#3498db"]})

        assert response.status_code == 200
        assert "'color-1': '#3498db'," in response.json()["content"]

    def test_export_rejects_bad_color(self, test_client):
        response = test_client.post("/v1/export/css", json={"colors": ["#3498db", "nope"]})
        assert response.status_code == 422
        assert response.json()["detail"]["value"] == "nope"


class TestExtractAPI:
    """Test the /v1/extract endpoints"""

    def test_extract_text(self, test_client):
        html = (
            "<title>Demo</title>"
            "<style>a { color: #FF0000; } b { color: rgb(255,0,0); }</style>"
            '<div style="background: #3498db"></div>'
        )
        response = test_client.post("/v1/extract/text", json={"text": html})

        assert response.status_code == 200
        data = response.json()
        assert data["page_title"] == "Demo"
        assert data["colors"][0] == {"hex": "#ff0000", "count": 2, "usage": "style"}
        assert data["colors"][1] == {"hex": "#3498db", "count": 1, "usage": "inline"}

    def test_extract_url(self, test_client):
        html = "<title>Remote</title><style>p { color: teal; }</style>"
        with patch("prizm.services.colors.extraction.fetch_html", return_value=html) as fetch:
            response = test_client.post("/v1/extract/url", json={"url": "example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["url"] == "example.com"
        assert data["page_title"] == "Remote"
        assert data["colors"][0]["hex"] == "#008080"
        fetch.assert_called_once()

    def test_extract_url_network_failure(self, test_client):
        error = NetworkExtractionError("https://example.com", 3)
        with patch("prizm.services.colors.extraction.fetch_html", side_effect=error):
            response = test_client.post("/v1/extract/url", json={"url": "example.com"})

        assert response.status_code == 502
        assert "example.com" not in response.json()["detail"]

    def test_extract_url_invalid(self, test_client):
        response = test_client.post("/v1/extract/url", json={"url": "not a url"})
        assert response.status_code == 400

    def test_extract_image(self, test_client):
        response = test_client.post(
            "/v1/extract/image",
            files={"file": ("swatch.png", _png_bytes(), "image/png")},
        )

        assert response.status_code == 200
        colors = response.json()["colors"]
        assert colors[0]["hex"] == "#3498db"
        assert colors[0]["usage"] == "image"

    def test_extract_image_undecodable(self, test_client):
        response = test_client.post(
            "/v1/extract/image",
            files={"file": ("broken.png", b"not really a png", "image/png")},
        )
        assert response.status_code == 400

    def test_extract_image_unsupported_type(self, test_client):
        response = test_client.post(
            "/v1/extract/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 415

    def test_extract_image_too_large(self, test_client, monkeypatch):
        monkeypatch.setattr(Config, "MAX_FILE_MB", 0)
        response = test_client.post(
            "/v1/extract/image",
            files={"file": ("swatch.png", _png_bytes(), "image/png")},
        )
        assert response.status_code == 413


class TestPaletteAPI:
    """Test the session palette endpoints"""

    def test_add_list_rename_remove(self, test_client):
        base = "/v1/palette/s1"

        response = test_client.post(f"{base}/colors", json={"color": "#3498db"})
        assert response.status_code == 200
        assert response.json()["added"] is True

        response = test_client.post(f"{base}/colors", json={"color": "rgb(52, 152, 219)"})
        assert response.json()["added"] is False

        test_client.post(f"{base}/colors", json={"color": "red"})
        data = test_client.get(base).json()
        assert [c["name"] for c in data["colors"]] == ["Color 1", "Color 2"]
        assert data["colors"][1]["formats"]["rgb"] == "rgb(255, 0, 0)"

        response = test_client.put(f"{base}/colors/1/name", json={"name": "Danger"})
        assert response.json()["colors"][1]["name"] == "Danger"

        response = test_client.delete(f"{base}/colors/0")
        assert [c["hex"] for c in response.json()["colors"]] == ["#ff0000"]

        response = test_client.delete(f"{base}/colors")
        assert response.json()["colors"] == []

    def test_sessions_are_isolated(self, test_client):
        test_client.post("/v1/palette/a/colors", json={"color": "#000"})
        assert test_client.get("/v1/palette/b").json()["colors"] == []

    def test_remove_missing_index(self, test_client):
        response = test_client.delete("/v1/palette/s1/colors/3")
        assert response.status_code == 404

    def test_reads_do_not_create_sessions(self, test_client):
        for i in range(50):
            response = test_client.get(f"/v1/palette/s{i}")
            assert response.status_code == 200
            assert response.json()["colors"] == []
        test_client.delete("/v1/palette/other/colors")
        test_client.put("/v1/palette/other/colors/0/name", json={"name": "x"})
        test_client.delete("/v1/palette/other/colors/0")
        assert len(session_stores) == 0

    def test_rename_in_unknown_session(self, test_client):
        response = test_client.put("/v1/palette/nobody/colors/0/name", json={"name": "x"})
        assert response.status_code == 404

    def test_clear_drops_session(self, test_client):
        test_client.post("/v1/palette/s1/colors", json={"color": "#000"})
        assert "s1" in session_stores
        test_client.delete("/v1/palette/s1/colors")
        assert "s1" not in session_stores

    def test_add_invalid_color(self, test_client):
        response = test_client.post("/v1/palette/s1/colors", json={"color": "#XYZ"})
        assert response.status_code == 422


class TestMetricsAPI:
    def test_counts_requests(self, test_client):
        test_client.post("/v1/convert", json={"color": "#3498db"})
        test_client.post("/v1/convert", json={"color": "#XYZ"})

        data = test_client.get("/v1/metrics").json()
        assert data["enabled"] is True
        assert data["counters"]["convert_requests_total"] == 2
        assert data["counters"]["convert_failed_total_parse"] == 1
        assert "convert_duration_ms" in data["timing_stats"]

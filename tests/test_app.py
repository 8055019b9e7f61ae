from __future__ import annotations

import base64
from io import BytesIO

import pytest
from PIL import Image

import app as app_module
from qrlink.rate_limiter import RateLimiter

LINKS = {
    "menu": {"destination_url": "https://example.com/menu", "is_active": True},
    "paused": {"destination_url": "https://example.com/old", "is_active": False},
    "tampered": {"destination_url": "javascript:alert(1)", "is_active": True},
}


@pytest.fixture
def client(monkeypatch):
    app_module.app.config.update(TESTING=True, RATE_LIMIT_ENABLED=False, LINK_RESOLVER=LINKS.get)
    monkeypatch.setattr(app_module, "rate_limiter", RateLimiter())
    with app_module.app.test_client() as client:
        yield client
    app_module.app.config.update(RATE_LIMIT_ENABLED=False, LINK_RESOLVER=None)


def _png_bytes(size=(64, 64), color=(220, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


# URL validation

def test_validate_url_endpoint(client) -> None:
    ok = client.post("/api/validate-url", json={"url": "https://Example.com/menu"})
    assert ok.status_code == 200
    assert ok.get_json() == {"isValid": True, "normalizedUrl": "https://example.com/menu"}

    bad = client.post("/api/validate-url", json={"url": "http://169.254.169.254/latest/meta-data"})
    assert bad.status_code == 200
    assert bad.get_json()["kind"] == "BlockedHost"


def test_validate_url_strict_flag(client) -> None:
    response = client.post("/api/validate-url", json={"url": "http://intranet/", "strict": True})
    assert response.get_json()["kind"] == "SingleLabelHost"


def test_validate_url_requires_url(client) -> None:
    assert client.post("/api/validate-url", json={}).status_code == 400


# Render

def test_render_returns_svg_hash_and_warnings(client) -> None:
    response = client.post("/api/render", json={"text": "HELLO", "fg": "#112233", "ecc": "L"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["svg"].startswith("<?xml")
    assert 'viewBox="0 0 29 29"' in body["svg"]
    assert "#112233" in body["svg"]
    assert len(body["style_hash"]) == 16
    assert body["warnings"] == []


def test_render_destination_url_is_validated(client) -> None:
    response = client.post("/api/render", json={"destination_url": "http://10.0.0.5/"})
    assert response.status_code == 400
    assert response.get_json()["field"] == "destination_url"


def test_render_managed_mode_checks_slug(client) -> None:
    bad = client.post("/api/render", json={"mode": "managed", "slug": "Not A Slug"})
    assert bad.status_code == 400
    assert bad.get_json()["field"] == "slug"

    good = client.post("/api/render", json={"mode": "managed", "slug": "menu-2024"})
    assert good.status_code == 200


def test_render_style_errors_are_listed(client) -> None:
    response = client.post("/api/render", json={"text": "HELLO", "fg": "blue", "quiet_zone": 50})
    assert response.status_code == 400
    assert set(response.get_json()["fields"]) == {"foreground_color", "quiet_zone"}


def test_render_capacity_overflow(client) -> None:
    response = client.post("/api/render", json={"text": "x" * 3000, "ecc": "H"})
    assert response.status_code == 422


def test_render_with_uploaded_logo(client) -> None:
    response = client.post(
        "/api/render",
        data={"text": "https://example.com", "ecc": "M", "logo_ratio": "0.24",
              "logo": (BytesIO(_png_bytes()), "logo.png")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert "data:image/png;base64," in body["svg"]
    assert len(body["warnings"]) == 2


def test_render_rejects_unreadable_logo(client) -> None:
    response = client.post(
        "/api/render",
        data={"text": "HELLO", "logo": (BytesIO(b"not an image"), "logo.png")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    assert response.get_json()["field"] == "logo"


# Exports

def test_export_svg(client) -> None:
    response = client.get("/export/svg?text=HELLO&optimize=1")
    assert response.status_code == 200
    assert response.mimetype == "image/svg+xml"
    assert response.headers["X-Style-Hash"]
    assert b"\n" not in response.data
    assert "qr.svg" in response.headers["Content-Disposition"]


def test_export_png(client) -> None:
    response = client.get("/export/png?text=HELLO&size=128&transparent=true")
    assert response.status_code == 200
    assert response.mimetype == "image/png"
    img = Image.open(BytesIO(response.data))
    assert img.size == (128, 128)
    assert img.mode == "RGBA"


@pytest.mark.parametrize("size", ["10", "5000", "big"])
def test_export_png_rejects_bad_size(client, size: str) -> None:
    response = client.get(f"/export/png?text=HELLO&size={size}")
    assert response.status_code == 400


def test_export_pdf_preset(client) -> None:
    response = client.post("/export/pdf", json={"text": "HELLO", "preset": "sticker-50mm"})
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")


def test_export_pdf_custom_page(client) -> None:
    response = client.post("/export/pdf", json={
        "text": "HELLO", "page_width": 80, "page_height": 60, "margin": 5, "bleed": 3,
    })
    assert response.status_code == 200
    assert response.data.startswith(b"%PDF")


def test_export_pdf_errors(client) -> None:
    assert client.post("/export/pdf", json={"text": "HELLO", "preset": "poster"}).status_code == 400
    assert client.post("/export/pdf", json={"text": "HELLO", "page_width": 0}).status_code == 400
    assert client.post("/export/pdf", json={"text": "HELLO", "margin": "wide"}).status_code == 400


# Redirects

def test_redirect_to_destination(client) -> None:
    response = client.get("/r/menu")
    assert response.status_code == 307
    assert response.headers["Location"] == "https://example.com/menu"


@pytest.mark.parametrize("slug, error", [
    ("missing", "qr-not-found"),
    ("paused", "qr-inactive"),
    ("tampered", "invalid-destination"),
])
def test_redirect_failures_go_home(client, slug: str, error: str) -> None:
    response = client.get(f"/r/{slug}")
    assert response.status_code == 302
    assert response.headers["Location"].endswith(f"/?error={error}")


def test_redirect_without_resolver(client) -> None:
    app_module.app.config["LINK_RESOLVER"] = None
    response = client.get("/r/menu")
    assert response.headers["Location"].endswith("/?error=qr-not-found")


# Rate limiting

def test_rate_limit_returns_429(client) -> None:
    app_module.app.config["RATE_LIMIT_ENABLED"] = True
    for _ in range(30):
        assert client.post("/api/validate-url", json={"url": "https://example.com"}).status_code == 200

    blocked = client.post("/api/validate-url", json={"url": "https://example.com"})
    assert blocked.status_code == 429
    assert blocked.headers["X-RateLimit-Remaining"] == "0"
    assert int(blocked.headers["Retry-After"]) <= 60

    other = client.post("/api/validate-url", json={"url": "https://example.com"},
                        headers={"X-Forwarded-For": "203.0.113.9"})
    assert other.status_code == 200


def test_rate_limit_windows_are_pruned_by_requests(client, monkeypatch) -> None:
    clock = {"now": 1000.0}
    limiter = RateLimiter(clock=lambda: clock["now"], sweep_interval=60)
    monkeypatch.setattr(app_module, "rate_limiter", limiter)
    app_module.app.config["RATE_LIMIT_ENABLED"] = True

    for n in range(5):
        client.post("/api/validate-url", json={"url": "https://example.com"},
                    headers={"X-Forwarded-For": f"198.51.100.{n}"})
    assert len(limiter) == 5

    clock["now"] += 61
    client.post("/api/validate-url", json={"url": "https://example.com"},
                headers={"X-Forwarded-For": "198.51.100.99"})
    assert len(limiter) == 1
    assert limiter._thread is None


# Numbers and logos

@pytest.mark.parametrize("size", [512.5, "512.5", True, "inf", "nan"])
def test_export_png_rejects_non_integral_size(client, size) -> None:
    response = client.post("/export/png", json={"text": "HELLO", "size": size})
    assert response.status_code == 400


def test_export_png_accepts_integral_float_size(client) -> None:
    response = client.post("/export/png", json={"text": "HELLO", "size": 128.0})
    assert response.status_code == 200
    assert Image.open(BytesIO(response.data)).size == (128, 128)


@pytest.mark.parametrize("field, value", [("bleed", "inf"), ("margin", "nan"), ("bleed", 5000)])
def test_export_pdf_rejects_unbounded_geometry(client, field: str, value) -> None:
    response = client.post("/export/pdf", json={"text": "HELLO", "page_width": 50, "page_height": 50, field: value})
    assert response.status_code == 400


def test_logo_data_uri_is_reencoded_as_png(client) -> None:
    jpeg = BytesIO()
    Image.new("RGB", (40, 40), (0, 90, 200)).save(jpeg, format="JPEG")
    uri = "data:image/jpeg;base64," + base64.b64encode(jpeg.getvalue()).decode("ascii")

    response = client.post("/api/render", json={"text": "HELLO", "ecc": "H", "logo_ratio": 0.2,
                                                "logo_data_uri": uri})
    assert response.status_code == 200
    svg = response.get_json()["svg"]
    assert "data:image/png;base64," in svg
    assert "data:image/jpeg" not in svg


@pytest.mark.parametrize("uri", [
    "data:image/svg+xml;base64," + base64.b64encode(
        b'<svg xmlns="http://www.w3.org/2000/svg"><image href="http://169.254.169.254/"/></svg>'
    ).decode("ascii"),
    "data:image/svg+xml,<svg xmlns='http://www.w3.org/2000/svg'/>",
    "data:image/png;base64,not base64!",
    "https://example.com/logo.png",
])
def test_logo_data_uri_rejects_non_raster_input(client, uri: str) -> None:
    response = client.post("/api/render", json={"text": "HELLO", "logo_ratio": 0.2, "logo_data_uri": uri})
    assert response.status_code == 400
    assert response.get_json()["field"] == "logo"

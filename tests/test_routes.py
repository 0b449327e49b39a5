from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from portfolio.app import create_app
from portfolio.domain.slugs import is_valid_slug
from portfolio.services.content import ContentService
from portfolio.services.shortener_client import ShortenerUnavailableError


@pytest.fixture()
def client(settings, fake_client):
    app = create_app(settings, shortener_client=fake_client)
    return TestClient(app)


def test_home_renders_hero_projects_and_posts(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "nexxel" in resp.text
    assert "license-generator" in resp.text
    assert "Featured posts" in resp.text


def test_security_headers_are_set(client):
    resp = client.get("/health")
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "default-src 'self'" in resp.headers["Content-Security-Policy"]


def test_static_files_are_cacheable(client):
    resp = client.get("/static/site.css")
    assert resp.status_code == 200
    assert resp.headers["Cache-Control"].startswith("public")


def test_shortener_page_shows_link_preview(client):
    resp = client.get("/shortener")
    assert resp.status_code == 200
    assert "https://nexxel.dev/r/" in resp.text
    assert 'value="Create"' in resp.text


def test_check_endpoint_normalizes_and_reports_usage(client, fake_client):
    resp = client.get("/shortener/check", params={"slug": "TAKEN"})
    assert resp.status_code == 200
    assert resp.json() == {"slug": "taken", "used": True}
    assert fake_client.check_calls == ["taken"]

    resp = client.get("/shortener/check", params={"slug": "free-one"})
    assert resp.json()["used"] is False


def test_check_endpoint_rejects_invalid_slug(client, fake_client):
    resp = client.get("/shortener/check", params={"slug": "no spaces!"})
    assert resp.status_code == 400
    assert fake_client.check_calls == []


def test_check_endpoint_surfaces_backend_outage(client, fake_client):
    fake_client.check_error = ShortenerUnavailableError("Could not reach the shortener.")
    resp = client.get("/shortener/check", params={"slug": "cat"})
    assert resp.status_code == 503


def test_submit_creates_link(client, fake_client):
    resp = client.post("/shortener", data={"slug": "Cat-In-Hat", "url": "https://example.com"})
    assert resp.status_code == 200
    assert "Here's your link!" in resp.text
    assert "https://nexxel.dev/r/cat-in-hat" in resp.text
    assert "Create New" in resp.text
    assert fake_client.create_calls == [("cat-in-hat", "https://example.com")]


def test_submit_with_taken_slug_is_rejected_before_create(client, fake_client):
    resp = client.post("/shortener", data={"slug": "taken", "url": "https://example.com"})
    assert resp.status_code == 409
    assert "This link is not available" in resp.text
    assert 'id="create" value="Create" disabled' in resp.text
    assert 'data-base="https://nexxel.dev/r"' in resp.text
    assert fake_client.create_calls == []


def test_submit_with_invalid_url_keeps_input(client, fake_client):
    resp = client.post("/shortener", data={"slug": "cat", "url": "example"})
    assert resp.status_code == 400
    assert 'id="url-error"' in resp.text
    assert 'value="cat"' in resp.text
    assert fake_client.check_calls == []


def test_submit_during_outage_allows_retry(client, fake_client):
    fake_client.create_error = ShortenerUnavailableError("The shortener is unavailable, try again.")
    resp = client.post("/shortener", data={"slug": "later", "url": "https://example.com"})
    assert resp.status_code == 503
    assert 'id="form-error"' in resp.text
    assert 'value="later"' in resp.text
    assert 'value="https://example.com"' in resp.text


def test_content_service_reads_json(tmp_path):
    (tmp_path / "hero.json").write_text(json.dumps({"name": "someone"}), encoding="utf-8")
    (tmp_path / "projects.json").write_text(
        json.dumps([{"url": "https://github.com/x/y", "repo": "y", "stars": 3}, {"repo": "no-url"}]),
        encoding="utf-8",
    )
    (tmp_path / "posts.json").write_text(
        json.dumps([
            {"title": "a", "url": "/blog/a"},
            {"title": "b", "url": "/blog/b", "featured": False},
            {"title": "c", "url": "/blog/c"},
        ]),
        encoding="utf-8",
    )
    content = ContentService(str(tmp_path))

    assert content.hero().name == "someone"
    projects = content.projects()
    assert [p.repo for p in projects] == ["y"]
    assert projects[0].stars == "3"
    assert projects[0].language_color == "#8B8B8B"
    assert [p.title for p in content.featured_posts(limit=1)] == ["a"]
    assert [p.title for p in content.featured_posts()] == ["a", "c"]


def test_content_service_tolerates_missing_files(tmp_path):
    content = ContentService(str(tmp_path / "nope"))
    assert content.projects() == []
    assert content.featured_posts() == []
    assert content.hero().name == ""


def test_random_slug_route_checks_the_generated_slug(client, fake_client):
    resp = client.get("/shortener/random")
    assert resp.status_code == 200
    body = resp.json()
    assert is_valid_slug(body["slug"])
    assert body["used"] is False
    assert fake_client.check_calls == [body["slug"]]


def test_random_slug_route_reports_backend_outage(client, fake_client):
    fake_client.check_error = ShortenerUnavailableError("Could not reach the shortener.")
    resp = client.get("/shortener/random")
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Could not reach the shortener."


def test_shortener_page_offers_random_button_and_error_slot(client):
    resp = client.get("/shortener")
    assert 'id="random"' in resp.text
    assert 'type="button"' in resp.text
    assert 'id="slug-error"' in resp.text
    assert 'data-base="https://nexxel.dev/r"' in resp.text

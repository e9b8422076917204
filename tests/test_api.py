"""HTTP surface tests with FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from folio.api import create_app
from folio.api.dependencies import SESSION_COOKIE
from folio.services import HostingAPIError, HostingErrorKind, PortfolioStoreError

TOKEN_HEADER = {"X-Hosting-Token": "ghp_test_token"}


@pytest.fixture
def app(config, hosting_factory):
    return create_app(config, hosting_factory=hosting_factory)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def body(resume, sections):
    return {
        "resume": resume.model_dump(mode="json"),
        "sections": [s.model_dump(mode="json") for s in sections],
        "templateId": "modern",
        "themeColor": "#0F766E",
        "slug": "Jane Doe",
        "settings": {"showPhoto": False},
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_check_slug(client):
    response = client.get("/check-slug", params={"slug": "Jane Doe"})

    assert response.status_code == 200
    assert response.json() == {"slug": "jane-doe", "available": True}


def test_check_slug_invalid(client):
    response = client.get("/check-slug", params={"slug": "!!!"})

    assert response.status_code == 422
    assert response.json()["step"] == "IDLE"


def test_check_reserved_slug(client):
    assert client.get("/check-slug", params={"slug": "portfolios"}).json()["available"] is False


def test_generate_preview(client, body):
    response = client.post("/portfolio/generate", json=body)

    assert response.status_code == 200
    html = response.json()["html"]
    assert html.startswith("<!DOCTYPE html>")
    assert "Senior Engineer" in html


def test_publish_then_serve(client, hosting_factory, body):
    response = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER)

    assert response.status_code == 200
    result = response.json()
    assert result["url"] == "https://jane.github.io/jane-doe"
    assert result["repo"] == "jane-doe"
    assert result["portfolio"]["slug"] == "jane-doe"
    assert hosting_factory.credentials[0].get_secret_value() == "ghp_test_token"

    page = client.get("/jane-doe")
    assert page.status_code == 200
    assert "text/html" in page.headers["content-type"]
    assert "Senior Engineer" in page.text
    assert SESSION_COOKIE in page.cookies

    listed = client.get("/portfolios", params={"resume_id": "resume-1"}).json()
    assert [p["slug"] for p in listed] == ["jane-doe"]
    assert "ghp_test_token" not in page.text


def test_publish_requires_token(client, body):
    response = client.post("/portfolio/publish", json=body)
    assert response.status_code == 422


def test_publish_taken_slug(client, hosting, body, resume):
    client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER)
    hosting.calls.clear()

    other = dict(body, resume=dict(body["resume"], id="resume-2"))
    response = client.post("/portfolio/publish", json=other, headers=TOKEN_HEADER)

    assert response.status_code == 409
    assert response.json()["step"] == "IDLE"
    assert hosting.calls == []


def test_publish_bad_credential(client, hosting, body):
    hosting.fail["get_identity"] = HostingAPIError(HostingErrorKind.UNAUTHORIZED, "Bad credentials", 401)

    response = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER)

    assert response.status_code == 401
    assert response.json() == {
        "step": "AUTHENTICATING",
        "error": "Bad credentials",
        "retryable": False,
        "deployment": None,
    }


def test_publish_hosting_not_ready(client, hosting, body):
    hosting.fail["enable_static_hosting"] = HostingAPIError(HostingErrorKind.NOT_READY, "Branch missing", 422)

    response = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER)

    assert response.status_code == 503
    assert response.json()["retryable"] is True


def test_persist_failure_then_retry(client, app, monkeypatch, body):
    store = app.state.services.store
    original = store.save_published

    def broken(**kwargs):
        raise PortfolioStoreError("disk full")

    monkeypatch.setattr(store, "save_published", broken)
    response = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER)

    assert response.status_code == 500
    deployment = response.json()["deployment"]
    assert deployment["url"] == "https://jane.github.io/jane-doe"

    monkeypatch.setattr(store, "save_published", original)
    retry = client.post("/portfolio/persist", json=dict(body, deployment=deployment))

    assert retry.status_code == 200
    assert retry.json()["url"] == deployment["url"]
    assert client.get("/jane-doe").status_code == 200


def test_republish_by_portfolio_id(client, body):
    first = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()

    again = client.post(
        "/portfolio/publish",
        json=dict(body, portfolioId=first["portfolio"]["id"]),
        headers=TOKEN_HEADER,
    )

    assert again.status_code == 200
    assert again.json()["portfolio"]["id"] == first["portfolio"]["id"]
    assert again.json()["url"] == first["url"]


def test_republish_unknown_portfolio(client, body):
    response = client.post("/portfolio/publish", json=dict(body, portfolioId=999), headers=TOKEN_HEADER)
    assert response.status_code == 404


def test_unknown_slug_page(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert "Portfolio Not Found" in response.text


def test_views_counted_once_per_session(client, app, body):
    portfolio_id = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]

    client.get("/jane-doe")
    client.get("/jane-doe")
    response = client.post("/portfolio/record-view", json={"portfolioId": portfolio_id})

    assert response.status_code == 202
    assert response.json() == {"accepted": True}
    assert app.state.services.store.get(portfolio_id).views == 1


def test_record_view_issues_session_cookie(client):
    response = client.post("/portfolio/record-view", json={"portfolioId": 12345})

    assert response.status_code == 202
    assert SESSION_COOKIE in response.cookies


def test_deactivate(client, body):
    portfolio_id = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]

    response = client.post(f"/portfolios/{portfolio_id}/deactivate")

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get("/jane-doe").status_code == 404
    assert client.get("/check-slug", params={"slug": "jane-doe"}).json()["available"] is True


def test_deactivate_unknown(client):
    assert client.post("/portfolios/999/deactivate").status_code == 404


def test_get_portfolio(client, body):
    portfolio_id = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]

    response = client.get(f"/portfolios/{portfolio_id}")

    assert response.status_code == 200
    assert response.json()["slug"] == "jane-doe"
    assert response.json()["url"] == "https://jane.github.io/jane-doe"


def test_get_unknown_portfolio(client):
    assert client.get("/portfolios/999").status_code == 404


def test_update_title_and_settings(client, hosting, body):
    portfolio_id = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]
    hosting.calls.clear()

    response = client.patch(
        f"/portfolios/{portfolio_id}",
        json={"title": "Jane at work", "settings": {"showPhoto": True, "customTitle": "Jane"}},
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Jane at work"
    assert updated["settings"]["customTitle"] == "Jane"
    assert updated["is_active"] is True
    assert hosting.calls == []


def test_deactivate_and_reactivate(client, body):
    portfolio_id = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]

    off = client.patch(f"/portfolios/{portfolio_id}", json={"isActive": False})
    assert off.json()["is_active"] is False
    assert client.get("/jane-doe").status_code == 404

    on = client.patch(f"/portfolios/{portfolio_id}", json={"isActive": True})
    assert on.status_code == 200
    assert on.json()["is_active"] is True
    assert client.get("/jane-doe").status_code == 200


def test_reactivate_conflict(client, body):
    first = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]
    client.post(f"/portfolios/{first}/deactivate")
    other = dict(body, resume=dict(body["resume"], id="resume-2"))
    second = client.post("/portfolio/publish", json=other, headers=TOKEN_HEADER).json()["portfolio"]["id"]

    response = client.patch(f"/portfolios/{first}", json={"isActive": True})

    assert response.status_code == 409
    assert response.json()["step"] == "IDLE"
    assert response.json()["retryable"] is False
    assert client.get(f"/portfolios/{first}").json()["is_active"] is False
    assert client.get(f"/portfolios/{second}").json()["is_active"] is True


def test_update_unknown_portfolio(client):
    assert client.patch("/portfolios/999", json={"title": "x"}).status_code == 404


def test_views_not_counted_after_deactivate(client, app, body):
    portfolio_id = client.post("/portfolio/publish", json=body, headers=TOKEN_HEADER).json()["portfolio"]["id"]
    client.post(f"/portfolios/{portfolio_id}/deactivate")

    response = client.post("/portfolio/record-view", json={"portfolioId": portfolio_id})

    assert response.status_code == 202
    assert app.state.services.store.get(portfolio_id).views == 0

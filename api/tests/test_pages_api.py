from __future__ import annotations

from conftest import COMPANY_ID, INTRUDER_HEADERS, OWNER_HEADERS, PAGE_ID

HERO_ID = f"hero-section-{PAGE_ID}"
FOOTER_ID = f"footer-section-{PAGE_ID}"


def _draft_body() -> dict:
    return {
        "content": [
            {"type": "Footer", "id": "f", "props": {"text": "Thanks"}},
            {"type": "Benefits", "id": "b", "props": {"heading": "Perks"}},
            {"type": "Carousel", "id": "c", "props": {}},
            {"type": "Hero", "id": "h", "props": {"title": "Join Acme"}},
        ],
        "root": {"props": {}},
    }


def test_owner_routes_require_bearer_token(client) -> None:
    response = client.get("/pages/acme/draft")
    assert response.status_code == 401

    response = client.get("/pages/acme/draft", headers={"Authorization": "Bearer unknown-token"})
    assert response.status_code == 401


def test_other_users_cannot_touch_the_page(client, repository) -> None:
    for method, path in [
        ("get", "/pages/acme/draft"),
        ("post", "/pages/acme/publish"),
        ("get", "/pages/acme/preview"),
        ("delete", "/pages/acme/assets/logo"),
    ]:
        response = client.request(method.upper(), path, headers=INTRUDER_HEADERS)
        assert response.status_code == 403, path

    response = client.put("/pages/acme/draft", headers=INTRUDER_HEADERS, json=_draft_body())
    assert response.status_code == 403
    assert repository.pages == {}


def test_unknown_company_is_404(client) -> None:
    response = client.get("/pages/nope/draft", headers=OWNER_HEADERS)

    assert response.status_code == 404


def test_first_access_creates_page_with_pinned_blocks(client, repository) -> None:
    response = client.get("/pages/acme/draft", headers=OWNER_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["career_page_id"] == PAGE_ID
    assert [block["id"] for block in body["content"]] == [HERO_ID, FOOTER_ID]
    assert repository.pages[PAGE_ID]["company_id"] == COMPANY_ID


def test_get_page_returns_theme_and_palette(client) -> None:
    response = client.get("/pages/acme", headers=OWNER_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["company_slug"] == "acme"
    assert body["published"] is False
    assert body["theme"] == {"primaryColor": "#000000", "secondaryColor": None}
    assert body["palette"]["--primary"] == "#000000"


def test_put_draft_normalizes_and_persists(client, repository) -> None:
    response = client.put("/pages/acme/draft", headers=OWNER_HEADERS, json=_draft_body())

    assert response.status_code == 200
    content = response.json()["content"]
    assert [block["id"] for block in content] == ["h", "b", "f"]
    assert [block["type"] for block in content] == ["HeroSection", "BenefitsSection", "FooterSection"]
    assert repository.pages[PAGE_ID]["draft_puck_data"]["content"] == content
    assert repository.pages[PAGE_ID]["published"] is False


def test_put_draft_rejects_non_list_content(client) -> None:
    response = client.put("/pages/acme/draft", headers=OWNER_HEADERS, json={"content": "nope"})

    assert response.status_code == 422


def test_publish_without_saved_draft_is_404(client, repository) -> None:
    client.get("/pages/acme/draft", headers=OWNER_HEADERS)

    response = client.post("/pages/acme/publish", headers=OWNER_HEADERS)

    assert response.status_code == 404
    assert repository.pages[PAGE_ID]["published"] is False


def test_publish_copies_saved_draft(client, repository) -> None:
    client.put("/pages/acme/draft", headers=OWNER_HEADERS, json=_draft_body())

    assert client.get("/pages/acme/published", headers=OWNER_HEADERS).status_code == 404

    response = client.post("/pages/acme/publish", headers=OWNER_HEADERS)

    assert response.status_code == 200
    assert response.json()["published"] is True
    record = repository.pages[PAGE_ID]
    assert record["puck_data"] == record["draft_puck_data"]

    published = client.get("/pages/acme/published", headers=OWNER_HEADERS)
    assert published.status_code == 200
    assert [block["id"] for block in published.json()["content"]] == ["h", "b", "f"]


def test_later_draft_edits_leave_published_copy_alone(client, repository) -> None:
    client.put("/pages/acme/draft", headers=OWNER_HEADERS, json=_draft_body())
    client.post("/pages/acme/publish", headers=OWNER_HEADERS)

    client.put("/pages/acme/draft", headers=OWNER_HEADERS, json={"content": [], "root": {"props": {}}})

    published = client.get("/pages/acme/published", headers=OWNER_HEADERS).json()
    assert [block["id"] for block in published["content"]] == ["h", "b", "f"]


def test_patch_theme_merges_colors(client, repository) -> None:
    response = client.patch("/pages/acme/theme", headers=OWNER_HEADERS, json={"secondaryColor": "#FACC15"})

    assert response.status_code == 200
    assert response.json()["theme"] == {"primaryColor": "#000000", "secondaryColor": "#facc15"}
    assert repository.pages[PAGE_ID]["theme"] == {"primaryColor": "#000000", "secondaryColor": "#FACC15"}

    response = client.patch("/pages/acme/theme", headers=OWNER_HEADERS, json={"primaryColor": "blue"})
    assert response.status_code == 422


def test_upload_and_remove_asset(client, repository, storage) -> None:
    response = client.post(
        "/pages/acme/assets/logo",
        headers=OWNER_HEADERS,
        files={"file": ("logo.PNG", b"\x89PNG-bytes", "image/png")},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["path"].startswith(f"logos/{COMPANY_ID}/")
    assert body["path"].endswith(".png")
    assert body["public_url"] == f"https://cdn.example.test/career-assets/{body['path']}"
    assert body["page"]["logo_url"] == body["public_url"]
    assert storage.uploads[0]["content_type"] == "image/png"

    response = client.delete("/pages/acme/assets/logo", headers=OWNER_HEADERS)

    assert response.status_code == 200
    assert response.json()["logo_url"] is None
    assert repository.pages[PAGE_ID]["logo_url"] is None


def test_upload_rejects_wrong_file_type(client, storage) -> None:
    response = client.post(
        "/pages/acme/assets/video",
        headers=OWNER_HEADERS,
        files={"file": ("clip.mov", b"quicktime", "video/quicktime")},
    )

    assert response.status_code == 422
    assert storage.uploads == []

    response = client.post(
        "/pages/acme/assets/avatar",
        headers=OWNER_HEADERS,
        files={"file": ("a.png", b"png", "image/png")},
    )
    assert response.status_code == 422


def test_preview_renders_draft_with_all_jobs(client, repository) -> None:
    repository.seed_job("j1", "Engineer", location="Berlin", job_type="full-time")
    repository.seed_job("j2", "Designer", published=False)
    body = _draft_body()
    body["content"].append({"type": "Jobs", "id": "roles", "props": {"heading": "Roles"}})
    client.put("/pages/acme/draft", headers=OWNER_HEADERS, json=body)

    response = client.get("/pages/acme/preview", headers=OWNER_HEADERS)

    assert response.status_code == 200
    tree = response.json()["tree"]
    assert tree["mode"] == "preview"
    assert tree["preview_banner"] == "Preview Mode - Unpublished Changes"
    jobs_section = next(section for section in tree["sections"] if section["block_id"] == "roles")
    assert [job["id"] for job in jobs_section["data"]["jobs"]] == ["j1", "j2"]


def test_preview_applies_filters(client, repository) -> None:
    repository.seed_job("j1", "Engineer", job_type="full-time")
    repository.seed_job("j2", "Designer", job_type="contract")
    client.put(
        "/pages/acme/draft",
        headers=OWNER_HEADERS,
        json={"content": [{"type": "Jobs", "id": "roles", "props": {}}], "root": {"props": {}}},
    )

    response = client.get("/pages/acme/preview", headers=OWNER_HEADERS, params={"type": "contract"})

    jobs_section = next(section for section in response.json()["tree"]["sections"] if section["block_id"] == "roles")
    assert [job["id"] for job in jobs_section["data"]["jobs"]] == ["j2"]
    assert jobs_section["data"]["count_label"] == "1 job found"

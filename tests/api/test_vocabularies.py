"""Tests for vocabulary endpoints."""

from fastapi.testclient import TestClient


class TestVocabularyEndpoints:
    """Tests for /vocabularies/{kind}."""

    def test_add_and_list(self, auth_client: TestClient) -> None:
        """Added entries are listed in display order."""
        for name in ["S", "M", "L"]:
            response = auth_client.post("/vocabularies/sizes", json={"name": name})
            assert response.status_code == 201

        data = auth_client.get("/vocabularies/sizes").json()
        assert data["kind"] == "sizes"
        assert [e["name"] for e in data["items"]] == ["S", "M", "L"]

    def test_duplicate_name(self, auth_client: TestClient) -> None:
        """A taken name is a conflict."""
        auth_client.post("/vocabularies/fits", json={"name": "Slim"})

        response = auth_client.post("/vocabularies/fits", json={"name": "Slim"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "VOCABULARY_ENTRY_EXISTS"

    def test_color_defaults(self, auth_client: TestClient) -> None:
        """Colors without a hex code are black."""
        response = auth_client.post("/vocabularies/colors", json={"name": "Onyx"})

        assert response.json()["hex_code"] == "#000000"

    def test_rename_and_delete(self, auth_client: TestClient) -> None:
        """Entries can be renamed and deleted."""
        entry = auth_client.post("/vocabularies/patterns", json={"name": "Stripe"}).json()

        renamed = auth_client.patch(
            f"/vocabularies/patterns/{entry['id']}", json={"name": "Striped"}
        )
        assert renamed.json()["name"] == "Striped"

        assert auth_client.delete(f"/vocabularies/patterns/{entry['id']}").status_code == 204
        assert auth_client.get("/vocabularies/patterns").json()["items"] == []

    def test_unknown_kind(self, client: TestClient) -> None:
        """Only known vocabularies are addressable."""
        assert client.get("/vocabularies/flavors").status_code == 422

    def test_writes_require_auth(self, client: TestClient) -> None:
        """Adding entries is admin-only."""
        assert client.post("/vocabularies/sizes", json={"name": "S"}).status_code == 401

"""Tests for points-of-measurement endpoints."""

from fastapi.testclient import TestClient


class TestPOMCatalogEndpoints:
    """Tests for POM categories and definitions."""

    def test_seeded_catalog(self, seeded_client: TestClient) -> None:
        """The bootstrap seeds the standard POM categories."""
        names = [c["name"] for c in seeded_client.get("/poms/categories").json()]

        assert names == ["Tops", "Bottoms", "One-Pieces", "Footwear", "Accessories"]

    def test_filter_definitions(self, seeded_client: TestClient) -> None:
        """Definitions can be filtered by POM category."""
        tops = seeded_client.get("/poms/categories").json()[0]

        data = seeded_client.get("/poms/definitions", params={"category_id": tops["id"]}).json()

        assert data["items"]
        assert {d["category_name"] for d in data["items"]} == {"Tops"}
        assert data["items"][0]["code"] == "HPS"

    def test_create_category_and_definition(self, auth_client: TestClient) -> None:
        """New POMs can be added to the catalog."""
        category = auth_client.post("/poms/categories", json={"name": "Hats"})
        assert category.status_code == 201

        definition = auth_client.post(
            "/poms/definitions",
            json={"category_id": category.json()["id"], "code": "crn", "name": "Crown"},
        )

        assert definition.status_code == 201
        assert definition.json()["code"] == "CRN"
        assert definition.json()["category_name"] == "Hats"
        assert definition.json()["default_tolerance"] == 0.5

    def test_duplicate_category(self, auth_client: TestClient) -> None:
        """POM category names are unique."""
        auth_client.post("/poms/categories", json={"name": "Hats"})

        assert auth_client.post("/poms/categories", json={"name": "Hats"}).status_code == 409


    def test_update_definition(self, seeded_client: TestClient) -> None:
        """PATCH changes only the fields that are sent."""
        hps = seeded_client.get("/poms/definitions").json()["items"][0]

        response = seeded_client.patch(
            f"/poms/definitions/{hps['id']}",
            json={"name": "High Point Shoulder", "default_tolerance": 1.0},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "High Point Shoulder"
        assert data["default_tolerance"] == 1.0
        assert data["code"] == hps["code"]
        assert data["category_name"] == hps["category_name"]

    def test_retire_definition(self, seeded_client: TestClient) -> None:
        """A retired definition disappears from the catalog."""
        before = seeded_client.get("/poms/definitions").json()["items"]
        pom_id = before[0]["id"]

        assert seeded_client.delete(f"/poms/definitions/{pom_id}").status_code == 204

        after = seeded_client.get("/poms/definitions").json()["items"]
        assert pom_id not in {d["id"] for d in after}
        assert len(after) == len(before) - 1
        assert seeded_client.delete(f"/poms/definitions/{pom_id}").status_code == 404

    def test_admin_routes_require_auth(self, client: TestClient) -> None:
        assert client.patch("/poms/definitions/any", json={"name": "X"}).status_code == 401
        assert client.delete("/poms/definitions/any").status_code == 401
        assert client.post("/poms/package-types", json={"name": "Girth"}).status_code == 401


class TestPackageTypeEndpoints:
    """Tests for package measurement types."""

    def test_seeded_types(self, seeded_client: TestClient) -> None:
        data = seeded_client.get("/poms/package-types").json()

        assert [t["name"] for t in data] == ["Length", "Width", "Height", "Weight"]
        assert data[-1]["unit"] == "kg"

    def test_create_and_update(self, auth_client: TestClient) -> None:
        created = auth_client.post(
            "/poms/package-types", json={"name": "Girth", "description": "Around the middle"}
        )
        assert created.status_code == 201
        assert created.json()["unit"] == "cm"

        updated = auth_client.patch(
            f"/poms/package-types/{created.json()['id']}", json={"unit": "in"}
        )

        assert updated.status_code == 200
        assert updated.json()["unit"] == "in"
        assert updated.json()["description"] == "Around the middle"

    def test_duplicate_name(self, seeded_client: TestClient) -> None:
        response = seeded_client.post("/poms/package-types", json={"name": "Weight"})

        assert response.status_code == 409

class TestApparelPOMEndpoints:
    """Tests for apparel POM links."""

    def test_replace_links(self, seeded_client: TestClient) -> None:
        """PUT replaces the set; GET returns it in order."""
        tops = seeded_client.post("/categories", json={"name": "Tops"}).json()
        definitions = seeded_client.get("/poms/definitions").json()["items"][:3]
        first, second, third = (d["id"] for d in definitions)

        seeded_client.put(
            f"/poms/apparel/{tops['id']}",
            json={"poms": [{"pom_id": first}, {"pom_id": second}]},
        )
        response = seeded_client.put(
            f"/poms/apparel/{tops['id']}",
            json={"poms": [{"pom_id": third, "is_required": True}, {"pom_id": first}]},
        )

        assert response.status_code == 200
        items = seeded_client.get(f"/poms/apparel/{tops['id']}").json()["items"]
        assert [i["pom"]["id"] for i in items] == [third, first]
        assert items[0]["is_required"] is True

    def test_unknown_pom_rejected(self, seeded_client: TestClient) -> None:
        """Unknown POM IDs are 404 and change nothing."""
        tops = seeded_client.post("/categories", json={"name": "Tops"}).json()

        response = seeded_client.put(
            f"/poms/apparel/{tops['id']}", json={"poms": [{"pom_id": "missing"}]}
        )

        assert response.status_code == 404
        assert seeded_client.get(f"/poms/apparel/{tops['id']}").json()["items"] == []

    def test_duplicate_pom_rejected(self, seeded_client: TestClient) -> None:
        """A POM listed twice is a validation error."""
        tops = seeded_client.post("/categories", json={"name": "Tops"}).json()
        pom_id = seeded_client.get("/poms/definitions").json()["items"][0]["id"]

        response = seeded_client.put(
            f"/poms/apparel/{tops['id']}",
            json={"poms": [{"pom_id": pom_id}, {"pom_id": pom_id}]},
        )

        assert response.status_code == 422

from __future__ import annotations

from fastapi.testclient import TestClient


def test_security_schemes_and_public_operations(client: TestClient):
    schema = client.get("/openapi.json").json()

    schemes = schema["components"]["securitySchemes"]
    assert schemes["BearerAuth"]["scheme"] == "bearer"
    assert schemes["ApiTokenHeader"]["name"] == "X-API-Token"

    paths = schema["paths"]
    assert paths["/health"]["get"]["security"] == []
    assert paths["/v1/products"]["get"]["security"] == []
    assert paths["/v1/auth/token"]["post"]["security"] == []
    assert "security" not in paths["/v1/products"]["post"]
    assert "security" not in paths["/v1/products/{product_id}"]["delete"]
    assert paths["/v1/products/{product_id}/reviews"]["get"]["security"] == []
    assert "security" not in paths["/v1/products/{product_id}/reviews"]["post"]
    assert "security" not in paths["/v1/products/{product_id}/reviews/{review_id}"]["put"]


def test_tags_metadata(client: TestClient):
    schema = client.get("/openapi.json").json()

    assert {"Products", "Reviews", "Users", "Health"} <= {t["name"] for t in schema["tags"]}

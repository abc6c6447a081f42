"""
Resource API integration tests.

Covers the generated CRUD routes for products, estimates and users: envelope
shape, pagination fallbacks, validation, conflicts and transactional rollback.
"""
import asyncio

import pytest
from fastapi import status

from app.core.security import verify_password
from app.models import User

API = "/api/v1"
PRODUCTS = f"{API}/products"
ESTIMATES = f"{API}/estimates"
USERS = f"{API}/users"


def create_product(client, headers, **overrides):
    payload = {"name": "Widget", "slug": "widget", **overrides}
    response = client.post(PRODUCTS, json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["data"]


def stored_password(session_maker, user_id: int) -> str:
    async def fetch():
        async with session_maker() as session:
            return (await session.get(User, user_id)).password

    return asyncio.run(fetch())


class TestResourceAuthentication:

    def test_index_requires_token(self, client):
        response = client.get(PRODUCTS)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHENTICATED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token_rejected(self, client):
        response = client.get(PRODUCTS, headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token_cannot_authenticate(self, client, tokens):
        headers = {"Authorization": f"Bearer {tokens['refresh_token']}"}
        response = client.get(PRODUCTS, headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_schema_requires_token(self, client):
        assert client.get(f"{PRODUCTS}/schema").status_code == status.HTTP_401_UNAUTHORIZED


class TestResourceIndex:

    def test_empty_index(self, client, auth_headers):
        response = client.get(PRODUCTS, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["pagination"] == {
            "totalItems": 0,
            "currentPage": 1,
            "itemsPerPage": 15,
            "totalPages": 0,
            "urlPath": "/api/v1/products",
            "urlQuery": None,
            "nextPage": None,
            "prevPage": None,
        }
        assert body["search"] is None
        assert body["sort"] is None
        assert body["notifications"] is None
        assert set(body["columns"]) == {"name", "cost", "price", "mrp", "stock_quantity"}
        assert [group["group"] for group in body["schema"]] == [
            "General Information", "Price & Inventory", "TAX", "Shipping", "Description",
        ]
        assert body["filters"]["applied"] is None
        assert {f["field"] for f in body["filters"]["available"]} == {"type", "publication_status"}

    def test_page_zero_falls_back_with_warning(self, client, auth_headers):
        response = client.get(PRODUCTS, params={"page": 0}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["pagination"]["currentPage"] == 1
        assert body["notifications"] == [
            {"type": "warning", "message": "Invalid page number '0', using page 1"}
        ]

    def test_per_page_capped_at_maximum(self, client, auth_headers):
        response = client.get(PRODUCTS, params={"per_page": 150}, headers=auth_headers)

        body = response.json()
        assert body["pagination"]["itemsPerPage"] == 100
        assert body["notifications"][0]["message"] == "Page size exceeds maximum of 100, using maximum 100."

    def test_pagination_links_and_query(self, client, auth_headers):
        for i in range(3):
            create_product(client, auth_headers, name=f"Item {i}", slug=f"item-{i}")

        response = client.get(
            PRODUCTS, params={"per_page": 2, "page": 1, "sort": "name"}, headers=auth_headers
        )

        pagination = response.json()["pagination"]
        assert pagination["totalItems"] == 3
        assert pagination["totalPages"] == 2
        assert pagination["nextPage"] == "2"
        assert pagination["prevPage"] is None
        assert pagination["urlQuery"] == "sort=name"

    def test_page_past_end_is_clamped(self, client, auth_headers):
        create_product(client, auth_headers)

        response = client.get(PRODUCTS, params={"page": 5}, headers=auth_headers)

        body = response.json()
        assert body["pagination"]["currentPage"] == 1
        assert len(body["data"]) == 1
        assert body["notifications"][0]["message"] == (
            "Requested page 5 exceeds available pages. Showing page 1."
        )

    def test_sort_descending(self, client, auth_headers):
        create_product(client, auth_headers, name="Cheap", slug="cheap", price=10)
        create_product(client, auth_headers, name="Pricey", slug="pricey", price=900)

        response = client.get(PRODUCTS, params={"sort": "price", "dir": "desc"}, headers=auth_headers)

        body = response.json()
        assert [item["name"] for item in body["data"]] == ["Pricey", "Cheap"]
        assert body["sort"] == {"column": "price", "dir": "desc"}

    def test_unknown_sort_column_warns(self, client, auth_headers):
        response = client.get(PRODUCTS, params={"sort": "secret"}, headers=auth_headers)

        body = response.json()
        assert body["sort"] == {"column": "id", "dir": "asc"}
        assert body["notifications"][0]["message"] == "Sort column 'secret' not found, using default 'id'"

    def test_search_matches_searchable_fields(self, client, auth_headers):
        create_product(client, auth_headers, name="Steel Bottle", slug="steel-bottle")
        create_product(client, auth_headers, name="Tote Bag", slug="tote-bag", sku="BOT-9")
        create_product(client, auth_headers, name="Desk Lamp", slug="desk-lamp")

        response = client.get(PRODUCTS, params={"search": "bot"}, headers=auth_headers)

        body = response.json()
        assert body["search"] == "bot"
        assert {item["name"] for item in body["data"]} == {"Steel Bottle", "Tote Bag"}

    def test_search_wildcards_match_literally(self, client, auth_headers):
        create_product(client, auth_headers, name="Desk Lamp", slug="desk-lamp")
        create_product(client, auth_headers, name="100% Cotton Tee", slug="cotton-tee")

        wildcard = client.get(PRODUCTS, params={"search": "%%"}, headers=auth_headers)
        percent = client.get(PRODUCTS, params={"search": "0% c"}, headers=auth_headers)

        assert wildcard.json()["pagination"]["totalItems"] == 0
        assert [item["name"] for item in percent.json()["data"]] == ["100% Cotton Tee"]

    def test_short_search_is_ignored(self, client, auth_headers):
        create_product(client, auth_headers)

        response = client.get(PRODUCTS, params={"search": "w"}, headers=auth_headers)

        body = response.json()
        assert body["search"] is None
        assert len(body["data"]) == 1
        assert body["notifications"][0]["type"] == "warning"

    def test_filter_by_allowed_value(self, client, auth_headers):
        create_product(client, auth_headers, name="Draft", slug="draft")
        create_product(client, auth_headers, name="Live", slug="live", publication_status="published")

        response = client.get(
            PRODUCTS, params={"filter": "publication_status:published"}, headers=auth_headers
        )

        body = response.json()
        assert [item["name"] for item in body["data"]] == ["Live"]
        assert body["filters"]["applied"] == {"field": "publication_status", "value": "published"}

    def test_filter_with_unknown_value_is_ignored(self, client, auth_headers):
        create_product(client, auth_headers)

        response = client.get(PRODUCTS, params={"filter": "type:bundle"}, headers=auth_headers)

        body = response.json()
        assert len(body["data"]) == 1
        assert body["filters"]["applied"] is None
        assert body["notifications"][0]["message"] == (
            "Invalid filter value 'bundle' for type, filter ignored"
        )


class TestResourceCrud:

    def test_store_returns_created_record(self, client, auth_headers, product_payload):
        response = client.post(PRODUCTS, json=product_payload, headers=auth_headers)

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Resource created successfully"
        data = body["data"]
        assert data["id"] >= 1
        assert data["name"] == "Steel Water Bottle"
        assert data["price"] == 449
        assert data["cost"] == 210.5
        # column defaults filled in by the database
        assert data["brand"] == "ASENSAR"
        assert data["type"] == "simple"
        assert data["created_at"] is not None

    def test_store_missing_required_field(self, client, auth_headers):
        response = client.post(PRODUCTS, json={"name": "No slug"}, headers=auth_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNPROCESSABLE_ENTITY"
        assert body["error"]["validation_errors"] == {"slug": ["The slug field is required."]}

    def test_store_type_errors(self, client, auth_headers):
        response = client.post(
            PRODUCTS,
            json={"name": "Widget", "slug": "widget", "stock_quantity": "many", "type": "bundle"},
            headers=auth_headers,
        )

        errors = response.json()["error"]["validation_errors"]
        assert errors["stock_quantity"] == ["The stock quantity field must be an integer."]
        assert errors["type"] == ["The selected type is invalid."]

    def test_store_invalid_json(self, client, auth_headers):
        response = client.post(
            PRODUCTS,
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    def test_show_update_destroy_round_trip(self, client, auth_headers):
        created = create_product(client, auth_headers)
        url = f"{PRODUCTS}/{created['id']}"

        shown = client.get(url, headers=auth_headers)
        assert shown.status_code == status.HTTP_200_OK
        assert shown.json()["data"]["slug"] == "widget"

        updated = client.put(url, json={"price": "99.90", "active": "0"}, headers=auth_headers)
        assert updated.status_code == status.HTTP_200_OK
        assert updated.json()["message"] == "Resource updated successfully"
        assert updated.json()["data"]["price"] == 99.9
        assert updated.json()["data"]["active"] is False
        assert updated.json()["data"]["name"] == "Widget"

        patched = client.patch(url, json={"name": "Widget Pro"}, headers=auth_headers)
        assert patched.json()["data"]["name"] == "Widget Pro"

        deleted = client.delete(url, headers=auth_headers)
        assert deleted.status_code == status.HTTP_200_OK
        assert deleted.json()["message"] == "Resource deleted successfully"
        assert "data" not in deleted.json()

        assert client.get(url, headers=auth_headers).status_code == status.HTTP_404_NOT_FOUND

    def test_destroy_twice_is_not_found(self, client, auth_headers):
        created = create_product(client, auth_headers)
        url = f"{PRODUCTS}/{created['id']}"

        assert client.delete(url, headers=auth_headers).status_code == status.HTTP_200_OK
        second = client.delete(url, headers=auth_headers)

        assert second.status_code == status.HTTP_404_NOT_FOUND
        assert second.json()["message"] == f"Resource with ID '{created['id']}' not found"

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_missing_record(self, client, auth_headers, method):
        kwargs = {"json": {"name": "x"}} if method == "put" else {}
        response = getattr(client, method)(f"{PRODUCTS}/9999", headers=auth_headers, **kwargs)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["message"] == "Resource with ID '9999' not found"

    def test_non_numeric_id_is_not_found(self, client, auth_headers):
        response = client.get(f"{PRODUCTS}/abc", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_out_of_range_id_is_not_found(self, client, auth_headers, method):
        response = getattr(client, method)(f"{PRODUCTS}/99999999999999999999", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_duplicate_unique_value_conflicts(self, client, auth_headers):
        create_product(client, auth_headers)

        response = client.post(PRODUCTS, json={"name": "Other", "slug": "widget"}, headers=auth_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["error"]["code"] == "CONFLICT"
        assert body["error"]["details"][0]["field"] == "slug"

    def test_explicit_null_uses_column_default(self, client, auth_headers):
        created = create_product(client, auth_headers, brand="Acme")

        response = client.put(f"{PRODUCTS}/{created['id']}", json={"brand": None}, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["brand"] == "ASENSAR"

    def test_failed_update_rolls_back(self, client, auth_headers):
        created = create_product(client, auth_headers)
        url = f"{PRODUCTS}/{created['id']}"

        response = client.put(url, json={"slug": None, "name": "Renamed"}, headers=auth_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert body["message"] == "Internal server error"

        current = client.get(url, headers=auth_headers).json()["data"]
        assert current["slug"] == "widget"
        assert current["name"] == "Widget"


class TestResourceMetadata:

    def test_schema_route_not_captured_by_id(self, client, auth_headers):
        response = client.get(f"{PRODUCTS}/schema", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        groups = response.json()["data"]
        assert groups[0]["group"] == "General Information"
        assert groups[0]["fields"]["slug"]["required"] is True

    def test_columns_route(self, client, auth_headers):
        response = client.get(f"{PRODUCTS}/columns", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        columns = response.json()["data"]
        assert columns["name"]["label"] == "Product Name"
        assert columns["price"]["sortable"] is True

    def test_auto_schema_for_estimates(self, client, auth_headers):
        response = client.get(f"{ESTIMATES}/schema", headers=auth_headers)

        groups = response.json()["data"]
        assert len(groups) == 1
        fields = groups[0]["fields"]
        assert fields["date"]["type"] == "date"
        assert fields["status"]["type"] == "select"
        assert fields["number"]["required"] is True
        assert fields["grand_total"]["type"] == "number"


class TestEstimates:

    def test_create_and_filter_by_status(self, client, auth_headers):
        base = {"date": "2026-10-19", "customer_id": "C-001"}
        first = client.post(ESTIMATES, json={**base, "number": "EST-1"}, headers=auth_headers)
        second = client.post(
            ESTIMATES, json={**base, "number": "EST-2", "status": "SENT"}, headers=auth_headers
        )
        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_201_CREATED
        assert first.json()["data"]["status"] == "DRAFT"
        assert first.json()["data"]["date"] == "2026-10-19"

        response = client.get(ESTIMATES, params={"filter": "status:SENT"}, headers=auth_headers)

        assert [item["number"] for item in response.json()["data"]] == ["EST-2"]

    def test_filter_all_clears_filter(self, client, auth_headers):
        client.post(
            ESTIMATES, json={"number": "EST-1", "date": "2026-10-19", "customer_id": "C"}, headers=auth_headers
        )

        response = client.get(ESTIMATES, params={"filter": "status:all"}, headers=auth_headers)

        body = response.json()
        assert len(body["data"]) == 1
        assert body["filters"]["applied"] is None
        assert body["notifications"] is None

    def test_invalid_date_format(self, client, auth_headers):
        response = client.post(
            ESTIMATES,
            json={"number": "EST-1", "date": "19/10/2026", "customer_id": "C-001"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["validation_errors"]["date"] == [
            "The date field must match the format Y-m-d."
        ]


class TestUserResource:

    def new_user(self, **overrides):
        return {
            "name": "Jane",
            "username": "jane",
            "email": "jane@example.com",
            "password": "password123",
            **overrides,
        }

    def test_password_hidden_and_hashed(self, client, auth_headers, session_maker):
        response = client.post(USERS, json=self.new_user(), headers=auth_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert "password" not in data
        hashed = stored_password(session_maker, data["id"])
        assert hashed != "password123"
        assert verify_password("password123", hashed)

    def test_empty_password_on_update_keeps_hash(self, client, auth_headers, session_maker):
        user_id = client.post(USERS, json=self.new_user(), headers=auth_headers).json()["data"]["id"]
        before = stored_password(session_maker, user_id)

        response = client.put(
            f"{USERS}/{user_id}", json={"name": "Jane D", "password": ""}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["name"] == "Jane D"
        assert stored_password(session_maker, user_id) == before

    def test_new_password_on_update_is_hashed(self, client, auth_headers, session_maker):
        user_id = client.post(USERS, json=self.new_user(), headers=auth_headers).json()["data"]["id"]

        client.put(f"{USERS}/{user_id}", json={"password": "another-pass"}, headers=auth_headers)

        assert verify_password("another-pass", stored_password(session_maker, user_id))

    def test_short_password_rejected(self, client, auth_headers):
        response = client.post(USERS, json=self.new_user(password="short"), headers=auth_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["validation_errors"]["password"] == [
            "Password must be at least 8 characters long."
        ]

    def test_invalid_email_rejected(self, client, auth_headers):
        response = client.post(USERS, json=self.new_user(email="not-an-email"), headers=auth_headers)

        assert response.json()["error"]["validation_errors"]["email"] == [
            "Please provide a valid email address."
        ]

    def test_taken_email_rejected(self, client, auth_headers, registered_user):
        response = client.post(
            USERS, json=self.new_user(email=registered_user["email"]), headers=auth_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["validation_errors"]["email"] == [
            "This email address is already taken."
        ]

    def test_own_email_allowed_on_update(self, client, auth_headers, registered_user):
        response = client.put(
            f"{USERS}/{registered_user['id']}",
            json={"email": registered_user["email"]},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_200_OK

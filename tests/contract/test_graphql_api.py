"""
Contract tests for the HTTP surface.

Tests cover:
- GraphQL queries and mutations with their camelCase field names
- Error reporting in the ``errors`` array (domain errors visible, others masked)
- Health, readiness and metrics endpoints
- Correlation ID propagation
"""

from unittest.mock import AsyncMock

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError
from strawberry.extensions import MaskErrors, SchemaExtension

from garage_api.src.gql.schema import schema
from tests.doubles import JOKE

VEHICLE_FIELDS = "id name manufacturer year joke parts { id name price vehicleId }"


def gql(client, query: str, **variables):
    response = client.post("/graphql", json={"query": query, "variables": variables})
    assert response.status_code == 200
    return response.json()


def add_vehicle(client, name="Model T", manufacturer="Ford", year=1920) -> dict:
    body = gql(
        client,
        f"""
        mutation($name: String!, $manufacturer: String!, $year: Int!) {{
            addVehicle(name: $name, manufacturer: $manufacturer, year: $year) {{ {VEHICLE_FIELDS} }}
        }}
        """,
        name=name,
        manufacturer=manufacturer,
        year=year,
    )
    return body["data"]["addVehicle"]


def add_part(client, vehicle_id: str, name="Wheel", price=10.0) -> dict:
    body = gql(
        client,
        """
        mutation($name: String!, $price: Float!, $vehicleId: ID!) {
            addPart(name: $name, price: $price, vehicleId: $vehicleId) { id name price vehicleId }
        }
        """,
        name=name,
        price=price,
        vehicleId=vehicle_id,
    )
    return body["data"]["addPart"]


class TestVehicleQueries:
    """Test the query root."""

    def test_vehicle_with_parts(self, client) -> None:
        vehicle = add_vehicle(client)
        part = add_part(client, vehicle["id"], name="Carburetor", price=45.0)

        body = gql(client, f"query($id: ID!) {{ vehicle(id: $id) {{ {VEHICLE_FIELDS} }} }}", id=vehicle["id"])

        assert "errors" not in body
        assert body["data"]["vehicle"] == {
            "id": vehicle["id"],
            "name": "Model T",
            "manufacturer": "Ford",
            "year": 1920,
            "joke": JOKE,
            "parts": [
                {"id": part["id"], "name": "Carburetor", "price": 45.0, "vehicleId": vehicle["id"]}
            ],
        }

    def test_unknown_vehicle_is_null(self, client) -> None:
        body = gql(client, "query($id: ID!) { vehicle(id: $id) { id } }", id=str(ObjectId()))

        assert "errors" not in body
        assert body["data"]["vehicle"] is None

    def test_malformed_id_reports_bad_input(self, client) -> None:
        body = gql(client, 'query { vehicle(id: "nope") { id } }')

        assert body["data"]["vehicle"] is None
        assert body["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"

    def test_listings(self, client) -> None:
        ford = add_vehicle(client)
        add_vehicle(client, "Beetle", "Volkswagen", 1938)
        add_part(client, ford["id"])

        body = gql(
            client,
            """
            query($vehicleId: ID!) {
                vehicles { name }
                parts { name vehicleId }
                vehiclesByManufacturer(manufacturer: "Ford") { name }
                partsByVehicle(vehicleId: $vehicleId) { name }
                vehiclesByYearRange(startYear: 1930, endYear: 1940) { name }
            }
            """,
            vehicleId=ford["id"],
        )

        data = body["data"]
        assert [v["name"] for v in data["vehicles"]] == ["Model T", "Beetle"]
        assert data["parts"] == [{"name": "Wheel", "vehicleId": ford["id"]}]
        assert data["vehiclesByManufacturer"] == [{"name": "Model T"}]
        assert data["partsByVehicle"] == [{"name": "Wheel"}]
        assert data["vehiclesByYearRange"] == [{"name": "Beetle"}]

    def test_inverted_year_range_reports_bad_input(self, client) -> None:
        body = gql(client, "{ vehiclesByYearRange(startYear: 2000, endYear: 1990) { id } }")

        assert body["data"] is None
        assert body["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"


class TestMutations:
    """Test the mutation root."""

    def test_add_vehicle_returns_empty_parts(self, client) -> None:
        vehicle = add_vehicle(client)

        assert vehicle["parts"] == []
        assert vehicle["joke"] == JOKE

    def test_update_vehicle_partial(self, client) -> None:
        vehicle = add_vehicle(client)
        add_part(client, vehicle["id"])

        body = gql(
            client,
            f"mutation($id: ID!) {{ updateVehicle(id: $id, year: 1925) {{ {VEHICLE_FIELDS} }} }}",
            id=vehicle["id"],
        )

        updated = body["data"]["updateVehicle"]
        assert updated["year"] == 1925
        assert updated["name"] == "Model T"
        assert updated["parts"] == []

        body = gql(client, "query($id: ID!) { vehicle(id: $id) { parts { name } } }", id=vehicle["id"])
        assert body["data"]["vehicle"]["parts"] == [{"name": "Wheel"}]

    def test_update_unknown_vehicle_is_null(self, client) -> None:
        body = gql(
            client,
            'mutation($id: ID!) { updateVehicle(id: $id, name: "x") { id } }',
            id=str(ObjectId()),
        )

        assert "errors" not in body
        assert body["data"]["updateVehicle"] is None

    def test_delete_part_detaches(self, client) -> None:
        vehicle = add_vehicle(client)
        part = add_part(client, vehicle["id"])

        body = gql(
            client,
            "mutation($id: ID!) { deletePart(id: $id) { id name vehicleId } }",
            id=part["id"],
        )

        assert body["data"]["deletePart"] == {"id": part["id"], "name": "Wheel", "vehicleId": vehicle["id"]}
        body = gql(client, "query($id: ID!) { vehicle(id: $id) { parts { id } } }", id=vehicle["id"])
        assert body["data"]["vehicle"]["parts"] == []

    def test_delete_missing_part_reports_not_found(self, client) -> None:
        body = gql(
            client,
            "mutation($id: ID!) { deletePart(id: $id) { id } }",
            id=str(ObjectId()),
        )

        assert body["data"] is None
        error = body["errors"][0]
        assert error["message"] == "Part not found"
        assert error["path"] == ["deletePart"]
        assert error["extensions"]["code"] == "NOT_FOUND"

    def test_add_part_to_unknown_vehicle_reports_not_found(self, client) -> None:
        body = gql(
            client,
            'mutation($v: ID!) { addPart(name: "Wheel", price: 1.0, vehicleId: $v) { id } }',
            v=str(ObjectId()),
        )

        assert body["errors"][0]["message"] == "Vehicle not found"


class TestErrorMasking:
    """Only domain errors reach the client verbatim."""

    def test_store_failure_is_reported(self, client, parts_collection) -> None:
        parts_collection.fail_on("find", ServerSelectionTimeoutError("no servers"))

        body = gql(client, "{ parts { id } }")

        assert body["errors"][0]["extensions"]["code"] == "STORE_FAILURE"
        assert "no servers" not in body["errors"][0]["message"]

    def test_unexpected_error_is_masked(self, client) -> None:
        services = client.app.state.services
        services.queries.list_parts = AsyncMock(side_effect=RuntimeError("secret detail"))

        body = gql(client, "{ parts { id } }")

        assert "secret detail" not in body["errors"][0]["message"]

    def test_schema_errors_are_not_masked(self, client) -> None:
        body = gql(client, "{ vehicles { doesNotExist } }")

        assert "doesNotExist" in body["errors"][0]["message"]

    def test_masking_extension_built_per_operation(self) -> None:
        for factory in schema.extensions:
            assert not isinstance(factory, SchemaExtension)
            assert isinstance(factory(), MaskErrors)


class TestOperationalEndpoints:
    """Health, readiness, metrics and correlation IDs."""

    def test_health(self, client, settings) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == settings.app_name

    def test_ready(self, client) -> None:
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["mongodb"] == "healthy"

    def test_not_ready_when_store_unreachable(self, client, database) -> None:
        database.ping_error = ServerSelectionTimeoutError("no servers")

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_metrics_exposed(self, client, settings) -> None:
        add_vehicle(client)

        response = client.get(settings.metrics_endpoint)

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert "garage_enrichment_requests_total" in response.text

    def test_correlation_id_echoed(self, client) -> None:
        response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_correlation_id_generated(self, client) -> None:
        response = client.get("/")
        assert response.headers["X-Correlation-ID"]

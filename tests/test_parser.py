"""Tests for the parser module."""

import pytest

from activity_generator.exceptions import SpecParseError, UnresolvedReferenceError
from activity_generator.parser import parse_operations, parse_parameter, parse_response
from activity_generator.type_mapper import TypeMapper


def _mapper(schemas: dict | None = None, strict: bool = True) -> TypeMapper:
    return TypeMapper(schemas or {}, "openapi_client.models", strict_refs=strict)


class TestParseOperations:
    """Walking the petstore document."""

    def test_document_order(self, operations):
        assert [(op.http_method, op.path) for op in operations] == [
            ("GET", "/pets"),
            ("POST", "/pets"),
            ("GET", "/pets/{id}"),
            ("PUT", "/pets/{id}"),
            ("DELETE", "/pets/{id}"),
            ("PATCH", "/pets/{id}/photos"),
        ]

    def test_operation_ids(self, operations):
        assert [op.operation_id for op in operations] == [
            "listPets", "createPet", "getpetsid", "updatePet", "deletePet", "tag-photos",
        ]

    def test_empty_paths(self):
        assert parse_operations({"openapi": "3.0.0", "paths": {}}, _mapper()) == []

    def test_missing_paths(self):
        assert parse_operations({"openapi": "3.0.0"}, _mapper()) == []

    def test_unsupported_methods_ignored(self):
        spec = {"paths": {"/pets": {"head": {"operationId": "headPets"}, "options": {}}}}
        assert parse_operations(spec, _mapper()) == []

    def test_idempotency(self, ops_by_id):
        assert ops_by_id["listPets"].idempotent
        assert ops_by_id["updatePet"].idempotent
        assert ops_by_id["deletePet"].idempotent
        assert not ops_by_id["createPet"].idempotent
        assert not ops_by_id["tag-photos"].idempotent

    def test_tags(self, ops_by_id):
        assert ops_by_id["listPets"].tags == ("pets",)
        assert ops_by_id["tag-photos"].tags == ()

    def test_summary_and_description(self, ops_by_id):
        assert ops_by_id["listPets"].summary == "List all pets"
        assert ops_by_id["tag-photos"].description == "Tag the photos of a pet."


class TestParameters:

    def test_types(self, ops_by_id):
        params = {p.name: p for p in ops_by_id["createPet"].parameters}
        assert params["X-Request-ID"].type_name == "uuid.UUID"
        assert params["X-Request-ID"].location == "header"
        assert params["X-Request-ID"].field_name == "xRequestID"
        assert params["dry_run"].type_name == "bool"

    def test_declared_order(self, ops_by_id):
        names = [p.name for p in ops_by_id["tag-photos"].parameters]
        assert names == ["id", "caption", "album", "taken_after"]

    def test_path_level_parameters_inherited(self, ops_by_id):
        for op_id in ("getpetsid", "updatePet", "deletePet"):
            params = ops_by_id[op_id].parameters
            assert [p.name for p in params] == ["id"]
            assert params[0].description == "The id of the pet"

    def test_operation_parameter_overrides_path_level(self):
        spec = {
            "paths": {
                "/pets/{id}": {
                    "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
                    "get": {
                        "operationId": "getPet",
                        "parameters": [{"name": "id", "in": "path", "schema": {"type": "integer"}}],
                    },
                }
            }
        }
        (op,) = parse_operations(spec, _mapper())
        assert len(op.parameters) == 1
        assert op.parameters[0].type_name == "int"

    def test_path_parameter_always_required(self):
        param = parse_parameter(_mapper(), {"name": "id", "in": "path", "schema": {"type": "string"}})
        assert param.required
        assert param.annotation == "str"

    def test_query_parameter_optional_by_default(self):
        param = parse_parameter(_mapper(), {"name": "limit", "in": "query", "schema": {"type": "integer"}})
        assert not param.required
        assert param.annotation == "Optional[int]"

    def test_missing_schema_is_any(self):
        param = parse_parameter(_mapper(), {"name": "q", "in": "query"})
        assert param.type_name == "Any"

    def test_schema_from_content(self):
        raw = {"name": "filter", "in": "query", "content": {"application/json": {"schema": {"type": "object"}}}}
        assert parse_parameter(_mapper(), raw).type_name == "dict[str, Any]"

    def test_referenced_parameter(self):
        spec = {
            "components": {"parameters": {"Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}}}},
            "paths": {"/pets": {"get": {"operationId": "listPets", "parameters": [{"$ref": "#/components/parameters/Limit"}]}}},
        }
        (op,) = parse_operations(spec, _mapper())
        assert op.parameters[0].name == "limit"

    def test_nameless_parameter_rejected(self):
        spec = {"paths": {"/pets": {"get": {"parameters": [{"in": "query"}]}}}}
        with pytest.raises(SpecParseError, match="GET /pets"):
            parse_operations(spec, _mapper())


class TestRequestBody:

    def test_json_preferred(self, ops_by_id):
        body = ops_by_id["createPet"].request_body
        assert list(body.content) == ["application/xml", "application/json"]
        assert body.primary_content_type.content_type == "application/json"
        assert ops_by_id["createPet"].body_type == "openapi_client.models.NewPet"

    def test_required(self, ops_by_id):
        assert ops_by_id["createPet"].request_body.required
        assert not ops_by_id["updatePet"].request_body.required

    def test_no_body(self, ops_by_id):
        assert ops_by_id["listPets"].request_body is None


class TestResponses:

    def test_array_response(self, ops_by_id):
        response = ops_by_id["listPets"].response
        media = response.primary_content_type
        assert response.status_code == "200"
        assert media.is_array
        assert media.item_type == "openapi_client.models.Pet"
        assert ops_by_id["listPets"].return_type == "list[openapi_client.models.Pet]"

    def test_first_2xx_wins(self, ops_by_id):
        """404 is declared first but the 200 response is used."""
        response = ops_by_id["getpetsid"].response
        assert response.status_code == "200"
        assert response.primary_content_type.schema_ref == "#/components/schemas/Pet"

    def test_created(self, ops_by_id):
        assert ops_by_id["createPet"].response.status_code == "201"

    def test_no_content(self, ops_by_id):
        assert ops_by_id["deletePet"].response.status_code == "204"
        assert ops_by_id["deletePet"].return_type == "None"

    def test_no_responses_defaults_to_200(self, ops_by_id):
        response = ops_by_id["tag-photos"].response
        assert response.status_code == "200"
        assert response.description == "Success"
        assert ops_by_id["tag-photos"].return_type == "None"

    def test_falls_back_to_first_declared(self):
        response = parse_response({}, _mapper(), {"404": {"description": "Not found"}, "default": {}})
        assert response.status_code == "404"
        assert response.description == "Not found"


class TestReferences:

    _SPEC: dict = {
        "paths": {
            "/pets": {
                "get": {
                    "operationId": "listPets",
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Missing"}}},
                        }
                    },
                }
            }
        }
    }

    def test_undefined_schema_rejected(self):
        with pytest.raises(UnresolvedReferenceError):
            parse_operations(self._SPEC, _mapper())

    def test_undefined_schema_lenient(self):
        (op,) = parse_operations(self._SPEC, _mapper(strict=False))
        assert op.return_type == "openapi_client.models.Missing"


class TestDuplicateMethodNames:

    def test_counter_suffix(self):
        spec = {
            "paths": {
                "/a": {"get": {"operationId": "fetch"}},
                "/b": {"get": {"operationId": "fetch"}},
                "/c": {"get": {"operationId": "fetch"}},
            }
        }
        names = [op.method_name for op in parse_operations(spec, _mapper())]
        assert names == ["fetch", "fetch2", "fetch3"]


class TestParameterIdentifiers:
    """Parameters sharing a name across locations get distinct identifiers."""

    _SPEC: dict = {
        "paths": {
            "/things/{id}": {
                "get": {
                    "operationId": "getThing",
                    "parameters": [
                        {"name": "id", "in": "path", "schema": {"type": "string"}},
                        {"name": "id", "in": "query", "schema": {"type": "string"}},
                    ],
                },
                "put": {
                    "operationId": "putThing",
                    "parameters": [{"name": "body", "in": "query", "schema": {"type": "string"}}],
                    "requestBody": {"content": {"application/json": {"schema": {"type": "object"}}}},
                },
            }
        }
    }

    def test_location_suffix(self, caplog):
        get_thing = parse_operations(self._SPEC, _mapper())[0]
        assert [p.field_name for p in get_thing.parameters] == ["id", "idQuery"]
        assert [p.name for p in get_thing.parameters] == ["id", "id"]
        assert "renaming to 'idQuery'" in caplog.text

    def test_body_name_reserved_when_body_present(self):
        put_thing = parse_operations(self._SPEC, _mapper())[1]
        assert put_thing.parameters[0].field_name == "bodyQuery"
        assert put_thing.parameters[0].name == "body"

"""Tests for spec loading, operation lookup and input model building."""

import json

import pytest
from pydantic import ValidationError

from clicksend_mcp.errors import SpecLoadError
from clicksend_mcp.openapi import (
    DATE_REQUEST_PARAM,
    HISTORY_PATH,
    build_input_model,
    derive_operation_id,
    find_message_field,
    inject_date_request_parameter,
    load_spec,
    lookup_operation,
    parse_endpoint,
    request_body_schema,
    sanitize_tool_id,
)


def _history_parameter_names(spec: dict) -> list:
    return [p["name"] for p in spec["paths"][HISTORY_PATH]["get"]["parameters"]]


class TestLoadSpec:
    def test_bundled_spec_has_date_parameter(self, spec):
        assert _history_parameter_names(spec).count(DATE_REQUEST_PARAM) == 1

    def test_injection_is_idempotent(self, spec):
        assert inject_date_request_parameter(spec) is False
        assert _history_parameter_names(spec).count(DATE_REQUEST_PARAM) == 1

    def test_injection_adds_once(self):
        spec = {"paths": {HISTORY_PATH: {"get": {"parameters": []}}}}
        assert inject_date_request_parameter(spec) is True
        assert inject_date_request_parameter(spec) is False
        assert _history_parameter_names(spec) == [DATE_REQUEST_PARAM]

    def test_injection_without_history_operation(self):
        spec = {"paths": {"/v3/sms/send": {"post": {}}}}
        assert inject_date_request_parameter(spec) is False

    def test_json_document(self, tmp_path):
        path = tmp_path / "spec.json"
        path.write_text(json.dumps({"paths": {HISTORY_PATH: {"get": {"summary": "History"}}}}))
        spec = load_spec(path)
        assert _history_parameter_names(spec) == [DATE_REQUEST_PARAM]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecLoadError):
            load_spec(tmp_path / "missing.yaml")

    def test_unparsable_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("paths: [unclosed\n")
        with pytest.raises(SpecLoadError):
            load_spec(path)

    def test_document_without_paths(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("openapi: 3.0.1\n")
        with pytest.raises(SpecLoadError):
            load_spec(path)


class TestOperationIndex:
    def test_lookup_is_case_insensitive(self, spec):
        upper = lookup_operation(spec, "GET", "/v3/sms/templates")
        lower = lookup_operation(spec, "get", "/v3/sms/templates")
        assert upper == lower
        assert upper.method == "GET"
        assert upper.summary == "Get lists of all SMS templates"

    def test_lookup_miss(self, spec):
        assert lookup_operation(spec, "GET", "/v3/nowhere") is None
        assert lookup_operation(spec, "DELETE", "/v3/sms/templates") is None

    def test_lookup_empty_operation(self):
        operation = lookup_operation({"paths": {"/x": {"get": {}}}}, "GET", "/x")
        assert operation is not None
        assert operation.parameters == ()
        assert operation.summary == ""

    def test_lookup_collects_parameters(self, spec):
        operation = lookup_operation(spec, "GET", "/v3/sms/receipts/{message_id}")
        assert [p.name for p in operation.parameters_in("path")] == ["message_id"]
        assert operation.parameters_in("query") == ()

    def test_derive_operation_id(self):
        assert derive_operation_id("GET", "/v3/sms/history") == "GET-v3-sms-history"
        assert derive_operation_id("GET", "/v3/sms/{id}/cancel") == "GET-v3-sms-id-cancel"

    def test_sanitize_tool_id(self):
        assert sanitize_tool_id("POST-v3-sms-send") == "post-v3-sms-send"
        assert sanitize_tool_id("Get v3.sms") == "get-v3-sms"

    def test_parse_endpoint(self):
        assert parse_endpoint("post /v3/sms/send") == ("POST", "/v3/sms/send")


class TestBuildInputModel:
    def test_query_parameters_optional(self, spec):
        model = build_input_model(lookup_operation(spec, "GET", HISTORY_PATH), spec)
        for name in ("q", "date_from", "date_to", "order_by", "page", "limit", DATE_REQUEST_PARAM):
            assert not model.model_fields[name].is_required()
        assert model.model_validate({}).model_dump(exclude_unset=True) == {}

    def test_required_query_parameter(self, spec):
        model = build_input_model(lookup_operation(spec, "GET", "/v3/search/contacts-lists"), spec)
        assert model.model_fields["q"].is_required()
        with pytest.raises(ValidationError):
            model.model_validate({"page": 1})

    def test_parameter_description_overrides_schema(self):
        spec = {
            "paths": {
                "/things": {
                    "get": {
                        "parameters": [
                            {
                                "name": "kind",
                                "in": "query",
                                "description": "Parameter text",
                                "schema": {"type": "string", "description": "Schema text"},
                            },
                            {
                                "name": "size",
                                "in": "query",
                                "schema": {"type": "integer", "description": "Schema only"},
                            },
                        ]
                    }
                }
            }
        }
        model = build_input_model(lookup_operation(spec, "GET", "/things"), spec)
        assert model.model_fields["kind"].description == "Parameter text"
        assert model.model_fields["size"].description == "Schema only"

    def test_body_fields_are_flattened(self, spec):
        model = build_input_model(lookup_operation(spec, "POST", "/v3/sms/send"), spec)
        assert model.model_fields["messages"].is_required()
        payload = model.model_validate(
            {"messages": [{"body": "hello", "to": "+61400000000", "from": "Acme"}]}
        )
        assert payload.model_dump(by_alias=True, exclude_unset=True) == {
            "messages": [{"body": "hello", "to": "+61400000000", "from": "Acme"}]
        }

    def test_body_message_requires_body(self, spec):
        model = build_input_model(lookup_operation(spec, "POST", "/v3/sms/send"), spec)
        with pytest.raises(ValidationError):
            model.model_validate({"messages": [{"to": "+61400000000"}]})

    def test_json_schema_keeps_original_names(self, spec):
        model = build_input_model(lookup_operation(spec, "POST", "/v3/sms/send"), spec)
        schema = json.dumps(model.model_json_schema())
        assert '"from"' in schema
        assert '"from_"' not in schema

    def test_content_type_preference(self):
        spec = {
            "paths": {
                "/upload": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/x-www-form-urlencoded": {
                                    "schema": {"properties": {"form_field": {"type": "string"}}}
                                },
                                "multipart/form-data": {
                                    "schema": {"properties": {"file_name": {"type": "string"}}}
                                },
                            }
                        }
                    }
                }
            }
        }
        operation = lookup_operation(spec, "POST", "/upload")
        assert set(request_body_schema(operation, spec)["properties"]) == {"file_name"}
        model = build_input_model(operation, spec)
        assert "file_name" in model.model_fields
        assert "form_field" not in model.model_fields

    def test_unresolvable_body_reference_is_skipped(self):
        spec = {
            "paths": {
                "/broken": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/Gone"}
                                }
                            }
                        }
                    }
                }
            }
        }
        model = build_input_model(lookup_operation(spec, "POST", "/broken"), spec)
        assert model.model_fields == {}


class TestFindMessageField:
    def test_array_of_records(self, spec):
        assert find_message_field(lookup_operation(spec, "POST", "/v3/sms/send"), spec) == "messages"

    def test_plain_object_body(self):
        spec = {
            "paths": {
                "/lists": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "object",
                                        "properties": {
                                            "list_name": {"type": "string"},
                                            "tags": {"type": "array", "items": {"type": "string"}},
                                        },
                                    }
                                }
                            }
                        }
                    }
                }
            }
        }
        assert find_message_field(lookup_operation(spec, "POST", "/lists"), spec) is None

    def test_no_body(self, spec):
        assert find_message_field(lookup_operation(spec, "GET", "/v3/sms/templates"), spec) is None

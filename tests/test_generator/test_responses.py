"""Tests for specgen.generator.responses -- results, errors and header policy."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from specgen.exceptions import ReferenceResolutionError
from specgen.generator.responses import resolve_responses
from specgen.generator.status import is_error, is_success, parse_status_code, reason_phrase
from specgen.models import ArraySchema, ReferenceSchema
from specgen.parser.resolver import Document


def _json(schema: dict[str, Any], description: str = "OK", **extra: Any) -> dict[str, Any]:
    return {"description": description, "content": {"application/json": {"schema": schema}}, **extra}


USER = {"$ref": "#/components/schemas/User"}


class TestStatusCodes:
    """Test status key parsing helpers."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [("200", 200), (404, 404), ("2xx", "2XX"), ("default", "default"), ("abc", None), ("600", None)],
    )
    def test_parse(self, key: Any, expected: Any) -> None:
        assert parse_status_code(key) == expected

    def test_classification(self) -> None:
        assert is_success(204) and is_success("2XX")
        assert not is_success(301) and not is_success("default")
        assert is_error(404) and is_error("5XX")
        assert not is_error(302) and not is_error("default")

    def test_reason_phrase(self) -> None:
        assert reason_phrase(404) == "Not Found"
        assert reason_phrase(599) == ""
        assert reason_phrase("default") == ""


class TestResolveResponses:
    """Test resolving a responses map."""

    def test_success_error_and_header(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {
                "200": _json(USER, headers={"X-Rate-Limit": {"schema": {"type": "integer"}}}),
                "404": {"description": "Not Found"},
            },
        )
        assert len(resolution.results) == 1
        result = resolution.results[0]
        assert result.status_code == 200
        assert isinstance(result.schema_, ReferenceSchema)
        assert resolution.errors == {404: "Not Found"}
        assert resolution.response_header == "X-Rate-Limit"
        assert resolution.imports == ["User"]

    def test_all_2xx_in_declaration_order(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"202": {"description": "Accepted"}, "200": _json(USER), "2XX": _json({"type": "string"})},
        )
        assert [r.status_code for r in resolution.results] == [202, 200, "2XX"]
        assert resolution.results[0].is_void
        assert resolution.errors == {}

    def test_default_used_when_no_success(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"404": {"description": "Missing"}, "default": {"$ref": "#/components/responses/Error"}},
        )
        assert [r.status_code for r in resolution.results] == ["default"]
        assert resolution.results[0].description == "Unexpected error"
        assert resolution.errors == {404: "Missing"}
        assert resolution.imports == ["Error"]

    def test_default_is_error_entry_when_success_exists(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"200": _json(USER), "default": {"$ref": "#/components/responses/Error"}},
        )
        assert resolution.errors == {"default": "Unexpected error"}
        assert resolution.imports == ["User"]

    def test_void_200_when_nothing_usable(self, users_api: Document) -> None:
        resolution = resolve_responses(users_api, {"500": {"description": "Boom"}})
        assert [r.status_code for r in resolution.results] == [200]
        assert resolution.results[0].is_void
        assert resolution.errors == {500: "Boom"}

    def test_missing_responses_map(self, users_api: Document) -> None:
        resolution = resolve_responses(users_api, None)
        assert [r.status_code for r in resolution.results] == [200]
        assert resolution.responses == []

    def test_error_description_falls_back_to_reason_phrase(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"200": {"description": "OK"}, "409": {"description": ""}, "4XX": {}},
        )
        assert resolution.errors == {409: "Conflict", "4XX": ""}

    def test_non_json_content_is_void(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"200": {"description": "CSV", "content": {"text/csv": {"schema": {"type": "string"}}}}},
        )
        assert resolution.results[0].is_void

    def test_header_absent_when_several(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"200": {"description": "OK", "headers": {"A": {}, "B": {}}}},
        )
        assert resolution.response_header is None

    def test_header_only_from_first_result(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"200": {"description": "OK"}, "201": {"description": "Created", "headers": {"Location": {}}}},
        )
        assert resolution.response_header is None

    def test_imports_deduplicated_across_results(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {
                "200": _json({"type": "array", "items": USER}),
                "201": _json({"oneOf": [{"$ref": "#/components/schemas/Error"}, USER]}),
            },
        )
        assert isinstance(resolution.results[0].schema_, ArraySchema)
        assert resolution.imports == ["User", "Error"]

    def test_responses_lists_everything(self, users_api: Document) -> None:
        resolution = resolve_responses(
            users_api,
            {"200": _json(USER), "404": {"description": "Not Found"}},
        )
        assert [r.status_code for r in resolution.responses] == [200, 404]
        assert [r.is_error for r in resolution.responses] == [False, True]

    def test_invalid_status_key_skipped_with_warning(
        self, users_api: Document, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="specgen.generator.responses"):
            resolution = resolve_responses(
                users_api,
                {"200": {"description": "OK"}, "x-extension": {"description": "?"}},
            )
        assert [r.status_code for r in resolution.responses] == [200]
        assert "x-extension" in caplog.text

    def test_broken_reference_raises(self, users_api: Document) -> None:
        with pytest.raises(ReferenceResolutionError, match="#/components/responses/Nope"):
            resolve_responses(users_api, {"200": {"$ref": "#/components/responses/Nope"}})

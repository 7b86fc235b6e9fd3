"""Tests for samroute.definition.mounts."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import pytest

from samroute.definition.document import parse_document
from samroute.definition.mounts import (
    create_mount,
    extract_mounts,
    fill_any_method,
    map_explicit_methods,
)
from samroute.models import (
    ANY_METHOD_EXTENSION,
    INTEGRATION_EXTENSION,
    ApiGatewayIntegration,
    HTTPMethod,
    MountDescriptor,
    Operation,
    ParsedDocument,
    PathItem,
)

ALL_METHODS = [m.value for m in HTTPMethod]

IntegrationFactory = Callable[[str], dict[str, Any]]


def _doc(paths: dict[str, Any]) -> ParsedDocument:
    return parse_document(json.dumps({"paths": paths}).encode("utf-8"))


def _pairs(mounts: list[MountDescriptor]) -> list[tuple[str, str]]:
    return [(m.path, m.method) for m in mounts]


# ---------------------------------------------------------------------------
# Full extraction
# ---------------------------------------------------------------------------


class TestExtractMountsUsersFixture:
    """Extraction from the users fixture."""

    @pytest.fixture()
    def mounts(self, users_definition: dict[str, Any]) -> list[MountDescriptor]:
        return extract_mounts(_doc(users_definition["paths"]))

    def test_mount_count(self, mounts: list[MountDescriptor]) -> None:
        # /health GET, /users GET + 6 wildcard, /users/{userId} GET + DELETE
        assert len(mounts) == 10

    def test_deterministic_order(self, mounts: list[MountDescriptor]) -> None:
        assert _pairs(mounts) == [
            ("/health", "get"),
            ("/users", "get"),
            ("/users", "post"),
            ("/users", "put"),
            ("/users", "delete"),
            ("/users", "patch"),
            ("/users", "head"),
            ("/users", "options"),
            ("/users/{userId}", "get"),
            ("/users/{userId}", "delete"),
        ]

    def test_no_duplicate_pairs(self, mounts: list[MountDescriptor]) -> None:
        pairs = _pairs(mounts)
        assert len(pairs) == len(set(pairs))

    def test_handlers(self, mounts: list[MountDescriptor]) -> None:
        handlers = {(m.path, m.method): m.handler_reference for m in mounts}
        assert handlers[("/users", "get")] == "fn-list-users"
        assert handlers[("/users/{userId}", "get")] == "GetUser"
        assert handlers[("/users/{userId}", "delete")] == "fn-delete-user"
        assert handlers[("/health", "get")] == ""

    def test_operation_without_integration_not_mounted(
        self, mounts: list[MountDescriptor]
    ) -> None:
        assert ("/users/{userId}", "put") not in _pairs(mounts)

    def test_name_equals_path(self, mounts: list[MountDescriptor]) -> None:
        assert all(m.name == m.path for m in mounts)


class TestExtractMountsScenarios:
    def test_explicit_get_plus_any_method(self, lambda_integration: IntegrationFactory) -> None:
        doc = _doc(
            {
                "/users": {
                    "get": {INTEGRATION_EXTENSION: lambda_integration("fn-list-users")},
                    ANY_METHOD_EXTENSION: {
                        INTEGRATION_EXTENSION: lambda_integration("fn-catch-all")
                    },
                }
            }
        )
        mounts = extract_mounts(doc)
        assert mounts[0] == MountDescriptor(
            name="/users", path="/users", method="get", handler_reference="fn-list-users"
        )
        assert [(m.method, m.handler_reference) for m in mounts[1:]] == [
            ("post", "fn-catch-all"),
            ("put", "fn-catch-all"),
            ("delete", "fn-catch-all"),
            ("patch", "fn-catch-all"),
            ("head", "fn-catch-all"),
            ("options", "fn-catch-all"),
        ]

    @pytest.mark.parametrize("explicit_count", range(0, 8))
    def test_wildcard_fills_exactly_the_gaps(
        self, explicit_count: int, lambda_integration: IntegrationFactory
    ) -> None:
        explicit = ALL_METHODS[:explicit_count]
        item: dict[str, Any] = {
            method: {INTEGRATION_EXTENSION: lambda_integration(f"fn-{method}")}
            for method in explicit
        }
        item[ANY_METHOD_EXTENSION] = {INTEGRATION_EXTENSION: lambda_integration("fn-any")}

        mounts = extract_mounts(_doc({"/p": item}))

        assert len(mounts) == 7
        wildcard = [m for m in mounts if m.handler_reference == "fn-any"]
        assert len(wildcard) == 7 - explicit_count
        for mount in mounts:
            if mount.method in explicit:
                assert mount.handler_reference == f"fn-{mount.method}"

    def test_empty_document(self) -> None:
        assert extract_mounts(ParsedDocument()) == []

    def test_paths_sorted(self, lambda_integration: IntegrationFactory) -> None:
        get = {"get": {INTEGRATION_EXTENSION: lambda_integration("fn")}}
        doc = _doc({"/b": get, "/a": get, "/a/{id}": get})
        assert [m.path for m in extract_mounts(doc)] == ["/a", "/a/{id}", "/b"]

    def test_malformed_explicit_integration_still_mounted(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        doc = _doc({"/a": {"post": {INTEGRATION_EXTENSION: "not-an-object"}}})
        with caplog.at_level(logging.WARNING, logger="samroute"):
            mounts = extract_mounts(doc)
        assert mounts == [
            MountDescriptor(name="/a", path="/a", method="post", handler_reference="")
        ]
        assert "No integration defined for POST /a" in caplog.text

    def test_null_integration_is_not_a_mapping(self) -> None:
        doc = _doc({"/a": {"get": {INTEGRATION_EXTENSION: None}}})
        assert extract_mounts(doc) == []

    def test_malformed_any_method_skipped(
        self, lambda_integration: IntegrationFactory, caplog: pytest.LogCaptureFixture
    ) -> None:
        doc = _doc(
            {
                "/a": {
                    "get": {INTEGRATION_EXTENSION: lambda_integration("fn-get")},
                    ANY_METHOD_EXTENSION: ["not", "an", "object"],
                }
            }
        )
        with caplog.at_level(logging.WARNING, logger="samroute"):
            mounts = extract_mounts(doc)
        assert _pairs(mounts) == [("/a", "get")]
        assert "Skipping any-method mounts for /a" in caplog.text

    def test_any_method_without_integration_mounts_empty_handlers(self) -> None:
        doc = _doc({"/a": {ANY_METHOD_EXTENSION: {}}})
        mounts = extract_mounts(doc)
        assert [m.method for m in mounts] == ALL_METHODS
        assert all(m.handler_reference == "" for m in mounts)

    def test_unsupported_method_never_mounted(self, lambda_integration: IntegrationFactory) -> None:
        doc = _doc(
            {
                "/a": {
                    "trace": {INTEGRATION_EXTENSION: lambda_integration("fn-trace")},
                    ANY_METHOD_EXTENSION: {
                        INTEGRATION_EXTENSION: lambda_integration("fn-any")
                    },
                }
            }
        )
        mounts = extract_mounts(doc)
        assert [m.method for m in mounts] == ALL_METHODS
        assert {m.handler_reference for m in mounts} == {"fn-any"}

    def test_uppercase_method_emitted_lowercase(self, lambda_integration: IntegrationFactory) -> None:
        doc = _doc({"/a": {"PATCH": {INTEGRATION_EXTENSION: lambda_integration("fn")}}})
        assert _pairs(extract_mounts(doc)) == [("/a", "patch")]


# ---------------------------------------------------------------------------
# The two phases on their own
# ---------------------------------------------------------------------------


class TestPhases:
    def test_map_explicit_methods_reports_mapped(self, lambda_integration: IntegrationFactory) -> None:
        item = PathItem(
            operations={
                HTTPMethod.GET: Operation(
                    extensions={INTEGRATION_EXTENSION: lambda_integration("fn-get")}
                ),
                HTTPMethod.PUT: Operation(),
            }
        )
        mounts, mapped = map_explicit_methods("/x", item)
        assert mapped == {HTTPMethod.GET}
        assert _pairs(mounts) == [("/x", "get")]

    def test_fill_any_method_respects_mapped(self, lambda_integration: IntegrationFactory) -> None:
        item = PathItem(
            extensions={
                ANY_METHOD_EXTENSION: {INTEGRATION_EXTENSION: lambda_integration("fn-any")}
            }
        )
        mounts = fill_any_method("/x", item, {HTTPMethod.GET, HTTPMethod.HEAD})
        assert [m.method for m in mounts] == ["post", "put", "delete", "patch", "options"]

    def test_fill_any_method_without_extension(self) -> None:
        assert fill_any_method("/x", PathItem(), set()) == []

    def test_create_mount_with_unresolvable_integration(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="samroute"):
            mount = create_mount("/x", HTTPMethod.GET, ApiGatewayIntegration(type="mock"))
        assert mount.handler_reference == ""
        assert "Could not extract Lambda function for GET /x" in caplog.text

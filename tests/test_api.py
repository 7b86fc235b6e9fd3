"""Tests for samroute.api -- end-to-end resolution."""

from __future__ import annotations

import io
import json
import shutil
from pathlib import Path
from typing import Any
from unittest.mock import patch

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from samroute import resolve_mounts, resolve_template_mounts
from samroute.exceptions import (
    DefinitionIOError,
    DocumentParseError,
    NoDefinitionFoundError,
    RemoteFetchError,
)
from samroute.models import MountDescriptor, ServerlessApi


class TestResolveMounts:
    def test_local_file(self, fixtures_dir: Path) -> None:
        api = ServerlessApi(definition_uri="users_api.json", base_dir=str(fixtures_dir))
        mounts = resolve_mounts(api)
        assert len(mounts) == 10
        assert MountDescriptor(
            name="/users", path="/users", method="get", handler_reference="fn-list-users"
        ) in mounts

    def test_local_yaml_file(self, fixtures_dir: Path) -> None:
        api = ServerlessApi(definition_uri=str(fixtures_dir / "users_api.yaml"))
        assert resolve_mounts(api) == [
            MountDescriptor(
                name="/orders", path="/orders", method="post", handler_reference="CreateOrder"
            )
        ]

    def test_inline_text(self, users_definition: dict[str, Any]) -> None:
        api = ServerlessApi(definition_body=json.dumps(users_definition))
        assert len(resolve_mounts(api)) == 10

    def test_inline_structure(self, users_definition: dict[str, Any]) -> None:
        api = ServerlessApi(definition_body=users_definition)
        assert len(resolve_mounts(api)) == 10

    def test_empty_inline_text(self) -> None:
        assert resolve_mounts(ServerlessApi(definition_body="{}")) == []

    def test_uri_preferred_over_inline_text(self, fixtures_dir: Path) -> None:
        api = ServerlessApi(
            definition_uri=str(fixtures_dir / "users_api.yaml"),
            definition_body="{}",
        )
        assert [m.path for m in resolve_mounts(api)] == ["/orders"]

    def test_s3_location(self, users_definition: dict[str, Any]) -> None:
        data = json.dumps(users_definition).encode("utf-8")
        client = boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        api = ServerlessApi(
            DefinitionUri={"Bucket": "artifacts", "Key": "users.json", "Version": 3}
        )
        with Stubber(client) as stubber:
            stubber.add_response(
                "get_object",
                {"Body": StreamingBody(io.BytesIO(data), len(data))},
                {"Bucket": "artifacts", "Key": "users.json", "VersionId": "3"},
            )
            mounts = resolve_mounts(api, s3_client=client)
        assert len(mounts) == 10

    def test_no_definition(self) -> None:
        with pytest.raises(NoDefinitionFoundError):
            resolve_mounts(ServerlessApi())

    def test_missing_local_file(self, tmp_path: Path) -> None:
        api = ServerlessApi(definition_uri=str(tmp_path / "nope.json"))
        with pytest.raises(DefinitionIOError):
            resolve_mounts(api)

    def test_unparsable_definition(self) -> None:
        with pytest.raises(DocumentParseError):
            resolve_mounts(ServerlessApi(definition_body="[not: valid"))

    def test_remote_errors_propagate_unchanged(self) -> None:
        api = ServerlessApi(definition_uri="s3://artifacts/users.json")
        error = RemoteFetchError("Error while fetching definition from S3: artifacts/users.json")
        with patch("samroute.definition.sources.fetch_object", side_effect=error):
            with pytest.raises(RemoteFetchError) as exc_info:
                resolve_mounts(api)
        assert exc_info.value is error

    def test_each_call_is_independent(self, users_definition: dict[str, Any]) -> None:
        api = ServerlessApi(definition_body=users_definition)
        first = resolve_mounts(api)
        second = resolve_mounts(api)
        assert first == second
        assert first is not second


class TestResolveTemplateMounts:
    def test_template(self, tmp_path: Path, fixtures_dir: Path) -> None:
        shutil.copy(fixtures_dir / "users_api.json", tmp_path / "users_api.json")
        template = tmp_path / "template.yaml"
        template.write_text(
            "Resources:\n"
            "  FileApi:\n"
            "    Type: AWS::Serverless::Api\n"
            "    Properties:\n"
            "      DefinitionUri: users_api.json\n"
            "  EmptyApi:\n"
            "    Type: AWS::Serverless::Api\n"
            "    Properties:\n"
            "      DefinitionBody: '{}'\n",
            encoding="utf-8",
        )
        result = resolve_template_mounts(template)
        assert list(result) == ["EmptyApi", "FileApi"]
        assert result["EmptyApi"] == []
        assert len(result["FileApi"]) == 10

    def test_inline_body_with_unquoted_date(
        self, tmp_path: Path, lambda_integration: Any
    ) -> None:
        uri = lambda_integration("fn-list-users")["uri"]
        template = tmp_path / "template.yaml"
        template.write_text(
            "Resources:\n"
            "  DatedApi:\n"
            "    Type: AWS::Serverless::Api\n"
            "    Properties:\n"
            "      DefinitionBody:\n"
            "        swagger: '2.0'\n"
            "        info:\n"
            "          title: Users\n"
            "          version: 2017-04-20\n"
            "        paths:\n"
            "          /users:\n"
            "            get:\n"
            "              x-amazon-apigateway-integration:\n"
            "                type: aws_proxy\n"
            "                httpMethod: POST\n"
            f"                uri: {uri}\n",
            encoding="utf-8",
        )
        assert resolve_template_mounts(template) == {
            "DatedApi": [
                MountDescriptor(
                    name="/users", path="/users", method="get", handler_reference="fn-list-users"
                )
            ]
        }

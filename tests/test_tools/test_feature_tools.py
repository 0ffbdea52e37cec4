"""
Feature tools: pb_feature_list, pb_feature_get, pb_feature_bulk_update
"""
import json

import httpx
import pytest

from productboard_mcp.api.errors import ErrorKind
from productboard_mcp.tools.errors import ToolExecutionError, ToolValidationError
from productboard_mcp.tools.features import BulkUpdateFeaturesTool, GetFeatureTool, ListFeaturesTool

FEATURES = [
    {
        "id": "f1",
        "name": "Dark mode",
        "description": "<p>Night <b>theme</b></p>",
        "status": {"name": "In_Progress"},
        "owner": {"email": "Ann@example.com"},
        "tags": [{"name": "UI"}, {"name": "web"}],
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-03-01T00:00:00Z",
    },
    {
        "id": "f2",
        "name": "Export to CSV",
        "description": "",
        "status": {"name": "new"},
        "owner": {"email": "bob@example.com"},
        "tags": ["data"],
        "createdAt": "2024-02-01T00:00:00Z",
        "updatedAt": "2024-02-02T00:00:00Z",
    },
    {
        "id": "f3",
        "name": "Audit log",
        "status": {"name": "done"},
        "createdAt": "2023-12-01T00:00:00Z",
    },
]


def text_of(result):
    (item,) = result["content"]
    assert item["type"] == "text"
    return item["text"]


class TestListFeatures:
    @pytest.mark.asyncio
    async def test_lists_newest_first_by_default(self, api_client, fake_api):
        fake_api.add("GET", "/features", {"data": FEATURES})

        text = text_of(await ListFeaturesTool(api_client).execute({}))

        assert text.startswith("Found 3 matching features (from 3 total), showing 3:")
        assert text.index("Export to CSV") < text.index("Dark mode") < text.index("Audit log")
        assert "Description: Night theme" in text
        assert "Owner: Unassigned" in text
        assert fake_api.requests[0].url.params["pageLimit"] == "20"

    @pytest.mark.asyncio
    async def test_parent_filter_sent_to_api(self, api_client, fake_api):
        fake_api.add("GET", "/features", {"data": []})

        await ListFeaturesTool(api_client).execute({"product_id": "p1", "limit": 5})

        params = fake_api.requests[0].url.params
        assert params["parent.id"] == "p1"
        assert params["pageLimit"] == "5"

    @pytest.mark.asyncio
    async def test_client_side_filters(self, api_client, fake_api):
        fake_api.add("GET", "/features", {"data": FEATURES})
        tool = ListFeaturesTool(api_client)

        by_status = text_of(await tool.execute({"status": "in_progress"}))
        by_owner = text_of(await tool.execute({"owner_email": "ann@EXAMPLE.com"}))
        by_tags = text_of(await tool.execute({"tags": ["ui", "WEB"]}))
        by_search = text_of(await tool.execute({"search": "csv"}))

        assert "Dark mode" in by_status and "Export" not in by_status
        assert "Dark mode" in by_owner and "Export" not in by_owner
        assert "Dark mode" in by_tags and "Export" not in by_tags
        assert "Export to CSV" in by_search and "Dark mode" not in by_search

    @pytest.mark.asyncio
    async def test_sort_and_slice(self, api_client, fake_api):
        fake_api.add("GET", "/features", {"data": FEATURES})

        text = text_of(
            await ListFeaturesTool(api_client).execute(
                {"sort": "name", "order": "asc", "offset": 1, "limit": 1}
            )
        )

        assert "showing 1:" in text
        assert "1. Dark mode" in text

    @pytest.mark.asyncio
    async def test_nothing_found(self, api_client, fake_api):
        fake_api.add("GET", "/features", {"data": FEATURES})
        result = await ListFeaturesTool(api_client).execute({"search": "nothing-like-this"})
        assert text_of(result) == "No features found."

    @pytest.mark.asyncio
    async def test_invalid_params(self, api_client, fake_api):
        tool = ListFeaturesTool(api_client)

        with pytest.raises(ToolValidationError) as exc_info:
            await tool.execute({"status": "shipped", "limit": 0, "bogus": 1})

        fields = " ".join(exc_info.value.errors)
        assert "status" in fields
        assert "limit" in fields
        assert "bogus" in fields
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_service_error_wrapped(self, api_client, fake_api):
        fake_api.add("GET", "/features", httpx.Response(403, json={"message": "Forbidden"}))

        with pytest.raises(ToolExecutionError) as exc_info:
            await ListFeaturesTool(api_client).execute({})

        assert exc_info.value.kind == ErrorKind.AUTHORIZATION
        assert exc_info.value.tool_name == "pb_feature_list"
        assert "Forbidden" in exc_info.value.message


class TestGetFeature:
    @pytest.mark.asyncio
    async def test_returns_feature_json(self, api_client, fake_api):
        fake_api.add("GET", "/features/f1", {"data": FEATURES[0]})

        result = await GetFeatureTool(api_client).execute({"featureId": "f1"})

        assert json.loads(result["content"][0]["text"])["name"] == "Dark mode"

    @pytest.mark.asyncio
    async def test_not_found(self, api_client, fake_api):
        with pytest.raises(ToolExecutionError) as exc_info:
            await GetFeatureTool(api_client).execute({"featureId": "missing"})
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_requires_id(self, api_client):
        with pytest.raises(ToolValidationError):
            await GetFeatureTool(api_client).execute({})


class TestBulkUpdate:
    @pytest.mark.asyncio
    async def test_partial_failure_reported_per_feature(self, api_client, fake_api):
        fake_api.add("PATCH", "/features/f1", {"data": {"id": "f1"}})
        fake_api.add("PATCH", "/features/f2", httpx.Response(400, json={"message": "Unknown status"}))

        result = await BulkUpdateFeaturesTool(api_client).execute({
            "updates": [
                {"id": "f1", "name": "Dark mode v2", "ownerEmail": "ann@example.com"},
                {"id": "f2", "status": "bogus"},
            ]
        })

        summary = json.loads(result["content"][0]["text"])
        assert summary["total"] == 2
        assert summary["succeeded"] == 1
        assert summary["failed"] == 1
        assert summary["results"][0] == {"id": "f1", "success": True, "data": {"data": {"id": "f1"}}}
        assert summary["results"][1] == {"id": "f2", "success": False, "error": "Unknown status"}

        first_body = json.loads(fake_api.calls("PATCH", "/features/f1")[0].content)
        assert first_body == {"data": {"name": "Dark mode v2", "owner": {"email": "ann@example.com"}}}
        second_body = json.loads(fake_api.calls("PATCH", "/features/f2")[0].content)
        assert second_body == {"data": {"status": {"name": "bogus"}}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [{}, {"updates": []}, {"updates": [{"id": "f1"}]}])
    async def test_rejects_empty_updates(self, api_client, arguments):
        with pytest.raises(ToolValidationError):
            await BulkUpdateFeaturesTool(api_client).execute(arguments)

    @pytest.mark.asyncio
    async def test_requires_write(self, api_client):
        metadata = BulkUpdateFeaturesTool(api_client).permission_metadata
        assert metadata.minimum_access_level.label == "write"
        assert metadata.required_permissions == frozenset({"features:write"})

"""Tests for the PackagesAPI facade."""

import httpx
import pytest

from adapters.http_client import APIError
from adapters.packages_api import PackagesAPI
from core.domain.models import (
    ApplyPkgRequest,
    CreatePkgRequest,
    CreateStackRequest,
    DeleteStackRequest,
    ExportStackRequest,
    ListStacksRequest,
    Pkg,
    PkgApply,
    PkgCreate,
    PkgSummary,
    ReadStackRequest,
    Stack,
    StackCreate,
    StackList,
    StackUpdate,
    UpdateStackRequest,
)
from core.interfaces.transport import APITransport, RequestOptions

from conftest import RecordingTransport


OPERATIONS = [
    (
        "create_pkg",
        CreatePkgRequest(body=PkgCreate(resources=[{"id": "b1", "kind": "Bucket"}])),
        "POST",
        "/api/v2/packages",
        "application/json",
        Pkg,
    ),
    (
        "apply_pkg",
        ApplyPkgRequest(body=PkgApply(dry_run=True, org_id="o1")),
        "POST",
        "/api/v2/packages/apply",
        "application/json",
        PkgSummary,
    ),
    (
        "list_stacks",
        ListStacksRequest(org_id="o1"),
        "GET",
        "/api/v2/packages/stacks?orgID=o1",
        None,
        StackList,
    ),
    (
        "create_stack",
        CreateStackRequest(body=StackCreate(org_id="o1", name="n1")),
        "POST",
        "/api/v2/packages/stacks",
        "application/json",
        Stack,
    ),
    (
        "read_stack",
        ReadStackRequest(stack_id="abc"),
        "GET",
        "/api/v2/packages/stacks/abc",
        None,
        Stack,
    ),
    (
        "update_stack",
        UpdateStackRequest(stack_id="abc", body=StackUpdate(name="renamed")),
        "PATCH",
        "/api/v2/packages/stacks/abc",
        "application/json",
        Stack,
    ),
    (
        "delete_stack",
        DeleteStackRequest(stack_id="abc", org_id="o1"),
        "DELETE",
        "/api/v2/packages/stacks/abc?orgID=o1",
        None,
        None,
    ),
    (
        "export_stack",
        ExportStackRequest(stack_id="abc", org_id="o1"),
        "DELETE",
        "/api/v2/packages/stacks/abc/export?orgID=o1",
        None,
        Pkg,
    ),
]


class TestRouting:
    """Each operation maps to exactly one verb, path and encoding."""

    def test_recording_transport_satisfies_protocol(self, recording_transport):
        assert isinstance(recording_transport, APITransport)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "operation, request_obj, method, path, content_type, response_model",
        OPERATIONS,
        ids=[op[0] for op in OPERATIONS],
    )
    async def test_operation_routing(
        self, recording_transport, operation, request_obj, method, path, content_type, response_model
    ):
        api = PackagesAPI(recording_transport)

        await getattr(api, operation)(request_obj)

        assert len(recording_transport.calls) == 1
        call = recording_transport.calls[0]
        assert call["method"] == method
        assert call["path"] == path
        assert call["content_type"] == content_type
        assert call["response_model"] is response_model
        assert call["request"] is request_obj


class TestQueryStrings:
    @pytest.mark.asyncio
    async def test_list_stacks_omits_absent_filters(self, recording_transport):
        api = PackagesAPI(recording_transport)

        await api.list_stacks(ListStacksRequest(orgID="o1"))

        path = recording_transport.calls[0]["path"]
        assert path.endswith("?orgID=o1")
        assert "name=" not in path
        assert "stackID=" not in path

    @pytest.mark.asyncio
    async def test_list_stacks_keeps_declared_order(self, recording_transport):
        api = PackagesAPI(recording_transport)

        await api.list_stacks(ListStacksRequest(orgID="o1", name="n1", stackID="s1"))

        assert recording_transport.calls[0]["path"] == "/api/v2/packages/stacks?orgID=o1&name=n1&stackID=s1"

    @pytest.mark.asyncio
    async def test_query_values_are_percent_encoded(self, recording_transport):
        api = PackagesAPI(recording_transport)

        await api.list_stacks(ListStacksRequest(org_id="o1", name="my stack&co"))

        assert recording_transport.calls[0]["path"].endswith("?orgID=o1&name=my%20stack%26co")

    @pytest.mark.asyncio
    async def test_path_parameter_is_interpolated_verbatim(self, recording_transport):
        api = PackagesAPI(recording_transport)

        await api.read_stack(ReadStackRequest(stack_id="0a1b2c"))

        assert recording_transport.calls[0]["path"] == "/api/v2/packages/stacks/0a1b2c"


class TestPassThrough:
    @pytest.mark.asyncio
    async def test_result_is_returned_unmodified(self):
        sentinel = object()
        transport = RecordingTransport(result=sentinel)
        api = PackagesAPI(transport)

        result = await api.read_stack(ReadStackRequest(stack_id="abc"))

        assert result is sentinel

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        error = APIError(404, "stack not found", code="not found")
        api = PackagesAPI(RecordingTransport(error=error))

        with pytest.raises(APIError) as exc_info:
            await api.read_stack(ReadStackRequest(stack_id="missing"))

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_network_error_propagates_untranslated(self):
        error = httpx.ConnectError("connection refused")
        api = PackagesAPI(RecordingTransport(error=error))

        with pytest.raises(httpx.ConnectError):
            await api.list_stacks(ListStacksRequest(org_id="o1"))

    @pytest.mark.asyncio
    async def test_request_options_are_forwarded(self, recording_transport):
        api = PackagesAPI(recording_transport)
        options = RequestOptions(headers={"X-Trace": "1"}, timeout=2.5)

        await api.delete_stack(DeleteStackRequest(stack_id="abc", org_id="o1"), options)

        assert recording_transport.calls[0]["options"] is options

    @pytest.mark.asyncio
    async def test_each_call_is_one_round_trip(self, recording_transport):
        api = PackagesAPI(recording_transport)
        request = ReadStackRequest(stack_id="abc")

        await api.read_stack(request)
        await api.read_stack(request)

        assert len(recording_transport.calls) == 2
        assert request.stack_id == "abc"


class TestOverHTTP:
    """Facade + APIBase against httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_create_stack_sends_only_given_fields(self, make_api_base):
        base, server = make_api_base(
            lambda request: httpx.Response(201, json={"id": "s1", "orgID": "o1", "name": "n1"})
        )
        api = PackagesAPI(base)

        stack = await api.create_stack(CreateStackRequest(body=StackCreate(org_id="o1", name="n1")))

        assert server.last.method == "POST"
        assert server.last.url.path == "/api/v2/packages/stacks"
        assert server.last.headers["content-type"] == "application/json"
        assert server.last_json() == {"orgID": "o1", "name": "n1"}
        assert isinstance(stack, Stack)
        assert stack.id == "s1"
        assert stack.org_id == "o1"

    @pytest.mark.asyncio
    async def test_delete_stack_sends_no_body(self, make_api_base):
        base, server = make_api_base(lambda request: httpx.Response(204))
        api = PackagesAPI(base)

        result = await api.delete_stack(DeleteStackRequest(stack_id="abc", org_id="o1"))

        assert result is None
        assert server.last.method == "DELETE"
        assert server.last.url.path == "/api/v2/packages/stacks/abc"
        assert server.last.url.query == b"orgID=o1"
        assert server.last.content == b""

    @pytest.mark.asyncio
    async def test_list_stacks_decodes_stacks(self, make_api_base):
        payload = {
            "stacks": [
                {"id": "s1", "orgID": "o1", "name": "first", "urls": ["https://example.com/a.json"]},
                {"id": "s2", "orgID": "o1", "name": "second"},
            ]
        }
        base, server = make_api_base(lambda request: httpx.Response(200, json=payload))
        api = PackagesAPI(base)

        result = await api.list_stacks(ListStacksRequest(org_id="o1", name="first"))

        assert server.last.url.params["orgID"] == "o1"
        assert server.last.url.params["name"] == "first"
        assert "stackID" not in server.last.url.params
        assert [stack.id for stack in result.stacks] == ["s1", "s2"]
        assert result.stacks[0].urls == ["https://example.com/a.json"]

    @pytest.mark.asyncio
    async def test_update_stack_patches_body(self, make_api_base):
        base, server = make_api_base(
            lambda request: httpx.Response(200, json={"id": "abc", "name": "renamed", "description": "d"})
        )
        api = PackagesAPI(base)

        stack = await api.update_stack(
            UpdateStackRequest(stack_id="abc", body=StackUpdate(name="renamed", description="d"))
        )

        assert server.last.method == "PATCH"
        assert server.last_json() == {"name": "renamed", "description": "d"}
        assert stack.name == "renamed"

    @pytest.mark.asyncio
    async def test_export_stack_uses_delete_verb_and_returns_package(self, make_api_base):
        payload = [
            {"apiVersion": "influxdata.com/v2alpha1", "kind": "Bucket", "metadata": {"name": "b"}, "spec": {}},
        ]
        base, server = make_api_base(lambda request: httpx.Response(200, json=payload))
        api = PackagesAPI(base)

        pkg = await api.export_stack(ExportStackRequest(stack_id="abc", org_id="o1"))

        assert server.last.method == "DELETE"
        assert server.last.url.path == "/api/v2/packages/stacks/abc/export"
        assert server.last.url.query == b"orgID=o1"
        assert isinstance(pkg, Pkg)
        assert [obj.kind for obj in pkg] == ["Bucket"]

    @pytest.mark.asyncio
    async def test_apply_pkg_dry_run(self, make_api_base):
        base, server = make_api_base(
            lambda request: httpx.Response(200, json={"summary": {"buckets": [{"name": "b"}]}, "diff": {}})
        )
        api = PackagesAPI(base)
        body = PkgApply(
            dry_run=True,
            org_id="o1",
            package=Pkg.model_validate([{"kind": "Bucket", "metadata": {"name": "b"}}]),
        )

        summary = await api.apply_pkg(ApplyPkgRequest(body=body))

        sent = server.last_json()
        assert server.last.url.path == "/api/v2/packages/apply"
        assert sent["dryRun"] is True
        assert sent["orgID"] == "o1"
        assert sent["package"][0]["kind"] == "Bucket"
        assert summary.summary["buckets"] == [{"name": "b"}]

    @pytest.mark.asyncio
    async def test_apply_pkg_sends_package_objects_as_given(self, make_api_base):
        base, server = make_api_base(lambda request: httpx.Response(200, json={"summary": {}}))
        api = PackagesAPI(base)
        raw = [{"kind": "Bucket", "metadata": {"name": "b"}}, {"kind": "Label"}]

        await api.apply_pkg(ApplyPkgRequest(body=PkgApply(org_id="o1", package=Pkg.model_validate(raw))))

        assert server.last_json()["package"] == raw

    @pytest.mark.asyncio
    async def test_not_found_surfaces_as_api_error(self, make_api_base):
        base, _ = make_api_base(
            lambda request: httpx.Response(404, json={"code": "not found", "message": "stack not found"})
        )
        api = PackagesAPI(base)

        with pytest.raises(APIError) as exc_info:
            await api.read_stack(ReadStackRequest(stack_id="missing"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "not found"
        assert exc_info.value.message == "stack not found"

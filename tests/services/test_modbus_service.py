from __future__ import annotations

import json

import httpx
import pytest
import respx

from modbus_console.api import ApiClientConfig, ConsoleApiClient
from modbus_console.services import (
    CollectionDelta,
    MappingsAppliedEvent,
    ModbusService,
    MutationStatus,
    new_draft_id,
)

from tests.factories import make_controller, make_mapping
from tests.stubs import FakeConsoleClient


@pytest.mark.asyncio
async def test_list_gateway_mappings_parses_rows(fake_client: FakeConsoleClient) -> None:
    fake_client.queue(
        {
            "success": True,
            "mappings": [
                {
                    "id": "m1",
                    "gatewayId": "g1",
                    "modbusAddress": 4,
                    "registerType": 3,
                    "itemId": "i1",
                    "itemName": "Tank level",
                    "dataRepresentation": 3,
                    "scaleMin": 0,
                    "scaleMax": 100,
                }
            ],
        }
    )
    service = ModbusService(fake_client)  # type: ignore[arg-type]

    rows = await service.list_gateway_mappings("g1")

    assert rows[0].item_name == "Tank level"
    assert rows[0].scale_max == 100
    assert fake_client.requests[0].body == {"gatewayId": "g1"}


@pytest.mark.asyncio
async def test_batch_edit_sends_single_request(fake_client: FakeConsoleClient) -> None:
    service = ModbusService(fake_client)  # type: ignore[arg-type]
    added = make_mapping(mapping_id=new_draft_id(), address=20, item_id="i9")
    changed = make_mapping(mapping_id="m2", address=8)
    delta = CollectionDelta(added=[added], changed=[changed], removed=["m3"])
    events: list[MappingsAppliedEvent] = []
    service.mappings_applied.subscribe(events.append)

    outcome = await service.batch_edit_mappings("g1", delta)

    assert outcome.success
    assert len(fake_client.requests) == 1
    request = fake_client.requests[0]
    assert request.path == "/api/Monitoring/BatchEditModbusGatewayMappings"
    assert request.body["gatewayId"] == "g1"
    assert "id" not in request.body["added"][0]
    assert request.body["added"][0]["modbusAddress"] == 20
    assert request.body["updated"][0]["id"] == "m2"
    assert request.body["removedIds"] == ["m3"]
    assert [event.status for event in events] == [
        MutationStatus.PENDING,
        MutationStatus.SUCCEEDED,
    ]


@pytest.mark.asyncio
async def test_batch_edit_noop_skips_request(fake_client: FakeConsoleClient) -> None:
    service = ModbusService(fake_client)  # type: ignore[arg-type]

    outcome = await service.batch_edit_mappings("g1", CollectionDelta())

    assert outcome.success
    assert fake_client.requests == []


@pytest.mark.asyncio
async def test_batch_edit_never_sends_draft_ids_for_removal(
    fake_client: FakeConsoleClient,
) -> None:
    service = ModbusService(fake_client)  # type: ignore[arg-type]
    delta = CollectionDelta(removed=["m1", new_draft_id()])

    await service.batch_edit_mappings("g1", delta)

    assert fake_client.requests[0].body["removedIds"] == ["m1"]


@pytest.mark.asyncio
async def test_controller_crud_round_trips_through_http(respx_mock: respx.Router) -> None:
    client = ConsoleApiClient(ApiClientConfig(base_url="https://console.test"))
    service = ModbusService(client)
    try:
        add_route = respx_mock.post(
            "https://console.test/api/Monitoring/AddModbusController"
        ).mock(return_value=httpx.Response(200, json={"success": True}))
        edit_route = respx_mock.post(
            "https://console.test/api/Monitoring/EditModbusController"
        ).mock(
            return_value=httpx.Response(
                200, json={"success": False, "message": "Name already exists"}
            )
        )

        added = await service.add_controller(make_controller(controller_id=""))
        edited = await service.edit_controller(make_controller(controller_id="c1"))

        assert added.success
        assert not edited.success
        assert edited.message == "Name already exists"
        assert add_route.called and edit_route.called

        add_body = json.loads(add_route.calls.last.request.content)
        assert "id" not in add_body
        assert add_body["ipAddress"] == "192.168.1.20"
        edit_body = json.loads(edit_route.calls.last.request.content)
        assert edit_body["id"] == "c1"
    finally:
        await client.close()

import contextlib

import pytest
from aiohttp import test_utils, web

from octo.errors import Forbidden, HTTPException, NotFound
from octo.http import RESTClient


@contextlib.asynccontextmanager
async def rest_client(routes):
    app = web.Application()
    app.add_routes(routes)
    server = test_utils.TestServer(app)
    await server.start_server()
    client = RESTClient("secret", base_url=str(server.make_url("/api")))
    await client.start()
    try:
        yield client
    finally:
        await client.close()
        await server.close()


@pytest.mark.asyncio
async def test_auth_header_and_json_body():
    seen = {}

    async def create(request):
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = await request.json()
        return web.json_response({"id": "1", "channel_id": request.match_info["channel_id"]})

    routes = [web.post("/api/v10/channels/{channel_id}/messages", create)]
    async with rest_client(routes) as client:
        data = await client.create_message("42", {"content": "hi"})

    assert data == {"id": "1", "channel_id": "42"}
    assert seen == {"auth": "Bot secret", "body": {"content": "hi"}}


@pytest.mark.asyncio
async def test_empty_params_are_dropped_and_204_is_none():
    queries = []

    async def history(request):
        queries.append(dict(request.query))
        return web.json_response([])

    async def delete(request):
        return web.Response(status=204)

    routes = [
        web.get("/api/v10/channels/{channel_id}/messages", history),
        web.delete("/api/v10/channels/{channel_id}/messages/{message_id}", delete),
    ]
    async with rest_client(routes) as client:
        assert await client.list_channel_messages("42", limit=1, before="9") == []
        assert await client.delete_message("42", "9") is None

    assert queries == [{"limit": "1", "before": "9"}]


@pytest.mark.asyncio
async def test_error_statuses_map_to_exceptions():
    async def forbidden(request):
        return web.json_response({"message": "Missing Access"}, status=403)

    async def missing(request):
        return web.json_response({"message": "Unknown User"}, status=404)

    async def broken(request):
        return web.Response(status=500, text="boom")

    routes = [
        web.get("/api/v10/guilds/{guild_id}", forbidden),
        web.get("/api/v10/users/{user_id}", missing),
        web.get("/api/v10/channels/{channel_id}", broken),
    ]
    async with rest_client(routes) as client:
        with pytest.raises(Forbidden):
            await client.get_guild("1")

        with pytest.raises(NotFound) as info:
            await client.get_user("2")
        assert info.value.status == 404

        with pytest.raises(HTTPException) as info:
            await client.get_channel("3")
        assert not isinstance(info.value, (Forbidden, NotFound))
        assert info.value.status == 500


def test_session_requires_start():
    with pytest.raises(RuntimeError):
        RESTClient(None).session

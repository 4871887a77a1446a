"""Tests for the aiohttp task API client against a fake server."""

import aiohttp
import pytest
from aiohttp import test_utils, web

from tasktracker.client import TaskAPIClient, TaskAPIError
from tasktracker.config import Settings


TASK = {
    "id": "t1",
    "title": "Buy milk",
    "description": "",
    "completed": False,
    "priority": "medium",
    "category": "general",
    "createdAt": "2024-01-01T12:00:00.000000Z",
    "updatedAt": "2024-01-01T12:00:00.000000Z",
}


def build_fake_api():
    """Minimal in-memory stand-in for the task API."""
    tasks = {}
    received = []

    async def list_tasks(request):
        return web.json_response(list(tasks.values()))

    async def create_task(request):
        body = await request.json()
        received.append(("POST", body))
        if not body.get("title", "").strip():
            return web.json_response({"error": "Title is required"}, status=400)
        task = {**TASK, **body}
        tasks[task["id"]] = task
        return web.json_response(task, status=201)

    async def update_task(request):
        body = await request.json()
        received.append(("PUT", body))
        task_id = request.match_info["task_id"]
        if task_id not in tasks:
            return web.json_response({"error": "Task not found"}, status=404)
        tasks[task_id] = {**tasks[task_id], **body, "updatedAt": "2024-01-01T12:00:01.000000Z"}
        return web.json_response(tasks[task_id])

    async def delete_task(request):
        task_id = request.match_info["task_id"]
        if tasks.pop(task_id, None) is None:
            return web.json_response({"error": "Task not found"}, status=404)
        return web.Response(status=204)

    app = web.Application()
    app.router.add_get("/api/tasks", list_tasks)
    app.router.add_post("/api/tasks", create_task)
    app.router.add_put("/api/tasks/{task_id}", update_task)
    app.router.add_delete("/api/tasks/{task_id}", delete_task)
    return app, received


class TestTaskAPIClient:
    """Test TaskAPIClient requests and error mapping."""

    @pytest.mark.asyncio
    async def test_task_lifecycle(self):
        app, received = build_fake_api()
        async with test_utils.TestServer(app) as server:
            async with TaskAPIClient(str(server.make_url("/"))) as api:
                created = await api.create_task("Buy milk", category="errands")
                assert created.id == "t1"
                assert created.category == "errands"

                tasks = await api.get_tasks()
                assert [task.id for task in tasks] == ["t1"]

                updated = await api.update_task("t1", completed=True)
                assert updated.completed is True
                assert updated.updated_at == "2024-01-01T12:00:01.000000Z"

                await api.delete_task("t1")
                assert await api.get_tasks() == []

        assert received == [
            ("POST", {"title": "Buy milk", "category": "errands"}),
            ("PUT", {"completed": True}),
        ]

    @pytest.mark.asyncio
    async def test_error_responses_raise(self):
        async with test_utils.TestServer(build_fake_api()[0]) as server:
            async with TaskAPIClient(str(server.make_url("/"))) as api:
                with pytest.raises(TaskAPIError) as exc_info:
                    await api.create_task("   ")
                assert exc_info.value.status == 400
                assert exc_info.value.message == "Title is required"

                with pytest.raises(TaskAPIError) as exc_info:
                    await api.update_task("missing", completed=True)
                assert exc_info.value.status == 404

                with pytest.raises(TaskAPIError) as exc_info:
                    await api.delete_task("missing")
                assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_server_error_with_json_body(self):
        async def failing(request):
            return web.json_response({"error": "Failed to fetch tasks"}, status=500)

        app = web.Application()
        app.router.add_get("/api/tasks", failing)

        async with test_utils.TestServer(app) as server:
            async with TaskAPIClient(str(server.make_url("/"))) as api:
                with pytest.raises(TaskAPIError) as exc_info:
                    await api.get_tasks()

        assert exc_info.value.status == 500
        assert exc_info.value.message == "Failed to fetch tasks"

    @pytest.mark.asyncio
    async def test_server_error_with_plain_text_body(self):
        async def failing(request):
            return web.Response(status=500, text="boom")

        app = web.Application()
        app.router.add_get("/api/tasks", failing)
        app.router.add_delete("/api/tasks/{task_id}", failing)

        async with test_utils.TestServer(app) as server:
            async with TaskAPIClient(str(server.make_url("/"))) as api:
                with pytest.raises(TaskAPIError) as exc_info:
                    await api.get_tasks()
                assert exc_info.value.status == 500
                assert exc_info.value.message == "boom"

                with pytest.raises(TaskAPIError) as exc_info:
                    await api.delete_task("t1")
                assert exc_info.value.message == "boom"

    @pytest.mark.asyncio
    async def test_caller_session_is_left_open(self):
        app, _ = build_fake_api()
        async with test_utils.TestServer(app) as server:
            async with aiohttp.ClientSession() as session:
                async with TaskAPIClient(str(server.make_url("/")), session=session) as api:
                    assert await api.get_tasks() == []

                assert session.closed is False
                # still usable after the client is done with it
                async with session.get(server.make_url("/api/tasks")) as response:
                    assert response.status == 200

    @pytest.mark.asyncio
    async def test_owned_session_is_closed(self):
        app, _ = build_fake_api()
        async with test_utils.TestServer(app) as server:
            api = TaskAPIClient(str(server.make_url("/")))
            async with api:
                await api.get_tasks()
                session = api._session

        assert session.closed is True

    @pytest.mark.asyncio
    async def test_base_url_defaults_to_settings(self, monkeypatch):
        app, received = build_fake_api()
        async with test_utils.TestServer(app) as server:
            base_url = str(server.make_url("/"))
            monkeypatch.setattr(
                "tasktracker.client.get_settings",
                lambda: Settings(api_base_url=base_url),
            )

            async with TaskAPIClient() as api:
                assert api.base_url == base_url.rstrip("/")
                created = await api.create_task("From settings")

        assert created.title == "From settings"
        assert received == [("POST", {"title": "From settings"})]

    def test_explicit_base_url_wins(self, monkeypatch):
        monkeypatch.setattr(
            "tasktracker.client.get_settings",
            lambda: Settings(api_base_url="http://settings.invalid"),
        )

        api = TaskAPIClient("http://explicit.invalid/")

        assert api.base_url == "http://explicit.invalid"

"""Integration tests for FastAPI integration across layers."""

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

import itertools

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from miraveja_glue import RuntimeService, YamlLoader
from miraveja_glue.infrastructure.fastapi_integration import (
    ScopedContainerMiddleware,
    create_fastapi_dependency,
    create_scoped_dependency,
)
from miraveja_glue.infrastructure.testing import TestContainer


class UserRepository:
    def __init__(self, users):
        self.users = users


class RequestContext:
    def __init__(self, request_id, repository):
        self.request_id = request_id
        self.repository = repository


def build_loader():
    counter = itertools.count(1)
    loader = YamlLoader()
    loader.from_data("/virtual/services.yaml", {"parameters": {"users": ["alice", "bob"]}})
    loader.add_service(
        "user_repository",
        RuntimeService(
            lambda context: _build_repository(context),
        ),
    )
    loader.add_service(
        "request_context",
        RuntimeService(lambda context: _build_request_context(context, next(counter)), scope="request"),
    )
    return loader


async def _build_repository(context):
    return UserRepository(await context.container.get_parameter("users", context))


async def _build_request_context(context, request_id):
    return RequestContext(request_id, await context.container.get("user_repository", context))


def build_app(loader, container):
    app = FastAPI()
    app.add_middleware(ScopedContainerMiddleware, loader=loader, scope="request", parent=container)

    get_repository = create_fastapi_dependency(container, "user_repository")
    get_request_context = create_scoped_dependency("request_context")

    @app.get("/users")
    async def list_users(repository=Depends(get_repository)):
        return {"users": repository.users, "repository": id(repository)}

    @app.get("/context")
    async def read_context(ctx=Depends(get_request_context), repository=Depends(get_repository)):
        return {"request_id": ctx.request_id, "shared": ctx.repository is repository}

    return app


class TestFastAPIIntegrationEndToEnd:
    """Test complete FastAPI integration scenarios."""

    def test_application_dependency(self):
        """Test that endpoints receive services from the application container."""
        loader = build_loader()
        with TestClient(build_app(loader, loader.get_container())) as client:
            first = client.get("/users").json()
            second = client.get("/users").json()

        assert first["users"] == ["alice", "bob"]
        assert first["repository"] == second["repository"]

    def test_request_scoped_dependency(self):
        """Test that each request gets its own scoped services."""
        loader = build_loader()
        with TestClient(build_app(loader, loader.get_container())) as client:
            first = client.get("/context").json()
            second = client.get("/context").json()

        assert first == {"request_id": 1, "shared": True}
        assert second == {"request_id": 2, "shared": True}

    def test_overrides_with_test_container(self):
        """Test serving an application built on a test container."""
        loader = build_loader()
        test_container = TestContainer(loader.get_container())
        test_container.mock_service("user_repository", UserRepository(["mock"]))
        with TestClient(build_app(loader, test_container)) as client:
            assert client.get("/users").json()["users"] == ["mock"]
            assert client.get("/context").json()["shared"] is True

    def test_missing_middleware(self):
        """Test that scoped dependencies require the middleware."""
        app = FastAPI()
        get_request_context = create_scoped_dependency("request_context")

        @app.get("/context")
        async def read_context(ctx=Depends(get_request_context)):
            return {}

        client = TestClient(app, raise_server_exceptions=True)

        with pytest.raises(RuntimeError, match="ScopedContainerMiddleware"):
            client.get("/context")

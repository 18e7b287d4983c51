from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from miraveja_glue.application import Loader
from miraveja_glue.domain import IContainer


def create_fastapi_dependency(container: IContainer, service_id: str) -> Callable[[], Awaitable[Any]]:
    """Create a FastAPI Depends() callable that resolves a service from a container.

    The instance is built once per container, so every request shares it.

    Args:
        container: The container to resolve the service from.
        service_id: The id of the service to resolve.

    Returns:
        An async callable that FastAPI can use with Depends().

    Example:
        >>> container = loader.get_container()
        >>> get_repository = create_fastapi_dependency(container, "user_repository")
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repository=Depends(get_repository)):
        ...     return await repository.get_all()
    """

    async def dependency() -> Any:
        """Resolve the service from the container."""
        return await container.get(service_id)

    return dependency


def create_scoped_dependency(service_id: str) -> Callable[[Request], Awaitable[Any]]:
    """Create a FastAPI dependency resolving from the request's container.

    Requires the ScopedContainerMiddleware to be installed.

    Args:
        service_id: The id of the service to resolve.

    Returns:
        An async callable that resolves from the request container.

    Example:
        >>> app.add_middleware(ScopedContainerMiddleware, loader=loader, scope="request", parent=container)
        >>>
        >>> get_request_context = create_scoped_dependency("request_context")
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx=Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    async def scoped_dependency(request: Request) -> Any:
        """Resolve from the request's container."""
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a scoped DI container. Did you forget to add ScopedContainerMiddleware?"
            )
        scoped_container: IContainer = request.state.di_container
        return await scoped_container.get(service_id)

    return scoped_dependency


class ScopedContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that creates a container for each request.

    Each request gets a fresh container for one loader scope, so services of
    that scope are built once per request. When a parent container is given,
    anything missing from the scope is resolved from it.

    The container is accessible via `request.state.di_container`.

    Attributes:
        loader: The loader holding the definitions.
        scope: The scope of the per-request services.
        parent: Container to fall back to, usually the application container.
    """

    def __init__(
        self,
        app: FastAPI,
        loader: Loader,
        scope: Optional[str] = None,
        parent: Optional[IContainer] = None,
    ):
        """Initialize the middleware.

        Args:
            app: The FastAPI/Starlette application.
            loader: The loader to create containers from.
            scope: The scope of the per-request services.
            parent: Container to fall back to.
        """
        super().__init__(app)
        self.loader = loader
        self.scope = scope
        self.parent = parent

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a container for the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.di_container = self.loader.get_container(self.scope, self.parent)
        return await call_next(request)

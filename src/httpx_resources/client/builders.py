from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from httpx_resources.client.plugin import URL_TEMPLATE, AnyClient, install, resources_of
from httpx_resources.resources.href import resolve
from httpx_resources.resources.template import build_url_template
from httpx_resources.settings import Settings, get_settings
from httpx_resources.telemetry.recorder import UrlTemplateRecorder

logger = logging.getLogger(__name__)


class _ResourceRequests:
    """Request construction shared by the sync and async clients."""

    def __init__(self, client: AnyClient):
        self._client = client
        self._resources = resources_of(client)

    @property
    def client(self) -> AnyClient:
        return self._client

    def build_request(self, method: str, resource: BaseModel, **kwargs: Any) -> httpx.Request:
        """
        Build (without sending) a request whose URL comes from `resource`.

        The URL template is stored under URL_TEMPLATE in the request
        extensions; every other keyword goes to httpx's build_request, so
        params/headers/extensions given here are applied on top.
        """
        fmt = self._resources.format
        descriptor = fmt.descriptor_for(type(resource))

        extensions = dict(kwargs.pop("extensions", None) or {})
        extensions[URL_TEMPLATE] = build_url_template(descriptor)

        # httpx replaces (rather than extends) the URL query when params are
        # given, so the resource query goes in as params with the caller's on top
        path, query = resolve(resource, fmt)
        params = httpx.QueryParams(query)
        extra = kwargs.pop("params", None)
        if extra is not None:
            params = params.merge(extra)

        logger.debug("%s %s -> %s?%s", method.upper(), extensions[URL_TEMPLATE], path, params)
        return self._client.build_request(
            method, httpx.URL(path), params=params, extensions=extensions, **kwargs
        )


class ResourcesClient(_ResourceRequests):
    """
    Issue requests against typed resources with an httpx.Client.

        client = httpx.Client(base_url="https://api.example.com")
        install(client)
        with ResourcesClient(client) as api:
            api.get(User(user_id=1))
    """

    def __init__(self, client: httpx.Client):
        super().__init__(client)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **client_kwargs: Any) -> "ResourcesClient":
        settings = settings or get_settings()
        client_kwargs.setdefault("base_url", settings.base_url)
        client_kwargs.setdefault("timeout", settings.timeout_seconds)
        client_kwargs.setdefault("follow_redirects", settings.follow_redirects)
        client = httpx.Client(**client_kwargs)
        install(client)
        if settings.record_url_templates:
            UrlTemplateRecorder().attach(client)
        return cls(client)

    def request(
        self,
        method: str,
        resource: BaseModel,
        *,
        auth: Any = httpx.USE_CLIENT_DEFAULT,
        follow_redirects: Any = httpx.USE_CLIENT_DEFAULT,
        **kwargs: Any,
    ) -> httpx.Response:
        request = self.build_request(method, resource, **kwargs)
        return self._client.send(request, auth=auth, follow_redirects=follow_redirects)

    def get(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("GET", resource, **kwargs)

    def post(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("POST", resource, **kwargs)

    def put(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", resource, **kwargs)

    def patch(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", resource, **kwargs)

    def delete(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", resource, **kwargs)

    def options(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("OPTIONS", resource, **kwargs)

    def head(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return self.request("HEAD", resource, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ResourcesClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AsyncResourcesClient(_ResourceRequests):
    """Async counterpart of ResourcesClient over httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient):
        super().__init__(client)

    async def request(
        self,
        method: str,
        resource: BaseModel,
        *,
        auth: Any = httpx.USE_CLIENT_DEFAULT,
        follow_redirects: Any = httpx.USE_CLIENT_DEFAULT,
        **kwargs: Any,
    ) -> httpx.Response:
        request = self.build_request(method, resource, **kwargs)
        return await self._client.send(request, auth=auth, follow_redirects=follow_redirects)

    async def get(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", resource, **kwargs)

    async def post(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", resource, **kwargs)

    async def put(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", resource, **kwargs)

    async def patch(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", resource, **kwargs)

    async def delete(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", resource, **kwargs)

    async def options(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("OPTIONS", resource, **kwargs)

    async def head(self, resource: BaseModel, **kwargs: Any) -> httpx.Response:
        return await self.request("HEAD", resource, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncResourcesClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

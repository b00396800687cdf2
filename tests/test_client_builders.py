import json

import httpx
import pytest

from httpx_resources.client.builders import AsyncResourcesClient, ResourcesClient
from httpx_resources.client.plugin import URL_TEMPLATE, Resources, install, resources_or_none
from httpx_resources.errors import PluginNotInstalledError
from httpx_resources.resources.format import ResourcesFormat
from httpx_resources.settings import Settings
from httpx_resources.telemetry.recorder import UrlTemplateRecorder

from shop_resources import Items, Post, Search, User

BASE_URL = "https://api.test/v1"


def make_client(seen: list[httpx.Request], status_code: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json={"ok": True})

    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    install(client)
    return client


def test_get_resolves_url_and_attaches_template():
    seen: list[httpx.Request] = []
    api = ResourcesClient(make_client(seen))

    response = api.get(User(user_id=7))

    assert response.status_code == 200
    assert len(seen) == 1
    assert str(seen[0].url) == "https://api.test/v1/users/7?expand=false"
    assert seen[0].extensions[URL_TEMPLATE] == "/users/{user_id}?expand={expand?}"
    assert response.request.extensions[URL_TEMPLATE] == "/users/{user_id}?expand={expand?}"


@pytest.mark.parametrize(
    "verb, method",
    [
        ("get", "GET"),
        ("post", "POST"),
        ("put", "PUT"),
        ("patch", "PATCH"),
        ("delete", "DELETE"),
        ("options", "OPTIONS"),
        ("head", "HEAD"),
    ],
)
def test_verbs_forward_method(verb: str, method: str):
    seen: list[httpx.Request] = []
    api = ResourcesClient(make_client(seen))

    getattr(api, verb)(Search(q="x"))

    assert seen[0].method == method
    assert seen[0].extensions[URL_TEMPLATE] == "/search?q={q}"


def test_generic_request_with_body_and_headers():
    seen: list[httpx.Request] = []
    api = ResourcesClient(make_client(seen))

    post = Post(user=User(user_id=1), post_id=2)
    api.request("PUT", post, json={"title": "hi"}, headers={"X-Trace": "abc"})

    req = seen[0]
    assert req.method == "PUT"
    assert req.url.path == "/v1/users/1/posts/2"
    assert req.headers["X-Trace"] == "abc"
    assert json.loads(req.read()) == {"title": "hi"}


def test_caller_params_and_extensions_apply_on_top():
    seen: list[httpx.Request] = []
    api = ResourcesClient(make_client(seen))

    api.get(Items(a="x"), params={"page": "2"}, extensions={"custom": "yes"})

    req = seen[0]
    assert req.url.params["a"] == "x"
    assert req.url.params["page"] == "2"
    assert req.extensions["custom"] == "yes"
    assert req.extensions[URL_TEMPLATE] == "/items?a={a}&b={b?}"


def test_caller_params_override_resource_query_keys():
    seen: list[httpx.Request] = []
    api = ResourcesClient(make_client(seen))

    api.get(Items(a="x", b=3), params={"b": "9", "page": "2"})

    assert str(seen[0].url) == "https://api.test/v1/items?a=x&b=9&page=2"


def test_client_default_params_keep_resource_query():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    client = httpx.Client(
        transport=httpx.MockTransport(handler), base_url=BASE_URL, params={"key": "k1"}
    )
    install(client)
    ResourcesClient(client).get(Items(a="x"))

    assert seen[0].url.params["key"] == "k1"
    assert seen[0].url.params["a"] == "x"
    assert seen[0].url.path == "/v1/items"


def test_build_request_does_not_send():
    seen: list[httpx.Request] = []
    api = ResourcesClient(make_client(seen))

    request = api.build_request("GET", Items(a="x", b=3))

    assert seen == []
    assert str(request.url) == "https://api.test/v1/items?a=x&b=3"
    assert request.extensions[URL_TEMPLATE] == "/items?a={a}&b={b?}"


def test_missing_plugin_fails_when_wrapping():
    client = httpx.Client(base_url=BASE_URL)
    assert resources_or_none(client) is None
    with pytest.raises(PluginNotInstalledError):
        ResourcesClient(client)
    client.close()


def test_installed_format_is_used():
    class NumericBools(ResourcesFormat):
        def encode_value(self, value):
            if isinstance(value, bool):
                return ["1" if value else "0"]
            return super().encode_value(value)

    client = httpx.Client(base_url=BASE_URL)
    plugin = install(client, Resources(format=NumericBools()))
    assert resources_or_none(client) is plugin

    with ResourcesClient(client) as api:
        request = api.build_request("GET", User(user_id=5, expand=True))
    assert request.url.params["expand"] == "1"
    assert client.is_closed


def test_from_settings_configures_client():
    settings = Settings(base_url="https://api.test", timeout_seconds=3, record_url_templates=True)
    transport = httpx.MockTransport(lambda request: httpx.Response(204))

    with ResourcesClient.from_settings(settings, transport=transport) as api:
        response = api.delete(User(user_id=9))
        hooks = api.client.event_hooks["response"]

        assert response.status_code == 204
        assert str(response.request.url) == "https://api.test/users/9?expand=false"
        assert api.client.timeout == httpx.Timeout(3)
        assert len(hooks) == 1 and isinstance(hooks[0], UrlTemplateRecorder)
        assert [g.template for g in hooks[0].groups()] == ["/users/{user_id}?expand={expand?}"]


@pytest.mark.anyio
async def test_async_client():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    install(client)

    async with AsyncResourcesClient(client) as api:
        response = await api.post(Items(a="new"))

    assert response.status_code == 201
    assert seen[0].method == "POST"
    assert str(seen[0].url) == "https://api.test/v1/items?a=new"
    assert seen[0].extensions[URL_TEMPLATE] == "/items?a={a}&b={b?}"
    assert client.is_closed

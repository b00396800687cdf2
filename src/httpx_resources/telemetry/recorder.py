from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Union

import httpx

from httpx_resources.client.plugin import URL_TEMPLATE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteGroup:
    method: str
    template: str
    count: int
    errors: int


class UrlTemplateRecorder:
    """
    Group finished requests by their URL template.

    Responses whose request carries no template (plain httpx calls) are
    ignored. Hooks may fire from several threads; counters are locked.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[tuple[str, str]] = Counter()
        self._errors: Counter[tuple[str, str]] = Counter()

    def __call__(self, response: httpx.Response) -> None:
        request = response.request
        template = request.extensions.get(URL_TEMPLATE)
        if template is None:
            return

        key = (request.method, template)
        with self._lock:
            self._counts[key] += 1
            if response.status_code >= 400:
                self._errors[key] += 1
        logger.debug("%s %s -> %s", request.method, template, response.status_code)

    async def async_hook(self, response: httpx.Response) -> None:
        self(response)

    def attach(self, client: Union[httpx.Client, httpx.AsyncClient]) -> "UrlTemplateRecorder":
        hook = self.async_hook if isinstance(client, httpx.AsyncClient) else self
        hooks = client.event_hooks
        hooks["response"] = [*hooks.get("response", []), hook]
        client.event_hooks = hooks
        return self

    def groups(self) -> list[RouteGroup]:
        with self._lock:
            out = [
                RouteGroup(method=m, template=t, count=n, errors=self._errors[(m, t)])
                for (m, t), n in self._counts.items()
            ]
        # stable ordering for reports
        out.sort(key=lambda g: (g.template, g.method))
        return out

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._errors.clear()

"""Integration test fixtures (scripted HTTP backends).

Provides httpx clients wired to an in-process MockTransport that plays a
script of responses and network failures, one step per request.
"""

import httpx
import pytest


class ScriptedHandler:
    """
    MockTransport handler replaying a fixed script.

    Each step is either an httpx.Response or an httpx exception class, which
    is raised bound to the incoming request. The last step repeats forever.
    """

    def __init__(self, steps):
        if not steps:
            raise ValueError("at least one step is required")
        self.steps = list(steps)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        if isinstance(step, type) and issubclass(step, httpx.HTTPError):
            raise step(f"scripted {step.__name__}", request=request)
        # Fresh copy so a repeated step never reuses a consumed response
        return httpx.Response(step.status_code, headers=step.headers, content=step.content)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def scripted_client():
    """Factory fixture: scripted_client(*steps) -> (httpx.Client, ScriptedHandler)."""
    clients: list[httpx.Client] = []

    def _create(*steps):
        handler = ScriptedHandler(steps)
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=False)
        clients.append(client)
        return client, handler

    yield _create

    for client in clients:
        client.close()


@pytest.fixture
def scripted_async_client():
    """Async counterpart of scripted_client; tests close the client with `async with`."""

    def _create(*steps):
        handler = ScriptedHandler(steps)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=False)
        return client, handler

    return _create

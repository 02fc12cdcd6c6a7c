"""
Account API endpoint resolution.

The media services front door answers a GET on the account URL either
with 200 (the URL already is the account endpoint) or with 301 pointing
at the cluster that hosts the account. The request is a plain web
request, so it runs under the web request retry policy; httpx failures
are translated to WebRequestError for the detection strategy.
"""

import httpx
import structlog

from media_services.config import Settings
from media_services.retry.policy import MediaRetryPolicy
from media_services.transport.errors import translate_httpx_error
from media_services.transport.exceptions import MediaServicesError

logger = structlog.get_logger(__name__)


def build_http_client(settings: Settings) -> httpx.Client:
    """Create a synchronous httpx client configured from settings."""
    return httpx.Client(
        timeout=httpx.Timeout(settings.WEB_REQUEST_TIMEOUT),
        follow_redirects=False,
    )


def build_async_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create an asynchronous httpx client configured from settings."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.WEB_REQUEST_TIMEOUT),
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        follow_redirects=False,
    )


def endpoint_from_response(response: httpx.Response) -> str:
    """
    Extract the account API endpoint from the discovery response.

    Raises:
        httpx.HTTPStatusError: The server answered with an error status
        MediaServicesError: Any other unexpected status
    """
    if response.status_code == 301:
        location = response.headers.get("Location")
        if not location:
            raise MediaServicesError(
                "Redirect without Location header",
                details={"status_code": response.status_code},
            )
        return str(response.url.join(location))

    if response.status_code == 200:
        return str(response.url)

    if response.is_error:
        response.raise_for_status()

    raise MediaServicesError(
        f"Unexpected response code {response.status_code}",
        details={"status_code": response.status_code, "url": str(response.url)},
    )


def resolve_account_api_endpoint(
    client: httpx.Client,
    api_server: str,
    policy: MediaRetryPolicy,
    headers: dict[str, str] | None = None,
) -> str:
    """
    Resolve the account API endpoint, blocking the calling thread.

    Args:
        client: httpx client (redirects are never followed)
        api_server: Front door URL of the media services account
        policy: Retry policy, normally the web request policy
        headers: Extra headers (access token, API version)

    Returns:
        Absolute URL of the account API endpoint
    """

    def _request() -> str:
        try:
            response = client.get(api_server, headers=headers, follow_redirects=False)
            return endpoint_from_response(response)
        except httpx.HTTPError as e:
            raise translate_httpx_error(e) from e

    endpoint = policy.execute_action(_request)
    logger.info("Resolved account API endpoint", api_server=api_server, endpoint=endpoint)
    return endpoint


async def aresolve_account_api_endpoint(
    client: httpx.AsyncClient,
    api_server: str,
    policy: MediaRetryPolicy,
    headers: dict[str, str] | None = None,
) -> str:
    """Async variant of resolve_account_api_endpoint()."""

    async def _request() -> str:
        try:
            response = await client.get(api_server, headers=headers, follow_redirects=False)
            return endpoint_from_response(response)
        except httpx.HTTPError as e:
            raise translate_httpx_error(e) from e

    endpoint = await policy.execute_async(_request)
    logger.info("Resolved account API endpoint", api_server=api_server, endpoint=endpoint)
    return endpoint

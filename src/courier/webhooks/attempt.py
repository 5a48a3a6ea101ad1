"""Single HTTP call to a receiver, reduced to a three-way result.

``attempt_once`` never raises: a 2xx is ``AttemptSuccess``, any other
status is ``AttemptHttpError``, and anything that prevented a response
(DNS, connect, timeout, bad URL) is ``AttemptTransportError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import httpx

from courier.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger(__name__)

HttpMethod = Literal["GET", "POST"]


@dataclass(frozen=True)
class AttemptSuccess:
    """Receiver answered with a 2xx."""

    status_code: int
    body: str

    succeeded = True

    @property
    def response_status(self) -> int | None:
        return self.status_code

    @property
    def response_body(self) -> str | None:
        return self.body


@dataclass(frozen=True)
class AttemptHttpError:
    """Receiver answered with a non-2xx status."""

    status_code: int
    body: str

    succeeded = False

    @property
    def response_status(self) -> int | None:
        return self.status_code

    @property
    def response_body(self) -> str | None:
        return self.body


@dataclass(frozen=True)
class AttemptTransportError:
    """No response was obtained."""

    error: str

    succeeded = False

    @property
    def response_status(self) -> int | None:
        return None

    @property
    def response_body(self) -> str | None:
        return self.error


AttemptResult = AttemptSuccess | AttemptHttpError | AttemptTransportError


def classify_response(response: httpx.Response) -> AttemptSuccess | AttemptHttpError:
    """Map a received response onto success or HTTP error."""
    if 200 <= response.status_code < 300:
        return AttemptSuccess(status_code=response.status_code, body=response.text)
    return AttemptHttpError(status_code=response.status_code, body=response.text)


async def attempt_once(
    client: httpx.AsyncClient,
    method: HttpMethod,
    url: str,
    *,
    headers: Mapping[str, str],
    params: Mapping[str, str] | None = None,
    content: str | None = None,
) -> AttemptResult:
    """Issue one request and classify the outcome.

    Args:
        client: HTTP client to send with.
        method: "GET" for the ping phase, "POST" for the body phase.
        url: Receiver URL.
        headers: Request headers.
        params: Query parameters, merged over any already in ``url``;
            the receiver's own query (tokens and the like) is kept.
        content: Request body.

    Returns:
        AttemptSuccess, AttemptHttpError or AttemptTransportError.
    """
    try:
        target = str(httpx.URL(url).copy_merge_params(dict(params))) if params else url
        response = await client.request(
            method,
            target,
            headers=dict(headers),
            content=content,
        )
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Webhook request failed", method=method, url=url, error=str(e))
        return AttemptTransportError(error=str(e) or type(e).__name__)
    except Exception as e:
        logger.exception("Unexpected webhook request error", method=method, url=url)
        return AttemptTransportError(error=str(e) or type(e).__name__)

    return classify_response(response)

"""HTTP content check variants."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

import httpx

from hostcheck import _params
from hostcheck._types import CheckResult, probe_failure
from hostcheck.checks._base import Check
from hostcheck.errors import InfrastructureError

if TYPE_CHECKING:
    from hostcheck.local import LocalSession

logger = logging.getLogger(__name__)


def fetch_body(session: LocalSession, url: str, *, verify: bool) -> str:
    """GET ``url`` and return the decoded body, whatever the status code.

    Raises:
        InfrastructureError: If the request could not be completed.

    """
    try:
        with session.http_client(verify=verify) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        raise InfrastructureError(
            f"Could not fetch {url}: {exc}",
            error_code="HTTP_ERROR",
            context={"url": url, "verify": verify},
            cause=exc,
        ) from exc
    logger.debug("GET %s -> %s (%d bytes)", url, response.status_code, len(response.content))
    return response.text


def _response_matches(session: LocalSession, url: str, pattern: re.Pattern[str], *, verify: bool) -> CheckResult:
    body = fetch_body(session, url, verify=verify)
    if pattern.search(body):
        return CheckResult.success()
    return probe_failure("Response didn't match regexp", pattern.pattern, [body])


@dataclass(frozen=True)
class ResponseMatches(Check):
    """Does the response body from this URL match this regular expression?"""

    check_id: ClassVar[str] = "ResponseMatches"
    arity: ClassVar[int] = 2

    url: str
    pattern: re.Pattern[str]

    @classmethod
    def _from_params(cls, params):
        return cls(url=_params.parse_url(params[0]), pattern=_params.parse_regex(params[1]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _response_matches(session, self.url, self.pattern, verify=True)


@dataclass(frozen=True)
class ResponseMatchesInsecure(Check):
    """Does the response body match, without validating the TLS certificate?"""

    check_id: ClassVar[str] = "ResponseMatchesInsecure"
    arity: ClassVar[int] = 2

    url: str
    pattern: re.Pattern[str]

    @classmethod
    def _from_params(cls, params):
        return cls(url=_params.parse_url(params[0]), pattern=_params.parse_regex(params[1]))

    def probe(self, session: LocalSession) -> CheckResult:
        return _response_matches(session, self.url, self.pattern, verify=False)

"""
Unit tests for HTTP content check variants.

Responses come from httpx.MockTransport; nothing leaves the process.
"""

import httpx
import pytest

from hostcheck.checks import ResponseMatches, ResponseMatchesInsecure
from hostcheck.errors import InfrastructureError, ParameterTypeError
from hostcheck.local import LocalSession

PAGE = "<!DOCTYPE html><html><body>Electronic Frontier Foundation</body></html>"


def session_returning(status=200, text=PAGE, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, text=text)

    return LocalSession(http_transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestResponseMatches:
    """Test regular expression matching of response bodies."""

    def test_body_matches(self) -> None:
        check = ResponseMatches.from_params(["https://eff.org", "html"])
        assert check.execute(session_returning()).passed

    def test_body_does_not_match(self) -> None:
        check = ResponseMatches.from_params(["https://eff.org", "asfdjhow012u"])
        result = check.execute(session_returning())
        assert result.code == 1
        assert result.message.startswith("Response didn't match regexp:\n\tSpecified: asfdjhow012u\n\tActual: <!DOCTYPE")

    def test_regex_search_not_fullmatch(self) -> None:
        check = ResponseMatches.from_params(["http://example.test/", r"Frontier\s+Foundation"])
        assert check.execute(session_returning()).passed

    def test_error_status_body_still_searched(self) -> None:
        check = ResponseMatches.from_params(["http://example.test/missing", "Not Found"])
        assert check.execute(session_returning(status=404, text="404 Not Found")).passed

    def test_request_is_get(self) -> None:
        seen = []
        ResponseMatches.from_params(["http://example.test/health", "ok"]).execute(session_returning(seen=seen))
        assert [(r.method, str(r.url)) for r in seen] == [("GET", "http://example.test/health")]

    def test_transport_error_is_infrastructure_error(self) -> None:
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        session = LocalSession(http_transport=httpx.MockTransport(handler))
        result = ResponseMatches.from_params(["http://example.test/", "html"]).execute(session)
        assert isinstance(result.cause, InfrastructureError)
        assert result.cause.error_code == "HTTP_ERROR"
        assert "Could not fetch http://example.test/" in result.message

    def test_insecure_disables_verification(self, monkeypatch) -> None:
        verify_flags = []
        original = LocalSession.http_client

        def spy(self, *, verify=True):
            verify_flags.append(verify)
            return original(self, verify=verify)

        monkeypatch.setattr(LocalSession, "http_client", spy)
        ResponseMatchesInsecure.from_params(["https://self-signed.test", "html"]).execute(session_returning())
        ResponseMatches.from_params(["https://self-signed.test", "html"]).execute(session_returning())
        assert verify_flags == [False, True]

    @pytest.mark.parametrize(
        "params,message",
        [
            (["eff.org", "html"], "is not a valid URL"),
            (["ftp://eff.org", "html"], "is not a valid URL"),
            (["https://eff.org", "(html"], "is not a valid regular expression"),
        ],
    )
    def test_invalid_parameters(self, params, message) -> None:
        with pytest.raises(ParameterTypeError, match=message):
            ResponseMatches.from_params(params)


@pytest.mark.network
class TestRealHTTP:
    """Matching against a live site."""

    def test_eff_homepage(self) -> None:
        assert ResponseMatches.from_params(["https://eff.org", "html"]).execute().passed
        assert not ResponseMatches.from_params(["https://eff.org", "asfdjhow012u"]).execute().passed

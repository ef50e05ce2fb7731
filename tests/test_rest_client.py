"""
Device client tests. The network is stubbed by patching requests.Session.get.
"""
from unittest.mock import MagicMock, patch

import requests
from requests.auth import HTTPBasicAuth

from reseller_monitor.core.constants import PollStatus
from reseller_monitor.models.router import Router
from reseller_monitor.utils.device_clients.mikrotik.rest_client import poll_router


def make_router(**kwargs) -> Router:
    data = {
        "name": "core-1",
        "host": "10.0.0.1",
        "port": 443,
        "username": "api",
        "password": "secret",
        "routeros_version": "v7",
    }
    data.update(kwargs)
    return Router(**data)


def fake_response(status_code=200, payload=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("no JSON")
    else:
        response.json.return_value = payload
    return response


def test_ok_returns_sessions_and_uses_basic_auth_over_https():
    sessions = [{"name": "u1"}, {"name": "u2"}]
    with patch.object(requests.Session, "get", autospec=True, return_value=fake_response(200, sessions)) as get:
        outcome = poll_router(make_router(), timeout=5)

    assert outcome.status == PollStatus.OK
    assert outcome.sessions == sessions
    assert outcome.is_online is True

    http_session, url = get.call_args.args
    assert url == "https://10.0.0.1:443/rest/ppp/active"
    assert http_session.auth == HTTPBasicAuth("api", "secret")
    assert get.call_args.kwargs["timeout"] == 5


def test_http_opt_in():
    with patch.object(requests.Session, "get", autospec=True, return_value=fake_response(200, [])) as get:
        poll_router(make_router(use_https=False, port=80))

    assert get.call_args.args[1] == "http://10.0.0.1:80/rest/ppp/active"


def test_401_is_auth_failure_but_online():
    with patch.object(requests.Session, "get", return_value=fake_response(401)):
        outcome = poll_router(make_router())

    assert outcome.status == PollStatus.AUTH_FAILURE
    assert outcome.is_online is True
    assert outcome.sessions == []


def test_other_status_is_unreachable():
    with patch.object(requests.Session, "get", return_value=fake_response(503)):
        outcome = poll_router(make_router())

    assert outcome.status == PollStatus.UNREACHABLE
    assert outcome.is_online is False
    assert outcome.error == "HTTP 503"


def test_connection_error_is_unreachable():
    with patch.object(requests.Session, "get", side_effect=requests.exceptions.ConnectionError("refused")):
        outcome = poll_router(make_router())

    assert outcome.status == PollStatus.UNREACHABLE
    assert outcome.is_online is False
    assert "refused" in outcome.error


def test_timeout_is_unreachable():
    with patch.object(requests.Session, "get", side_effect=requests.exceptions.ReadTimeout("slow")):
        outcome = poll_router(make_router(), timeout=1)

    assert outcome.status == PollStatus.UNREACHABLE
    assert outcome.error.startswith("Timeout")


def test_invalid_json_is_unreachable():
    with patch.object(requests.Session, "get", return_value=fake_response(200, json_error=True)):
        outcome = poll_router(make_router())

    assert outcome.status == PollStatus.UNREACHABLE


def test_non_array_body_is_unreachable():
    with patch.object(requests.Session, "get", return_value=fake_response(200, {"error": "x"})):
        outcome = poll_router(make_router())

    assert outcome.status == PollStatus.UNREACHABLE


def test_unsupported_dialect_makes_no_network_call():
    with patch.object(requests.Session, "get") as get:
        outcome = poll_router(make_router(routeros_version="v6"))

    get.assert_not_called()
    assert outcome.status == PollStatus.UNSUPPORTED
    assert outcome.is_online is False
    assert "v6" in outcome.error

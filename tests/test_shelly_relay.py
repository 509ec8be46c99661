"""Tests for devices/shelly_relay.py request building and error mapping"""

import pytest
import requests

import config
from devices.shelly_relay import CommunicationError, ShellyApi


def mock_response(mocker, json_data=None, status_error=None, json_error=None):
    resp = mocker.Mock()
    resp.raise_for_status = mocker.Mock(side_effect=status_error)
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    return resp


class TestGetStatus:

    def test_get_status_returns_payload(self, mocker):
        payload = {"switch:0": {"output": True, "apower": 42.6}}
        mock_get = mocker.patch(
            "devices.shelly_relay.requests.get",
            return_value=mock_response(mocker, payload),
        )

        api = ShellyApi("192.168.1.50")

        assert api.get_status() == payload
        mock_get.assert_called_once_with(
            "http://192.168.1.50/rpc/Shelly.GetStatus",
            params=None,
            timeout=config.HTTP_TIMEOUT,
        )

    def test_connection_error_raises_communication_error(self, mocker):
        mocker.patch(
            "devices.shelly_relay.requests.get",
            side_effect=requests.ConnectionError("no route to host"),
        )

        with pytest.raises(CommunicationError, match="no route to host"):
            ShellyApi("192.168.1.50").get_status()

    def test_timeout_raises_communication_error(self, mocker):
        mocker.patch(
            "devices.shelly_relay.requests.get",
            side_effect=requests.Timeout("read timed out"),
        )

        with pytest.raises(CommunicationError):
            ShellyApi("192.168.1.50").get_status()

    def test_http_error_raises_communication_error(self, mocker):
        resp = mock_response(mocker, status_error=requests.HTTPError("500 Server Error"))
        mocker.patch("devices.shelly_relay.requests.get", return_value=resp)

        with pytest.raises(CommunicationError, match="500"):
            ShellyApi("192.168.1.50").get_status()

    def test_invalid_json_raises_communication_error(self, mocker):
        resp = mock_response(mocker, json_error=ValueError("Expecting value"))
        mocker.patch("devices.shelly_relay.requests.get", return_value=resp)

        with pytest.raises(CommunicationError, match="invalid JSON"):
            ShellyApi("192.168.1.50").get_status()

    def test_non_object_json_raises_communication_error(self, mocker):
        mocker.patch(
            "devices.shelly_relay.requests.get",
            return_value=mock_response(mocker, [1, 2, 3]),
        )

        with pytest.raises(CommunicationError, match="not an object"):
            ShellyApi("192.168.1.50").get_status()


class TestSetRelay:

    def test_set_relay_on(self, mocker):
        mock_get = mocker.patch(
            "devices.shelly_relay.requests.get",
            return_value=mock_response(mocker, {"was_on": False}),
        )

        ShellyApi("192.168.1.50").set_relay(0, True)

        mock_get.assert_called_once_with(
            "http://192.168.1.50/rpc/Switch.Set",
            params={"id": 0, "on": "true"},
            timeout=config.HTTP_TIMEOUT,
        )

    def test_set_relay_off_other_index(self, mocker):
        mock_get = mocker.patch(
            "devices.shelly_relay.requests.get",
            return_value=mock_response(mocker, {"was_on": True}),
        )

        ShellyApi("192.168.1.50").set_relay(1, False)

        assert mock_get.call_args.kwargs["params"] == {"id": 1, "on": "false"}

    def test_set_relay_failure_raises_communication_error(self, mocker):
        mocker.patch(
            "devices.shelly_relay.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        )

        with pytest.raises(CommunicationError):
            ShellyApi("192.168.1.50").set_relay(0, True)

import pytest
from unittest.mock import MagicMock, patch
import httpx

from launchpad.core.errors import OrganicValidationError
from launchpad.remote.organic import HttpOrganicValidator, build_validation_url


def _resp(status=200, json_data=None, json_error=None):
    r = MagicMock()
    r.status_code = status
    if json_error is not None:
        r.json.side_effect = json_error
    else:
        r.json.return_value = json_data
    return r


def _validator():
    return HttpOrganicValidator(
        base_url="https://gcdsdk.example/install_data/v4.0/",
        app_id="123",
        dev_key="dk",
        timeout=2,
    )


def test_build_validation_url():
    assert build_validation_url("https://h/install_data/v4.0/", "42") == "https://h/install_data/v4.0/id42"
    assert build_validation_url("https://h/install_data/v4.0", "42") == "https://h/install_data/v4.0/id42"


@patch("httpx.Client.get")
def test_validate_success(mock_get):
    mock_get.return_value = _resp(200, {"af_status": "Non-organic", "media_source": "fb"})

    data = _validator().validate("dev-1")

    assert data == {"af_status": "Non-organic", "media_source": "fb"}
    args, kwargs = mock_get.call_args
    assert args[0] == "https://gcdsdk.example/install_data/v4.0/id123"
    assert kwargs["params"] == {"devkey": "dk", "device_id": "dev-1"}


@patch("httpx.Client.get")
def test_validate_empty_object_is_success(mock_get):
    mock_get.return_value = _resp(200, {})
    assert _validator().validate("dev-1") == {}


@patch("httpx.Client.get")
def test_validate_missing_device_id(mock_get):
    with pytest.raises(OrganicValidationError, match="missing_device_id"):
        _validator().validate(None)
    mock_get.assert_not_called()


@patch("httpx.Client.get")
@pytest.mark.parametrize("status", [201, 404, 500])
def test_validate_requires_200(mock_get, status):
    mock_get.return_value = _resp(status, {})
    with pytest.raises(OrganicValidationError) as exc:
        _validator().validate("dev-1")
    assert exc.value.status_code == status


@patch("httpx.Client.get")
def test_validate_bad_json(mock_get):
    mock_get.return_value = _resp(200, json_error=ValueError("bad"))
    with pytest.raises(OrganicValidationError, match="malformed_json"):
        _validator().validate("dev-1")


@patch("httpx.Client.get")
def test_validate_non_object(mock_get):
    mock_get.return_value = _resp(200, ["not", "a", "dict"])
    with pytest.raises(OrganicValidationError, match="response_not_object"):
        _validator().validate("dev-1")


@patch("httpx.Client.get")
def test_validate_network_error(mock_get):
    mock_get.side_effect = httpx.ReadTimeout("Timeout")
    with pytest.raises(OrganicValidationError, match="transport:ReadTimeout"):
        _validator().validate("dev-1")

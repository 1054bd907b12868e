import requests
import pytest

from face_portal import client as portal_client
from face_portal.client import PortalClient, to_result


def make_response(status_code, content=b"", headers=None):
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.headers.update(headers or {})
    return response


@pytest.fixture
def session(mocker):
    return mocker.create_autospec(requests.Session, instance=True)


@pytest.fixture
def image_path(tmp_path, image_file):
    path = tmp_path / "face.jpg"
    path.write_bytes(image_file.getvalue())
    return path


def test_register_sends_form_fields(session, image_path):
    session.post.return_value = make_response(
        200, b'{"message": "ok"}', {"Content-Type": "application/json", "Result": "0"}
    )

    result = PortalClient("http://proxy.test/api/proxy/", session=session).register(" device-1 ", "Ann ", image_path)

    args, kwargs = session.post.call_args
    assert args[0] == "http://proxy.test/api/proxy/register"
    assert kwargs["data"] == {"uid": "device-1", "name": "Ann"}
    filename, content, content_type = kwargs["files"]["image"]
    assert filename == "face.jpg"
    assert content == image_path.read_bytes()
    assert content_type == "image/jpeg"
    assert result.ok
    assert result.body == {"message": "ok"}
    assert result.headers["result_code"] == "0"


def test_recognize_keeps_binary_body(session, image_path):
    session.post.return_value = make_response(
        200, b"\xff\xfbaudio", {"Content-Type": "audio/mpeg", "X-Response-Type": "audio", "X-Response-Text": "Hi Ann"}
    )

    result = PortalClient(session=session).recognize("device-1", image_path)

    assert result.is_binary
    assert result.body == b"\xff\xfbaudio"
    assert result.headers["response_type"] == "audio"
    assert result.headers["response_text"] == "Hi Ann"


def test_list_and_delete_send_uid_header(session):
    session.get.return_value = make_response(200, b"{}", {"Content-Type": "application/json"})
    session.delete.return_value = make_response(
        207, b'{"outcome": "partial_failure"}', {"Content-Type": "application/json"}
    )
    portal = PortalClient("http://proxy.test/api/proxy", session=session)

    portal.list_faces("device-1")
    result = portal.delete_by_name("device-1", "Ann")

    assert session.get.call_args.kwargs["headers"] == {"X-Portal-UID": "device-1"}
    assert session.delete.call_args.args[0] == "http://proxy.test/api/proxy/faces/deletebyname"
    assert session.delete.call_args.kwargs["json"] == {"name": "Ann"}
    assert result.status_code == 207
    assert result.body["outcome"] == "partial_failure"


def test_to_result_falls_back_to_text_for_bad_json():
    result = to_result(make_response(502, b"<html>bad gateway</html>", {"Content-Type": "application/json"}))
    assert not result.ok
    assert result.body == "<html>bad gateway</html>"


def test_cli_writes_binary_reply(mocker, image_path, tmp_path, capsys):
    instance = mocker.patch.object(portal_client, "PortalClient", autospec=True).return_value
    instance.recognize.return_value = portal_client.PortalResult(
        status_code=200, content_type="audio/mpeg", body=b"audio-bytes", headers={"response_type": "audio"}
    )
    output = tmp_path / "reply.mp3"

    exit_code = portal_client.main(
        ["--api-url", "http://proxy.test", "recognize", "--uid", "device-1", str(image_path), "--output", str(output)]
    )

    assert exit_code == 0
    assert output.read_bytes() == b"audio-bytes"
    instance.recognize.assert_called_once_with("device-1", str(image_path))
    assert "response_type: audio" in capsys.readouterr().out


def test_cli_reports_connection_errors(mocker, capsys):
    instance = mocker.patch.object(portal_client, "PortalClient", autospec=True).return_value
    instance.list_faces.side_effect = requests.exceptions.ConnectionError("refused")

    exit_code = portal_client.main(["--api-url", "http://proxy.test", "list", "--uid", "device-1"])

    assert exit_code == 2
    assert "API Error: refused" in capsys.readouterr().err

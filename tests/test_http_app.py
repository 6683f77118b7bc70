import pytest

from reactornet.buffer import Buffer
from reactornet.http_app import main, on_request
from reactornet.http_request import HttpRequest
from reactornet.http_response import HttpResponse, HttpStatusCode
from reactornet.http_server import parse_http_request

DATA = "GET / HTTP/1.1\r\nHost: localhost:43211\r\nUser-Agent: curl/7.54.0\r\nAccept: */*\r\n\r\n"


def _respond(url):
    request = HttpRequest()
    request.url = url
    response = HttpResponse()
    on_request(request, response)
    return response


def test_source_request_gets_home_page():
    buffer = Buffer()
    buffer.append_string(DATA)
    request = HttpRequest()
    parse_http_request(buffer, request)
    response = HttpResponse()
    on_request(request, response)
    assert response.status_code is HttpStatusCode.OK
    assert response.status_message == "OK"
    assert response.content_type == "text/html"
    assert "<h1>Hello, network programming</h1>" in response.body

    output = Buffer()
    response.encode_buffer(output)
    encoded = output.peek()
    assert encoded.startswith(b"HTTP/1.1 200 OK\r\n")
    assert encoded.endswith(response.body.encode())


def test_network_page_ignores_query_string():
    response = _respond("/network?x=1")
    assert response.status_code is HttpStatusCode.OK
    assert response.content_type == "text/plain"
    assert response.body == "hello, network programming"


def test_unknown_path_is_not_found():
    response = _respond("/network/more")
    assert response.status_code is HttpStatusCode.NOT_FOUND
    assert response.status_message == "Not Found"
    assert response.keep_connected is True
    assert response.body is None


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
import pytest

from reactornet.buffer import Buffer
from reactornet.http_response import HttpResponse, HttpStatusCode

BODY = "hello, network programming"


def _encode(response):
    buffer = Buffer()
    response.encode_buffer(buffer)
    return buffer.peek()


@pytest.mark.parametrize(
    "code, number",
    [
        (HttpStatusCode.OK, b"200"),
        (HttpStatusCode.MOVED_PERMANENTLY, b"301"),
        (HttpStatusCode.BAD_REQUEST, b"400"),
        (HttpStatusCode.NOT_FOUND, b"404"),
    ],
)
def test_status_code_written_in_status_line(code, number):
    response = HttpResponse()
    response.status_code = code
    response.status_message = "X"
    response.keep_connected = True
    assert _encode(response) == b"HTTP/1.1 " + number + b" X\r\nConnection: close\r\n\r\n"


def test_new_response_defaults():
    response = HttpResponse()
    assert response.status_code is HttpStatusCode.UNKNOWN
    assert response.status_message is None
    assert response.body is None
    assert response.keep_connected is False


def test_encode_ok_response():
    response = HttpResponse()
    response.status_code = HttpStatusCode.OK
    response.status_message = "OK"
    response.content_type = "text/plain"
    response.body = BODY
    expected = (
        "HTTP/1.1 200 OK\r\n"
        f"Content-Length: {len(BODY)}\r\n"
        "Connection: Keep-Alive\r\n"
        "\r\n" + BODY
    ).encode()
    assert _encode(response) == expected


def test_encode_closing_not_found_response():
    response = HttpResponse()
    response.status_code = HttpStatusCode.NOT_FOUND
    response.status_message = "Not Found"
    response.keep_connected = True
    assert _encode(response) == b"HTTP/1.1 404 Not Found\r\nConnection: close\r\n\r\n"


def test_extra_headers_follow_connection_line():
    response = HttpResponse()
    response.status_code = HttpStatusCode.OK
    response.status_message = "OK"
    response.body = BODY
    response.headers.append(("Server", "reactornet"))
    encoded = _encode(response)
    head, _, body = encoded.partition(b"\r\n\r\n")
    assert head.split(b"\r\n")[-1] == b"Server: reactornet"
    assert body == BODY.encode()


def test_encode_appends_after_existing_data():
    buffer = Buffer()
    buffer.append(b"prefix")
    response = HttpResponse()
    response.status_code = HttpStatusCode.OK
    response.status_message = "OK"
    response.body = BODY
    response.encode_buffer(buffer)
    data = buffer.peek()
    assert data.startswith(b"prefixHTTP/1.1 200 OK\r\n")
    assert data.endswith(BODY.encode())
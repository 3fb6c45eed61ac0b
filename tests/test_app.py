import logging
import re

import pytest
from fastapi.testclient import TestClient

from hello_server.app import app


client = TestClient(app)

ISO_LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\] ")


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Hello World!"
    assert response.headers["content-type"].startswith("text/plain")


def test_good_evening():
    response = client.get("/good-evening")
    assert response.status_code == 200
    assert response.text == "Good evening"


def test_root_is_idempotent():
    bodies = {client.get("/").text for _ in range(3)}
    assert bodies == {"Hello World!"}


def test_query_string_does_not_affect_matching():
    response = client.get("/good-evening?name=ada")
    assert response.status_code == 200
    assert response.text == "Good evening"


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/missing"),
        ("GET", "/good-evening/"),
        ("POST", "/"),
        ("PUT", "/good-evening"),
        ("DELETE", "/"),
    ],
)
def test_everything_else_is_plain_not_found(method, path):
    response = client.request(method, path)
    assert response.status_code == 404
    assert response.text == "Not Found"
    assert response.headers["content-type"].startswith("text/plain")


def test_each_request_logged_once(caplog):
    with caplog.at_level(logging.INFO, logger="hello_server.access"):
        client.get("/nowhere?x=1")
    lines = [r.getMessage() for r in caplog.records if r.name == "hello_server.access"]
    assert len(lines) == 1
    assert ISO_LINE.match(lines[0])
    assert lines[0].endswith("] GET /nowhere?x=1")


def test_matched_request_logged_too(caplog):
    with caplog.at_level(logging.INFO, logger="hello_server.access"):
        client.get("/")
    lines = [r.getMessage() for r in caplog.records if r.name == "hello_server.access"]
    assert len(lines) == 1
    assert lines[0].endswith("] GET /")


def test_percent_encoded_path_is_not_decoded(caplog):
    with caplog.at_level(logging.INFO, logger="hello_server.access"):
        response = client.get("/good%2Devening")
    assert response.status_code == 404
    assert response.text == "Not Found"
    lines = [r.getMessage() for r in caplog.records if r.name == "hello_server.access"]
    assert lines[-1].endswith("] GET /good%2Devening")


@pytest.mark.parametrize("method", ["TRACE", "PROPFIND"])
def test_unlisted_methods_are_not_found(method):
    response = client.request(method, "/")
    assert response.status_code == 404
    assert response.text == "Not Found"

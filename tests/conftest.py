import socket

import pytest

from tests.fixtures.fake_api import FakeAPIServer


def pytest_addoption(parser):
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="run tests that call the real upstream services",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--live"):
        return
    skip_live = pytest.mark.skip(reason="needs --live to call upstream services")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture(scope="session")
def fake_api():
    """Base URL of a local fake of the Ergast and md5 services."""
    server = FakeAPIServer().start()
    yield server.url
    server.stop()


@pytest.fixture
def unused_url():
    """A URL nothing listens on."""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/nothing"

import socket
import threading
import time
from collections import namedtuple
from contextlib import contextmanager

import psutil
import pytest
import uvicorn
from fastapi.testclient import TestClient

from envinfo.config import Settings
from envinfo.main import create_app

Addr = namedtuple("Addr", ["family", "address", "netmask", "broadcast", "ptp"])


def addr(family: int, address: str) -> Addr:
    return Addr(family, address, None, None, None)


FAKE_INTERFACES = {
    "lo": [addr(socket.AF_INET, "127.0.0.1"), addr(socket.AF_INET6, "::1")],
    "eth0": [
        addr(psutil.AF_LINK, "02:42:ac:11:00:02"),
        addr(socket.AF_INET, "10.0.0.5"),
        addr(socket.AF_INET, "10.0.0.6"),
        addr(socket.AF_INET6, "fe80::42:acff:fe11:2"),
    ],
    "wg0": [addr(socket.AF_INET6, "fd00::1")],
}


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@contextmanager
def serve(settings: Settings):
    """Run the app under a real uvicorn server in a background thread."""
    config = uvicorn.Config(
        create_app(settings), host="127.0.0.1", port=settings.port, log_config=None
    )
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline or not thread.is_alive():
            pytest.fail("server did not start")
        time.sleep(0.05)
    try:
        yield f"http://127.0.0.1:{settings.port}"
    finally:
        server.should_exit = True
        thread.join(timeout=10)


@pytest.fixture
def fake_interfaces(monkeypatch):
    monkeypatch.setattr(psutil, "net_if_addrs", lambda: FAKE_INTERFACES)
    return FAKE_INTERFACES


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def client(fake_interfaces, settings):
    return TestClient(create_app(settings))


@pytest.fixture
def live_server(monkeypatch, fake_interfaces):
    monkeypatch.setenv("PORT", str(free_port()))
    with serve(Settings.from_env()) as url:
        yield url

"""
测试共用的 pytest fixture

api/ 下的 Vercel 函数不是包，按文件路径加载。
上游请求经由 urllib.request.urlopen，由 fake_upstream 替换；
端点运行在真实的进程内 HTTPServer 中。
"""
import importlib.util
import io
import json
import sys
import threading
import urllib.error
from http.client import HTTPConnection
from http.server import HTTPServer
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def load_function(name):
    path = PROJECT_ROOT / "api" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(f"test_api_{name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ---------------------------------------------------------------------------
# 假上游
# ---------------------------------------------------------------------------

class _FakeResponse:
    def __init__(self, status, body, content_type):
        self.status = status
        self.headers = {"Content-Type": content_type}
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeUpstream:
    """记录每次上游请求，并返回预设的响应"""

    def __init__(self):
        self.calls = []
        self.status = 200
        self.body = b'{"code":0}'
        self.content_type = "application/json; charset=utf-8"
        self.error = None

    def reply(self, status, body, content_type="application/json; charset=utf-8"):
        self.status = status
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.content_type = content_type

    def fail(self, exc):
        self.error = exc

    def __call__(self, req, timeout=None, context=None):
        self.calls.append(req)
        if self.error is not None:
            raise self.error
        if self.status >= 400:
            raise urllib.error.HTTPError(
                req.full_url, self.status, "upstream error",
                {"Content-Type": self.content_type}, io.BytesIO(self.body),
            )
        return _FakeResponse(self.status, self.body, self.content_type)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def fake_upstream(monkeypatch):
    upstream = FakeUpstream()
    monkeypatch.setattr("urllib.request.urlopen", upstream)
    return upstream


# ---------------------------------------------------------------------------
# 进程内服务器
# ---------------------------------------------------------------------------

class Client:
    def __init__(self, port):
        self.port = port

    def request(self, method, path, body=None, headers=None):
        conn = HTTPConnection("127.0.0.1", self.port, timeout=5)
        try:
            if isinstance(body, (dict, list)):
                body = json.dumps(body)
            conn.request(method, path, body=body, headers=headers or {})
            resp = conn.getresponse()
            return resp.status, dict(resp.getheaders()), resp.read().decode("utf-8")
        finally:
            conn.close()


def _serve(handler_class):
    server = HTTPServer(("127.0.0.1", 0), handler_class)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, thread


@pytest.fixture
def serve():
    servers = []

    def _start(handler_class):
        server, thread = _serve(handler_class)
        servers.append((server, thread))
        return Client(server.server_address[1])

    yield _start

    for server, thread in servers:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def proxy_module():
    return load_function("proxy")


@pytest.fixture
def proxy_client(serve, proxy_module):
    return serve(proxy_module.handler)

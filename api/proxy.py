"""
飞书开放平台代理端点
为浏览器补上 CORS 头，把 /api/proxy/* 的请求转发到 https://open.feishu.cn
"""
from http.server import BaseHTTPRequestHandler
import sys
import os

# 添加 lib 目录到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from lib.config import UPSTREAM_ORIGIN, MOUNT_PREFIX, UPSTREAM_HOST
from lib.paths import build_upstream_url
from lib.relay import cors_headers, read_json_body, encode_body, error_body, relay_request


class handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        print(f"[Proxy] {self.address_string()} - {format % args}", flush=True)

    def _send(self, status: int, body: str = "", content_type: str = None):
        payload = body.encode('utf-8')
        self.send_response(status)
        for name, value in cors_headers().items():
            self.send_header(name, value)
        if content_type:
            self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        if payload:
            self.wfile.write(payload)

    def _read_body(self) -> bytes:
        length = int(self.headers.get('Content-Length') or 0)
        return self.rfile.read(length) if length > 0 else b""

    def _relay(self):
        try:
            url = build_upstream_url(self.path, UPSTREAM_ORIGIN, MOUNT_PREFIX, UPSTREAM_HOST)
            body = encode_body(read_json_body(self._read_body()))
            authorization = self.headers.get('Authorization', '')
            result = relay_request(url, self.command, authorization, body)
        except Exception as e:
            print(f"[Proxy] ✗ 转发失败 {self.command} {self.path}: {e}", flush=True)
            self._send(500, error_body(e), 'application/json')
            return

        self._send(result.status, result.text, result.content_type)

    def do_OPTIONS(self):
        self._send(200)

    def do_GET(self):
        self._relay()

    def do_POST(self):
        self._relay()

    def do_PUT(self):
        self._relay()

    def do_PATCH(self):
        self._relay()

    def do_DELETE(self):
        self._relay()

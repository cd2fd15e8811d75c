"""
健康检查端点
"""
from http.server import BaseHTTPRequestHandler
import json
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from lib.config import SERVICE_NAME, UPSTREAM_ORIGIN, VERSION
from lib.relay import cors_headers


def health_payload() -> dict:
    return {
        "status": "ok",
        "message": f"{SERVICE_NAME}运行中",
        "upstream": UPSTREAM_ORIGIN,
        "version": VERSION
    }


class handler(BaseHTTPRequestHandler):
    def _write_headers(self, status: int):
        self.send_response(status)
        for name, value in cors_headers().items():
            self.send_header(name, value)

    def do_OPTIONS(self):
        self._write_headers(200)
        self.send_header('Content-Length', '0')
        self.end_headers()

    def do_GET(self):
        payload = json.dumps(health_payload(), ensure_ascii=False).encode('utf-8')
        self._write_headers(200)
        self.send_header('Content-Type', 'application/json; charset=utf-8')
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

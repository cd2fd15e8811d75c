#!/usr/bin/env python3
"""
飞书开放平台 CORS 代理 - 本地开发服务器

复用 api/ 下的 Vercel 函数，在本机提供与线上一致的接口：
    /api/proxy/*        转发到 https://open.feishu.cn
    /health, /api/health 健康检查

用法:
    python server.py               # 默认端口 8080
    python server.py --port 9000
"""
import importlib.util
import json
import os
import sys
from http.server import HTTPServer

ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, ROOT_DIR)

from lib.config import SERVICE_NAME, UPSTREAM_ORIGIN, MOUNT_PREFIX

HEALTH_PATHS = ("/health", "/api/health")


def load_function(name: str):
    """按文件路径加载 api/<name>.py"""
    path = os.path.join(ROOT_DIR, "api", f"{name}.py")
    spec = importlib.util.spec_from_file_location(f"api_{name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


proxy = load_function("proxy")
health = load_function("health")


class DevHandler(proxy.handler):
    """本地路由：健康检查走 health 端点，其余交给代理"""

    def _is_health(self) -> bool:
        return self.path.split("?", 1)[0].rstrip("/") in HEALTH_PATHS

    def do_GET(self):
        if self._is_health():
            body = json.dumps(health.health_payload(), ensure_ascii=False)
            self._send(200, body, 'application/json; charset=utf-8')
            return
        super().do_GET()


def run_server(port: int = 8080):
    """启动本地代理服务器"""
    print("=" * 70, flush=True)
    print(f"  {SERVICE_NAME}", flush=True)
    print(f"  上游: {UPSTREAM_ORIGIN}", flush=True)
    print(f"  模式: 本地开发服务器 (端口 {port})", flush=True)
    print("  提示: 按 Ctrl+C 停止", flush=True)
    print("=" * 70, flush=True)

    server = HTTPServer(('0.0.0.0', port), DevHandler)
    print(f"\n[服务器] 代理服务器已启动", flush=True)
    print(f"    地址: http://0.0.0.0:{port}", flush=True)
    print(f"    健康检查: GET http://localhost:{port}/health", flush=True)
    print(f"    代理入口: http://localhost:{port}{MOUNT_PREFIX}/open-apis/...", flush=True)
    print("\n[等待] 等待请求...\n", flush=True)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n\n[停止] 用户中断，关闭服务器", flush=True)
    finally:
        server.server_close()


def main():
    """主入口"""
    args = sys.argv[1:]

    port = 8080  # 默认端口
    if "--port" in args:
        idx = args.index("--port")
        if idx + 1 < len(args):
            try:
                port = int(args[idx + 1])
            except ValueError:
                print(f"[警告] 无效端口 {args[idx + 1]}，使用默认端口 {port}", flush=True)
    run_server(port)


if __name__ == "__main__":
    main()

"""
配置管理模块
上游地址与 CORS 头为固定常量，超时和证书校验可通过环境变量调整
"""
import os

SERVICE_NAME = "飞书开放平台 CORS 代理"
VERSION = "1.0.0"

# 上游飞书开放平台
UPSTREAM_HOST = "open.feishu.cn"
UPSTREAM_ORIGIN = f"https://{UPSTREAM_HOST}"

# 本地挂载路径（vercel.json 将 /api/proxy/* 重写到 api/proxy.py）
MOUNT_PREFIX = "/api/proxy"

# 转发请求固定使用的 Content-Type
FORWARDED_CONTENT_TYPE = "application/json"

# 转发超时（秒）
REQUEST_TIMEOUT = int(os.environ.get("PROXY_TIMEOUT", "30"))

# 是否校验上游证书
SSL_VERIFY = os.environ.get("PROXY_SSL_VERIFY", "true").lower() != "false"

# CORS 配置
CORS_ALLOW_CREDENTIALS = "true"
CORS_ALLOW_ORIGIN = "*"
CORS_ALLOW_METHODS = "GET,OPTIONS,PATCH,DELETE,POST,PUT"
CORS_ALLOW_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
    "Content-MD5, Content-Type, Date, X-Api-Version, Authorization"
)

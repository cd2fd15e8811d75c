"""
转发模块
把浏览器请求原样转发到飞书开放平台，并把上游的状态码和响应正文带回
"""
import urllib.request
import urllib.error
import json
import ssl
from typing import Dict, NamedTuple, Optional
from .config import (
    FORWARDED_CONTENT_TYPE, REQUEST_TIMEOUT, SSL_VERIFY,
    CORS_ALLOW_CREDENTIALS, CORS_ALLOW_ORIGIN, CORS_ALLOW_METHODS, CORS_ALLOW_HEADERS
)

# SSL上下文（PROXY_SSL_VERIFY=false 时跳过验证，仅用于本地调试）
SSL_CONTEXT = ssl.create_default_context()
if not SSL_VERIFY:
    SSL_CONTEXT.check_hostname = False
    SSL_CONTEXT.verify_mode = ssl.CERT_NONE

DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


class RelayResponse(NamedTuple):
    status: int
    text: str
    content_type: str = DEFAULT_CONTENT_TYPE


def cors_headers() -> Dict[str, str]:
    """每个响应都要带上的 CORS 头"""
    return {
        "Access-Control-Allow-Credentials": CORS_ALLOW_CREDENTIALS,
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


def read_json_body(raw):
    """解析请求体（允许 UTF-8 BOM），空或非法 JSON 返回 None"""
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', errors='replace')
    if isinstance(raw, str):
        raw = raw.lstrip('\ufeff')
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def encode_body(body) -> Optional[bytes]:
    """非空对象序列化为紧凑 JSON，其余情况不发送请求体"""
    if isinstance(body, dict) and body:
        return json.dumps(body, ensure_ascii=False, separators=(',', ':')).encode('utf-8')
    return None


def error_body(exc: Exception) -> str:
    return json.dumps({"error": str(exc) or exc.__class__.__name__}, ensure_ascii=False)


def _charset(content_type: str) -> str:
    for param in content_type.split(';')[1:]:
        name, _, value = param.strip().partition('=')
        if name.lower() == 'charset' and value:
            return value.strip('"\' ')
    return 'utf-8'


def _decode(raw: bytes, content_type: str) -> str:
    """按上游声明的字符集解码，未知字符集按 UTF-8 处理"""
    try:
        return raw.decode(_charset(content_type), errors='replace')
    except LookupError:
        return raw.decode('utf-8', errors='replace')


def _utf8_content_type(content_type: str) -> str:
    # 正文统一以 UTF-8 回写，charset 参数随之改写
    params = [p.strip() for p in content_type.split(';')]
    kept = [p for p in params[1:] if p and not p.lower().startswith('charset=')]
    return '; '.join([params[0]] + kept + ['charset=utf-8'])


def _relay_response(status: int, raw: bytes, content_type: Optional[str]) -> RelayResponse:
    content_type = content_type or DEFAULT_CONTENT_TYPE
    return RelayResponse(status, _decode(raw, content_type), _utf8_content_type(content_type))


def relay_request(url: str, method: str = "GET", authorization: str = "",
                  body: Optional[bytes] = None, timeout: int = REQUEST_TIMEOUT) -> RelayResponse:
    """发送一次上游请求（不重试）

    上游的 4xx/5xx 作为正常响应返回；网络错误、超时等异常直接抛出。
    """
    headers = {
        "Content-Type": FORWARDED_CONTENT_TYPE,
        "Authorization": authorization or "",
    }
    req = urllib.request.Request(url, data=body, headers=headers, method=method)

    try:
        with urllib.request.urlopen(req, timeout=timeout, context=SSL_CONTEXT) as response:
            return _relay_response(response.status, response.read(), response.headers.get('Content-Type'))
    except urllib.error.HTTPError as e:
        content_type = e.headers.get('Content-Type') if e.headers else None
        return _relay_response(e.code, e.read(), content_type)

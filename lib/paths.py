"""
路径规范化模块
把进入代理的请求路径换算成飞书开放平台上的相对路径

客户端有两种调用约定：
- 相对路径：/api/proxy/open-apis/bitable/v1/...
- 完整地址拼在路径里（cors-anywhere 风格）：/api/proxy/https://open.feishu.cn/open-apis/...
"""
import re
import urllib.parse
from enum import Enum
from typing import Tuple

from .config import MOUNT_PREFIX, UPSTREAM_HOST, UPSTREAM_ORIGIN


class PathShape(Enum):
    UPSTREAM_RELATIVE = "upstream_relative"
    EMBEDDED_ABSOLUTE = "embedded_absolute"
    UNRECOGNIZED = "unrecognized"


def _embedded_pattern(host: str):
    # 主机名（可带数字端口）之后必须是路径、查询或结尾，open.feishu.cn.example.com 不算
    return re.compile(re.escape(host) + r"(?::\d+)?(?=[/?]|$)(.*)", re.DOTALL)


def split_request_target(target: str) -> Tuple[str, str]:
    """拆分请求目标为 (path, search)，search 带前导 ?，无查询时为空字符串"""
    if not target.startswith("/"):
        parts = urllib.parse.urlsplit(target)
        path = parts.path or "/"
        query = parts.query
    else:
        path, _, query = target.partition("?")
        query = query.split("#", 1)[0]
        path = path.split("#", 1)[0]
    return path, f"?{query}" if query else ""


def strip_mount_prefix(path: str, prefix: str = MOUNT_PREFIX) -> str:
    """去掉本地挂载前缀（字面前缀匹配，不存在时原样返回）"""
    if prefix and path.startswith(prefix):
        return path[len(prefix):]
    return path


def classify_path(path: str, host: str = UPSTREAM_HOST) -> PathShape:
    if host not in path:
        return PathShape.UPSTREAM_RELATIVE
    if _embedded_pattern(host).search(path):
        return PathShape.EMBEDDED_ABSOLUTE
    return PathShape.UNRECOGNIZED


def _ensure_leading_slash(path: str) -> str:
    if path and not path.startswith("/"):
        return "/" + path
    return path


def normalize_relative(path: str, host: str = UPSTREAM_HOST) -> str:
    return _ensure_leading_slash(path)


def normalize_embedded(path: str, host: str = UPSTREAM_HOST) -> str:
    """取主机名之后的部分，丢弃前面的协议和主机"""
    match = _embedded_pattern(host).search(path)
    if not match:
        return normalize_unrecognized(path, host)
    return _ensure_leading_slash(match.group(1))


def normalize_unrecognized(path: str, host: str = UPSTREAM_HOST) -> str:
    # 含主机名却取不到路径：保持去前缀后的原样，请求仍落在上游主机上
    return _ensure_leading_slash(path)


_NORMALIZERS = {
    PathShape.UPSTREAM_RELATIVE: normalize_relative,
    PathShape.EMBEDDED_ABSOLUTE: normalize_embedded,
    PathShape.UNRECOGNIZED: normalize_unrecognized,
}


def normalize_path(path: str, prefix: str = MOUNT_PREFIX, host: str = UPSTREAM_HOST) -> str:
    """返回相对上游根路径的路径（非空时以 / 开头，不含协议和主机）"""
    path = strip_mount_prefix(path, prefix)
    shape = classify_path(path, host)
    return _NORMALIZERS[shape](path, host)


def build_upstream_url(target: str, origin: str = UPSTREAM_ORIGIN,
                       prefix: str = MOUNT_PREFIX, host: str = UPSTREAM_HOST) -> str:
    """根据请求目标（路径 + 查询串）拼出上游完整地址"""
    path, search = split_request_target(target)
    return origin + normalize_path(path, prefix, host) + search

import base64
import re
from typing import Optional
from urllib.parse import unquote

_HEX_HASH_RE = re.compile(r'(?<![A-Fa-f0-9])([A-Fa-f0-9]{40})(?![A-Fa-f0-9])')
_BTIH_RE = re.compile(r'btih:([A-Za-z0-9]+)', re.IGNORECASE)
_BASE32_RE = re.compile(r'^[A-Z2-7]{32}$')

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def to_camel(snake_str: str) -> str:
    """将 snake_case 字符串转换为 camelCase。"""
    components = snake_str.split('_')
    # 我们将除第一个之外的每个组件的首字母大写，然后连接起来。
    return components[0] + ''.join(x.title() for x in components[1:])


def format_file_size(size: Optional[int]) -> str:
    """将字节数格式化为 "1.5 GB" 形式，未知大小返回空字符串"""
    if size is None or size < 0:
        return ""
    value = float(size)
    order = 0
    while value >= 1024 and order < len(_SIZE_UNITS) - 1:
        order += 1
        value /= 1024
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {_SIZE_UNITS[order]}"


def normalize_torrent_hash(raw: Optional[str]) -> Optional[str]:
    """
    规范化 BTIH：40 位十六进制直接转大写，32 位 base32 解码为十六进制。
    其他输入返回 None。
    """
    if not raw or not raw.strip():
        return None
    value = raw.strip()
    if len(value) == 40 and all(c in "0123456789abcdefABCDEF" for c in value):
        return value.upper()
    if len(value) == 32 and _BASE32_RE.match(value.upper()):
        try:
            decoded = base64.b32decode(value.upper())
        except ValueError:
            return None
        if len(decoded) == 20:
            return decoded.hex().upper()
    return None


def _extract_hash(source: Optional[str]) -> Optional[str]:
    if not source or not source.strip():
        return None

    candidates = [source]
    decoded = unquote(source)
    if decoded != source:
        candidates.append(decoded)

    for candidate in candidates:
        direct = normalize_torrent_hash(candidate)
        if direct:
            return direct
        m = _BTIH_RE.search(candidate)
        if m:
            from_btih = normalize_torrent_hash(m.group(1))
            if from_btih:
                return from_btih
        m = _HEX_HASH_RE.search(candidate)
        if m:
            return m.group(1).upper()
    return None


def resolve_torrent_hash(*sources: Optional[str]) -> Optional[str]:
    """
    依次从显式 hash、磁力链接、种子 URL 中解析种子标识，返回第一个有效结果。
    """
    for source in sources:
        extracted = _extract_hash(source)
        if extracted:
            return extracted
    return None

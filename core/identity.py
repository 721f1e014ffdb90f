"""
Identity Resolver：把請求的網路位址轉成標準的參與者 identity

規則：
- IPv6 loopback（::1）視為 127.0.0.1
- IPv4-mapped IPv6（::ffff:a.b.c.d）取出內嵌的 IPv4
- 其他位址必須是嚴格的四段十進位 IPv4，否則 InvalidIdentity

純函式，沒有副作用
"""
import ipaddress

from core.exceptions import InvalidIdentity

_IPV6_LOOPBACK = ipaddress.IPv6Address("::1")
_IPV4_LOOPBACK = ipaddress.IPv4Address("127.0.0.1")


def parse_address(raw_address) -> ipaddress.IPv4Address:
    """
    解析位址並回傳 IPv4Address

    參數：
        raw_address: 來自 HTTP 層的原始位址字串

    返回：
        IPv4Address

    異常：
        InvalidIdentity: 不是 IPv4、loopback 或 IPv4-mapped IPv6
    """
    if not isinstance(raw_address, str):
        raise InvalidIdentity(raw_address)

    text = raw_address.strip()
    # 有些 proxy 會帶上 zone id（fe80::1%eth0），一律不接受
    if not text or "%" in text:
        raise InvalidIdentity(raw_address)

    try:
        address = ipaddress.ip_address(text)
    except ValueError:
        raise InvalidIdentity(raw_address)

    if isinstance(address, ipaddress.IPv4Address):
        return address

    if address == _IPV6_LOOPBACK:
        return _IPV4_LOOPBACK
    if address.ipv4_mapped is not None:
        return address.ipv4_mapped

    raise InvalidIdentity(raw_address)


def resolve(raw_address) -> str:
    """回傳標準化的 dotted quad 字串，作為 Ledger 的 key"""
    return str(parse_address(raw_address))

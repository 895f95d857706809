from fastapi import Header

UNKNOWN_CLIENT = "unknown"


def get_client_ip(
    x_forwarded_for: str | None = Header(default=None),
    x_real_ip: str | None = Header(default=None),
) -> str:
    """프록시 헤더에서 클라이언트 IP를 찾습니다. 없으면 "unknown" 버킷을 사용합니다."""
    if x_forwarded_for:
        first = x_forwarded_for.split(",")[0].strip()
        if first:
            return first
    if x_real_ip and x_real_ip.strip():
        return x_real_ip.strip()
    return UNKNOWN_CLIENT

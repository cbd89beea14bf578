# Client identity for rate limiting: IP only, no business logic.
# Proxy headers first (X-Forwarded-For first hop, CF-Connecting-IP,
# X-Real-IP), then the socket peer.

from fastapi import Request

UNKNOWN_CLIENT = "unknown"


def get_client_ip(request: Request) -> str:
    headers = request.headers

    # 1. Reverse proxy chain: the first hop is the original client
    forwarded_for = headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    # 2. Cloudflare
    cf_ip = headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip.strip()

    # 3. nginx
    real_ip = headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # 4. Direct connection
    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT

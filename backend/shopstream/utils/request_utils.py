# /shopstream/utils/request_utils.py
from fastapi import Request

LOCALHOST = "127.0.0.1"


def get_remote_address(request: Request) -> str:
    """Client address used as the rate-limit key; prefers the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client and request.client.host:
        return request.client.host
    return LOCALHOST

from __future__ import annotations

import hashlib
import hmac

from fastapi import Request

from quizlink.core.config import settings


def request_id(request: Request) -> str | None:
    rid = getattr(getattr(request, "state", None), "request_id", None)
    rid = str(rid or "").strip()
    return rid or None


def client_ip(request: Request) -> str:
    if bool(getattr(settings, "trust_proxy_headers", False)):
        fwd = str(request.headers.get("forwarded") or "").strip()
        if fwd:
            # Forwarded: for=1.2.3.4;proto=https;host=...
            for part in (p.strip() for p in fwd.split(";") if p.strip()):
                if part.lower().startswith("for="):
                    v = part.split("=", 1)[1].strip().strip('"').strip()
                    if v.startswith("[") and "]" in v:
                        v = v[1 : v.index("]")]
                    if ":" in v and not v.count(":") > 1:
                        v = v.split(":", 1)[0]
                    if v:
                        return v

        xri = str(request.headers.get("x-real-ip") or "").strip()
        if xri:
            return xri

        xff = str(request.headers.get("x-forwarded-for") or "")
        if xff:
            ip = xff.split(",")[0].strip()
            if ip:
                return ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def hash_ip(ip: str) -> str:
    """Anonymized abuse signal for a client address: 16 hex chars, not reversible."""
    digest = hmac.new(
        str(settings.ip_hash_salt or "").encode("utf-8"),
        str(ip or "unknown").encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return digest[:16]

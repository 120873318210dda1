from __future__ import annotations

from .hadesweb import HadeswebClient
from .normalizer import normalize_http_response, normalize_response, unwrap_payload

__all__ = ["HadeswebClient", "normalize_http_response", "normalize_response", "unwrap_payload"]

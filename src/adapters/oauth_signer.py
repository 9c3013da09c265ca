"""Firma OAuth 1.0a (HMAC-SHA1) para la REST API de Gravity Forms.

La API v2 acepta la firma como query param (`oauth_signature`) junto al resto
de parámetros `oauth_*`. No hay token de usuario: la clave HMAC es `secret&`.
"""

from __future__ import annotations

from collections.abc import Mapping

from oauthlib.common import generate_nonce, generate_timestamp
from oauthlib.oauth1 import Client
from oauthlib.oauth1.rfc5849 import signature

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def new_oauth_parameters(consumer_key: str) -> dict[str, str]:
    """Parámetros OAuth de un solo uso (nonce + timestamp nuevos en cada llamada)."""

    return {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": generate_timestamp(),
        "oauth_version": OAUTH_VERSION,
    }


def sign_request(
    method: str,
    url: str,
    params: Mapping[str, str],
    secret: str,
) -> str:
    """Devuelve la firma base64 (sin percent-encoding; httpx la codifica al enviar).

    Lanza `ValueError` si la URL no tiene esquema o host.
    """

    base_uri = signature.base_string_uri(url)
    normalized = signature.normalize_parameters([(str(k), str(v)) for k, v in params.items()])
    base_string = signature.signature_base_string(method.upper(), base_uri, normalized)
    client = Client(params.get("oauth_consumer_key", ""), client_secret=secret)
    return signature.sign_hmac_sha1_with_client(base_string, client)

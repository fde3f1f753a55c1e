from __future__ import annotations

import jwt


class AuthTokenValidationError(Exception):
    pass


class SessionTokenVerifier:
    """Verifies identity-provider session tokens against the provider JWKS."""

    def __init__(
        self,
        *,
        jwks_uri: str,
        issuer: str,
        audience: str,
        algorithms: list[str],
        leeway_sec: int = 60,
        timeout_sec: int = 5,
        jwks_client: jwt.PyJWKClient | None = None,
    ) -> None:
        self._jwks_uri = jwks_uri
        self._issuer = issuer
        self._audience = audience
        self._algorithms = algorithms or ["RS256"]
        self._leeway_sec = max(0, int(leeway_sec))
        self._jwks_client = jwks_client
        self._timeout_sec = timeout_sec

    def _client(self) -> jwt.PyJWKClient:
        if self._jwks_client is None:
            if not self._jwks_uri:
                raise AuthTokenValidationError("JWKS URI is not configured.")
            self._jwks_client = jwt.PyJWKClient(self._jwks_uri, timeout=self._timeout_sec)
        return self._jwks_client

    def verify(self, token: str) -> dict:
        try:
            signing_key = self._client().get_signing_key_from_jwt(token)
        except jwt.PyJWKClientError as exc:
            raise AuthTokenValidationError(f"Signing key lookup failed: {exc}") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthTokenValidationError(f"Malformed token: {exc}") from exc

        options = {"require": ["exp", "sub"], "verify_aud": bool(self._audience)}
        try:
            claims = jwt.decode(
                token,
                key=signing_key.key,
                algorithms=self._algorithms,
                audience=self._audience or None,
                issuer=self._issuer or None,
                leeway=self._leeway_sec,
                options=options,
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthTokenValidationError("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthTokenValidationError(f"Invalid token: {exc}") from exc
        return claims

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional

from notedapp.domain.entities import EndpointConfig

NETWORKS: tuple[str, ...] = ("local", "ic")

IC_HOST = "https://ic0.app"
LOCAL_HOST = "http://localhost:4943"
IC_IDENTITY_PROVIDER = "https://identity.ic0.app"

ENV_NETWORK = "DFX_NETWORK"
ENV_BACKEND_ID = "CANISTER_ID_NOTE_DAPP_BACKEND"
ENV_IDENTITY_ID = "CANISTER_ID_INTERNET_IDENTITY"
ENV_HOST = "NOTEDAPP_HOST"
ENV_TIMEOUT = "NOTEDAPP_REQUEST_TIMEOUT_S"
ENV_MOCK = "NOTEDAPP_MOCK_BACKEND"
ENV_DEBUG = "NOTEDAPP_DEBUG"


@dataclass
class ClientSettings:
    """Runtime settings for reaching the backend; never persisted here."""

    network: str = "local"
    backend_canister_id: str = ""
    identity_canister_id: str = ""
    host_override: str = ""
    request_timeout_s: Optional[float] = None
    use_mock_backend: bool = False
    debug_logging: bool = False

    def __post_init__(self) -> None:
        self.network = self._coerce_network(self.network)

    # ------------------------------------------------------------------
    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "ClientSettings":
        settings = cls()
        payload = {}
        if environ.get(ENV_NETWORK):
            payload["network"] = environ[ENV_NETWORK]
        if environ.get(ENV_BACKEND_ID):
            payload["backend_canister_id"] = environ[ENV_BACKEND_ID]
        if environ.get(ENV_IDENTITY_ID):
            payload["identity_canister_id"] = environ[ENV_IDENTITY_ID]
        if environ.get(ENV_HOST):
            payload["host_override"] = environ[ENV_HOST]
        if environ.get(ENV_TIMEOUT):
            payload["request_timeout_s"] = environ[ENV_TIMEOUT]
        if ENV_MOCK in environ:
            payload["use_mock_backend"] = environ[ENV_MOCK]
        if ENV_DEBUG in environ:
            payload["debug_logging"] = environ[ENV_DEBUG]
        settings.apply_dict(payload)
        return settings

    @property
    def host(self) -> str:
        if self.host_override:
            return self.host_override
        return IC_HOST if self.network == "ic" else LOCAL_HOST

    @property
    def identity_provider_url(self) -> str:
        if self.network == "ic":
            return IC_IDENTITY_PROVIDER
        return f"http://{self.identity_canister_id}.localhost:4943"

    def endpoint(self) -> EndpointConfig:
        return EndpointConfig(
            host=self.host,
            canister_id=self.backend_canister_id,
            request_timeout_s=self.request_timeout_s,
        )

    def is_valid(self) -> bool:
        if self.use_mock_backend:
            return True
        return bool(self.backend_canister_id)

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply flat settings keys; unknown keys are rejected."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")
        allowed = {f.name for f in fields(self)}
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates = {key: self._coerce_value(key, value) for key, value in payload.items()}
        for key, value in updates.items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        return asdict(self)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_value(self, key: str, raw: Any) -> Any:
        if key == "network":
            return self._coerce_network(raw)
        if key in {"backend_canister_id", "identity_canister_id", "host_override"}:
            return self._coerce_optional_str(raw)
        if key == "request_timeout_s":
            return self._coerce_timeout(raw)
        if key in {"use_mock_backend", "debug_logging"}:
            return self._coerce_bool(raw)
        raise ValueError(f"Unhandled settings field: {key}")

    @staticmethod
    def _coerce_network(value: Any) -> str:
        text = str(value or "").strip().lower() or "local"
        if text not in NETWORKS:
            raise ValueError(f"network must be one of {', '.join(NETWORKS)}.")
        return text

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_timeout(value: Any) -> Optional[float]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, bool):
            raise ValueError("request_timeout_s must be a number.")
        try:
            coerced = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("request_timeout_s must be a number.") from exc
        if coerced <= 0:
            raise ValueError("request_timeout_s must be positive.")
        return coerced


__all__ = ["ClientSettings", "NETWORKS"]

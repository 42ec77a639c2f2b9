"""JSON-over-HTTP actor implementing the backend call contract."""

from __future__ import annotations

from typing import Any, Dict, List

import requests

from notedapp.domain.entities import EndpointConfig, Identity
from notedapp.domain.ports import ActorPort

from notedapp.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    describe_failure,
    extract_reject_code,
    extract_reject_hint,
    read_error_body,
)
from notedapp.adapters.http_client import HttpConfig, JsonSession


class BackendRestAdapter(ActorPort):
    """Actor that POSTs ``{"args": [...]}`` to ``/canisters/{id}/{method}``.

    The reply body is ``{"reply": <value>}``; the value is returned untouched
    so tagged results and optionals keep their wire shape for the gateway.
    """

    def __init__(self, endpoint: EndpointConfig, identity: Identity) -> None:
        if not endpoint.canister_id:
            raise ValueError("BackendRestAdapter requires a backend canister id")
        self.endpoint = endpoint
        self.identity = identity
        self.cfg = HttpConfig(request_timeout_s=endpoint.request_timeout_s)
        self.session = JsonSession(identity, self.cfg)

    # ---------- ActorPort ----------

    def get_notes(self) -> List[Any]:
        return self._call("get_notes")

    def add_note(self, content: str) -> Any:
        return self._call("add_note", content)

    def update_note(self, note_id: int, content: str) -> None:
        self._call("update_note", note_id, content)

    def delete_note(self, note_id: int) -> None:
        self._call("delete_note", note_id)

    def search_notes(self, query: str) -> List[Any]:
        return self._call("search_notes", query)

    def get_balance(self) -> int:
        return self._call("get_balance")

    def get_transaction_history(self) -> List[Dict[str, Any]]:
        return self._call("get_transaction_history")

    def get_transaction_history_filtered(self, kind: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self._call("get_transaction_history_filtered", kind)

    def get_icrc_balance(self) -> Any:
        return self._call("get_icrc_balance")

    def get_icrc_ledger_canister_id(self) -> Any:
        return self._call("get_icrc_ledger_canister_id")

    def set_icrc_ledger_canister_id(self, canister_id: str) -> Any:
        return self._call("set_icrc_ledger_canister_id", canister_id)

    def transfer(self, to: str, amount: int) -> Any:
        return self._call("transfer", to, amount)

    def icrc_transfer(self, to: str, amount: int) -> Any:
        return self._call("icrc_transfer", to, amount)

    def whoami(self) -> str:
        return self._call("whoami")

    # ------------------------------------------------------------------
    def _call(self, method: str, *args: Any) -> Any:
        url = self._make_url(method)
        resp = self.session.post(url, json_body={"args": list(args)})
        self._ensure_ok(resp, method)
        return self._reply(resp, method)

    def _make_url(self, method: str) -> str:
        base = self.endpoint.host.strip()
        if base.endswith("/"):
            base = base[:-1]
        return f"{base}/canisters/{self.endpoint.canister_id}/{method}"

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        """Raise typed adapter errors for non-2xx responses."""
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = read_error_body(resp)
        message = describe_failure(ctx, status, payload)
        if 400 <= status < 500:
            raise ApiClientError(
                message,
                status=status,
                reject_code=extract_reject_code(payload),
                hint=extract_reject_hint(payload),
                payload=payload,
                context=ctx,
            )
        if 500 <= status < 600:
            raise ApiServerError(message, status=status, payload=payload, context=ctx)
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _reply(resp: requests.Response, ctx: str) -> Any:
        try:
            payload = resp.json()
        except Exception as exc:
            snippet = getattr(resp, "text", "")[:400]
            raise ApiError(f"{ctx}: invalid JSON reply: {snippet}", context=ctx) from exc
        if not isinstance(payload, dict) or "reply" not in payload:
            raise ApiError(f"{ctx}: reply member missing", payload=payload, context=ctx)
        return payload["reply"]


def make_rest_actor(identity: Identity, endpoint: EndpointConfig) -> BackendRestAdapter:
    """Actor factory handed to the identity provider."""
    return BackendRestAdapter(endpoint, identity)


__all__ = ["BackendRestAdapter", "make_rest_actor"]

"""HTTP client for a Kubernetes-style REST API serving workload objects."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from rsmkit.common.merge_patch import create_merge_patch
from rsmkit.domain.errors import (
    AlreadyExistsError,
    ClusterError,
    ConflictError,
    NotFoundError,
    TransientClusterError,
)
from rsmkit.domain.scheme import DEFAULT_SCHEME

from ..manifest import ObjectListManifest, from_manifest, to_manifest

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from rsmkit.config import ClusterConfig
    from rsmkit.domain.model import ClusterObject, ObjectKey
    from rsmkit.domain.ports import ClientOptions
    from rsmkit.domain.scheme import Scheme

log = getLogger(__name__)

MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"
_TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def _label_selector(labels: Mapping[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return response.text


class HttpClusterClient:
    """Synchronous ``ClusterClient`` over httpx.

    Retries are left to the outer reconcile loop: transport failures and
    throttling responses surface as ``TransientClusterError``.
    """

    def __init__(
        self,
        config: ClusterConfig,
        *,
        scheme: Scheme = DEFAULT_SCHEME,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._scheme = scheme
        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.Client(
            base_url=config.api_url,
            headers=headers,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    def __enter__(self) -> HttpClusterClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # --- reads ----------------------------------------------------------------

    def get(self, key: ObjectKey) -> ClusterObject:
        response = self._send("GET", self._object_path(key), key=key)
        return from_manifest(response.json(), scheme=self._scheme)

    def list(
        self,
        kind: str,
        *,
        namespace: str,
        labels: Mapping[str, str] | None = None,
    ) -> list[ClusterObject]:
        params = {"labelSelector": _label_selector(labels)} if labels else None
        response = self._send("GET", self._collection_path(kind, namespace), params=params)
        payload = ObjectListManifest.model_validate(response.json())
        items: list[ClusterObject] = []
        for item in payload.items:
            item.setdefault("kind", kind)
            items.append(from_manifest(item, scheme=self._scheme))
        return items

    # --- writes ---------------------------------------------------------------

    def create(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        response = self._send(
            "POST",
            self._collection_path(obj.kind, obj.namespace),
            key=obj.key,
            params=self._write_params(options),
            json=to_manifest(obj),
        )
        self._absorb(obj, response)

    def update(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        response = self._send(
            "PUT",
            self._object_path(obj.key),
            key=obj.key,
            params=self._write_params(options),
            json=to_manifest(obj),
        )
        self._absorb(obj, response)

    def patch(
        self,
        base: ClusterObject,
        target: ClusterObject,
        *,
        options: ClientOptions | None = None,
    ) -> None:
        patch = create_merge_patch(to_manifest(base), to_manifest(target))
        patch.pop("status", None)
        if not patch:
            log.debug("Empty patch for %s, skipping", target.key)
            return
        response = self._send(
            "PATCH",
            self._object_path(target.key),
            key=target.key,
            params=self._write_params(options),
            content=json.dumps(patch).encode("utf-8"),
            headers={"Content-Type": MERGE_PATCH_CONTENT_TYPE},
        )
        self._absorb(target, response)

    def delete(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        body: dict[str, Any] = {"kind": "DeleteOptions"}
        if options is not None:
            body["propagationPolicy"] = str(options.propagation)
            if options.dry_run:
                body["dryRun"] = ["All"]
        self._send("DELETE", self._object_path(obj.key), key=obj.key, json=body)

    def update_status(self, obj: ClusterObject, *, options: ClientOptions | None = None) -> None:
        response = self._send(
            "PUT",
            f"{self._object_path(obj.key)}/status",
            key=obj.key,
            params=self._write_params(options),
            json=to_manifest(obj),
        )
        self._absorb(obj, response)

    # --- internals ------------------------------------------------------------

    def _collection_path(self, kind: str, namespace: str) -> str:
        plural = self._scheme.plural_for(kind)
        return f"{self._config.api_prefix}/namespaces/{namespace}/{plural}"

    def _object_path(self, key: ObjectKey) -> str:
        return f"{self._collection_path(key.kind, key.namespace)}/{key.name}"

    @staticmethod
    def _write_params(options: ClientOptions | None) -> dict[str, str] | None:
        if options is None:
            return None
        params: dict[str, str] = {}
        if options.field_manager:
            params["fieldManager"] = options.field_manager
        if options.dry_run:
            params["dryRun"] = "All"
        return params or None

    @staticmethod
    def _absorb(obj: ClusterObject, response: httpx.Response) -> None:
        """Copy server-assigned identity fields back onto ``obj``."""

        if not response.content:
            return
        metadata = response.json().get("metadata") or {}
        obj.metadata.uid = metadata.get("uid", obj.metadata.uid)
        obj.metadata.resource_version = metadata.get(
            "resourceVersion", obj.metadata.resource_version
        )

    def _send(
        self,
        method: str,
        url: str,
        *,
        key: ObjectKey | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise TransientClusterError(f"{method} {url} failed: {exc}", key=key) from exc
        log.debug("%s %s -> %s", method, url, response.status_code)
        self._raise_for_status(method, response, key)
        return response

    @staticmethod
    def _raise_for_status(method: str, response: httpx.Response, key: ObjectKey | None) -> None:
        if response.is_success:
            return
        status = response.status_code
        path = response.request.url.path
        message = f"{method} {path} returned {status}: {_error_message(response)}"
        if status == httpx.codes.NOT_FOUND:
            raise NotFoundError(message, key=key)
        if status == httpx.codes.CONFLICT:
            if method == "POST":
                raise AlreadyExistsError(message, key=key)
            raise ConflictError(message, key=key)
        if status in _TRANSIENT_STATUS_CODES:
            raise TransientClusterError(message, key=key)
        raise ClusterError(message, key=key)

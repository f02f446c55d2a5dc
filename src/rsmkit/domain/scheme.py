"""Kind registry mapping kind names to object types and REST plurals.

``DEFAULT_SCHEME`` is populated once at import time and frozen afterwards.
Tests that need custom kinds build their own ``Scheme`` instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rsmkit.domain.model import ClusterObject, ReplicaUnit, Workload


@dataclass(slots=True, frozen=True)
class KindInfo:
    kind: str
    object_type: type[ClusterObject]
    plural: str


@dataclass(slots=True)
class Scheme:
    _kinds: dict[str, KindInfo] = field(default_factory=dict[str, KindInfo])
    _frozen: bool = False

    def register(self, object_type: type[ClusterObject], *, plural: str | None = None) -> None:
        if self._frozen:
            raise RuntimeError("Scheme is frozen; register kinds at process start")
        kind = object_type.KIND
        existing = self._kinds.get(kind)
        if existing is not None and existing.object_type is not object_type:
            owner = existing.object_type.__name__
            raise ValueError(f"Kind {kind!r} already registered for {owner}")
        self._kinds[kind] = KindInfo(
            kind=kind,
            object_type=object_type,
            plural=plural or f"{kind.lower()}s",
        )

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def info_for(self, kind: str) -> KindInfo:
        try:
            return self._kinds[kind]
        except KeyError:
            raise LookupError(f"Kind {kind!r} is not registered") from None

    def object_type_for(self, kind: str) -> type[ClusterObject]:
        return self.info_for(kind).object_type

    def plural_for(self, kind: str) -> str:
        return self.info_for(kind).plural

    def recognizes(self, kind: str) -> bool:
        return kind in self._kinds


def _build_default_scheme() -> Scheme:
    scheme = Scheme()
    scheme.register(Workload, plural="workloads")
    scheme.register(ReplicaUnit, plural="replicaunits")
    scheme.freeze()
    return scheme


DEFAULT_SCHEME = _build_default_scheme()

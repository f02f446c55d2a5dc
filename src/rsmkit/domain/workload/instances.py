"""Resolve a workload's instance templates into its desired replica names.

Resolution order:
1) every generated group ``generate_name`` x ``replicas`` expands to
   ``generate_name-0 .. generate_name-(replicas-1)``
2) every explicit template claims its literal name
3) the common template fills the remaining ordinals as ``<workload>-<n>``,
   scanning ``n`` from zero and skipping names already claimed, until the
   declared total is reached
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rsmkit.common.merge_patch import apply_merge_patch
from rsmkit.domain.errors import InstanceNameConflictError, WorkloadSpecError
from rsmkit.domain.model import UnitTemplate

if TYPE_CHECKING:
    from rsmkit.domain.model import InstanceTemplate, Workload


@dataclass(slots=True, frozen=True, kw_only=True)
class DesiredInstance:
    name: str
    template_name: str
    ordinal: int | None
    template: UnitTemplate


def parse_ordinal(name: str) -> tuple[str, int | None]:
    """Split ``prefix-<n>`` into ``(prefix, n)``; names without an ordinal give ``None``."""

    prefix, sep, suffix = name.rpartition("-")
    if sep and prefix and suffix.isdigit():
        return prefix, int(suffix)
    return name, None


def ordinal_sort_key(name: str) -> tuple[str, int]:
    prefix, ordinal = parse_ordinal(name)
    return prefix, -1 if ordinal is None else ordinal


def merge_template(base: UnitTemplate, instance: InstanceTemplate) -> UnitTemplate:
    """Overlay an instance template's overrides on the common template."""

    spec = (
        apply_merge_patch(base.spec, instance.spec) if instance.spec else copy.deepcopy(base.spec)
    )
    return UnitTemplate(
        labels={**base.labels, **instance.labels},
        annotations={**base.annotations, **instance.annotations},
        spec=spec,
    )


def _generated_names(template: InstanceTemplate) -> list[tuple[str, int | None]]:
    if template.name is not None and template.generate_name is not None:
        raise WorkloadSpecError(
            f"Instance template {template.name!r} sets both name and generate_name"
        )
    if template.name is not None:
        if not template.name:
            raise WorkloadSpecError("Instance template name must not be empty")
        if template.replicas not in (None, 1):
            raise WorkloadSpecError(
                f"Instance template {template.name!r} names one unit but declares "
                f"{template.replicas} replicas"
            )
        return [(template.name, None)]
    if not template.generate_name:
        raise WorkloadSpecError("Instance template needs either name or generate_name")
    replicas = 1 if template.replicas is None else template.replicas
    if replicas < 0:
        raise WorkloadSpecError(
            f"Instance template {template.generate_name!r} declares negative replicas"
        )
    return [(f"{template.generate_name}-{ordinal}", ordinal) for ordinal in range(replicas)]


def resolve_desired_instances(workload: Workload) -> dict[str, DesiredInstance]:
    """Return the desired units of ``workload`` keyed by name, in resolution order."""

    total = workload.spec.replicas
    if total is None:
        raise WorkloadSpecError(f"Workload {workload.name!r} declares no replicas")
    if total < 0:
        raise WorkloadSpecError(f"Workload {workload.name!r} declares negative replicas")

    base = workload.spec.template
    desired: dict[str, DesiredInstance] = {}
    # generated groups first, then explicit names, so conflicts report the group
    ordered = sorted(workload.spec.instances, key=lambda tpl: tpl.name is not None)
    for template in ordered:
        resolved = merge_template(base, template)
        for name, ordinal in _generated_names(template):
            existing = desired.get(name)
            if existing is not None:
                raise InstanceNameConflictError(
                    name, first=existing.template_name, second=template.template_name
                )
            desired[name] = DesiredInstance(
                name=name,
                template_name=template.template_name,
                ordinal=ordinal,
                template=resolved,
            )

    if len(desired) > total:
        raise WorkloadSpecError(
            f"Workload {workload.name!r} declares {total} replicas but its instance "
            f"templates name {len(desired)} units"
        )

    ordinal = 0
    while len(desired) < total:
        name = f"{workload.name}-{ordinal}"
        if name not in desired:
            desired[name] = DesiredInstance(
                name=name,
                template_name=workload.name,
                ordinal=ordinal,
                template=UnitTemplate(
                    labels=dict(base.labels),
                    annotations=dict(base.annotations),
                    spec=copy.deepcopy(base.spec),
                ),
            )
        ordinal += 1
    return desired

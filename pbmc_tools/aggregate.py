"""
pbmc_tools/aggregate.py
-----------------------
Response aggregator: fold one upstream JSON payload into the running result.

Output entries look like {"cell_type": "Treg", "degs": [...]}: the first key
is the endpoint's discriminant, the second its result name.
"""

from dataclasses import dataclass, field

from .errors import TransportError
from .filters import EndpointSpec
from .vocab import RESOLUTIONS


@dataclass
class AggregationResult:
    fine: list[dict] = field(default_factory=list)
    broad: list[dict] = field(default_factory=list)

    def branch(self, resolution: str) -> list[dict]:
        if resolution not in RESOLUTIONS:
            raise ValueError(f"Unknown resolution: {resolution}")
        return getattr(self, resolution)

    def to_dict(self) -> dict:
        return {"fine": self.fine, "broad": self.broad}


def read_records(payload, envelope_key: str) -> list[dict]:
    """Pull the record list out of {"results": [...]} / {"data": [...]} / {"rows": [...]}."""
    if not isinstance(payload, dict):
        raise TransportError("Network or response format error")
    records = payload.get(envelope_key)
    if not isinstance(records, list):
        raise TransportError(
            f"Network or response format error: missing '{envelope_key}' list"
        )
    if not all(isinstance(r, dict) for r in records):
        raise TransportError("Network or response format error")
    return records


def group_records(records: list[dict], discriminant: str) -> dict[str, list[dict]]:
    """Group by a record attribute; dict order is first-seen order."""
    groups: dict[str, list[dict]] = {}
    for record in records:
        try:
            groups.setdefault(record.get(discriminant), []).append(record)
        except TypeError as e:
            # unhashable value, e.g. a list where a name was expected
            raise TransportError("Network or response format error") from e
    return groups


def fold_response(
    payload,
    spec: EndpointSpec,
    key: str | None,
    into: list[dict],
) -> None:
    """
    Append the payload's records to `into`.

    key given  -> one entry under that key, whatever the records say.
    key None   -> one entry per distinct server-reported discriminant value.
    """
    records = read_records(payload, spec.envelope_key)
    project = spec.projection.project

    if key is not None:
        into.append({
            spec.discriminant: key,
            spec.result_name: [project(r) for r in records],
        })
        return

    for value, group in group_records(records, spec.discriminant).items():
        into.append({
            spec.discriminant: value,
            spec.result_name: [project(r) for r in group],
        })

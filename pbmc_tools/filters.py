"""
pbmc_tools/filters.py
---------------------
Value types shared by the query builder and the aggregator:

  FilterSet        validated query dimensions (age, sex, disease, paging, ordering)
  Keyed/Unfiltered which cell types a resolution is restricted to, if any
  ProjectionSpec   which upstream fields end up in an output record
  EndpointSpec     endpoint + envelope key + projection + output names, resolved once
"""

from dataclasses import dataclass, field

from .errors import InvalidArgument
from .vocab import AGE_GROUPS, DEG_ORDERINGS, DISEASES, PATHWAY_ORDERINGS, SEXES

# Output field -> upstream field, for spellings the API got wrong.
_LEGACY_SOURCES = {"pathway_description": "pathway_decription"}


def require_choice(name: str, value, choices) -> None:
    if value not in choices:
        raise InvalidArgument(
            f"Invalid {name} '{value}'. Choose from: {list(choices)}"
        )


def require_page(limit, offset) -> None:
    """limit > 0 and offset >= 0, both integers. Never clamped."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgument(f"Invalid limit '{limit}'. Expected an integer > 0")
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise InvalidArgument(f"Invalid offset '{offset}'. Expected an integer >= 0")


@dataclass(frozen=True)
class FilterSet:
    disease: str
    age_group: str = "all"
    sex: str = "all"
    limit: int = 100
    offset: int = 0
    ordering: str = "p_value"
    # Orderings the target endpoint accepts; defaults to any known one.
    orderings: tuple[str, ...] = field(
        default=tuple(dict.fromkeys(PATHWAY_ORDERINGS + DEG_ORDERINGS)),
        repr=False,
        compare=False,
    )

    def __post_init__(self):
        require_choice("ageGroup", self.age_group, AGE_GROUPS)
        require_choice("sex", self.sex, SEXES)
        require_choice("disease", self.disease, DISEASES)
        require_page(self.limit, self.offset)
        require_choice("ordering", self.ordering, self.orderings)

    def query_params(self, resolution: str) -> list[tuple[str, str]]:
        return [
            ("age", self.age_group),
            ("sex", self.sex),
            ("limit", str(self.limit)),
            ("offset", str(self.offset)),
            ("disease", self.disease),
            ("resolution", resolution),
            ("ordering", self.ordering),
        ]


@dataclass(frozen=True)
class Keyed:
    """Restrict to these cell types, one request each, in this order."""
    keys: tuple[str, ...]

    def __post_init__(self):
        if not self.keys:
            raise ValueError("Keyed needs at least one key; use UNFILTERED instead")


@dataclass(frozen=True)
class Unfiltered:
    """No cell-type restriction: one request, grouped by what the server reports."""


UNFILTERED = Unfiltered()


def entity_keys(values, vocabulary, name: str) -> Keyed | Unfiltered:
    """Validate and deduplicate requested cell types, keeping first-seen order."""
    if not values:
        return UNFILTERED
    if not isinstance(values, (list, tuple)) or not all(isinstance(v, str) for v in values):
        raise InvalidArgument(f"{name} must be a list of cell type names")
    keys = tuple(dict.fromkeys(values))
    for key in keys:
        require_choice(name, key, vocabulary)
    return Keyed(keys)


@dataclass(frozen=True)
class ProjectionSpec:
    fields: tuple[str, ...]
    # (output field, upstream field) pairs for endpoints with different names
    renames: tuple[tuple[str, str], ...] = ()

    def source_of(self, field: str) -> str:
        for out, src in self.renames:
            if out == field:
                return src
        return _LEGACY_SOURCES.get(field, field)

    def project(self, record: dict) -> dict:
        """Every declared field is present in the output; missing ones are None."""
        return {field: record.get(self.source_of(field)) for field in self.fields}


@dataclass(frozen=True)
class EndpointSpec:
    endpoint: str
    envelope_key: str
    projection: ProjectionSpec
    result_name: str
    discriminant: str = "cell_type"


PATHWAYS = EndpointSpec(
    endpoint="pathways",
    envelope_key="results",
    projection=ProjectionSpec(
        ("pathway_description", "pathway_id", "score", "p_value", "cell_type")
    ),
    result_name="pathways",
)

DEGS = EndpointSpec(
    endpoint="degs",
    envelope_key="results",
    projection=ProjectionSpec(("gene", "log2_fold_change", "p_value", "cell_type")),
    result_name="degs",
)

GENE_EXPRESSION = EndpointSpec(
    endpoint="gene_expr_celltype",
    envelope_key="results",
    projection=ProjectionSpec(("celltype", "mean_expression")),
    result_name="expression",
    discriminant="gene",
)

MARKERS = EndpointSpec(
    endpoint="marker-table-ds",
    envelope_key="data",
    projection=ProjectionSpec(
        ("cell_type", "log2_fold_change", "p_value"),
        renames=(("cell_type", "celltype"), ("p_value", "adj_p_val")),
    ),
    result_name="changes",
    discriminant="gene",
)

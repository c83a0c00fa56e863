"""
pbmc_tools/pbmc_query.py
------------------------
PBMCpedia query tools. Each function validates its arguments, builds the
upstream requests, fetches them one after another and folds the payloads
into the tool's result shape.

Every tool takes an optional `fetch(url) -> payload`; by default the real
HTTP client in client.py is used.
"""

import config

from .aggregate import AggregationResult, fold_response, read_records
from .client import fetch_all, fetch_json
from .envelope import tool_result
from .errors import InvalidArgument
from .filters import (
    DEGS,
    GENE_EXPRESSION,
    MARKERS,
    PATHWAYS,
    EndpointSpec,
    FilterSet,
    Keyed,
    Unfiltered,
    entity_keys,
    require_choice,
    require_page,
)
from .metadata import metadata_url, sample_rows, summarize_metadata
from .query import RequestDescriptor, build_gene_list_url, build_keyed_requests, build_per_gene_requests, with_params
from .vocab import DEG_ORDERINGS, MAX_GENES, PATHWAY_ORDERINGS, TYPES_ANY, TYPES_BROAD, TYPES_FINE


# ── Shared helpers ────────────────────────────────────────────────────────────

def _gene_list(genes) -> list[str]:
    if genes is None:
        return []
    if not isinstance(genes, (list, tuple)) or not all(isinstance(g, str) for g in genes):
        raise InvalidArgument("genes must be a list of gene names")
    if len(genes) > MAX_GENES:
        raise InvalidArgument(f"At most {MAX_GENES} genes can be queried at once")
    return list(dict.fromkeys(genes))


def _fan_out(
    spec: EndpointSpec,
    filters: FilterSet,
    fine: Keyed | Unfiltered,
    broad: Keyed | Unfiltered,
    fetch,
) -> AggregationResult:
    """Run the keyed/unfiltered cycle for fine, then for broad."""
    result = AggregationResult()
    for resolution, keys in (("fine", fine), ("broad", broad)):
        descriptors = build_keyed_requests(config.PBMC_API_URL, spec, filters, resolution, keys)
        branch = result.branch(resolution)
        for descriptor, payload in fetch_all(descriptors, fetch):
            fold_response(payload, spec, descriptor.key, branch)
    return result


def _per_celltype_tool(spec, orderings, *, disease, age_group, sex, limit, offset,
                       celltype_fine, celltype_broad, ordering, fetch) -> dict:
    filters = FilterSet(
        disease=disease,
        age_group=age_group,
        sex=sex,
        limit=limit,
        offset=offset,
        ordering=ordering,
        orderings=orderings,
    )
    fine = entity_keys(celltype_fine, TYPES_FINE, "celltype_fine")
    broad = entity_keys(celltype_broad, TYPES_BROAD, "celltype_broad")
    return _fan_out(spec, filters, fine, broad, fetch or fetch_json).to_dict()


# ── Tools ─────────────────────────────────────────────────────────────────────

@tool_result
def get_pathways(
    disease: str,
    age_group: str = "all",
    sex: str = "all",
    limit: int = 100,
    offset: int = 0,
    celltype_fine: list[str] | None = None,
    celltype_broad: list[str] | None = None,
    ordering: str = "p_value",
    fetch=None,
) -> dict:
    """Pathway activity (diseased vs. not), split by fine and broad cell type."""
    return _per_celltype_tool(
        PATHWAYS, PATHWAY_ORDERINGS,
        disease=disease, age_group=age_group, sex=sex, limit=limit, offset=offset,
        celltype_fine=celltype_fine, celltype_broad=celltype_broad,
        ordering=ordering, fetch=fetch,
    )


@tool_result
def get_degs(
    disease: str,
    age_group: str = "all",
    sex: str = "all",
    limit: int = 100,
    offset: int = 0,
    celltype_fine: list[str] | None = None,
    celltype_broad: list[str] | None = None,
    ordering: str = "p_value",
    fetch=None,
) -> dict:
    """Differentially expressed genes (diseased vs. not), split by fine and broad cell type."""
    return _per_celltype_tool(
        DEGS, DEG_ORDERINGS,
        disease=disease, age_group=age_group, sex=sex, limit=limit, offset=offset,
        celltype_fine=celltype_fine, celltype_broad=celltype_broad,
        ordering=ordering, fetch=fetch,
    )


@tool_result
def get_de_per_celltype(genes: list[str], celltype: str, fetch=None) -> dict:
    """Marker-table changes for each gene in one cell type, grouped by gene."""
    require_choice("celltype", celltype, TYPES_ANY)
    genes = _gene_list(genes)
    fetch = fetch or fetch_json

    result: list[dict] = []
    descriptors = build_per_gene_requests(config.PBMC_DOCS_URL, MARKERS, celltype, genes)
    for descriptor, payload in fetch_all(descriptors, fetch):
        fold_response(payload, MARKERS, descriptor.key, result)
    return {"result": result}


@tool_result
def get_expression_per_gene(
    genes: list[str],
    fine: bool,
    broad: bool,
    limit: int = 100,
    offset: int = 0,
    fetch=None,
) -> dict:
    """Mean expression per cell type for each gene, at the requested resolutions."""
    require_page(limit, offset)
    genes = _gene_list(genes)
    fetch = fetch or fetch_json

    url = build_gene_list_url(config.PBMC_API_URL, GENE_EXPRESSION, genes, limit, offset)

    result = AggregationResult()
    for resolution, enabled in (("fine", fine), ("broad", broad)):
        if not enabled:
            continue
        descriptor = RequestDescriptor(with_params(url, [("resolution", resolution)]))
        for _, payload in fetch_all([descriptor], fetch):
            fold_response(payload, GENE_EXPRESSION, None, result.branch(resolution))
    return {"result": result.to_dict()}


@tool_result
def get_metadata(
    sex: str = "none",
    disease: str = "none",
    summarize: bool = True,
    fetch=None,
) -> dict:
    """Sample metadata: a count summary, or the first 30 matching samples."""
    url = metadata_url(config.PBMC_DOCS_URL, sex, disease, summarize)
    fetch = fetch or fetch_json

    records = read_records(fetch(url), "results")
    if summarize:
        return {"result": summarize_metadata(records)}
    return {"result": sample_rows(records)}


@tool_result
def get_antibody_chains(clone: int, fetch=None) -> dict:
    """Receptor chains matched to one clonotype, passed through unchanged."""
    if isinstance(clone, bool) or not isinstance(clone, int) or clone < 0:
        raise InvalidArgument(f"Invalid clone '{clone}'. Expected an integer >= 0")
    fetch = fetch or fetch_json

    url = with_params(config.PBMC_DOCS_URL + "chains-by-clone", [("clone_id", str(clone))])
    return {"result": read_records(fetch(url), "rows")}

"""
pbmc_tools/query.py
-------------------
Query builder: turn validated filters and key sets into the ordered list of
upstream URLs to fetch.

User-typed strings (gene names) are percent-encoded. Vocabulary values
(ages, sexes, diseases, cell types) go in verbatim.
"""

from dataclasses import dataclass
from urllib.parse import quote

from .errors import RequestTooLarge
from .filters import EndpointSpec, FilterSet, Keyed, Unfiltered

# The upstream server rejects longer request lines.
URL_LENGTH_LIMIT = 4078


@dataclass(frozen=True)
class RequestDescriptor:
    url: str
    # Cell type or gene this request was issued for; None when unfiltered.
    key: str | None = None


def encode_component(value: str) -> str:
    """Same safe set as JavaScript's encodeURIComponent."""
    return quote(value, safe="!*'()")


def with_params(url: str, params: list[tuple[str, str]]) -> str:
    if not params:
        return url
    sep = "&" if "?" in url else "?"
    return url + sep + "&".join(f"{k}={v}" for k, v in params)


def build_keyed_requests(
    base_url: str,
    spec: EndpointSpec,
    filters: FilterSet,
    resolution: str,
    keys: Keyed | Unfiltered,
) -> list[RequestDescriptor]:
    """One request per cell type, or a single request with no cell_type at all."""
    endpoint_url = base_url + spec.endpoint
    params = filters.query_params(resolution)

    if isinstance(keys, Unfiltered):
        return [RequestDescriptor(with_params(endpoint_url, params))]

    return [
        RequestDescriptor(with_params(endpoint_url, [("cell_type", key)] + params), key)
        for key in keys.keys
    ]


def build_per_gene_requests(
    base_url: str,
    spec: EndpointSpec,
    cell_type: str,
    genes: list[str],
) -> list[RequestDescriptor]:
    """One request per gene for a fixed cell type. Keys are the raw gene names."""
    endpoint_url = base_url + spec.endpoint
    return [
        RequestDescriptor(
            with_params(endpoint_url, [("cell_type", cell_type), ("genes", encode_component(gene))]),
            gene,
        )
        for gene in genes
    ]


def build_gene_list_url(
    base_url: str,
    spec: EndpointSpec,
    genes: list[str],
    limit: int,
    offset: int,
) -> str:
    """
    Encode every gene as a repeated `genes=` parameter of a single URL.

    The finished URL is measured once; at or over URL_LENGTH_LIMIT the whole
    operation is refused before anything is sent.
    """
    params = [("limit", str(limit)), ("offset", str(offset))]
    params += [("genes", encode_component(gene)) for gene in genes]
    url = with_params(base_url + spec.endpoint, params)

    if len(url) >= URL_LENGTH_LIMIT:
        raise RequestTooLarge(len(url), URL_LENGTH_LIMIT)
    return url

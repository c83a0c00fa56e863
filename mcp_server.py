"""
MCP Server — PBMCpedia Tools
============================
Exposes the PBMCpedia query functions (pbmc_tools/pbmc_query.py) as an
MCP-compliant tool server.

  - @list_tools:    tells any client which queries exist and what they take
  - @call_tool:     runs one query and returns a CallToolResult
  - @list_resources / @read_resource: a short description of the service
  - transport:      stdio (default) or stateless streamable HTTP on /mcp,
                    chosen with MCP_TRANSPORT
"""

import asyncio
import contextlib
import inspect
import logging
import sys

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

import config
from pbmc_tools import pbmc_query
from pbmc_tools.envelope import failure
from pbmc_tools.vocab import (
    AGE_GROUPS,
    DEG_ORDERINGS,
    DISEASES,
    DISEASES_FOR_METADATA,
    MAX_GENES,
    PATHWAY_ORDERINGS,
    SEX_FOR_METADATA,
    SEXES,
    TYPES_ANY,
    TYPES_BROAD,
    TYPES_FINE,
)

# Logs go to stderr: stdout is the MCP stdio channel.
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [MCP] %(name)s %(levelname)s %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# 1. Server instance
# ─────────────────────────────────────────────

app = Server("pbmcpedia-connect")

DESCRIPTION_URI = "pbmc://description"
DESCRIPTION = (
    "This MCP server offers tools to interact with the PBMCpedia webserver, "
    "an atlas of Peripheral Blood Mononuclear Cell experiments/studies"
)


# ─────────────────────────────────────────────
# 2. Reused input schema fragments
# ─────────────────────────────────────────────

_AGE_GROUP = {
    "type": "string",
    "enum": list(AGE_GROUPS),
    "default": "all",
    "description": "Filter results by age group",
}
_SEX = {
    "type": "string",
    "enum": list(SEXES),
    "default": "all",
    "description": "Filter results by sex",
}
_DISEASE = {
    "type": "string",
    "enum": list(DISEASES),
    "description": (
        "Condition for which to query. The following conditions are not "
        "self-explanatory: `ad` is Alzheimer's disease, `pd` is Parkinson's, "
        "`hnscc` is Head and Neck Squamous Carcinoma, `rrms` is relapsing "
        "remitting Multiple Sclerosis, `mis-c` is multisystem inflammatory "
        "syndrome in children and `tb` is Tuberculosis."
    ),
}
_CELLTYPE_FINE = {
    "type": "array",
    "items": {"type": "string", "enum": list(TYPES_FINE)},
    "default": [],
    "description": (
        "List of fine-grained cell types to query. The empty default does "
        "not restrict by cell type."
    ),
}
_CELLTYPE_BROAD = {
    "type": "array",
    "items": {"type": "string", "enum": list(TYPES_BROAD)},
    "default": [],
    "description": (
        "List of broad cell types to query. The empty default does not "
        "restrict by cell type."
    ),
}
_LIMIT = {
    "type": "integer",
    "exclusiveMinimum": 0,
    "default": 100,
    "description": (
        "Fetch at most this many results (after applying other query filters "
        "except for 'offset'). If cell types are explicitly specified, fetch "
        "at most this many results per cell type."
    ),
}
_OFFSET = {
    "type": "integer",
    "minimum": 0,
    "default": 0,
    "description": (
        "How many elements to skip in the beginning of the result list (after "
        "applying other query filters and before applying the limit)."
    ),
}


def _ordering(choices) -> dict:
    return {
        "type": "string",
        "enum": list(choices),
        "default": "p_value",
        "description": "By what metric to order the results. '-' indicates descending order",
    }


def _per_celltype_schema(orderings) -> dict:
    return {
        "type": "object",
        "properties": {
            "ageGroup": _AGE_GROUP,
            "sex": _SEX,
            "disease": _DISEASE,
            "limit": _LIMIT,
            "offset": _OFFSET,
            "celltype_fine": _CELLTYPE_FINE,
            "celltype_broad": _CELLTYPE_BROAD,
            "ordering": _ordering(orderings),
        },
        "required": ["disease"],
    }


# ─────────────────────────────────────────────
# 3. list_tools handler
# ─────────────────────────────────────────────

@app.list_tools()
async def list_tools() -> list[types.Tool]:
    return [
        types.Tool(
            name="getPathways",
            description=(
                "Queries the PBMCpedia webserver for pathways using the provided "
                "parameters. Pathway activity was measured between 'afflicted with "
                "disease/condition' and 'not afflicted with disease/condition'. "
                "Returns {fine, broad}, each a list of {cell_type, pathways}."
            ),
            inputSchema=_per_celltype_schema(PATHWAY_ORDERINGS),
        ),
        types.Tool(
            name="getDEGs",
            description=(
                "Queries the PBMCpedia webserver (atlas for peripheral blood "
                "mononuclear cell experiments) for DEGs using the provided parameters. "
                "DEGs were measured between 'afflicted with disease/condition' and "
                "'not afflicted with disease/condition'. "
                "Returns {fine, broad}, each a list of {cell_type, degs}."
            ),
            inputSchema=_per_celltype_schema(DEG_ORDERINGS),
        ),
        types.Tool(
            name="getDEperCellType",
            description=(
                "Queries the PBMCpedia webserver for the differential expression of "
                "the given genes with respect to the provided cell type. Returns a "
                "list of {gene, changes: [{cell_type, log2_fold_change, p_value}]}."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "genes": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Names of the genes for which to query differential expression.",
                    },
                    "celltype": {
                        "type": "string",
                        "enum": list(TYPES_ANY),
                        "description": "Cell type to fetch differential expression for.",
                    },
                },
                "required": ["genes", "celltype"],
            },
        ),
        types.Tool(
            name="getExpressionPerGene",
            description=(
                "Queries the PBMCpedia webserver for gene expression. Returns the "
                "mean expression per gene and cell type, split into fine and broad "
                "cell type resolutions."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": _LIMIT,
                    "offset": _OFFSET,
                    "genes": {
                        "type": "array",
                        "items": {"type": "string"},
                        "maxItems": MAX_GENES,
                        "description": "Names of the genes for which to query gene expression.",
                    },
                    "fine": {
                        "type": "boolean",
                        "description": "Whether to return gene expression split by fine-grained cell type",
                    },
                    "broad": {
                        "type": "boolean",
                        "description": "Whether to return gene expression split by broad cell type",
                    },
                },
                "required": ["genes", "fine", "broad"],
            },
        ),
        types.Tool(
            name="getMetaData",
            description=(
                "Queries the PBMCpedia webserver for the samples fitting the provided "
                "filters and either returns a summary or full information on the "
                "first 30 results."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "sex": {
                        "type": "string",
                        "enum": list(SEX_FOR_METADATA),
                        "default": "none",
                        "description": "Passing 'none' (the default) disables this filter",
                    },
                    "disease": {
                        "type": "string",
                        "enum": list(DISEASES_FOR_METADATA),
                        "default": "none",
                        "description": "Passing 'none' (the default) disables this filter",
                    },
                    "summarize": {
                        "type": "boolean",
                        "default": True,
                        "description": "Whether to return a summary of the metadata instead of the first 30 results",
                    },
                },
            },
        ),
        types.Tool(
            name="getAntibodyChains",
            description=(
                "Queries the PBMCpedia webserver for the antibody chains matched "
                "to the given clonotype."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "clone": {
                        "type": "integer",
                        "minimum": 0,
                        "description": "ID of the clone",
                    },
                },
                "required": ["clone"],
            },
        ),
    ]


# ─────────────────────────────────────────────
# 4. call_tool handler
#    Queries block on HTTP, so they run in a worker thread.
#    Every outcome is already a CallToolResult.
# ─────────────────────────────────────────────

DISPATCH = {
    "getPathways": pbmc_query.get_pathways,
    "getDEGs": pbmc_query.get_degs,
    "getDEperCellType": pbmc_query.get_de_per_celltype,
    "getExpressionPerGene": pbmc_query.get_expression_per_gene,
    "getMetaData": pbmc_query.get_metadata,
    "getAntibodyChains": pbmc_query.get_antibody_chains,
}

# Wire names that differ from the Python keyword
_ARG_NAMES = {"ageGroup": "age_group"}


def _kwargs(arguments: dict | None) -> dict:
    # fetch is a Python-side injection point, never a client argument
    return {
        _ARG_NAMES.get(k, k): v
        for k, v in (arguments or {}).items()
        if k != "fetch"
    }


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> types.CallToolResult:
    if name not in DISPATCH:
        logger.warning("Unknown tool requested: %s", name)
        return failure(f"Unknown tool: {name}")

    func = DISPATCH[name]
    kwargs = _kwargs(arguments)
    try:
        inspect.signature(func).bind(**kwargs)
    except TypeError as e:
        return failure(f"Invalid arguments for {name}: {e}")

    return await asyncio.to_thread(func, **kwargs)


# ─────────────────────────────────────────────
# 5. Description resource
# ─────────────────────────────────────────────

@app.list_resources()
async def list_resources() -> list[types.Resource]:
    return [
        types.Resource(
            uri=DESCRIPTION_URI,
            name="description",
            title="Service description",
            mimeType="text/plain",
        )
    ]


@app.read_resource()
async def read_resource(uri) -> list[ReadResourceContents]:
    if str(uri).rstrip("/") != DESCRIPTION_URI:
        raise ValueError(f"Unknown resource: {uri}")
    return [ReadResourceContents(content=DESCRIPTION, mime_type="text/plain")]


# ─────────────────────────────────────────────
# 6. Entry points
# ─────────────────────────────────────────────

async def main():
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options(),
        )


def serve_http(port: int) -> None:
    """Stateless streamable HTTP: a fresh transport per request, JSON responses."""
    import uvicorn
    from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
    from starlette.applications import Starlette
    from starlette.routing import Mount

    session_manager = StreamableHTTPSessionManager(
        app=app,
        json_response=True,
        stateless=True,
    )

    async def handle_mcp(scope, receive, send):
        await session_manager.handle_request(scope, receive, send)

    @contextlib.asynccontextmanager
    async def lifespan(_starlette_app):
        async with session_manager.run():
            logger.info("MCP Server running on http://localhost:%d/mcp", port)
            yield

    starlette_app = Starlette(
        routes=[Mount("/mcp", app=handle_mcp)],
        lifespan=lifespan,
    )
    uvicorn.run(starlette_app, host="0.0.0.0", port=port)


def run() -> None:
    if config.MCP_TRANSPORT == "http":
        serve_http(config.PORT)
    elif config.MCP_TRANSPORT == "stdio":
        asyncio.run(main())
    else:
        raise SystemExit(f"Unknown MCP_TRANSPORT '{config.MCP_TRANSPORT}'. Use 'stdio' or 'http'.")


if __name__ == "__main__":
    run()

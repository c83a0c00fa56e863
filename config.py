"""
config.py — Server Configuration
================================
Every setting comes from the environment (or a local .env file), so the same
code runs against the public PBMCpedia instance or a local mirror.

To point the server at another instance: set PBMC_API_URL / PBMC_DOCS_URL.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Base for the filterable endpoints (pathways, degs, gene_expr_celltype)
PBMC_API_URL = os.getenv(
    "PBMC_API_URL", "https://web.ccb.uni-saarland.de/pbmcpedia/api/v1/"
)
# Base for marker-table-ds, v1/metadata and chains-by-clone
PBMC_DOCS_URL = os.getenv(
    "PBMC_DOCS_URL", "https://web.ccb.uni-saarland.de/pbmcpedia/api-docs/"
)

PBMC_TIMEOUT = float(os.getenv("PBMC_TIMEOUT", "30"))

MCP_TRANSPORT = os.getenv("MCP_TRANSPORT", "stdio")
PORT = int(os.getenv("PORT", "3002"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

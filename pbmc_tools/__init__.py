"""
pbmc_tools
----------
Query core for the PBMCpedia MCP server: vocabularies, request building,
response aggregation and the tool operations built on them.
"""

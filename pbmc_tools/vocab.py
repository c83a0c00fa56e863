"""
pbmc_tools/vocab.py
-------------------
Closed vocabularies accepted by the PBMCpedia API.
Values are sent upstream verbatim, so they must match the server's spelling.
"""

AGE_GROUPS = ("all", "adult", "elderly", "unknown", "young")
SEXES = ("all", "female", "male", "unknown")

DISEASES = (
    "Inflammation",
    "Respiratory system disorder",
    "ad",
    "covid-19",
    "hnscc",
    "influenza",
    "mis-c",
    "pd",
    "rrms",
    "sars-cov-2 vaccine",
    "tb",
)

TYPES_BROAD = (
    "T cell",
    "NK cell",
    "B cell",
    "ILC",
    "Progenitor cell",
    "Erythrocyte",
    "Monocyte",
    "DC",
)

TYPES_FINE = (
    "Plasma cell",
    "Intermediate monocyte",
    "Naive CD4 T cell",
    "CD14 monocyte",
    "ASDC",
    "ILC",
    "CD8aa",
    "cDC2",
    "Naive CD8 T cell",
    "pDC",
    "Memory CD8 T cell",
    "Naive B cell",
    "Effector B cell",
    "cDC1",
    "gdT",
    "Erythrocyte",
    "CD56dim NK cell",
    "CD16 monocyte",
    "Memory B cell",
    "Progenitor cell",
    "Treg",
    "Memory CD4 T cell",
    "DN T cell",
    "MAIT",
    "Proliferating T cell",
)

# Either resolution, for tools that take a single cell type
TYPES_ANY = TYPES_BROAD + tuple(t for t in TYPES_FINE if t not in TYPES_BROAD)

RESOLUTIONS = ("fine", "broad")

PATHWAY_ORDERINGS = ("p_value", "-p_value", "score", "-score")
DEG_ORDERINGS = (
    "p_value",
    "-p_value",
    "log2_fold_change",
    "-log2_fold_change",
    "gene",
    "-gene",
)

# The metadata endpoint speaks a different dialect: long disease names and
# "none" to disable a filter.
SEX_FOR_METADATA = ("male", "female", "unknown", "none")
DISEASES_FOR_METADATA = (
    "Multisystem inflammatory syndrome in children (MIS-C)",
    "Inflammation",
    "COVID-19",
    "Parkinson's Disease (PD)",
    "Healthy Control",
    "Unknown",
    "Tuberculosis (TB)",
    "End-Stage Renal Disease (ESRD)",
    "Relapsing Remitting Multiple Sclerosis (RRMS)",
    "Head and neck squamous cell carcinoma (HNSCC)",
    "Alzheimer's disease (AD)",
    "Respiratory system disorder",
    "Influenza",
    "SARS-CoV-2 vaccine",
    "Sepsis (survived)",
    "Sepsis (non-survived)",
    "Premature Ovarian Insufficiency (POI)",
    "none",
)

MAX_GENES = 1024

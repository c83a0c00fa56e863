"""
pbmc_tools/metadata.py
----------------------
The legacy sample-metadata tool: either the first 30 rows as-is, or a
count summary over everything that matches.
"""

from .errors import TransportError
from .filters import require_choice
from .query import with_params
from .vocab import DISEASES_FOR_METADATA, SEX_FOR_METADATA

SAMPLE_ROWS = 30
SUMMARY_ROWS = 10000

_SUMMARY_SEXES = ("male", "female", "unknown")
_AGE_BUCKETS = ("elderly", "young", "adult", "unknown")


def metadata_url(base_url: str, sex: str, disease: str, summarize: bool) -> str:
    """'none' disables a filter and is sent upstream as an empty value."""
    require_choice("sex", sex, SEX_FOR_METADATA)
    require_choice("disease", disease, DISEASES_FOR_METADATA)
    return with_params(base_url + "v1/metadata", [
        ("sex", "" if sex == "none" else sex),
        ("disease", "" if disease == "none" else disease),
        ("limit", str(SUMMARY_ROWS if summarize else SAMPLE_ROWS)),
    ])


def sample_rows(records: list[dict]) -> list[dict]:
    return [
        {
            "sample_id": r.get("sample_id"),
            "study_id": r.get("study"),
            "age": r.get("age_display"),
            "sex": r.get("sex"),
            "disease": r.get("disease"),
        }
        for r in records
    ]


def age_bucket(age_display) -> str:
    """'adult (42)' -> 'adult'. Anything unrecognised counts as unknown."""
    if not isinstance(age_display, str):
        return "unknown"
    bucket = age_display.split(" ", 1)[0]
    return bucket if bucket in _AGE_BUCKETS else "unknown"


def summarize_metadata(records: list[dict]) -> dict:
    sex_summary = {s: 0 for s in _SUMMARY_SEXES}
    age_summary = {a: 0 for a in _AGE_BUCKETS}
    disease_counts: dict[str, int] = {}

    for r in records:
        sex = r.get("sex")
        sex_summary[sex if isinstance(sex, str) and sex in sex_summary else "unknown"] += 1
        age_summary[age_bucket(r.get("age_display"))] += 1
        disease = r.get("disease")
        if disease is not None and not isinstance(disease, str):
            raise TransportError("Network or response format error")
        disease_counts[disease] = disease_counts.get(disease, 0) + 1

    return {
        "sex_summary": sex_summary,
        "disease_summary": [
            {"disease": d, "count": n} for d, n in disease_counts.items()
        ],
        "age_summary": age_summary,
    }

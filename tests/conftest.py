# conftest.py
# Put the repository root on sys.path so the flat-layout modules
# (mcp_server, config) and the pbmc_tools package import the same way
# they do when the server runs from a checkout.

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)

if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


class FakeFetch:
    """
    Stand-in for the HTTP capability. Records every URL and answers from a
    queue of payloads; an Exception in the queue is raised instead.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        if not self.responses:
            return {"results": [], "data": [], "rows": []}
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_fetch():
    return FakeFetch

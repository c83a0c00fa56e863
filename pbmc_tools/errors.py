"""
pbmc_tools/errors.py
--------------------
Failure kinds raised by the query core. Tool operations catch PbmcError
once per invocation and turn it into an error envelope.
"""


class PbmcError(Exception):
    """Base class; str(err) is the message shown to the client."""


class InvalidArgument(PbmcError):
    """A tool argument failed validation before any request was built."""


class UpstreamStatusError(PbmcError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Server returned error code {status}")


class TransportError(PbmcError):
    """Network failure, or a body that is not the JSON shape we expect."""


class RequestTooLarge(PbmcError):
    def __init__(self, length: int, threshold: int):
        self.length = length
        self.threshold = threshold
        super().__init__("Too many genes requested. Please try again with less")

from __future__ import annotations


class ReconstructError(RuntimeError):
    """Base error for the reconstruction and chat pipelines."""


class ConfigurationError(ReconstructError):
    """Required configuration (the backend credential) is missing."""


class NoImagesError(ReconstructError):
    def __init__(self, message: str = "No files uploaded") -> None:
        super().__init__(message)


class BackendCallError(ReconstructError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class MalformedResponseError(ReconstructError):
    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text

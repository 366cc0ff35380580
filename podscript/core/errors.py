from typing import Any


class PodscriptError(Exception):
    """Base error rendered as an `{error, details}` payload at the API boundary."""

    status_code = 500
    error = "Internal error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Any:
        return self.message


class ConfigurationError(PodscriptError):
    error = "Service misconfigured"


class SearchUnavailable(PodscriptError):
    status_code = 502
    error = "Search unavailable"


class MissingSearchKey(SearchUnavailable, ConfigurationError):
    status_code = 500


class GenerationFailed(PodscriptError):
    status_code = 502
    error = "Generation failed"


class ParseError(PodscriptError):
    status_code = 502
    error = "Malformed generation output"

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text

    def details(self) -> Any:
        return {"message": self.message, "rawText": self.raw_text}


class OutlineParseError(ParseError):
    error = "Failed to parse outline"


class SynthesisFailed(PodscriptError):
    status_code = 502
    error = "Speech synthesis failed"


class PipelineTimeout(PodscriptError):
    status_code = 504
    error = "Script generation timed out"

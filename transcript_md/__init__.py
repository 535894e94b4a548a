"""Rewrite raw speech transcripts into markdown documents through a remote language model."""

from .engine import TranscriptConverter, assemble_document, compare_names, sort_results
from .errors import (
    FilesystemError,
    InvalidPathError,
    NoInputError,
    RemoteServiceError,
    TranscriptToolError,
)
from .models import ConversionMode, ConversionReport, ConversionRequest, RewriteResult, TranscriptInput
from .openrouter_client import OpenRouterClient, OpenRouterSettings
from .rewriter import TranscriptRewriter

__all__ = [
    "ConversionMode",
    "ConversionReport",
    "ConversionRequest",
    "FilesystemError",
    "InvalidPathError",
    "NoInputError",
    "OpenRouterClient",
    "OpenRouterSettings",
    "RemoteServiceError",
    "RewriteResult",
    "TranscriptConverter",
    "TranscriptInput",
    "TranscriptRewriter",
    "TranscriptToolError",
    "assemble_document",
    "compare_names",
    "sort_results",
]

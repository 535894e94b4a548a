from __future__ import annotations

import locale
import logging
import re
import stat
import uuid
from functools import cmp_to_key
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .errors import FilesystemError, InvalidPathError, NoInputError
from .models import ConversionMode, ConversionReport, ConversionRequest, RewriteResult, TranscriptInput
from .token_utils import estimate_tokens

LogCallback = Callable[[str, str], None]
RewriteFn = Callable[[str], str]

logger = logging.getLogger(__name__)

TRANSCRIPT_EXTENSIONS = (".txt", ".text", ".transcript")
DOCUMENT_SEPARATOR = "\n\n---\n\n"

# ASCII digits only; str.isdigit and \d also accept other scripts.
_DIGIT_RUN_RE = re.compile(r"[0-9]+")


def is_transcript_name(name: str) -> bool:
    return name.endswith(TRANSCRIPT_EXTENSIONS)


def discover_transcripts(root: Path) -> List[Path]:
    """Regular files directly under ``root`` with a transcript extension, in name order."""
    try:
        entries = sorted(root.iterdir(), key=lambda path: path.name)
    except OSError as exc:
        raise FilesystemError(f"Failed to list directory {root}: {exc}", path=root) from exc
    return [path for path in entries if is_transcript_name(path.name) and path.is_file()]


def read_transcript(path: Path) -> TranscriptInput:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FilesystemError(f"Failed to read {path.name}: {exc}", path=path) from exc
    return TranscriptInput(path=path, text=text)


def _first_number(name: str) -> Optional[int]:
    match = _DIGIT_RUN_RE.search(name)
    return int(match.group(0)) if match else None


def compare_names(left: str, right: str) -> int:
    """Numeric comparison when both names contain digits, collation order otherwise.

    Only the first digit run of each name counts. A name without digits is
    compared against every other name by full-string collation, so mixed sets
    are not a strict natural sort. Collation uses the current LC_COLLATE order on
    case-folded names first, then on the names as given, then code points.
    """
    left_number = _first_number(left)
    right_number = _first_number(right)
    if left_number is not None and right_number is not None:
        return _cmp(left_number, right_number)
    folded = _cmp(locale.strcoll(left.casefold(), right.casefold()), 0)
    if folded:
        return folded
    return _cmp(locale.strcoll(left, right), 0) or _cmp(left, right)


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def sort_results(results: Sequence[RewriteResult]) -> List[RewriteResult]:
    # list.sort is stable, so equal numbers keep enumeration order.
    return sorted(results, key=cmp_to_key(lambda a, b: compare_names(a.name, b.name)))


def assemble_document(results: Sequence[RewriteResult]) -> str:
    """Join results with a horizontal rule; the last entry is followed by one as well."""
    return "".join(f"{result.content}{DOCUMENT_SEPARATOR}" for result in results)


def write_text_atomic(path: Path, text: str) -> None:
    tmp = path.with_name(f".{path.name}.tmp_{uuid.uuid4().hex}")
    try:
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to remove temporary file %s", tmp)
        raise FilesystemError(f"Failed to write {path}: {exc}", path=path) from exc


class TranscriptConverter:
    """Drives one conversion: single file or directory batch, then one output file."""

    def __init__(self, rewrite: RewriteFn, log_callback: Optional[LogCallback] = None):
        self._rewrite = rewrite
        self._log_callback = log_callback

    def _log(self, level: str, message: str) -> None:
        if self._log_callback:
            try:
                self._log_callback(level, message)
            except Exception:  # pragma: no cover
                logger.exception("Failed to emit log callback.")
        else:
            if level == "success":
                level = "info"
            getattr(logger, level, logger.info)(message)

    def convert(self, input_path: Path, output_path: Path) -> ConversionReport:
        request = ConversionRequest(input_path=Path(input_path), output_path=Path(output_path))
        report = ConversionReport(request)
        mode = self._classify(request.input_path)
        report.mode = mode
        if mode is ConversionMode.SINGLE:
            self._log("info", "Processing single transcript file...")
            result = self._process(request.input_path)
            document = result.content
            report.record(result.name)
        else:
            self._log("info", "Processing directory of transcript files...")
            results = self._process_directory(request.input_path)
            ordered = sort_results(results)
            document = assemble_document(ordered)
            for result in ordered:
                report.record(result.name)
        write_text_atomic(request.output_path, document)
        self._log("success", f"Saved markdown file: {request.output_path}")
        report.complete()
        return report

    @staticmethod
    def _classify(path: Path) -> ConversionMode:
        try:
            mode = path.stat().st_mode
        except FileNotFoundError as exc:
            raise InvalidPathError(f"Input path does not exist: {path}") from exc
        except OSError as exc:
            raise InvalidPathError(f"Cannot inspect input path {path}: {exc}") from exc
        if stat.S_ISREG(mode):
            return ConversionMode.SINGLE
        if stat.S_ISDIR(mode):
            return ConversionMode.BATCH
        raise InvalidPathError(f"The input path is neither a file nor a directory: {path}")

    def _process_directory(self, root: Path) -> List[RewriteResult]:
        files = discover_transcripts(root)
        if not files:
            raise NoInputError(f"No transcript files found in {root}.")
        total = len(files)
        self._log("info", f"Found {total} transcript file(s) to process.")
        return [self._process(path, idx, total) for idx, path in enumerate(files, start=1)]

    def _process(self, path: Path, index: int = 1, total: int = 1) -> RewriteResult:
        transcript = read_transcript(path)
        self._log(
            "info",
            f"[{index}/{total}] Processing: {transcript.name} (~{estimate_tokens(transcript.text)} tokens)",
        )
        try:
            content = self._rewrite(transcript.text)
        except Exception as exc:
            self._log("error", f"Error processing {transcript.name}: {exc}")
            raise
        self._log("success", f"Successfully processed: {transcript.name}")
        return RewriteResult(name=transcript.name, content=content)

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class ConversionMode(str, Enum):
    """How the input path was interpreted."""

    SINGLE = "single"
    BATCH = "batch"


@dataclass(frozen=True)
class TranscriptInput:
    path: Path
    text: str

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class RewriteResult:
    name: str
    content: str


@dataclass
class ConversionRequest:
    input_path: Path
    output_path: Path


@dataclass
class ConversionReport:
    request: ConversionRequest
    mode: Optional[ConversionMode] = None
    processed: List[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    def record(self, name: str) -> None:
        self.processed.append(name)

    def complete(self) -> None:
        self.finished_at = time.time()

    def to_dict(self) -> Dict[str, Any]:
        duration = None
        if self.finished_at is not None:
            duration = round(self.finished_at - self.started_at, 2)
        return {
            "request": {
                "input_path": str(self.request.input_path),
                "output_path": str(self.request.output_path),
            },
            "mode": self.mode.value if self.mode else None,
            "processed": list(self.processed),
            "summary": {
                "total_files": len(self.processed),
                "duration_seconds": duration,
            },
        }

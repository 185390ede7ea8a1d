from dataclasses import dataclass, field
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class FormatterConfig(BaseModel):
    """Resolved formatting options, shared read-only by every rule"""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    indent_width: int = Field(default=2, ge=1)
    use_tabs: bool = False
    align_preprocessor: bool = True
    wrap_multiline_blocks: bool = True
    inline_end_else: bool = True
    space_after_comma: bool = True
    remove_call_space: bool = True
    max_line_length: int = Field(default=100, ge=0)
    align_case_colon: bool = True
    auto_wrap_long_lines: bool = False


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass
class FormattingDiagnostic:
    line: int
    column: int
    severity: Severity
    message: str
    rule_id: str = ""


@dataclass
class FormatResult:
    source: str
    modified: bool
    file_path: str = ""
    diagnostics: List[FormattingDiagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[FormattingDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]


@dataclass
class FormatResults:
    results: List[FormatResult]
    total_files: int
    modified_files: int
    error_files: int
    interrupted: bool = False

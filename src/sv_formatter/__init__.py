from .engine import FormatterEngine
from .errors import ConfigError, FormatterError, ParseError
from .models import FormatterConfig, FormatResult, FormatResults, FormattingDiagnostic, Severity

__all__ = [
    "FormatterEngine",
    "FormatterConfig",
    "FormatResult",
    "FormatResults",
    "FormattingDiagnostic",
    "Severity",
    "FormatterError",
    "ConfigError",
    "ParseError",
]

class FormatterError(Exception):
    """Base class for sv-fmt failures"""


class ConfigError(FormatterError):
    """Invalid configuration file, unknown key or mistyped value"""


class ParseError(FormatterError):
    """The input is not syntactically valid SystemVerilog"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line:
            return f"{self.args[0]} at line {self.line}, column {self.column}"
        return self.args[0]

"""Failures that stop the code block pipeline for a single block.

Every error carries a stable ``kind`` (used for metrics and logs) and a
``notice`` that is safe to show to the person reading the document.
"""


class CodeBlockError(Exception):
    kind = "error"

    def __init__(self, notice: str):
        super().__init__(notice)
        self.notice = notice


class ParseError(CodeBlockError):
    kind = "parse_error"


class NoDirective(ParseError):
    """The block has no ``<compile>`` directive and is not meant to be run."""

    kind = "no_directive"

    def __init__(self) -> None:
        super().__init__("Code block has no <compile> directive")


class MalformedDirective(ParseError):
    kind = "malformed_directive"

    def __init__(self, detail: str = ""):
        notice = "Invalid configuration JSON string"
        if detail:
            notice = f"{notice}: {detail}"
        super().__init__(notice)
        self.detail = detail


class BuildError(CodeBlockError):
    kind = "build_error"


class MissingLanguage(BuildError):
    kind = "missing_language"

    def __init__(self) -> None:
        super().__init__("A language must be specified for a code block to be runnable")


class UnknownLanguage(BuildError):
    kind = "unknown_language"

    def __init__(self, language: str):
        super().__init__(
            f"Language '{language}' is not valid. "
            "For a list of valid languages, please see the settings page"
        )
        self.language = language


class NoCompilerAvailable(BuildError):
    kind = "no_compiler_available"

    def __init__(self, language: str):
        super().__init__(
            f"No default compiler is known for language '{language}'. "
            "Please specify a compiler in the <compile> directive"
        )
        self.language = language


class UnknownCompiler(BuildError):
    kind = "unknown_compiler"

    def __init__(self, compiler: str):
        super().__init__(
            f"Compiler '{compiler}' is not valid. "
            "For a list of valid compilers, please see the settings page"
        )
        self.compiler = compiler


class UnknownMode(BuildError):
    kind = "unknown_mode"

    def __init__(self, mode: str):
        super().__init__(
            f"Mode '{mode}' is not valid. "
            "Valid modes are 'run' (run, runner, execute, r) and 'asm' (asm, assembly, a)"
        )
        self.mode = mode


class TransportError(CodeBlockError):
    """The remote service could not be reached or did not answer with JSON."""

    kind = "transport_error"

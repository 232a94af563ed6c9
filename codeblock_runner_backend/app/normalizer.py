import re
from typing import Any, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .builder import Mode
from .errors import TransportError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class OutputLine(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class BuildResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Optional[int] = None
    stdout: List[OutputLine] = []
    stderr: List[OutputLine] = []
    compilationOptions: List[str] = []
    downloads: List[Any] = []
    executableFilename: Optional[str] = None
    timedOut: bool = False


class _CompileResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Optional[int] = None
    okToCache: bool = False
    timedOut: bool = False
    execTime: Optional[Union[str, int, float]] = None
    stdout: List[OutputLine] = []
    stderr: List[OutputLine] = []


class RunResult(_CompileResult):
    didExecute: bool = False
    processExecutionResultTime: Optional[float] = None
    buildResult: Optional[BuildResult] = None


class AsmResult(_CompileResult):
    asm: List[OutputLine] = []
    buildResult: Optional[BuildResult] = None


CompileResponse = Union[RunResult, AsmResult]


class DisplayLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    ordinal: str
    text: str


class NormalizedOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: List[DisplayLine]
    exec_time: Optional[int] = None
    timed_out: bool = False

    @property
    def runtime(self) -> str:
        """Runtime readout shown next to the output, at most six characters."""
        if self.exec_time is None:
            return ""
        return str(self.exec_time)[:6]


def parse_compile_response(payload: Any, mode: Mode) -> CompileResponse:
    model = AsmResult if mode is Mode.asm else RunResult
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise TransportError(f"Unexpected compile response: {e.error_count()} invalid field(s)") from e


def parse_exec_time(value: Optional[Union[str, int, float]]) -> Optional[int]:
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _sections(response: CompileResponse) -> List[List[OutputLine]]:
    build = response.buildResult or BuildResult()
    sections = [build.stdout, build.stderr, response.stdout]
    if isinstance(response, AsmResult):
        sections.append(response.asm)
    sections.append(response.stderr)
    return sections


def iter_display_lines(response: CompileResponse) -> Iterator[DisplayLine]:
    """Yield numbered output lines in display order.

    Order is build stdout, build stderr, program stdout, assembly listing and
    program stderr. Ordinals are zero padded to the width of the last one.
    """
    sections = _sections(response)
    width = len(str(sum(len(section) for section in sections)))
    ordinal = 0
    for section in sections:
        for line in section:
            ordinal += 1
            yield DisplayLine(ordinal=str(ordinal).zfill(width), text=line.text)


def normalize(response: CompileResponse) -> NormalizedOutput:
    return NormalizedOutput(
        lines=list(iter_display_lines(response)),
        exec_time=parse_exec_time(response.execTime),
        timed_out=response.timedOut,
    )

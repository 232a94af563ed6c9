import json
import logging
from enum import Enum
from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .catalog import CatalogResolver
from .directive import DirectiveConfig
from .errors import (
    MissingLanguage,
    NoCompilerAvailable,
    UnknownCompiler,
    UnknownLanguage,
    UnknownMode,
)

logger = logging.getLogger("codeblock_runner.builder")


class Mode(str, Enum):
    run = "run"
    asm = "asm"


MODE_SYNONYMS: Dict[Mode, tuple] = {
    Mode.run: ("run", "runner", "execute", "r"),
    Mode.asm: ("asm", "assembly", "a"),
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class RunExecuteParameters(_Frozen):
    # Run mode never forwards program arguments or stdin
    args: Literal[""] = ""
    stdin: Literal[""] = ""


class AsmExecuteParameters(_Frozen):
    args: List[str] = []
    stdin: List[str] = []


class RunCompilerOptions(_Frozen):
    executorRequest: Literal[True] = True


class AsmCompilerOptions(_Frozen):
    skipAsm: Literal[False] = False
    executorRequest: Literal[False] = False


class RunFilters(_Frozen):
    execute: Literal[True] = True


class AsmFilters(_Frozen):
    binary: bool = False
    commentOnly: bool = True
    demangle: bool = True
    directives: bool = True
    execute: Literal[False] = False
    intel: bool = True
    labels: bool = True
    libraryCode: bool = False
    trim: bool = False


class RunOptions(_Frozen):
    userArguments: str = ""
    executeParameters: RunExecuteParameters = RunExecuteParameters()
    compilerOptions: RunCompilerOptions = RunCompilerOptions()
    filters: RunFilters = RunFilters()
    tools: List[Any] = []
    libraries: List[Any] = []


class AsmOptions(_Frozen):
    userArguments: str = ""
    executeParameters: AsmExecuteParameters = AsmExecuteParameters()
    compilerOptions: AsmCompilerOptions = AsmCompilerOptions()
    filters: AsmFilters = AsmFilters()
    tools: List[Any] = []
    libraries: List[Any] = []


class RunCompileRequest(_Frozen):
    mode: Literal[Mode.run] = Field(default=Mode.run, exclude=True)
    source: str
    compiler: str
    options: RunOptions
    lang: str
    allowStoreCodeDebug: Literal[True] = True


class AsmCompileRequest(_Frozen):
    mode: Literal[Mode.asm] = Field(default=Mode.asm, exclude=True)
    source: str
    compiler: str
    options: AsmOptions
    lang: str
    allowStoreCodeDebug: Literal[True] = True


CompileRequest = Union[RunCompileRequest, AsmCompileRequest]


def _shown(value: Any) -> str:
    """Render a directive value the way it was written in the JSON."""
    return value if isinstance(value, str) else json.dumps(value)


def resolve_mode(raw_mode: Any) -> Mode:
    if not raw_mode:
        return Mode.run
    if isinstance(raw_mode, str):
        for mode, synonyms in MODE_SYNONYMS.items():
            if raw_mode in synonyms:
                return mode
    raise UnknownMode(_shown(raw_mode))


def build_request(
    source: str, config: DirectiveConfig, catalog: CatalogResolver
) -> CompileRequest:
    """Validate ``config`` against the catalog and build the compile request.

    Checks run in a fixed order and the first failure is raised, so no request
    is produced for an invalid directive.
    """
    if not config.language:
        raise MissingLanguage()

    language = None
    if isinstance(config.language, str):
        language = catalog.resolve_language(config.language)
    if language is None:
        if not catalog.ready:
            logger.warning("Catalog not loaded yet, rejecting language %r", config.language)
        raise UnknownLanguage(_shown(config.language))

    compiler = config.compiler or catalog.default_compiler_for(language)
    if not compiler:
        raise NoCompilerAvailable(language)
    if not isinstance(compiler, str) or not catalog.compiler_exists(compiler):
        raise UnknownCompiler(_shown(compiler))

    mode = resolve_mode(config.mode)

    user_arguments = config.commandLine or ""
    tools = list(config.tools or [])
    libraries = list(config.libraries or [])

    if mode is Mode.asm:
        return AsmCompileRequest(
            source=source,
            compiler=compiler,
            lang=language,
            options=AsmOptions(
                userArguments=user_arguments,
                executeParameters=AsmExecuteParameters(
                    args=list(config.args or []),
                    stdin=list(config.stdin or []),
                ),
                tools=tools,
                libraries=libraries,
            ),
        )

    return RunCompileRequest(
        source=source,
        compiler=compiler,
        lang=language,
        options=RunOptions(
            userArguments=user_arguments,
            tools=tools,
            libraries=libraries,
        ),
    )

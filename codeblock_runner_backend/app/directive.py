import json
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import MalformedDirective, NoDirective

DIRECTIVE_PATTERN = re.compile(r"<compile>(.*?)</compile>", re.DOTALL)


class DirectiveConfig(BaseModel):
    """Settings read from a ``<compile>{...}</compile>`` directive.

    Fields left out (or given as ``null``) stay ``None``; defaults are filled
    in when the compile request is built. ``language``, ``compiler`` and
    ``mode`` keep whatever JSON value was given so the builder can name it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    language: Optional[Any] = None
    compiler: Optional[Any] = None
    mode: Optional[Any] = None
    commandLine: Optional[str] = None
    args: Optional[List[str]] = None
    stdin: Optional[List[str]] = None
    tools: Optional[List[Any]] = None
    libraries: Optional[List[Any]] = None


class ExtractedBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    raw_config: str


def extract(raw_block_text: str) -> ExtractedBlock:
    """Split a code block into its program source and raw directive payload.

    Only the first directive is honoured; everything after its closing tag
    (minus one line break) is program source, even if it contains further
    ``<compile>`` tags.
    """
    match = DIRECTIVE_PATTERN.search(raw_block_text)
    if match is None:
        raise NoDirective()

    source = raw_block_text[match.end():]
    if source.startswith("\r\n"):
        source = source[2:]
    elif source.startswith("\n"):
        source = source[1:]
    return ExtractedBlock(source=source, raw_config=match.group(1))


def parse_config(raw_config: str) -> DirectiveConfig:
    try:
        data = json.loads(raw_config)
    except json.JSONDecodeError as e:
        raise MalformedDirective(e.msg) from e
    if not isinstance(data, dict):
        raise MalformedDirective("expected a JSON object")
    try:
        return DirectiveConfig.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MalformedDirective(f"invalid field(s) {fields}") from e

"""Turns a raw code block into display lines.

``prepare_block`` does all local work (directive parsing, validation and
request building) and never touches the network. ``run_block`` sends the
prepared request and normalizes the reply. ``inspect_blocks`` is the single
place where per-block failures become notices, so one bad block never stops
its siblings.
"""

import logging
import time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .builder import CompileRequest, build_request
from .catalog import CatalogResolver
from .directive import extract, parse_config
from .errors import CodeBlockError, NoDirective
from .normalizer import NormalizedOutput, normalize, parse_compile_response
from .remote_client import CompilerExplorerClient
from .utils.logging_middleware import COMPILE_COUNT, COMPILE_DURATION, PIPELINE_ERRORS

logger = logging.getLogger("codeblock_runner.pipeline")


class PreparedBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    request: CompileRequest


class BlockStatus(BaseModel):
    index: int
    runnable: bool
    notice: Optional[str] = None
    request: Optional[CompileRequest] = None


def prepare_block(raw_block_text: str, catalog: CatalogResolver) -> PreparedBlock:
    extracted = extract(raw_block_text)
    directive = parse_config(extracted.raw_config)
    request = build_request(extracted.source, directive, catalog)
    return PreparedBlock(source=extracted.source, request=request)


async def run_prepared(prepared: PreparedBlock, client: CompilerExplorerClient) -> NormalizedOutput:
    request = prepared.request
    logger.info(
        "Compiling with %s (%s, %s mode)", request.compiler, request.lang, request.mode.value,
        extra={"mode": request.mode.value, "compiler": request.compiler},
    )
    start = time.perf_counter()
    try:
        payload = await client.compile(request)
        response = parse_compile_response(payload, request.mode)
    except CodeBlockError:
        COMPILE_COUNT.labels(mode=request.mode.value, result="error").inc()
        raise
    finally:
        COMPILE_DURATION.observe(time.perf_counter() - start)

    COMPILE_COUNT.labels(mode=request.mode.value, result="success").inc()
    return normalize(response)


async def run_block(
    raw_block_text: str, catalog: CatalogResolver, client: CompilerExplorerClient
) -> NormalizedOutput:
    prepared = prepare_block(raw_block_text, catalog)
    return await run_prepared(prepared, client)


def record_failure(error: CodeBlockError, index: int | None = None) -> None:
    PIPELINE_ERRORS.labels(kind=error.kind).inc()
    if isinstance(error, NoDirective):
        logger.debug("Block %s has no directive, skipping", index, extra={"block": index})
    else:
        logger.warning(
            "Block %s rejected (%s): %s", index, error.kind, error.notice,
            extra={"block": index, "kind": error.kind},
        )


def inspect_blocks(blocks: List[str], catalog: CatalogResolver) -> List[BlockStatus]:
    """Decide for each block whether it can be run, without any network calls."""
    statuses = []
    for index, block in enumerate(blocks):
        try:
            prepared = prepare_block(block, catalog)
        except NoDirective as e:
            record_failure(e, index)
            statuses.append(BlockStatus(index=index, runnable=False))
        except CodeBlockError as e:
            record_failure(e, index)
            statuses.append(BlockStatus(index=index, runnable=False, notice=e.notice))
        else:
            statuses.append(BlockStatus(index=index, runnable=True, request=prepared.request))
    return statuses

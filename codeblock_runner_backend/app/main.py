"""HTTP surface used by the document viewer.

The viewer posts the text of its code blocks; blocks carrying a
``<compile>{...}</compile>`` directive are compiled (and optionally run) on
Compiler Explorer and the output comes back as numbered lines.
Run with ``uvicorn codeblock_runner_backend.app.main:app``.
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from . import config
from .catalog import CatalogResolver, CompilerDescriptor, LanguageDescriptor, load_catalog
from .errors import CodeBlockError, NoDirective, TransportError
from .normalizer import DisplayLine
from .pipeline import BlockStatus, inspect_blocks, prepare_block, record_failure, run_prepared
from .remote_client import CompilerExplorerClient
from .utils.logging_middleware import LoggingMiddleware, logger, metrics_app


class InspectRequest(BaseModel):
    blocks: List[str]


class RunRequest(BaseModel):
    block: str


class RunResponse(BaseModel):
    mode: str
    lines: List[DisplayLine]
    execTime: Optional[int] = None
    runtime: str = ""
    timedOut: bool = False


app = FastAPI()
app.add_middleware(LoggingMiddleware)
app.mount("/metrics", metrics_app)
app.state.catalog = CatalogResolver.not_ready()
app.state.client = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    logger.info(f"Loading compiler catalog from {config.COMPILER_EXPLORER_URL}")
    if app.state.client is None:
        app.state.client = CompilerExplorerClient()
    app.state.catalog = await load_catalog(app.state.client)
    if not app.state.catalog.ready:
        logger.error("Compiler catalog unavailable, code blocks will not be runnable")


@app.on_event("shutdown")
async def shutdown() -> None:
    if app.state.client is not None:
        await app.state.client.close()


def _ready_catalog() -> CatalogResolver:
    catalog: CatalogResolver = app.state.catalog
    if not catalog.ready:
        raise HTTPException(status_code=503, detail="Compiler catalog is not loaded")
    return catalog


@app.get("/health")
async def health():
    catalog: CatalogResolver = app.state.catalog
    return {
        "catalogReady": catalog.ready,
        "languages": len(catalog.languages),
        "compilers": len(catalog.compilers),
    }


@app.get("/languages", response_model=List[LanguageDescriptor])
async def list_languages():
    return list(_ready_catalog().languages)


@app.get("/compilers", response_model=List[CompilerDescriptor])
async def list_compilers(language: Optional[str] = None):
    catalog = _ready_catalog()
    if language is None:
        return list(catalog.compilers)
    language_id = catalog.resolve_language(language)
    if language_id is None:
        raise HTTPException(status_code=404, detail=f"Language '{language}' is not valid")
    return catalog.compilers_for(language_id)


@app.post("/blocks/inspect", response_model=List[BlockStatus])
async def inspect(req: InspectRequest):
    return inspect_blocks(req.blocks, app.state.catalog)


@app.post("/blocks/run", response_model=RunResponse)
async def run(req: RunRequest, request: Request):
    try:
        prepared = prepare_block(req.block, request.app.state.catalog)
    except NoDirective as e:
        record_failure(e)
        raise HTTPException(status_code=422, detail="Code block is not runnable")
    except CodeBlockError as e:
        record_failure(e)
        raise HTTPException(status_code=400, detail=e.notice)

    try:
        output = await run_prepared(prepared, request.app.state.client)
    except TransportError as e:
        record_failure(e)
        raise HTTPException(status_code=502, detail=e.notice)

    return RunResponse(
        mode=prepared.request.mode.value,
        lines=output.lines,
        execTime=output.exec_time,
        runtime=output.runtime,
        timedOut=output.timed_out,
    )

import logging
from typing import Any, List, Optional

import httpx

from . import config
from .builder import CompileRequest
from .errors import TransportError

logger = logging.getLogger("codeblock_runner.remote")

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class CompilerExplorerClient:
    """JSON-over-HTTP client for the Compiler Explorer REST API.

    One attempt per call; failures surface as :class:`TransportError` and the
    caller decides what to do with them.
    """

    def __init__(
        self,
        base_url: str = config.COMPILER_EXPLORER_URL,
        timeout: float = config.COMPILER_EXPLORER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.http = httpx.AsyncClient(
            base_url=base_url,
            headers=JSON_HEADERS,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "CompilerExplorerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def request(self, method: str, path: str, body: Any = None) -> Any:
        method = method.upper()
        try:
            if method == "GET":
                response = await self.http.request(method, path)
            else:
                response = await self.http.request(method, path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("%s %s failed with status %s", method, path, e.response.status_code)
            raise TransportError(
                f"Compiler service answered {e.response.status_code} for {path}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %r", method, path, e)
            raise TransportError(f"Could not reach the compiler service: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("%s %s returned a non-JSON body", method, path)
            raise TransportError(f"Compiler service returned a non-JSON reply for {path}") from e

    async def get_languages(self) -> List[dict]:
        return await self.request("GET", "/api/languages")

    async def get_compilers(self, language_id: Optional[str] = None) -> List[dict]:
        if language_id:
            return await self.request("GET", f"/api/compilers/{language_id}")
        return await self.request("GET", "/api/compilers")

    async def compile(self, compile_request: CompileRequest) -> Any:
        return await self.request(
            "POST",
            f"/api/compiler/{compile_request.compiler}/compile",
            compile_request.model_dump(),
        )

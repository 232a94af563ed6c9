import json

import httpx
import pytest

from codeblock_runner_backend.app.catalog import (
    CatalogResolver,
    CompilerDescriptor,
    LanguageDescriptor,
)
from codeblock_runner_backend.app.remote_client import CompilerExplorerClient

LANGUAGES = [
    {"id": "c++", "name": "C++", "monaco": "cppp", "extensions": [".cpp", ".cc"]},
    {"id": "c", "name": "C", "monaco": "nc", "extensions": [".c"]},
    {"id": "rust", "name": "Rust", "monaco": "rust", "extensions": [".rs"]},
    {"id": "python", "name": "Python", "monaco": "python", "extensions": [".py"]},
    {"id": "haskell", "name": "Haskell", "monaco": "haskell", "extensions": [".hs"]},
    {"id": "go", "name": "Go", "monaco": "go", "extensions": [".go"]},
]

COMPILERS = [
    {"id": "g122", "name": "x86-64 gcc 12.2", "lang": "c++", "compilerType": "",
     "instructionSet": "amd64", "semver": "12.2"},
    {"id": "cg122", "name": "x86-64 gcc 12.2", "lang": "c", "compilerType": "",
     "instructionSet": "amd64", "semver": "12.2"},
    {"id": "r1650", "name": "rustc 1.65.0", "lang": "rust", "compilerType": "",
     "instructionSet": "amd64", "semver": "1.65.0"},
    {"id": "python311", "name": "Python 3.11", "lang": "python", "compilerType": "python",
     "instructionSet": "python", "semver": "3.11"},
    {"id": "gl1190", "name": "go 1.19", "lang": "go", "compilerType": "golang",
     "instructionSet": "amd64", "semver": "1.19"},
]


@pytest.fixture
def catalog():
    return CatalogResolver(
        [LanguageDescriptor.model_validate(item) for item in LANGUAGES],
        [CompilerDescriptor.model_validate(item) for item in COMPILERS],
    )


class FakeCompilerExplorer:
    """Stands in for the remote service and records every request."""

    def __init__(self, compile_reply=None):
        self.requests: list[httpx.Request] = []
        self.compile_reply = compile_reply if compile_reply is not None else {
            "code": 0,
            "execTime": "42",
            "timedOut": False,
            "stdout": [{"text": "hello"}],
            "stderr": [],
            "buildResult": {"code": 0, "stdout": [], "stderr": []},
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/languages":
            return httpx.Response(200, json=LANGUAGES)
        if path == "/api/compilers":
            return httpx.Response(200, json=COMPILERS)
        if path.startswith("/api/compilers/"):
            lang = path[len("/api/compilers/"):]
            return httpx.Response(200, json=[c for c in COMPILERS if c["lang"] == lang])
        if path.startswith("/api/compiler/") and path.endswith("/compile"):
            return httpx.Response(200, json=self.compile_reply)
        return httpx.Response(404, text="Not found")

    @property
    def compile_bodies(self) -> list[dict]:
        return [
            json.loads(r.content) for r in self.requests if r.url.path.endswith("/compile")
        ]

    def client(self) -> CompilerExplorerClient:
        return CompilerExplorerClient(
            base_url="https://godbolt.test",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def remote():
    return FakeCompilerExplorer()


@pytest.fixture
def fake_remote_factory():
    """Build a fake remote with a custom compile reply."""
    return FakeCompilerExplorer

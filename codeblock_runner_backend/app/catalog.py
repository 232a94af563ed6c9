import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .errors import TransportError

logger = logging.getLogger("codeblock_runner.catalog")


class LanguageDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    name: str = ""
    monaco: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("monaco", "monacoLanguageId")
    )
    extensions: Tuple[str, ...] = ()


class CompilerDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    lang: str = ""
    compilerType: Optional[str] = None
    instructionSet: Optional[str] = None
    semver: Optional[str] = None


# Checked top to bottom; the first entry whose aliases contain the requested
# name wins, so an alias listed under two languages resolves to the upper one.
LANGUAGE_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("c++", ("cpp", "cplusplus", "cc")),
    ("c", ("c",)),
    ("cuda", ("cuda", "cu")),
    ("csharp", ("csharp", "cs")),
    ("rust", ("rust", "rs")),
    ("assembly", ("assembly", "asm")),
    ("python", ("python", "py")),
    ("haskell", ("hs",)),
)

DEFAULT_COMPILERS: Dict[str, str] = {
    "c++": "g122",
    "c": "g122",
    "cuda": "nvcc117",
    "csharp": "dotnet700csharp",
    "rust": "r1650",
    "assembly": "llvmas700",
    "python": "python311",
    "haskell": "ghc922",
}


class CatalogResolver:
    """Answers whether a language or compiler identifier is usable.

    A resolver built without catalogs is *not ready*: every lookup misses, so
    nothing can be compiled until both remote catalogs have been loaded.
    """

    def __init__(
        self,
        languages: Optional[List[LanguageDescriptor]] = None,
        compilers: Optional[List[CompilerDescriptor]] = None,
        aliases: Tuple[Tuple[str, Tuple[str, ...]], ...] = LANGUAGE_ALIASES,
        defaults: Optional[Dict[str, str]] = None,
    ):
        self._ready = languages is not None and compilers is not None
        self._languages: Tuple[LanguageDescriptor, ...] = tuple(languages or ())
        self._compilers: Tuple[CompilerDescriptor, ...] = tuple(compilers or ())
        self._language_ids = frozenset(lang.id for lang in self._languages)
        self._compiler_ids = frozenset(comp.id for comp in self._compilers)
        self._aliases = aliases
        self._defaults = dict(DEFAULT_COMPILERS if defaults is None else defaults)

    @classmethod
    def not_ready(cls) -> "CatalogResolver":
        return cls()

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def languages(self) -> Tuple[LanguageDescriptor, ...]:
        return self._languages

    @property
    def compilers(self) -> Tuple[CompilerDescriptor, ...]:
        return self._compilers

    def compilers_for(self, language_id: str) -> List[CompilerDescriptor]:
        return [comp for comp in self._compilers if comp.lang == language_id]

    def resolve_language(self, raw: str) -> Optional[str]:
        """Return the canonical language id for ``raw`` or ``None``."""
        if not self._ready:
            return None
        if raw in self._language_ids:
            return raw
        for language, aliases in self._aliases:
            if raw in aliases:
                # An alias only counts if its target is offered by the service
                return language if language in self._language_ids else None
        return None

    def compiler_exists(self, compiler_id: str) -> bool:
        return self._ready and compiler_id in self._compiler_ids

    def default_compiler_for(self, language_id: str) -> Optional[str]:
        if not self._ready:
            return None
        return self._defaults.get(language_id)


async def load_catalog(client) -> CatalogResolver:
    """Fetch both remote catalogs and build a resolver.

    Any failure yields a not-ready resolver instead of raising.
    """
    results = await asyncio.gather(
        client.get_languages(), client.get_compilers(), return_exceptions=True
    )
    try:
        for result in results:
            if isinstance(result, BaseException):
                raise result
        raw_languages, raw_compilers = results
        languages = [LanguageDescriptor.model_validate(item) for item in raw_languages]
        compilers = [CompilerDescriptor.model_validate(item) for item in raw_compilers]
    except TransportError as e:
        logger.error("Failed to fetch the compiler catalog: %s", e)
        return CatalogResolver.not_ready()
    except (ValidationError, TypeError) as e:
        logger.error("Compiler catalog has an unexpected shape: %s", e)
        return CatalogResolver.not_ready()

    logger.info(
        "Loaded catalog with %d languages and %d compilers", len(languages), len(compilers)
    )
    return CatalogResolver(languages, compilers)

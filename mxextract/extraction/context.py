"""
Per-run extraction state: the load capability, settings and the warnings
recorded while isolating failing units.
"""

from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    TypeVar,
)

from mxextract.config import Settings, get_settings
from mxextract.resolver import Loader, describe_handle, load_handle
from mxextract.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ExtractionWarning:
    """A unit or field that could not be extracted."""

    unit_kind: str
    unit_name: str
    message: str
    module: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class UnitResults(Generic[T]):
    """Outcome of extracting a sequence of units."""

    successes: List[T] = field(default_factory=list)
    warnings: List[ExtractionWarning] = field(default_factory=list)


class ExtractionContext:
    """
    Shared state of one extraction run.

    Args:
        loader: Coroutine materializing a handle (defaults to ``load_handle``)
        settings: Settings to use (defaults to the global settings)
    """

    def __init__(
        self,
        loader: Optional[Loader] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.loader = loader or load_handle
        self.settings = settings or get_settings()
        self.warnings: List[ExtractionWarning] = []
        self.module_name: Optional[str] = None

    async def load(self, handle: Any) -> Any:
        return await self.loader(handle)

    @contextmanager
    def scope(self, module_name: str) -> Iterator["ExtractionContext"]:
        """Attribute warnings and log records to a module while inside."""
        previous = self.module_name
        self.module_name = module_name
        try:
            with LogContext(module_name=module_name):
                yield self
        finally:
            self.module_name = previous

    def warn(self, unit_kind: str, unit_name: str, message: str) -> ExtractionWarning:
        """Record and log a warning for a unit."""
        warning = ExtractionWarning(
            unit_kind=unit_kind,
            unit_name=unit_name,
            message=message,
            module=self.module_name,
        )
        self.warnings.append(warning)
        logger.warning(
            f"Error extracting {unit_kind} '{unit_name}': {message}",
            extra={"unit_kind": unit_kind, "unit": unit_name},
        )
        return warning

    def guard(
        self,
        unit_kind: str,
        unit_name: str,
        field_name: str,
        compute: Callable[[], T],
        default: T,
    ) -> T:
        """Compute one field of a unit, falling back to ``default`` on failure."""
        try:
            return compute()
        except Exception as e:
            self.warn(unit_kind, unit_name, f"{field_name}: {e}")
            return default

    async def guard_async(
        self,
        unit_kind: str,
        unit_name: str,
        field_name: str,
        compute: Callable[[], Awaitable[T]],
        default: T,
    ) -> T:
        """Async variant of ``guard``."""
        try:
            return await compute()
        except Exception as e:
            self.warn(unit_kind, unit_name, f"{field_name}: {e}")
            return default

    async def collect_units(
        self,
        handles: Optional[Iterable[Any]],
        extract: Callable[[Any], Awaitable[T]],
        unit_kind: str,
    ) -> UnitResults[T]:
        """
        Extract every handle in order, skipping the ones that fail.

        Each failure becomes one warning; the remaining handles are still
        extracted and successes keep the input order.
        """
        results: UnitResults[T] = UnitResults()
        for handle in handles or []:
            try:
                results.successes.append(await extract(handle))
            except Exception as e:
                results.warnings.append(self.warn(unit_kind, describe_handle(handle), str(e)))
        return results

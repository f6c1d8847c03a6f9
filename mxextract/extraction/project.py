"""
Top-level orchestration: one linear pass from a model to a ``Document``.
"""

from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from mxextract.config import Settings
from mxextract.extraction.context import ExtractionContext, ExtractionWarning
from mxextract.extraction.flows import FlowExtractor
from mxextract.extraction.modules import ModuleExtractor
from mxextract.extraction.nodes import NodeExtractor
from mxextract.models import Document, ProjectSecurity
from mxextract.resolver import Loader, enum_text, flag_of, text_of
from mxextract.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProjectExtractor:
    """
    Extract a whole model into a ``Document``.

    Args:
        loader: Coroutine materializing handles (defaults to ``load_handle``)
        settings: Settings to use (defaults to the global settings)
        clock: Source of the ``extractedAt`` timestamp
    """

    def __init__(
        self,
        loader: Optional[Loader] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.context = ExtractionContext(loader=loader, settings=settings)
        self.nodes = NodeExtractor(self.context)
        self.flows = FlowExtractor(self.context)
        self.modules = ModuleExtractor(self.context, self.nodes, self.flows)
        self.clock = clock or utc_now

    @property
    def warnings(self) -> List[ExtractionWarning]:
        return self.context.warnings

    @log_performance
    async def extract_project(self, model: Any, project_name: Optional[str] = None) -> Document:
        """
        Extract project security and every module, in model order.

        Args:
            model: Model exposing ``all_project_securities`` and ``all_modules``
            project_name: Name recorded in the document (defaults to settings,
                then the model's own name)

        Returns:
            The extracted document
        """
        settings = self.context.settings
        project_security = await self.context.guard_async(
            "projectSecurity",
            "project",
            "projectSecurity",
            lambda: self.extract_project_security(model),
            ProjectSecurity(),
        )

        excluded = set(settings.excluded_modules)
        module_handles = [
            handle
            for handle in model.all_modules()
            if text_of(getattr(handle, "name", None)) not in excluded
        ]
        modules = await self.context.collect_units(
            module_handles, self.modules.extract_module, "module"
        )

        name = (
            project_name
            or settings.project_name
            or text_of(getattr(model, "project_name", None))
        )
        logger.info(
            f"Extracted {len(modules.successes)} modules with {len(self.warnings)} warnings",
            extra={"project_name": name},
        )

        return Document(
            project_name=name,
            schema_version=settings.schema_version,
            extracted_at=self.clock(),
            project_security=project_security,
            modules=modules.successes,
        )

    async def extract_project_security(self, model: Any) -> ProjectSecurity:
        """Extract the first project security settings, or the ``none`` fallback."""
        securities = list(model.all_project_securities() or [])
        if not securities or securities[0] is None:
            return ProjectSecurity()

        security = await self.context.load(securities[0])
        return ProjectSecurity(
            security_level=enum_text(getattr(security, "security_level", None), "none"),
            check_security=flag_of(security, "check_security", False),
            user_roles=[
                self.nodes.extract_user_role(role)
                for role in (getattr(security, "user_roles", None) or [])
            ],
        )


async def extract_project(
    model: Any,
    project_name: Optional[str] = None,
    loader: Optional[Loader] = None,
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
) -> Document:
    """Extract a model with a fresh ``ProjectExtractor``."""
    extractor = ProjectExtractor(loader=loader, settings=settings, clock=clock)
    return await extractor.extract_project(model, project_name=project_name)

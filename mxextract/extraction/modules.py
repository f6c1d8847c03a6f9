"""
Module-level aggregation.

Each module yields its domain model, its flow documents and its security
settings. The three sub-extractions and every unit inside them fail
independently.
"""

from functools import partial
from typing import Any, Iterator, List, Optional

from mxextract.classification import structure_type_of
from mxextract.extraction.context import ExtractionContext
from mxextract.extraction.flows import FlowExtractor
from mxextract.extraction.nodes import NodeExtractor
from mxextract.models import DomainModel, Flow, Module, ModuleSecurity
from mxextract.resolver import text_of
from mxextract.utils.logging import get_logger

logger = get_logger(__name__)


def iter_documents(container: Any) -> Iterator[Any]:
    """Yield the documents of a module or folder, descending into sub-folders."""
    for document in getattr(container, "documents", None) or []:
        yield document
    for folder in getattr(container, "folders", None) or []:
        yield from iter_documents(folder)


class ModuleExtractor:
    """Extract one module into a ``Module`` record."""

    def __init__(
        self,
        context: ExtractionContext,
        nodes: NodeExtractor,
        flows: FlowExtractor,
    ) -> None:
        self.context = context
        self.nodes = nodes
        self.flows = flows

    async def extract_module(self, handle: Any) -> Module:
        module = await self.context.load(handle)
        name = text_of(getattr(module, "name", None))

        with self.context.scope(name):
            logger.info(f"Processing module: {name}")
            guard = partial(self.context.guard_async, "module", name)

            domain_model = await guard(
                "domainModel", lambda: self.extract_domain_model(module), DomainModel()
            )
            microflows = await guard("microflows", lambda: self.extract_flows(module), [])
            security = await guard("security", lambda: self.extract_security(module), None)

        return Module(
            name=name,
            domain_model=domain_model,
            microflows=microflows,
            security=security,
        )

    async def extract_domain_model(self, module: Any) -> DomainModel:
        handle = getattr(module, "domain_model", None)
        if handle is None:
            return DomainModel()
        domain_model = await self.context.load(handle)

        entities = await self.context.collect_units(
            getattr(domain_model, "entities", None), self.nodes.extract_entity, "entity"
        )
        associations = await self.context.collect_units(
            list(getattr(domain_model, "associations", None) or [])
            + list(getattr(domain_model, "cross_associations", None) or []),
            self.nodes.extract_association,
            "association",
        )
        return DomainModel(entities=entities.successes, associations=associations.successes)

    async def extract_flows(self, module: Any) -> List[Flow]:
        document_types = self.context.settings.flow_document_types
        documents = [
            document
            for document in iter_documents(module)
            if structure_type_of(document) in document_types
        ]
        results = await self.context.collect_units(documents, self.flows.extract_flow, "microflow")
        return results.successes

    async def extract_security(self, module: Any) -> Optional[ModuleSecurity]:
        return await self.nodes.extract_module_security(getattr(module, "module_security", None))

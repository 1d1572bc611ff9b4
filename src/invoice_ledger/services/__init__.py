from invoice_ledger.services.drafting import DocumentDraftingService
from invoice_ledger.services.ingestion import load_documents, load_documents_file
from invoice_ledger.services.lineage import (
    DocumentLineage,
    DocumentLineageResolver,
    LineageConfig,
    resolve_lineage,
    separate_documents,
    squash_documents,
)
from invoice_ledger.services.numbering import (
    DateBasedStrategy,
    IncrementStrategy,
    NumberStrategy,
    build_number_strategy,
)
from invoice_ledger.services.summary import (
    SummaryConfig,
    SummaryEngine,
    summarize,
    summarize_document,
    total,
)

__all__ = [
    "DateBasedStrategy",
    "DocumentDraftingService",
    "DocumentLineage",
    "DocumentLineageResolver",
    "IncrementStrategy",
    "LineageConfig",
    "NumberStrategy",
    "SummaryConfig",
    "SummaryEngine",
    "build_number_strategy",
    "load_documents",
    "load_documents_file",
    "resolve_lineage",
    "separate_documents",
    "squash_documents",
    "summarize",
    "summarize_document",
    "total",
]

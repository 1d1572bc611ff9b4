"""Document lineage resolver.

Quotes, invoices and receipts form lineage groups: an invoice may come from a
quote and a receipt always belongs to an invoice. The loaded collection is
flat and may contain the same document several times, on its own and embedded
in the documents that reference it.

The resolver runs once per loaded collection and produces:
- the deduplicated documents,
- a stack per document id: every member of its lineage group (itself
  included), ordered by relevant date and then by number,
- a squash operation that keeps only the most progressed document of each
  lineage group in a list.
"""

from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from invoice_ledger.config import Settings
from invoice_ledger.domain.documents import (
    Document,
    Invoice,
    Quote,
    Receipt,
    relevant_date,
)
from invoice_ledger.domain.value_objects import ReceiptDateSource
from invoice_ledger.exceptions import (
    DocumentNotFoundError,
    LineageIntegrityError,
    UnhandledVariantError,
)
from invoice_ledger.logging_config import get_logger

logger = get_logger(__name__)

_DOCUMENT_KINDS = ["quote", "invoice", "receipt"]


@dataclass(frozen=True)
class LineageConfig:
    """Explicit configuration for the lineage resolver."""

    receipt_date_source: ReceiptDateSource = ReceiptDateSource.RECEIPT_DATE

    @classmethod
    def from_settings(cls, settings: Settings) -> "LineageConfig":
        return cls(receipt_date_source=settings.receipt_date_source)


def _references(document: Document) -> list[Document]:
    match document:
        case Quote():
            return []
        case Invoice():
            return [document.quote] if document.quote is not None else []
        case Receipt():
            return [document.invoice]
        case _:
            raise UnhandledVariantError(type(document).__name__, _DOCUMENT_KINDS)


def _walk(documents: Iterable[Document]) -> Iterator[Document]:
    for document in documents:
        yield document
        yield from _walk(_references(document))


def separate_documents(documents: Iterable[Document]) -> list[Document]:
    """Flatten embedded references and drop duplicates.

    Duplicates are detected first by object identity, then by document id.
    The first instance seen is kept and the input order is preserved.
    """
    seen_objects: set[int] = set()
    seen_ids: set[str] = set()
    result: list[Document] = []

    for document in _walk(documents):
        if id(document) in seen_objects:
            continue
        seen_objects.add(id(document))

        if document.id in seen_ids:
            continue
        seen_ids.add(document.id)
        result.append(document)

    return result


def squash_documents(documents: Iterable[Document]) -> list[Document]:
    """Keep only the most progressed document of each lineage group.

    A quote is dropped when an invoice in the list references it; an invoice
    (and its quote) is dropped when a receipt in the list references it.
    """
    documents = list(documents)
    to_remove: set[str] = set()

    for document in documents:
        match document:
            case Quote():
                pass
            case Invoice():
                if document.quote is not None:
                    to_remove.add(document.quote.id)
            case Receipt():
                to_remove.add(document.invoice.id)
                if document.invoice.quote is not None:
                    to_remove.add(document.invoice.quote.id)
            case _:
                raise UnhandledVariantError(type(document).__name__, _DOCUMENT_KINDS)

    return [document for document in documents if document.id not in to_remove]


@dataclass(frozen=True)
class DocumentLineage:
    """Result of resolving a document collection."""

    documents: tuple[Document, ...]
    stacks: Mapping[str, tuple[str, ...]]
    _index: Mapping[str, Document] = field(repr=False, compare=False)

    def get(self, document_id: str) -> Document:
        try:
            return self._index[document_id]
        except KeyError:
            raise DocumentNotFoundError(document_id) from None

    def stack(self, document_id: str) -> tuple[str, ...]:
        try:
            return self.stacks[document_id]
        except KeyError:
            raise DocumentNotFoundError(document_id) from None

    def stack_documents(self, document_id: str) -> tuple[Document, ...]:
        return tuple(self._index[member] for member in self.stack(document_id))

    def squash(self, documents: Iterable[Document] | None = None) -> list[Document]:
        """Squash ``documents``, or every resolved document when omitted."""
        return squash_documents(self.documents if documents is None else documents)


class DocumentLineageResolver:
    def __init__(self, config: LineageConfig | None = None) -> None:
        self._config = config or LineageConfig()

    @property
    def config(self) -> LineageConfig:
        return self._config

    def resolve(self, documents: Iterable[Document]) -> DocumentLineage:
        documents = list(documents)
        canonical = separate_documents(documents)
        index = {document.id: document for document in canonical}

        self._check_single_successor(canonical)

        stacks: dict[str, list[str]] = {document.id: [document.id] for document in canonical}

        def link(a: str, b: str) -> None:
            if b not in stacks[a]:
                stacks[a].append(b)
            if a not in stacks[b]:
                stacks[b].append(a)

        for document in canonical:
            match document:
                case Quote():
                    pass
                case Invoice():
                    if document.quote is not None:
                        link(document.id, document.quote.id)
                case Receipt():
                    link(document.id, document.invoice.id)
                    if document.invoice.quote is not None:
                        link(document.id, document.invoice.quote.id)
                case _:
                    raise UnhandledVariantError(type(document).__name__, _DOCUMENT_KINDS)

        ordered = {
            document_id: tuple(sorted(members, key=lambda member: self._sort_key(index[member])))
            for document_id, members in stacks.items()
        }

        logger.info(
            "lineage_resolved",
            input_count=len(documents),
            document_count=len(canonical),
            receipt_date_source=self._config.receipt_date_source,
        )

        return DocumentLineage(
            documents=tuple(canonical),
            stacks=MappingProxyType(ordered),
            _index=MappingProxyType(index),
        )

    def _sort_key(self, document: Document) -> tuple:
        return (relevant_date(document, self._config.receipt_date_source), document.number)

    def _check_single_successor(self, documents: list[Document]) -> None:
        referenced_by: dict[str, list[str]] = defaultdict(list)
        for document in documents:
            match document:
                case Invoice() if document.quote is not None:
                    referenced_by[document.quote.id].append(document.id)
                case Receipt():
                    referenced_by[document.invoice.id].append(document.id)

        for document_id, referrers in referenced_by.items():
            if len(referrers) > 1:
                raise LineageIntegrityError(document_id, referrers)


def resolve_lineage(
    documents: Iterable[Document], config: LineageConfig | None = None
) -> DocumentLineage:
    return DocumentLineageResolver(config).resolve(documents)


__all__ = [
    "DocumentLineage",
    "DocumentLineageResolver",
    "LineageConfig",
    "resolve_lineage",
    "separate_documents",
    "squash_documents",
]

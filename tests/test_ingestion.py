import json
from datetime import date
from decimal import Decimal

import pytest

from invoice_ledger.domain.discounts import FixedDiscount, PercentageDiscount
from invoice_ledger.domain.documents import Invoice, Quote, Receipt
from invoice_ledger.domain.value_objects import InvoiceStatus, QuantityType, QuoteStatus
from invoice_ledger.exceptions import (
    DanglingReferenceError,
    IngestionError,
    MixedTaxRateDiscountError,
)
from invoice_ledger.services.ingestion import load_documents, load_documents_file
from invoice_ledger.services.lineage import resolve_lineage


def quote_record(**overrides) -> dict:
    record = {
        "type": "quote",
        "id": "q-1",
        "number": "Q-1",
        "client_id": "client-1",
        "account_id": "account-1",
        "quote_date": "2023-01-10",
        "quote_expiration_date": "2023-02-09",
    }
    record.update(overrides)
    return record


class TestLoadDocuments:
    def test_builds_documents_in_record_order(self, documents_payload):
        documents = load_documents(documents_payload)

        assert [type(document) for document in documents] == [Receipt, Invoice, Quote, Invoice]
        assert [document.id for document in documents] == ["r-1", "i-1", "q-1", "i-2"]

    def test_references_are_resolved(self, documents_payload):
        receipt, invoice, quote, _ = load_documents(documents_payload)

        assert receipt.invoice is invoice
        assert invoice.quote is quote
        assert quote.status == QuoteStatus.ACCEPTED
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.paid_at == date(2023, 2, 1)

    def test_receipt_defaults_to_invoice_items_and_discounts(self, documents_payload):
        receipt, invoice, _, _ = load_documents(documents_payload)

        assert receipt.items == invoice.items
        assert receipt.discounts == (PercentageDiscount(Decimal("0.10")),)

    def test_receipt_with_own_items(self, documents_payload):
        documents_payload["documents"][0]["items"] = [
            {"description": "Settled amount", "unit_price": 21780}
        ]
        documents_payload["documents"][0]["discounts"] = []

        receipt = load_documents(documents_payload)[0]

        assert receipt.items[0].unit_price == 21780
        assert receipt.discounts == ()

    def test_accepts_plain_list(self, documents_payload):
        documents = load_documents(documents_payload["documents"])

        assert len(documents) == 4

    def test_discount_records(self):
        record = quote_record(
            items=[
                {
                    "description": "Licenses",
                    "unit_price": 1200,
                    "quantity": "10",
                    "discounts": [{"type": "fixed", "value": 100}],
                }
            ],
            discounts=[
                {"type": "fixed", "value": 50, "quantity": "2", "reason": "Bundle"},
                {"type": "percentage", "value": "0.05"},
            ],
        )

        (quote,) = load_documents([record])

        assert quote.items[0].discounts == (FixedDiscount(100),)
        fixed, percentage = quote.discounts
        assert fixed.quantity_type == QuantityType.EXPLICIT
        assert fixed.quantity == Decimal("2")
        assert fixed.reason == "Bundle"
        assert percentage == PercentageDiscount(Decimal("0.05"))

    def test_loaded_documents_resolve(self, documents_payload):
        lineage = resolve_lineage(load_documents(documents_payload))

        assert lineage.stack("q-1") == ("q-1", "i-1", "r-1")
        assert [document.id for document in lineage.squash()] == ["r-1", "i-2"]

    def test_empty_payload(self):
        assert load_documents({"documents": []}) == []


class TestDanglingReferences:
    def test_invoice_with_unknown_quote(self, documents_payload):
        documents_payload["documents"][1]["quote_id"] = "q-404"

        with pytest.raises(DanglingReferenceError) as exc_info:
            load_documents(documents_payload)

        assert exc_info.value.context == {
            "document_id": "i-1",
            "reference_field": "quote_id",
            "missing_id": "q-404",
        }

    def test_receipt_with_unknown_invoice(self, documents_payload):
        documents_payload["documents"][0]["invoice_id"] = "i-404"

        with pytest.raises(DanglingReferenceError, match="i-404"):
            load_documents(documents_payload)

    def test_receipt_cannot_reference_a_quote(self, documents_payload):
        documents_payload["documents"][0]["invoice_id"] = "q-1"

        with pytest.raises(DanglingReferenceError):
            load_documents(documents_payload)


class TestInvalidRecords:
    def test_unknown_type(self):
        with pytest.raises(IngestionError) as exc_info:
            load_documents([quote_record(type="credit-note")])

        assert exc_info.value.context["errors"]

    def test_missing_field_is_reported_with_location(self):
        record = quote_record()
        del record["quote_date"]

        with pytest.raises(IngestionError) as exc_info:
            load_documents([record])

        assert any("quote_date" in error for error in exc_info.value.context["errors"])

    def test_unknown_field_is_rejected(self):
        with pytest.raises(IngestionError):
            load_documents([quote_record(colour="blue")])

    def test_percentage_out_of_range(self):
        record = quote_record(discounts=[{"type": "percentage", "value": "1.5"}])

        with pytest.raises(IngestionError):
            load_documents([record])

    def test_domain_rules_still_apply(self):
        record = quote_record(
            items=[
                {"description": "Books", "unit_price": 2000, "tax_rate": "0.06"},
                {"description": "Design", "unit_price": 5000, "tax_rate": "0.21"},
            ],
            discounts=[{"type": "fixed", "value": 100}],
        )

        with pytest.raises(MixedTaxRateDiscountError):
            load_documents([record])


class TestLoadDocumentsFile:
    def test_reads_json_file(self, tmp_path, documents_payload):
        path = tmp_path / "documents.json"
        path.write_text(json.dumps(documents_payload))

        documents = load_documents_file(path)

        assert len(documents) == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestionError, match="Cannot read"):
            load_documents_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"documents": [')

        with pytest.raises(IngestionError) as exc_info:
            load_documents_file(str(path))

        assert exc_info.value.context["line"] == 1

    def test_file_that_is_not_utf8(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"documents": [\xff\xfe]}')

        with pytest.raises(IngestionError, match="not UTF-8") as exc_info:
            load_documents_file(path)

        assert exc_info.value.context == {"path": str(path), "position": 15}

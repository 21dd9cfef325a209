import asyncio
from dataclasses import dataclass
from typing import Any

import psycopg
from psycopg import errors
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from ingest.consolidation.models import RecordFamily, ValidatedRecord
from ingest.database.connection import get_connection
from ingest.database.models import PersistResult, StoredRecord


@dataclass(frozen=True)
class _FamilyTables:
    records: str
    breakdown: str
    breakdown_fk: str
    attachments: str


_TABLES: dict[RecordFamily, _FamilyTables] = {
    RecordFamily.MAINTENANCE: _FamilyTables(
        records="maintenance_records",
        breakdown="maintenance_financial_breakdown",
        breakdown_fk="maintenance_record_id",
        attachments="maintenance_attachments",
    ),
    RecordFamily.EXPENSE: _FamilyTables(
        records="expenses",
        breakdown="expense_financial_breakdown",
        breakdown_fk="expense_id",
        attachments="expense_attachments",
    ),
}


@dataclass(frozen=True)
class AttachmentInfo:
    file_name: str
    file_url: str
    mime_type: str
    file_size_bytes: int


class RecordRepository:
    """Database operations for validated maintenance and expense records."""

    async def find_by_fingerprint(self, owner_id: str, fingerprint: str) -> list[StoredRecord]:
        """Look the fingerprint up in every record table concurrently."""
        found = await asyncio.gather(
            *(
                self._find_in_family(family, owner_id, fingerprint)
                for family in _TABLES
            )
        )
        return [record for record in found if record is not None]

    async def delete(self, record: StoredRecord) -> None:
        """Delete a stored record; child rows go with it (ON DELETE CASCADE)."""
        table = _TABLES[record.record_family].records
        async with get_connection() as conn:
            await conn.execute(
                f"DELETE FROM {table} WHERE id = %s",  # noqa: S608
                (record.id,),
            )
            await conn.commit()

    async def insert(
        self,
        owner_id: str,
        record: ValidatedRecord,
        attachment: AttachmentInfo,
    ) -> PersistResult:
        """Write a record with its breakdown, parts and attachment in one transaction.

        A concurrent insert of the same (owner, fingerprint) hits the unique
        index; the existing record's id is returned with ``from_cache=True``.
        """
        tables = _TABLES[record.record_family]
        async with get_connection() as conn:
            try:
                record_id = await self._insert_record(conn, tables, owner_id, record)
                await self._insert_breakdown(conn, tables, record_id, record)
                if record.record_family is RecordFamily.MAINTENANCE:
                    await self._insert_parts(conn, record_id, record)
                await self._insert_attachment(conn, tables, record_id, attachment)
                await conn.commit()
            except errors.UniqueViolation:
                await conn.rollback()
                existing = await self._find_in_family(
                    record.record_family, owner_id, record.fingerprint, conn=conn
                )
                if existing is None:
                    raise
                return PersistResult(record_id=existing.id, from_cache=True)
        return PersistResult(record_id=record_id)

    async def _find_in_family(
        self,
        family: RecordFamily,
        owner_id: str,
        fingerprint: str,
        conn: psycopg.AsyncConnection[Any] | None = None,
    ) -> StoredRecord | None:
        if conn is None:
            async with get_connection() as own_conn:
                return await self._find_in_family(family, owner_id, fingerprint, own_conn)

        table = _TABLES[family].records
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                f"""
                SELECT id, owner_id, document_hash, vendor, total, currency, created_at
                FROM {table}
                WHERE owner_id = %s AND document_hash = %s
                """,  # noqa: S608
                (owner_id, fingerprint),
            )
            row = await cur.fetchone()

        if row is None:
            return None

        return StoredRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            record_family=family,
            fingerprint=row["document_hash"],
            vendor_name=row["vendor"],
            total_amount=float(row["total"]) if row["total"] is not None else None,
            currency=row["currency"],
            created_at=row["created_at"],
        )

    async def _insert_record(
        self,
        conn: psycopg.AsyncConnection[Any],
        tables: _FamilyTables,
        owner_id: str,
        record: ValidatedRecord,
    ) -> int:
        columns: dict[str, Any] = {
            "owner_id": owner_id,
            "document_hash": record.fingerprint,
            "vendor": record.vendor_name,
            "total": record.total_amount,
            "currency": record.currency,
            "date": record.invoice_date,
            "invoice_number": record.invoice_number,
            "subtotal": record.breakdown.subtotal,
            "tax_total": record.breakdown.tax,
            "aircraft_registration": record.technical.aircraft_registration,
            "extracted_by_ocr": record.source.ocr_extracted,
            "ocr_confidence": record.source.confidence,
            "review_flags": Jsonb(record.review_payload()),
        }
        if record.record_family is RecordFamily.MAINTENANCE:
            columns.update(
                {
                    "work_order_number": record.work_order_number,
                    "serial_number": record.technical.serial_number,
                    "technician_name": record.technical.technician_name,
                    "compliance_reference": record.technical.compliance_reference,
                    "work_description": record.technical.work_description,
                }
            )
            if record.maintenance is not None:
                columns.update(
                    {
                        "maintenance_category": record.maintenance.category,
                        "audit_category": record.maintenance.audit_category,
                        "classification_confidence": record.maintenance.confidence,
                    }
                )
        else:
            columns["description"] = record.technical.work_description

        names = ", ".join(columns)
        placeholders = ", ".join(["%s"] * len(columns))
        async with conn.cursor() as cur:
            await cur.execute(
                f"INSERT INTO {tables.records} ({names}) VALUES ({placeholders}) RETURNING id",  # noqa: S608
                tuple(columns.values()),
            )
            row = await cur.fetchone()
        if row is None:
            raise RuntimeError(f"Insert into {tables.records} returned no id")
        return int(row[0])

    async def _insert_breakdown(
        self,
        conn: psycopg.AsyncConnection[Any],
        tables: _FamilyTables,
        record_id: int,
        record: ValidatedRecord,
    ) -> None:
        rows = [
            (record_id, category, amount)
            for category, amount in record.breakdown.category_amounts().items()
        ]
        if not rows:
            return
        async with conn.cursor() as cur:
            await cur.executemany(
                f"""
                INSERT INTO {tables.breakdown} ({tables.breakdown_fk}, category, amount)
                VALUES (%s, %s, %s)
                """,  # noqa: S608
                rows,
            )

    async def _insert_parts(
        self,
        conn: psycopg.AsyncConnection[Any],
        record_id: int,
        record: ValidatedRecord,
    ) -> None:
        if not record.parts:
            return
        async with conn.cursor() as cur:
            await cur.executemany(
                """
                INSERT INTO maintenance_parts
                (maintenance_record_id, part_number, description, quantity,
                 unit_price, total_price)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                [
                    (
                        record_id,
                        part.part_number,
                        part.description,
                        part.quantity,
                        part.unit_price,
                        part.total_price,
                    )
                    for part in record.parts
                ],
            )

    async def _insert_attachment(
        self,
        conn: psycopg.AsyncConnection[Any],
        tables: _FamilyTables,
        record_id: int,
        attachment: AttachmentInfo,
    ) -> None:
        await conn.execute(
            f"""
            INSERT INTO {tables.attachments}
            ({tables.breakdown_fk}, file_name, file_url, mime_type, file_size_bytes)
            VALUES (%s, %s, %s, %s, %s)
            """,  # noqa: S608
            (
                record_id,
                attachment.file_name,
                attachment.file_url,
                attachment.mime_type,
                attachment.file_size_bytes,
            ),
        )

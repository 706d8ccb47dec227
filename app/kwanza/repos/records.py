from app.kwanza.domain.records import RecordMetadata


def meta_from_row(row) -> RecordMetadata:
    return RecordMetadata(
        id=row.id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        active=row.active if hasattr(row, "active") else True,
    )


def apply_meta(row, meta: RecordMetadata) -> None:
    row.created_at = meta.created_at
    row.updated_at = meta.updated_at
    if hasattr(row, "active"):
        row.active = meta.active

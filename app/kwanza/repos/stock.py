from sqlalchemy import select

from app.kwanza.db.models import StockMovement


class StockMovementRepository:
    def __init__(self, db):
        self.db = db

    def record(
        self,
        *,
        product_id: int,
        operator_id: int | None,
        quantity_delta: int,
        stock_after: int,
        reason: str,
        reference: str | None = None,
    ) -> StockMovement:
        movement = StockMovement(
            product_id=product_id,
            operator_id=operator_id,
            quantity_delta=quantity_delta,
            stock_after=stock_after,
            reason=reason,
            reference=reference,
        )
        self.db.add(movement)
        self.db.flush()
        return movement

    def list_for_product(self, product_id: int, *, limit: int | None = None) -> list[StockMovement]:
        stmt = (
            select(StockMovement)
            .where(StockMovement.product_id == product_id)
            .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).scalars().all()

    def list_by_reference(self, reference: str) -> list[StockMovement]:
        stmt = select(StockMovement).where(StockMovement.reference == reference).order_by(StockMovement.id)
        return self.db.execute(stmt).scalars().all()

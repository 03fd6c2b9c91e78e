from sqlalchemy.exc import IntegrityError
from src.entities.order import Order
from src.dto.order import OrderCreate
from src.exceptions import DuplicateOrderError
from src.repositories.base import BaseRepository
from src.utils.database import db_session_context


class OrderRepository(BaseRepository[Order, OrderCreate]):
    def __init__(self):
        super().__init__(Order)

    async def get_by_session(self, stripe_session_id: str) -> Order | None:
        db = db_session_context.get()
        return db.query(self.model).filter(self.model.stripe_session_id == stripe_session_id).first()

    def add(self, obj_in: OrderCreate) -> Order:
        """Stage an order in the current transaction without committing.

        Raises:
            DuplicateOrderError: If an order already exists for the payment session.
        """
        db = db_session_context.get()
        db_obj = self.model(**obj_in.model_dump(mode="json", exclude={"event_date"}), event_date=obj_in.event_date)
        db.add(db_obj)
        try:
            db.flush()
        except IntegrityError as e:
            raise DuplicateOrderError(obj_in.stripe_session_id) from e
        return db_obj

order_repository = OrderRepository()

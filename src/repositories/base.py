from typing import TypeVar, Generic, Any
from src.utils.database import db_session_context
ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType")

class BaseRepository(Generic[ModelType, CreateSchemaType]):
    def __init__(self, model: type[ModelType], id_field: str = "id"):
        self.model = model
        self.id = id_field

    async def get(self, id: Any) -> ModelType | None:
        db = db_session_context.get()
        return db.query(self.model).filter(getattr(self.model, self.id) == id).first()

    async def create(self, obj_in: CreateSchemaType) -> ModelType:
        db = db_session_context.get()
        db_obj = self.model(**obj_in.model_dump())
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

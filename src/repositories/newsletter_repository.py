from src.entities.newsletter import NewsletterSubscription
from src.repositories.base import BaseRepository
from src.utils.database import db_session_context


class NewsletterRepository(BaseRepository[NewsletterSubscription, None]):
    def __init__(self):
        super().__init__(NewsletterSubscription)

    async def subscribe(self, email: str, source: str = "order") -> NewsletterSubscription:
        db = db_session_context.get()
        db_obj = self.model(email=email, source=source)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

newsletter_repository = NewsletterRepository()

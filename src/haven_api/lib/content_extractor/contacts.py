"""Contact submission extractor."""

from typing import Any

from sqlalchemy.orm import selectinload

from haven_api.lib.content_extractor.base import ContentExtractor, user_summary
from haven_api.models.contact import Contact


class ContactExtractor(ContentExtractor):
    content_type = "contacts"
    model = Contact
    media_fields = frozenset({"documents"})

    def load_options(self) -> tuple:
        return (selectinload(Contact.assigned_to),)

    def related_fields(self, row: Contact) -> dict[str, Any]:
        return {"assigned_to": user_summary(row.assigned_to, include_email=False)}

"""Outbound email message models."""

from typing import Optional

from pydantic import BaseModel, Field


class EmailContact(BaseModel):
    email: str
    name: Optional[str] = None


class EmailMessage(BaseModel):
    """A transactional email ready for delivery."""
    sender: EmailContact
    to: list[EmailContact] = Field(min_length=1)
    subject: str
    html_content: str
    text_content: str = ""
    tags: list[str] = Field(default_factory=list)

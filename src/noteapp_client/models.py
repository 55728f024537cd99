"""Wire models for the notes API."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class Note(BaseModel):
    """A note as returned by the server.

    ``id``, ``user_id``, ``user_email`` and ``created_at`` are assigned by the
    server; a client never sends them (see :class:`NoteDraft`).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: int = 0
    title: str
    content: str = ""
    user_id: str | None = None
    user_email: str | None = None
    created_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )
    file_url: str | None = None
    file_name: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def null_content_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def has_attachment(self) -> bool:
        return bool(self.file_url and self.file_name)


class NoteDraft(BaseModel):
    """Request body for creating or updating a note."""

    model_config = ConfigDict(extra="forbid")

    title: str
    content: str = ""
    file_url: str | None = None
    file_name: str | None = None

    @model_validator(mode="after")
    def check_attachment_pair(self) -> NoteDraft:
        if (self.file_url is None) != (self.file_name is None):
            raise ValueError("file_url and file_name must be set together")
        return self

    @classmethod
    def from_note(cls, note: Note) -> NoteDraft:
        return cls(
            title=note.title,
            content=note.content,
            file_url=note.file_url,
            file_name=note.file_name,
        )

    def with_attachment(self, uploaded: UploadedFile) -> NoteDraft:
        return self.model_copy(
            update={"file_url": uploaded.file_url, "file_name": uploaded.file_name}
        )

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class UploadedFile(BaseModel):
    """Response of ``POST /upload``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    file_url: str = Field(alias="fileUrl", min_length=1)
    file_name: str = Field(alias="fileName", min_length=1)


class SubscriptionStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    is_premium: bool = False
    subscription_status: str
    # Only meaningful when is_premium is set.
    plan_name: str | None = None
    expires_at: str | None = None

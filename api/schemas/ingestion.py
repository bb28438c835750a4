from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from skyfeed.ingestion import PostReference


class CreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri: str = Field(..., pattern=r"^at://", description="at:// uri of the post record")
    cid: str = Field(..., min_length=1)
    author: str | None = None
    reply_parent: str | None = Field(default=None, alias="replyParent")
    reply_root: str | None = Field(default=None, alias="replyRoot")
    sequence: int | None = None
    indexed_at: datetime | None = Field(default=None, alias="indexedAt")

    def to_reference(self) -> PostReference:
        return PostReference(
            uri=self.uri,
            cid=self.cid,
            author=self.author,
            reply_parent=self.reply_parent,
            reply_root=self.reply_root,
            sequence=self.sequence,
            indexed_at=self.indexed_at,
        )


class DeleteRequest(BaseModel):
    uri: str = Field(..., pattern=r"^at://")


class CursorResponse(BaseModel):
    service: str
    sequence: int

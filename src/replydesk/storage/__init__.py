"""Attachment storage used at send time."""

from replydesk.storage.attachments import AttachmentStorage

__all__ = ["AttachmentStorage"]

from .attach_note import AttachNoteTool
from .list_notes import ListNotesTool

__all__ = ["ListNotesTool", "AttachNoteTool"]

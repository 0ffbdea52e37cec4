from .tools import ContentItem, ErrorResponse, ToolCallResponse, ToolDescriptor, ToolListResponse

__all__ = ["ContentItem", "ErrorResponse", "ToolCallResponse", "ToolDescriptor", "ToolListResponse"]

from .current_user import CurrentUserTool

__all__ = ["CurrentUserTool"]

from .link_features import LinkFeatureToObjectiveTool
from .list_keyresults import ListKeyResultsTool

__all__ = ["LinkFeatureToObjectiveTool", "ListKeyResultsTool"]

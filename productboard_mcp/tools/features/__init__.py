from .bulk_update import BulkUpdateFeaturesTool
from .get_feature import GetFeatureTool
from .list_features import ListFeaturesTool

__all__ = ["ListFeaturesTool", "GetFeatureTool", "BulkUpdateFeaturesTool"]

# Models package init
from buildapi.models.aggregate import Aggregate

__all__ = ["Aggregate"]

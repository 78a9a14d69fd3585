# Ranker module: display ordering of scored and unscored applications
from .ranking import rank_applications, ranking_key

__all__ = ["rank_applications", "ranking_key"]

from .importance import compare_importance, rank_importance, scale_importance
from .modeler import ModelResult, WineQualityModeler

__all__ = [
    "ModelResult",
    "WineQualityModeler",
    "compare_importance",
    "rank_importance",
    "scale_importance",
]

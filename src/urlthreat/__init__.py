from .classifier import AnalysisResult, ThreatType, analyze_url, classify
from .features import UrlFeatures, extract_features, feature_order, to_vector

__all__ = [
    "AnalysisResult",
    "ThreatType",
    "UrlFeatures",
    "analyze_url",
    "classify",
    "extract_features",
    "feature_order",
    "to_vector",
]

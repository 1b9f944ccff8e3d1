# src/urlthreat/classifier.py
# ------------------------------------------------------------
# Rule-based threat classifier:
# - turns a UrlFeatures record into a 0..100 risk score
# - maps (score, key features) to benign / phishing / malware / defacement
# - reports a confidence percentage and the warnings that fired
# The weights and band edges are fixed heuristics; keep them as they are.
# ------------------------------------------------------------

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, NamedTuple, Optional, Tuple

from .features import UrlFeatures, extract_features

MIN_SCORE, MAX_SCORE = 0, 100
MIN_CONFIDENCE, MAX_CONFIDENCE = 50.0, 98.0


class ThreatType(str, Enum):
    BENIGN = "benign"
    PHISHING = "phishing"
    MALWARE = "malware"
    DEFACEMENT = "defacement"


class RiskRule(NamedTuple):
    condition: Callable[[UrlFeatures], bool]
    weight: int
    warning: Optional[str] = None


# Evaluated top to bottom; warnings come out in this order.
RISK_RULES: Tuple[RiskRule, ...] = (
    # high-risk indicators
    RiskRule(lambda f: f.use_of_ip == 1, 25, "URL uses IP address instead of domain name"),
    RiskRule(lambda f: f.short_url == 1, 15, "URL uses a URL shortening service"),
    RiskRule(lambda f: f.sus_url == 1, 20, "URL contains suspicious keywords"),
    RiskRule(lambda f: f.count_at > 0, 20, "URL contains @ symbol (potential redirect)"),
    RiskRule(lambda f: f.abnormal_url == 1, 15, "Abnormal URL structure detected"),
    # medium-risk indicators
    RiskRule(lambda f: f.url_length > 75, 10, "Unusually long URL"),
    RiskRule(lambda f: f.count_percent > 2, 10, "Multiple encoded characters detected"),
    RiskRule(lambda f: f.count_hyphen > 4, 8, "Excessive hyphens in URL"),
    RiskRule(lambda f: f.count_dir > 5, 8, "Deep directory structure"),
    RiskRule(lambda f: f.count_embed_domain > 0, 15, "Embedded domain detected"),
    # low-risk positive indicators
    RiskRule(lambda f: f.count_https > 0 and f.count_http == 1, -5),
    RiskRule(lambda f: 5 < f.hostname_length < 30, -3),
)


@dataclass(frozen=True)
class AnalysisResult:
    threat_type: ThreatType
    confidence: float
    risk_score: int
    features: UrlFeatures
    warnings: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "threatType": self.threat_type.value,
            "confidence": self.confidence,
            "riskScore": self.risk_score,
            "features": self.features.to_dict(),
            "warnings": list(self.warnings),
        }


def score_features(features: UrlFeatures) -> Tuple[int, Tuple[str, ...]]:
    """Apply RISK_RULES in order; return the clamped score and warnings."""
    score = 0
    warnings = []
    for rule in RISK_RULES:
        if rule.condition(features):
            score += rule.weight
            if rule.warning:
                warnings.append(rule.warning)
    return max(MIN_SCORE, min(MAX_SCORE, score)), tuple(warnings)


def categorize(score: int, f: UrlFeatures) -> Tuple[ThreatType, float]:
    """Map a clamped risk score to (threat type, raw confidence)."""
    if score < 15:
        return ThreatType.BENIGN, 95 - score * 2
    if score < 35:
        return ThreatType.BENIGN, 75 - (score - 15)
    if score < 55:
        # phishing indicators
        if f.sus_url or f.count_at > 0:
            return ThreatType.PHISHING, 60 + (score - 35)
        return ThreatType.DEFACEMENT, 55 + (score - 35)
    if score < 75:
        if f.use_of_ip or f.count_embed_domain > 0:
            return ThreatType.MALWARE, 70 + (score - 55)
        if f.sus_url:
            return ThreatType.PHISHING, 75 + (score - 55)
        return ThreatType.DEFACEMENT, 65 + (score - 55)

    # high risk: malware unless only the keyword signal points at phishing
    if f.use_of_ip:
        threat = ThreatType.MALWARE
    elif f.sus_url:
        threat = ThreatType.PHISHING
    else:
        threat = ThreatType.MALWARE
    return threat, 85 + min(10, (score - 75) / 2.5)


def _round_half_up(value: float, digits: int = 1) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def classify(features: UrlFeatures) -> AnalysisResult:
    score, warnings = score_features(features)
    threat, confidence = categorize(score, features)
    confidence = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))

    return AnalysisResult(
        threat_type=threat,
        confidence=_round_half_up(confidence),
        risk_score=score,
        features=features,
        warnings=warnings,
    )


def analyze_url(url: str) -> AnalysisResult:
    """Extract features from ``url`` and classify it. Deterministic."""
    return classify(extract_features(url))

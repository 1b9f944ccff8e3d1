import dataclasses

import pytest

from urlthreat import AnalysisResult, ThreatType, UrlFeatures, analyze_url, classify
from urlthreat.classifier import RISK_RULES, categorize, score_features

from test_features import ODD_INPUTS

ALL_WARNINGS = [
    "URL uses IP address instead of domain name",
    "URL uses a URL shortening service",
    "URL contains suspicious keywords",
    "URL contains @ symbol (potential redirect)",
    "Abnormal URL structure detected",
    "Unusually long URL",
    "Multiple encoded characters detected",
    "Excessive hyphens in URL",
    "Deep directory structure",
    "Embedded domain detected",
]


def make_features(**overrides) -> UrlFeatures:
    base = {f.name: 0 for f in dataclasses.fields(UrlFeatures)}
    base.update(overrides)
    return UrlFeatures(**base)


# --- scenarios ---

def test_google_is_benign():
    res = analyze_url("https://www.google.com")
    assert res.threat_type is ThreatType.BENIGN
    assert res.risk_score == 0
    assert res.confidence == 95.0
    assert res.warnings == ()


def test_ip_with_login_keyword():
    res = analyze_url("http://192.168.1.1/login.php")
    assert res.features.use_of_ip == 1
    assert res.features.sus_url == 1
    assert res.risk_score == 42
    assert res.threat_type is ThreatType.PHISHING
    assert res.confidence == 67.0
    assert list(res.warnings) == [
        "URL uses IP address instead of domain name",
        "URL contains suspicious keywords",
    ]


def test_shortener():
    res = analyze_url("http://bit.ly/xyz123")
    assert res.features.short_url == 1
    assert res.warnings == ("URL uses a URL shortening service",)
    # +15 shortener, -3 for a 6-character hostname
    assert res.risk_score == 12
    assert res.threat_type is ThreatType.BENIGN
    assert res.confidence == 71.0


def test_at_sign_and_keywords_keep_rule_order():
    res = analyze_url("http://example.com/a@b/secure-login?x=1&y=2")
    assert list(res.warnings) == [
        "URL contains suspicious keywords",
        "URL contains @ symbol (potential redirect)",
    ]
    assert res.risk_score == 37
    assert res.threat_type is ThreatType.PHISHING
    assert res.confidence == 62.0


def test_empty_string():
    res = analyze_url("")
    assert res.features.hostname_length == 0
    assert res.features.url_length == 0
    assert res.threat_type is ThreatType.BENIGN
    assert res.risk_score == 15
    assert res.confidence == 75.0
    assert res.warnings == ("Abnormal URL structure detected",)


# --- rule table ---

def test_rule_table_order():
    assert [r.warning for r in RISK_RULES if r.warning] == ALL_WARNINGS
    assert [r.weight for r in RISK_RULES] == [25, 15, 20, 20, 15, 10, 10, 8, 8, 15, -5, -3]


def test_every_warning_fires_in_order():
    f = make_features(
        use_of_ip=1, short_url=1, sus_url=1, count_at=1, abnormal_url=1,
        url_length=100, count_percent=3, count_hyphen=5, count_dir=6,
        count_embed_domain=1,
    )
    score, warnings = score_features(f)
    assert score == 100
    assert list(warnings) == ALL_WARNINGS


@pytest.mark.parametrize("field,value,delta", [
    ("url_length", 75, 0),
    ("url_length", 76, 10),
    ("count_percent", 2, 0),
    ("count_percent", 3, 10),
    ("count_hyphen", 4, 0),
    ("count_hyphen", 5, 8),
    ("count_dir", 5, 0),
    ("count_dir", 6, 8),
    ("count_at", 1, 20),
    ("count_embed_domain", 2, 15),
])
def test_rule_thresholds(field, value, delta):
    base = make_features(abnormal_url=1)
    score, _ = score_features(dataclasses.replace(base, **{field: value}))
    assert score == 15 + delta


@pytest.mark.parametrize("length,score", [(5, 15), (6, 12), (29, 12), (30, 15)])
def test_hostname_length_bonus_is_exclusive(length, score):
    f = make_features(abnormal_url=1, hostname_length=length)
    assert score_features(f)[0] == score


def test_https_bonus_needs_single_http():
    single = make_features(abnormal_url=1, count_https=1, count_http=1)
    double = make_features(abnormal_url=1, count_https=1, count_http=2)
    assert score_features(single) == (10, ("Abnormal URL structure detected",))
    assert score_features(double)[0] == 15


def test_score_clamped_at_zero():
    f = make_features(count_https=1, count_http=1, hostname_length=10)
    assert score_features(f) == (0, ())


# --- bands ---

@pytest.mark.parametrize("overrides,threat,confidence", [
    ({"short_url": 1, "abnormal_url": 1}, ThreatType.BENIGN, 60.0),
    ({"count_at": 1, "abnormal_url": 1}, ThreatType.PHISHING, 60.0),
    ({"abnormal_url": 1, "url_length": 80, "count_percent": 3}, ThreatType.DEFACEMENT, 55.0),
    ({"count_embed_domain": 1, "abnormal_url": 1, "url_length": 80, "count_percent": 3, "count_hyphen": 5},
     ThreatType.MALWARE, 73.0),
    ({"sus_url": 1, "abnormal_url": 1, "url_length": 80, "count_percent": 3}, ThreatType.PHISHING, 75.0),
    ({"short_url": 1, "abnormal_url": 1, "url_length": 80, "count_percent": 3, "count_hyphen": 5},
     ThreatType.DEFACEMENT, 68.0),
    ({"sus_url": 1, "count_at": 1, "abnormal_url": 1, "short_url": 1, "url_length": 80},
     ThreatType.PHISHING, 87.0),
    ({"short_url": 1, "abnormal_url": 1, "url_length": 80, "count_percent": 3, "count_hyphen": 5,
      "count_dir": 6, "count_embed_domain": 1}, ThreatType.MALWARE, 87.4),
])
def test_bands(overrides, threat, confidence):
    res = classify(make_features(**overrides))
    assert res.threat_type is threat
    assert res.confidence == confidence


@pytest.mark.parametrize("score,threat,confidence", [
    (0, ThreatType.BENIGN, 95),
    (14, ThreatType.BENIGN, 67),
    (15, ThreatType.BENIGN, 75),
    (34, ThreatType.BENIGN, 56),
    (35, ThreatType.DEFACEMENT, 55),
    (54, ThreatType.DEFACEMENT, 74),
    (55, ThreatType.DEFACEMENT, 65),
    (74, ThreatType.DEFACEMENT, 84),
    (75, ThreatType.MALWARE, 85),
    (100, ThreatType.MALWARE, 95),
])
def test_band_edges_without_indicators(score, threat, confidence):
    assert categorize(score, make_features()) == (threat, confidence)


def test_high_band_prefers_ip_over_keywords():
    f = make_features(use_of_ip=1, sus_url=1)
    assert categorize(80, f) == (ThreatType.MALWARE, 87.0)


def test_confidence_rounded_to_one_decimal():
    f = make_features(use_of_ip=1, short_url=1, sus_url=1, count_at=1)
    res = classify(f)
    assert res.risk_score == 80
    assert res.threat_type is ThreatType.MALWARE
    assert res.confidence == 87.0

    f = make_features(use_of_ip=1, short_url=1, sus_url=1, count_at=1, url_length=80)
    res = classify(f)
    assert res.risk_score == 90
    assert res.confidence == 91.0


# --- properties ---

@pytest.mark.parametrize("url", ODD_INPUTS + [
    "https://www.google.com",
    "http://192.168.1.1/login.php",
    "http://bit.ly/xyz123",
    "http://10.0.0.1//evil.com/a/b/c/d/e/f?x=%20%20%20&paypal=1",
])
def test_result_bounds_and_determinism(url):
    res = analyze_url(url)
    assert 0 <= res.risk_score <= 100
    assert 50 <= res.confidence <= 98
    assert round(res.confidence, 1) == res.confidence
    assert analyze_url(url) == res


def test_to_dict_wire_shape():
    d = analyze_url("http://192.168.1.1/login.php").to_dict()
    assert set(d) == {"threatType", "confidence", "riskScore", "features", "warnings"}
    assert d["threatType"] == "phishing"
    assert d["riskScore"] == 42
    assert d["features"]["useOfIp"] == 1
    assert isinstance(d["warnings"], list)


def test_result_is_immutable():
    res = analyze_url("example.com")
    assert isinstance(res, AnalysisResult)
    with pytest.raises(dataclasses.FrozenInstanceError):
        res.risk_score = 0

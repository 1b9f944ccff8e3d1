# app/server.py
# ------------------------------------------------------------
# Minimal Flask JSON API:
# - takes a URL (or a batch of URLs) from the client
# - extracts lexical features and scores them with the rule-based classifier
# - returns the threat type, confidence, risk score and warnings,
#   plus a friendly explanation block for the front end
# ------------------------------------------------------------

from flask import Flask, jsonify, request
from flask_cors import CORS

from urlthreat import AnalysisResult, ThreatType, analyze_url

MAX_URL_LENGTH = 2048
MAX_BATCH_SIZE = 100

THREAT_LABELS = {
    ThreatType.BENIGN: ("SAFE", "This URL appears to be safe and legitimate."),
    ThreatType.PHISHING: (
        "PHISHING",
        "This URL may be attempting to steal your credentials or personal information.",
    ),
    ThreatType.MALWARE: ("MALWARE", "This URL may distribute malicious software."),
    ThreatType.DEFACEMENT: (
        "DEFACEMENT",
        "This URL may be associated with website defacement activities.",
    ),
}

SAFE_INDICATORS = [
    "No suspicious keywords detected",
    "Standard URL structure",
    "No URL shortening detected",
]


def risk_level(score: int) -> str:
    if score < 35:
        return "low"
    if score < 65:
        return "medium"
    return "high"


def explain_result(result: AnalysisResult) -> dict:
    """
    Build the display block the front end shows next to a verdict:
    - label + description for the threat type
    - low / medium / high risk level
    - the "checks passed" list, only for clean benign results
    - a few headline feature values
    """
    label, description = THREAT_LABELS[result.threat_type]
    feats = result.features

    passed = []
    if result.threat_type is ThreatType.BENIGN and not result.warnings:
        passed = list(SAFE_INDICATORS)

    return {
        "label": label,
        "description": description,
        "riskLevel": risk_level(result.risk_score),
        "passedChecks": passed,
        "highlights": {
            "urlLength": feats.url_length,
            "hostnameLength": feats.hostname_length,
            "directoryDepth": feats.count_dir,
            "specialChars": feats.count_percent + feats.count_equal,
        },
    }


def _bad_request(message: str):
    return jsonify({"error": message}), 400


# 1) Create the Flask app
app = Flask(__name__)

# Allow the browser front end / extension (any origin) to call the API
CORS(app, resources={r"/api/*": {"origins": "*"}})


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@app.route("/api/analyze", methods=["POST"])
def api_analyze():
    """
    Expects JSON: {"url": "http://..."}
    Returns the full analysis (features included) and an explanation block.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return _bad_request("JSON body must be an object")
    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        return _bad_request("Field 'url' must be a non-empty string")

    url = url.strip()
    if len(url) > MAX_URL_LENGTH:
        return _bad_request(f"URL longer than {MAX_URL_LENGTH} characters")

    result = analyze_url(url)
    app.logger.info("analyze: %s (risk %d)", result.threat_type.value, result.risk_score)

    payload = result.to_dict()
    payload["url"] = url
    payload["explanation"] = explain_result(result)
    return jsonify(payload)


@app.route("/api/scan-urls", methods=["POST"])
def api_scan_urls():
    """
    API endpoint for browser extensions / other clients.
    Expects JSON: {"urls": ["http://...", "https://..."]}
    Returns JSON with one verdict per distinct, valid URL.
    "skipped" counts every entry not scanned: non-strings, empty or
    over-long URLs, duplicates, and anything past MAX_BATCH_SIZE.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return _bad_request("JSON body must be an object")
    urls = data.get("urls") or []
    if not isinstance(urls, list):
        return _bad_request("Field 'urls' must be a list")

    # Clean and deduplicate URLs
    cleaned = []
    seen = set()
    for u in urls:
        if not isinstance(u, str):
            continue
        u = u.strip()
        if not u or len(u) > MAX_URL_LENGTH:
            continue
        if u in seen:
            continue
        seen.add(u)
        cleaned.append(u)
    batch = cleaned[:MAX_BATCH_SIZE]

    results = []
    for url in batch:
        result = analyze_url(url)
        results.append({
            "url": url,
            "threatType": result.threat_type.value,
            "confidence": result.confidence,
            "riskScore": result.risk_score,
            "warnings": list(result.warnings),
            "explanation": explain_result(result),
        })

    app.logger.info("scan-urls: %d scanned, %d skipped", len(batch), len(urls) - len(batch))
    return jsonify({"results": results, "skipped": len(urls) - len(batch)})


# Run the app directly (development mode)
if __name__ == "__main__":
    # debug=True auto-reloads on code changes (dev only)
    app.run(debug=True)

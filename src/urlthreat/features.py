# src/urlthreat/features.py
# ------------------------------------------------------------
# Lexical + structural feature extractor for URL threat classification
# (No web requests; the URL is only parsed, never resolved or fetched)
# ------------------------------------------------------------

import logging
import re
from dataclasses import asdict, dataclass, fields
from typing import NamedTuple, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

SHORTENER_DOMAINS = (
    "bit.ly", "goo.gl", "shorte.st", "go2l.ink", "x.co", "ow.ly", "t.co",
    "tinyurl", "tr.im", "is.gd", "cli.gs", "yfrog.com", "migre.me", "ff.im",
    "tiny.cc", "url4.eu", "twit.ac", "su.pr", "twurl.nl", "snipurl.com",
    "short.to", "BudURL.com", "ping.fm", "post.ly", "Just.as", "bkite.com",
    "snipr.com", "fic.kr", "loopt.us", "doiop.com", "short.ie", "kl.am",
    "wp.me", "rubyurl.com", "om.ly", "to.ly", "bit.do", "lnkd.in", "db.tt",
    "qr.ae", "adf.ly", "bitly.com", "cur.lv", "tinyurl.com", "ity.im",
    "q.gs", "po.st", "bc.vc", "twitthis.com", "u.to", "j.mp", "buzurl.com",
    "cutt.us", "u.bb", "yourls.org", "prettylinkpro.com", "scrnch.me",
    "filoops.info", "vzturl.com", "qr.net", "1url.com", "tweez.me", "v.gd",
    "link.zip.net",
)

SUSPICIOUS_KEYWORDS = (
    "paypal", "login", "signin", "bank", "account", "update", "free", "lucky",
    "service", "bonus", "ebayisapi", "webscr", "secure", "verify", "password",
    "credential",
)

# characters a browser URL parser refuses in a hostname
FORBIDDEN_HOST_CHARS = frozenset(' \t\n\r<>^|"\\')


def _alternation(words) -> "re.Pattern":
    return re.compile("|".join(re.escape(w) for w in words), re.IGNORECASE)


IP_PATTERN = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b", re.ASCII)
SHORTENER_PATTERN = _alternation(SHORTENER_DOMAINS)
SUSPICIOUS_PATTERN = _alternation(SUSPICIOUS_KEYWORDS)
WWW_PATTERN = re.compile("www", re.IGNORECASE)
HTTPS_PATTERN = re.compile("https", re.IGNORECASE)
HTTP_PATTERN = re.compile("http", re.IGNORECASE)
DIGIT_PATTERN = re.compile(r"[0-9]")
LETTER_PATTERN = re.compile(r"[a-zA-Z]")


@dataclass(frozen=True)
class UrlFeatures:
    """Fixed 21-field numeric summary of one URL string."""

    use_of_ip: int
    abnormal_url: int
    count_dot: int
    count_www: int
    count_at: int
    count_dir: int
    count_embed_domain: int
    short_url: int
    count_https: int
    count_http: int
    count_percent: int
    count_question: int
    count_hyphen: int
    count_equal: int
    url_length: int
    hostname_length: int
    sus_url: int
    fd_length: int
    tld_length: int
    count_digits: int
    count_letters: int

    def to_dict(self) -> dict:
        """Wire form with camelCase keys, e.g. ``{"useOfIp": 0, ...}``."""
        return {_camel(name): value for name, value in asdict(self).items()}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class _ParsedUrl(NamedTuple):
    hostname: str
    path: str


def _ensure_scheme(url: str) -> str:
    # only the structural view gets a scheme; counts always use the raw text
    if not url.startswith("http"):
        return "http://" + url
    return url


DOUBLE_DOT_SEGMENTS = {"..", ".%2e", "%2e.", "%2e%2e"}
SINGLE_DOT_SEGMENTS = {".", "%2e"}


def remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments the way a browser does: ``/a/../b`` -> ``/b``."""
    segments = (path[1:] if path.startswith("/") else path).split("/")
    out = []
    for i, seg in enumerate(segments):
        last = i == len(segments) - 1
        lowered = seg.lower()
        if lowered in DOUBLE_DOT_SEGMENTS:
            if out:
                out.pop()
            if last:
                out.append("")
        elif lowered in SINGLE_DOT_SEGMENTS:
            if last:
                out.append("")
        else:
            out.append(seg)
    return "/" + "/".join(out)


def _idna_host(hostname: str) -> str:
    if hostname.isascii():
        return hostname
    # raises UnicodeError (a ValueError) for labels a browser would reject
    return hostname.encode("idna").decode("ascii")


def parse_structure(raw: str) -> Optional[_ParsedUrl]:
    """
    Parse hostname and path out of ``raw`` (scheme added when missing).
    Backslashes count as slashes, dot segments are resolved and non-ASCII
    hosts are punycoded, as in a browser. Returns None when the string has
    no usable host or an invalid port.
    """
    try:
        parsed = urlparse(_ensure_scheme(raw).replace("\\", "/"))
        hostname = parsed.hostname
        parsed.port  # ValueError when out of range
        if hostname:
            hostname = _idna_host(hostname)
    except ValueError as e:
        logger.debug("URL parse failed: %r (%s)", raw, e)
        return None
    if not hostname or any(ch in FORBIDDEN_HOST_CHARS for ch in hostname):
        logger.debug("URL has no usable hostname: %r", raw)
        return None
    return _ParsedUrl(hostname=hostname, path=remove_dot_segments(parsed.path or "/"))


# --- raw-string features ---

def use_of_ip(raw: str) -> int:
    return int(IP_PATTERN.search(raw) is not None)


def short_url(raw: str) -> int:
    return int(SHORTENER_PATTERN.search(raw) is not None)


def sus_url(raw: str) -> int:
    return int(SUSPICIOUS_PATTERN.search(raw) is not None)


def count_pattern(pattern: "re.Pattern", raw: str) -> int:
    return len(pattern.findall(raw))


# --- structural features (None = parse failed) ---

def abnormal_url(raw: str, parsed: Optional[_ParsedUrl]) -> int:
    if parsed is None:
        return 1
    return int(parsed.hostname not in raw)


def hostname_length(raw: str, parsed: Optional[_ParsedUrl]) -> int:
    if parsed is None:
        return len(raw)
    return len(parsed.hostname)


def count_dir(parsed: Optional[_ParsedUrl]) -> int:
    return parsed.path.count("/") if parsed else 0


def count_embed_domain(parsed: Optional[_ParsedUrl]) -> int:
    return parsed.path.count("//") if parsed else 0


def fd_length(parsed: Optional[_ParsedUrl]) -> int:
    if parsed is None:
        return 0
    parts = [p for p in parsed.path.split("/") if p]
    return len(parts[0]) if parts else 0


def tld_length(parsed: Optional[_ParsedUrl]) -> int:
    if parsed is None:
        return 0
    return len(parsed.hostname.split(".")[-1])


def extract_features(url: str) -> UrlFeatures:
    """Build the feature record for ``url``. Never raises for string input."""
    raw = url
    parsed = parse_structure(raw)

    return UrlFeatures(
        use_of_ip=use_of_ip(raw),
        abnormal_url=abnormal_url(raw, parsed),
        count_dot=raw.count("."),
        count_www=count_pattern(WWW_PATTERN, raw),
        count_at=raw.count("@"),
        count_dir=count_dir(parsed),
        count_embed_domain=count_embed_domain(parsed),
        short_url=short_url(raw),
        count_https=count_pattern(HTTPS_PATTERN, raw),
        count_http=count_pattern(HTTP_PATTERN, raw),
        count_percent=raw.count("%"),
        count_question=raw.count("?"),
        count_hyphen=raw.count("-"),
        count_equal=raw.count("="),
        url_length=len(raw),
        hostname_length=hostname_length(raw, parsed),
        sus_url=sus_url(raw),
        fd_length=fd_length(parsed),
        tld_length=tld_length(parsed),
        count_digits=count_pattern(DIGIT_PATTERN, raw),
        count_letters=count_pattern(LETTER_PATTERN, raw),
    )


def feature_order():
    return [f.name for f in fields(UrlFeatures)]


def to_vector(features: UrlFeatures):
    return [getattr(features, k) for k in feature_order()]

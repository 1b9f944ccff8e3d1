import os
import argparse

import numpy as np
import pandas as pd
import tldextract

from urlthreat import analyze_url, feature_order, to_vector

# Find project root (one level up from /scripts)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")

# bundled public suffix snapshot only; scanning never touches the network
_extract = tldextract.TLDExtract(suffix_list_urls=())


def registered_domain(url: str) -> str:
    ext = _extract(url)
    return ".".join(p for p in [ext.domain, ext.suffix] if p)


def clean_urls(df: pd.DataFrame, url_col: str) -> pd.Series:
    """Strip URLs and drop empty / duplicate rows, keeping first occurrences."""
    urls = df[url_col].dropna().astype(str).str.strip()
    urls = urls[urls != ""]
    return urls.drop_duplicates().reset_index(drop=True)


def scan_frame(df: pd.DataFrame, url_col: str = "url"):
    """Classify every URL in ``df[url_col]``; returns (results frame, AnalysisResult list)."""
    urls = clean_urls(df, url_col)
    analyses = [analyze_url(u) for u in urls]

    rows = []
    for url, res in zip(urls, analyses):
        row = {
            "url": url,
            "domain": registered_domain(url),
            "threat_type": res.threat_type.value,
            "confidence": res.confidence,
            "risk_score": res.risk_score,
            "warnings": "; ".join(res.warnings),
        }
        row.update(zip(feature_order(), to_vector(res.features)))
        rows.append(row)

    columns = ["url", "domain", "threat_type", "confidence", "risk_score", "warnings"]
    return pd.DataFrame(rows, columns=columns + feature_order()), analyses


def feature_matrix(analyses) -> np.ndarray:
    """Stack the feature vectors into a (rows, 21) float matrix."""
    if not analyses:
        return np.empty((0, len(feature_order())), dtype=float)
    return np.array([to_vector(a.features) for a in analyses], dtype=float)


def summarize(results: pd.DataFrame) -> pd.DataFrame:
    """Per threat type: URL count, mean risk score and mean confidence."""
    return (
        results.groupby("threat_type")
        .agg(count=("url", "size"),
             mean_risk=("risk_score", "mean"),
             mean_confidence=("confidence", "mean"))
        .sort_values("count", ascending=False)
    )


def main(argv=None):
    p = argparse.ArgumentParser(description="Classify a CSV of URLs with the rule-based threat classifier")
    p.add_argument("--input", required=True, help="Path to CSV with a URL column")
    p.add_argument("--url-col", default="url", help="Name of the URL column in the CSV")
    p.add_argument("--output", default=os.path.join(DATA_DIR, "scan_results.csv"),
                   help="Where to write the per-URL results CSV")
    p.add_argument("--matrix", default=None,
                   help="Optional .npy path for the (rows, 21) feature matrix")
    p.add_argument("--limit", type=int, default=None,
                   help="Only scan the first N rows")
    args = p.parse_args(argv)

    print(f"[+] Loading URLs from: {args.input}")
    df = pd.read_csv(args.input)
    if args.url_col not in df.columns:
        p.error(f"column '{args.url_col}' not found in {args.input}")
    if args.limit is not None:
        df = df.head(args.limit)

    results, analyses = scan_frame(df, args.url_col)
    print(f"[+] Scanned {len(results)} distinct URLs ({len(df)} rows read).")

    out_dir = os.path.dirname(os.path.abspath(args.output))
    os.makedirs(out_dir, exist_ok=True)
    results.to_csv(args.output, index=False)
    print(f"[+] Saved results to: {args.output}")

    if args.matrix:
        np.save(args.matrix, feature_matrix(analyses))
        print(f"[+] Saved feature matrix to: {args.matrix}")

    if len(results):
        print("[+] Summary by threat type:")
        print(summarize(results).to_string())
    return results


if __name__ == "__main__":
    main()

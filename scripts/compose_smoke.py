#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import sys

from urllib.request import Request, urlopen
from urllib.error import URLError


def main() -> int:
    base_url = os.getenv("KNOWSYNTH_API_URL", "http://localhost:8000").rstrip("/")
    headers = {"Content-Type": "application/json"}
    api_key = os.getenv("KNOWSYNTH_API_KEY")
    if api_key:
        headers["X-API-Key"] = api_key
    payload = json.dumps(
        {
            "query": "smoke test",
            "chunks": [{"title": "smoke", "text": "smoke test"}],
            "min_relevance_score": -1.0,
        }
    ).encode("utf-8")
    try:
        with urlopen(f"{base_url}/healthz", timeout=5) as r:
            print("/healthz:", r.read().decode("utf-8"))
        with urlopen(f"{base_url}/livez", timeout=5) as r:
            print("/livez:", r.read().decode("utf-8"))
        rerank = Request(f"{base_url}/rerank", data=payload, headers=headers, method="POST")
        with urlopen(rerank, timeout=30) as r:
            body = json.loads(r.read().decode("utf-8"))
        print("/rerank degraded:", body.get("degraded"), "chunks:", len(body.get("chunks", [])))
    except (URLError, ValueError) as exc:
        print(f"Smoke check failed: {exc}", file=sys.stderr)
        return 1
    print("Smoke check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
read_load.py: async redirect load against codes recorded by write_load.py

Each request resolves a random recorded code and checks the Location header
against the URL it was created for. Outcomes are tallied per status
("302", "404", "mismatch", "error"), and the most-hit codes are listed so
their visit counts can be compared with GET /api/urls/{id}.

Usage:
  python read_load.py --base http://127.0.0.1:8000 --in codes_created.jsonl --count 15000 --concurrency 200 --top 5
"""
import argparse
import asyncio
import json
import random
import time
from collections import Counter
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _load_targets(path):
    """code -> original url, skipping malformed lines."""
    targets = {}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if obj.get("code"):
                targets[obj["code"]] = obj.get("url")
    return targets

async def _resolve(client: httpx.AsyncClient, base: str, code: str, expected: str):
    try:
        r = await client.get(f"{base}/{code}", follow_redirects=False, timeout=10)
    except httpx.HTTPError:
        return "error"
    if r.status_code == 302 and expected and r.headers.get("location") != expected:
        return "mismatch"
    return str(r.status_code)

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--in", dest="codes_file", default="codes_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    parser.add_argument("--top", type=int, default=5)
    args = parser.parse_args()

    targets = _load_targets(args.codes_file)
    if not targets:
        print(f"No codes found in {args.codes_file}. Run write_load.py first.")
        return
    codes = list(targets)

    outcomes = Counter()
    redirected = Counter()

    start_iso = _now_iso()
    t0 = time.perf_counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task():
            code = random.choice(codes)
            async with sem:
                outcome = await _resolve(client, args.base, code, targets[code])
            outcomes[outcome] += 1
            if outcome == "302":
                redirected[code] += 1

        await asyncio.gather(*(_task() for _ in range(args.count)))

    dt = time.perf_counter() - t0
    ok = outcomes["302"]
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   reads={args.count}, ok={ok}, codes_hit={len(redirected)}/{len(codes)}")
    print("STATUS: " + ", ".join(f"{k}={v}" for k, v in sorted(outcomes.items())))
    for code, hits in redirected.most_common(args.top):
        print(f"  {code}: {hits}")
    if dt > 0:
        print(f"RPS:   {ok/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())

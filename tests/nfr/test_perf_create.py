"""
NFR: creation throughput and latency

How to run (opt-in):
    RUN_NFR=1 pytest tests/nfr/test_perf_create.py -vv
Optional thresholds:
    NFR_TARGET_CREATE_QPS=1000     # assert create QPS >= 1000 (example)
    NFR_TARGET_CREATE_P95_MS=5     # assert p95 latency per create <= 5 ms
    NFR_CREATE_BACKEND=sqlite      # measure against a sqlite file instead of memory

Notes:
    - Calls ShorteningService directly; no HTTP overhead.
    - Does not assert on timings unless the env vars are set.
"""

import logging
import os
import statistics
import time

import pytest

from shortlink.manager.shortening import ShorteningService
from shortlink.storage.storage_factory import get_sequence_allocator, get_storage

pytestmark = pytest.mark.nfr


def _should_run():
    return os.getenv("RUN_NFR") == "1"


@pytest.mark.skipif(not _should_run(), reason="NFR tests are opt-in; set RUN_NFR=1 to enable")
def test_create_throughput_and_latency(capsys, tmp_path):
    backend = os.getenv("NFR_CREATE_BACKEND", "memory")
    kwargs = {"path": str(tmp_path / "perf.db")} if backend == "sqlite" else {}
    logging.getLogger("shortlink").setLevel(logging.WARNING)
    service = ShorteningService(get_sequence_allocator(backend, **kwargs), get_storage(backend, **kwargs))

    n = 2000
    latencies_ms = []
    codes = set()

    t0 = time.perf_counter()
    for i in range(n):
        s = time.perf_counter()
        record = service.shorten(f"https://example.com/resource/{i}")
        e = time.perf_counter()
        codes.add(record.code)
        latencies_ms.append((e - s) * 1000.0)
    t1 = time.perf_counter()

    assert len(codes) == n

    total_s = t1 - t0
    qps = n / total_s
    p95 = statistics.quantiles(latencies_ms, n=100)[94] if len(latencies_ms) >= 100 else max(latencies_ms)

    qps_target = os.getenv("NFR_TARGET_CREATE_QPS")
    p95_target_ms = os.getenv("NFR_TARGET_CREATE_P95_MS")

    with capsys.disabled():
        print(f"\nCreate [{backend}] N={n} -> total {total_s:.3f}s, QPS={qps:.1f}, p95={p95:.2f}ms", flush=True)

    if qps_target:
        assert qps >= float(qps_target), f"Create QPS {qps:.1f} < target {qps_target}"
    if p95_target_ms:
        assert p95 <= float(p95_target_ms), f"Create p95 {p95:.2f}ms > target {p95_target_ms}ms"

"""
Performance Benchmark / Load Test
====================================
Spawns N concurrent threads each firing M score datagrams, then measures
'get' round-trip latency. Score submissions get no reply, so lost datagrams
only show up as a shorter leaderboard, never as errors.

Usage:  python benchmark.py [--clients 20] [--updates 50] [--gets 100]
"""

import socket, time, threading, argparse, statistics, random

from client import ScoreClient, HOST, PORT


def worker(host, port, name, n_updates, results, barrier):
    sent, errors = 0, 0
    client = ScoreClient(host, port)
    try:
        barrier.wait()
        for _ in range(n_updates):
            try:
                client.submit_score(name, random.randint(1, 100000))
                sent += 1
            except OSError:
                errors += 1
    finally:
        client.close()
    results.append({"sent": sent, "errors": errors})


def measure_gets(host, port, n_gets, timeout=1.0):
    latencies, timeouts = [], 0
    client = ScoreClient(host, port)
    try:
        for _ in range(n_gets):
            t0 = time.perf_counter()
            try:
                client.get_scores(timeout)
                latencies.append((time.perf_counter() - t0) * 1000)
            except socket.timeout:
                timeouts += 1
    finally:
        client.close()
    return latencies, timeouts


def run_benchmark(host, port, n_clients, n_updates, n_gets):
    print(f"\n{'='*55}")
    print(f"  BENCHMARK: {n_clients} clients × {n_updates} scores, {n_gets} gets")
    print(f"{'='*55}")

    results, threads = [], []
    barrier = threading.Barrier(n_clients)
    t_start = time.perf_counter()

    for i in range(n_clients):
        t = threading.Thread(target=worker,
                             args=(host, port, f"Bot-{i:04d}", n_updates, results, barrier))
        t.start(); threads.append(t)
    for t in threads: t.join()

    t_send    = time.perf_counter() - t_start
    total_ok  = sum(r["sent"] for r in results)
    total_err = sum(r["errors"] for r in results)

    latencies, timeouts = measure_gets(host, port, n_gets)

    print(f"\n  Scores sent   : {total_ok} / {n_clients * n_updates}")
    print(f"  Send errors   : {total_err}")
    print(f"  Send time     : {t_send:.2f}s")
    print(f"  Send rate     : {total_ok / max(t_send, 1e-9):.1f} datagrams/sec")
    print(f"  Get timeouts  : {timeouts} / {n_gets}")
    if latencies:
        print(f"\n  Get RTT (ms)  : min={min(latencies):.2f}  max={max(latencies):.2f}"
              f"  mean={statistics.mean(latencies):.2f}  median={statistics.median(latencies):.2f}")
    print(f"{'='*55}\n")
    return {"sent": total_ok, "errors": total_err, "latencies": latencies, "timeouts": timeouts}


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--host", default=HOST)
    ap.add_argument("--port", type=int, default=PORT)
    ap.add_argument("--clients", type=int, default=10)
    ap.add_argument("--updates", type=int, default=20)
    ap.add_argument("--gets", type=int, default=50)
    args = ap.parse_args()
    run_benchmark(args.host, args.port, args.clients, args.updates, args.gets)

"""Generate concurrent traffic against the order API.

Workers share a pool of live orders and race each other with conditional
writes: each one reads an order, then PATCHes or cancels it with the tag it
read. When two workers pick the same order, at least one of them gets a 412.
The script prints a tally of status codes per operation at the end.

Knobs (environment):

* HTTP_BASE_URL: base URL of the API, e.g. http://localhost:8000
* HTTP_WORKERS: number of worker threads (default 4)
* HTTP_REQUESTS: requests per worker (default 200)
* HTTP_SLEEP: delay between requests of one worker, in seconds (default 0)
"""
from __future__ import annotations

import os
import random
import string
import threading
import time
from collections import Counter
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

import requests

HTTP_BASE_URL = os.getenv("HTTP_BASE_URL", "http://localhost:8000")
HTTP_WORKERS = int(os.getenv("HTTP_WORKERS", "4"))
HTTP_REQUESTS = int(os.getenv("HTTP_REQUESTS", "200"))
HTTP_DELAY = float(os.getenv("HTTP_SLEEP", "0"))

# operation -> relative weight
OPERATIONS = {
    "create": 3,
    "pay": 2,
    "amend": 3,
    "cancel": 2,
    "delete": 1,
}


def rand_user_id(prefix: str = "u", length: int = 6) -> str:
    return f"{prefix}-" + "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def pick_operation(has_orders: bool, rng: random.Random = random) -> str:
    if not has_orders:
        return "create"
    ops = list(OPERATIONS)
    return rng.choices(ops, weights=[OPERATIONS[o] for o in ops], k=1)[0]


def build_patch(operation: str, rng: random.Random = random) -> Dict:
    if operation == "pay":
        return {"status": "paid"}
    if operation == "amend":
        return {"amount": round(rng.uniform(1, 500), 2)}
    raise ValueError(f"no PATCH body for {operation}")


class Tally:
    def __init__(self):
        self._lock = threading.Lock()
        self._counts: Counter = Counter()

    def record(self, operation: str, status: int) -> None:
        with self._lock:
            self._counts[(operation, status)] += 1

    def rows(self) -> List[Tuple[str, int, int]]:
        with self._lock:
            return sorted((op, status, n) for (op, status), n in self._counts.items())


class LiveOrders:
    def __init__(self):
        self._lock = threading.Lock()
        self._ids: List[str] = []

    def add(self, order_id: str) -> None:
        with self._lock:
            self._ids.append(order_id)

    def discard(self, order_id: str) -> None:
        with self._lock:
            if order_id in self._ids:
                self._ids.remove(order_id)

    def pick(self) -> Optional[str]:
        with self._lock:
            return random.choice(self._ids) if self._ids else None

    def __bool__(self):
        with self._lock:
            return bool(self._ids)


def run_once(session: requests.Session, base_url: str, live: LiveOrders, tally: Tally) -> None:
    operation = pick_operation(bool(live))
    if operation == "create":
        body = {"userId": rand_user_id(), "amount": round(random.uniform(1, 500), 2)}
        resp = session.post(urljoin(base_url, "/orders"), json=body, timeout=5)
        if resp.status_code == 201:
            live.add(resp.json()["id"])
        tally.record(operation, resp.status_code)
        return

    order_id = live.pick()
    if order_id is None:
        return
    url = urljoin(base_url, f"/orders/{order_id}")

    if operation == "delete":
        resp = session.delete(url, timeout=5)
        live.discard(order_id)
        tally.record(operation, resp.status_code)
        return

    current = session.get(url, timeout=5)
    if current.status_code == 404:
        live.discard(order_id)
        tally.record(operation, 404)
        return
    headers = {"If-Match": current.headers.get("ETag", "")}

    if operation == "cancel":
        resp = session.post(f"{url}/cancel", headers=headers, timeout=5)
    else:
        resp = session.patch(url, json=build_patch(operation), headers=headers, timeout=5)
    tally.record(operation, resp.status_code)


def http_worker(name: str, base_url: str, live: LiveOrders, tally: Tally, requests_per_worker: int) -> None:
    session = requests.Session()
    for _ in range(requests_per_worker):
        try:
            run_once(session, base_url, live, tally)
        except requests.RequestException as exc:
            print(f"[http:{name}] error: {exc}")
            tally.record("error", 0)
        if HTTP_DELAY:
            time.sleep(HTTP_DELAY)


def main() -> None:
    live = LiveOrders()
    tally = Tally()
    threads: List[threading.Thread] = []

    print(f"[info] {HTTP_WORKERS} workers x {HTTP_REQUESTS} requests against {HTTP_BASE_URL}")
    started = time.monotonic()
    for idx in range(HTTP_WORKERS):
        thread = threading.Thread(
            target=http_worker,
            name=f"http-{idx}",
            args=(f"w{idx}", HTTP_BASE_URL, live, tally, HTTP_REQUESTS),
            daemon=True,
        )
        thread.start()
        threads.append(thread)

    try:
        for thread in threads:
            thread.join()
    except KeyboardInterrupt:
        print("\n[info] Stopped by user")

    elapsed = time.monotonic() - started
    print(f"[info] done in {elapsed:.1f}s")
    for operation, status, n in tally.rows():
        print(f"{operation:>8} {status:>4} {n:>6}")


if __name__ == "__main__":
    main()

import threading

from satcat_ingest.dedup import DedupOracle
from satcat_ingest.store import SatelliteStore


def test_claim_category_once(tmp_path):
    oracle = DedupOracle(SatelliteStore(tmp_path))
    assert oracle.claim_category(4)
    assert not oracle.claim_category(4)
    assert oracle.claim_category(11)


def test_claim_refused_when_persisted(tmp_path):
    store = SatelliteStore(tmp_path)
    store.write_category(4, "x")
    store.write_image(1, "a.png", b"")
    oracle = DedupOracle(store)
    assert not oracle.claim_category(4)
    assert not oracle.claim_image(1, "a.png")
    assert oracle.claim_image(2, "a.png")


def test_concurrent_claims_grant_exactly_one(tmp_path):
    oracle = DedupOracle(SatelliteStore(tmp_path))
    barrier = threading.Barrier(16)
    granted = []
    lock = threading.Lock()

    def claim():
        barrier.wait()
        ok = oracle.claim_category(7)
        with lock:
            granted.append(ok)

    threads = [threading.Thread(target=claim) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert granted.count(True) == 1
    assert oracle.claimed_count == 1

import threading
from concurrent.futures import ThreadPoolExecutor

from orderguard.keys import ClientKeyPair


def test_concurrent_registration_assigns_unique_dense_ids(registry):
    keys = [ClientKeyPair.generate().public_key for _ in range(40)]
    barrier = threading.Barrier(8)

    def register_all(offset):
        barrier.wait()
        # every worker registers every key, starting at a different point
        rotated = keys[offset:] + keys[:offset]
        return {k: registry.register(k) for k in rotated}

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(register_all, range(0, 40, 5)))

    assert len(registry) == 40
    for mapping in results[1:]:
        assert mapping == results[0]
    assert sorted(results[0].values()) == list(range(40))


def test_concurrent_stores_for_different_clients(registry, vault):
    ids = [registry.register(ClientKeyPair.generate().public_key) for _ in range(6)]

    def writer(cid):
        for i in range(150):
            assert vault.store(cid, f"{cid}:{i}")

    with ThreadPoolExecutor(max_workers=6) as pool:
        list(pool.map(writer, ids))

    for cid in ids:
        assert vault.retrieve_all(cid) == [f"{cid}:{i}" for i in range(50, 150)]


def test_retrieval_never_sees_torn_ledger(registry, vault):
    cid = registry.register(ClientKeyPair.generate().public_key)
    done = threading.Event()
    problems = []

    def writer():
        for i in range(400):
            vault.store(cid, str(i))
        done.set()

    def reader():
        while not done.is_set():
            seq = [int(o) for o in vault.retrieve_all(cid)]
            if len(seq) > 100:
                problems.append(("overflow", len(seq)))
            if seq and seq != list(range(seq[0], seq[0] + len(seq))):
                problems.append(("gap", seq))

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert problems == []
    assert vault.retrieve_all(cid) == [str(i) for i in range(300, 400)]

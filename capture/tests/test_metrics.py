from concurrent.futures import ThreadPoolExecutor

from capture import metrics


def test_inc_get_and_reset():
    metrics.inc("frames_classified")
    metrics.inc("frames_classified", 2)
    assert metrics.get("frames_classified") == 3
    assert metrics.get_all() == {"frames_classified": 3}
    metrics.reset_all()
    assert metrics.get_all() == {}
    assert metrics.get("frames_classified") == 0


def test_inc_from_worker_threads_is_not_lost():
    def bump(_):
        for _ in range(2000):
            metrics.inc("lines_parsed")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(bump, range(8)))
    assert metrics.get("lines_parsed") == 16000

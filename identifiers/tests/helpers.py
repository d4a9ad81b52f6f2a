import threading


def allocate_concurrently(allocator, namespace, period, count, after_each=None):
    """
    Fire ``count`` allocate_next calls from separate threads released together.

    ``after_each`` runs in every worker thread once its call has finished,
    e.g. to close that thread's database connection.

    Returns ``(identifiers, errors)``.
    """
    barrier = threading.Barrier(count, timeout=10)
    results = []
    errors = []
    guard = threading.Lock()

    def worker():
        try:
            barrier.wait()
            identifier = allocator.allocate_next(namespace, period)
        except Exception as exc:  # noqa: BLE001
            with guard:
                errors.append(exc)
        else:
            with guard:
                results.append(identifier)
        finally:
            if after_each is not None:
                after_each()

    threads = [threading.Thread(target=worker) for _ in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    return results, errors


def sequences_of(identifiers):
    return sorted(int(identifier.rsplit("-", 1)[1]) for identifier in identifiers)


def no_sleep(seconds):
    pass

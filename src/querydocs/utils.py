"""Small helpers shared by the runners."""


def time_string(start: float, end: float) -> str:
    """Format the time between two ``time.perf_counter()`` readings."""
    elapsed = end - start
    if elapsed < 1:
        return f'{elapsed * 1000:.0f}ms'
    if elapsed < 60:
        return f'{elapsed:.2f}s'
    minutes, seconds = divmod(elapsed, 60)
    return f'{int(minutes)}m {seconds:.0f}s'


def query_summary(code: str, length: int = 50) -> str:
    """One-line excerpt of a snippet for log messages."""
    flattened = ' '.join(code.split('\n'))
    return f'"{flattened[:length]}..."'

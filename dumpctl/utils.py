from datetime import datetime


def localnow() -> datetime:
    """Naive local wall-clock time; artifact names and cutoffs use local time."""
    return datetime.now()

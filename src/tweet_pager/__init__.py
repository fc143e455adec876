from .client import TwitterClient
from .config import PagerConfig
from .models import PageSequence, RateLimitSignal, Skipped
from .paginate import paginate_chunked, paginate_cursor, paginate_max_id

__all__ = [
    "PageSequence",
    "PagerConfig",
    "RateLimitSignal",
    "Skipped",
    "TwitterClient",
    "paginate_chunked",
    "paginate_cursor",
    "paginate_max_id",
]

"""Domain-wide constants and default values."""

DEFAULT_HOST = "api.twitter.com"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Endpoint page sizes as documented for the v1.1 API
TIMELINE_PAGE_SIZE = 200
IDS_PAGE_SIZE = 5000
RETWEETERS_PAGE_SIZE = 100
LOOKUP_BATCH_SIZE = 100

# Initial buffer capacity for max-id pagination over many (or unbounded) pages
UNBOUNDED_INITIAL_CAPACITY = 1000

FIRST_CURSOR = "-1"
LAST_CURSOR = "0"

ENV_BEARER_TOKEN = "TWITTER_BEARER_TOKEN"
ENV_RETRY_ON_RATE_LIMIT = "TWEET_PAGER_RETRY_ON_RATE_LIMIT"
ENV_VERBOSE = "TWEET_PAGER_VERBOSE"
ENV_HOST = "TWEET_PAGER_HOST"
ENV_TIMEOUT = "TWEET_PAGER_TIMEOUT"

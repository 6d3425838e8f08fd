"""Remote module for copying objects between object stores.

Only pulling is supported: objects reachable from a commit are copied from a
local repository or a dumb HTTP server into the local object store.
"""

from plumb.remote.fetch import Fetcher, FetchResult, HttpSource, LocalSource, fetch, open_source

__all__ = [
    'Fetcher', 'FetchResult', 'HttpSource', 'LocalSource', 'fetch', 'open_source',
]

"""feedstore: a durable single-slot cache for an image feed.

Backends implement `FeedStore`; `SerialFeedStore` gives any backend strict
FIFO operation ordering; `feedstore.testing.specs` certifies backends.
"""

__version__ = "1.0.0"

"""Short URL service: hash-derived short codes with cached, expiring resolution."""

__version__ = "0.1.0"

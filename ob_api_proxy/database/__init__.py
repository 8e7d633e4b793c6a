"""Payment record stores: in-memory (redis.py) and Redis-backed (redis_real.py)."""

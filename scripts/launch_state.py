"""
Inspect or reset the persisted launch decision in Redis.

  python scripts/launch_state.py show
  python scripts/launch_state.py reset
  python scripts/launch_state.py set-temp https://example.com/promo

`reset` clears the sticky Remote/Classic mode so the next launch re-runs
attribution from scratch. Safe to run in local/dev/CI.
"""
import json
import os
import sys
from dataclasses import asdict

from redis import Redis

from launchpad.store.kv import RedisKeyValueStore
from launchpad.store.launch_state import LaunchStore

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
PREFIX = os.getenv("STORE_PREFIX", "launch:")

USAGE = "usage: launch_state.py show | reset | set-temp <url>"


def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        print(USAGE)
        return 2

    r = Redis.from_url(REDIS_URL, decode_responses=True)
    store = LaunchStore(RedisKeyValueStore(r, prefix=PREFIX))
    cmd = argv[0]

    if cmd == "show":
        print(json.dumps(asdict(store.snapshot()), indent=2))
        return 0
    if cmd == "reset":
        store.reset()
        print(f"OK: cleared launch state under {PREFIX!r} in {REDIS_URL}")
        return 0
    if cmd == "set-temp" and len(argv) == 2:
        store.set_temp_destination(argv[1])
        print(f"OK: temp destination set in {REDIS_URL}")
        return 0

    print(USAGE)
    return 2


if __name__ == "__main__":
    sys.exit(main())

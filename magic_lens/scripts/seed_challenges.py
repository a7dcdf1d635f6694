"""
Insert the default challenge catalogue.

Usage:
    python -m magic_lens.scripts.seed_challenges
"""
from magic_lens import config
from magic_lens.services.store import ChallengeStore


def main():
    store = ChallengeStore(config.DB_PATH)
    added = store.seed_defaults()
    if added:
        print(f"  seeded {added} challenges -> {config.DB_PATH}")
    else:
        print(f"  {config.DB_PATH} already has {store.count_challenges()} challenges, nothing to do")


if __name__ == "__main__":
    main()

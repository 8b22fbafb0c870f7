"""Primary keys are 26-character ULID strings."""

import ulid


def generate_ulid() -> str:
    return str(ulid.ULID())

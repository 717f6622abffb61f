"""
Invite codes for joining training sessions.

8 characters from an alphabet without look-alikes (no 0/O, 1/I/L),
so codes can be read out loud or typed from a screenshot.
"""

import re
import secrets

ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
CODE_LENGTH = 8

_VALID = re.compile(r"[2-9ABCDEFGHJKLMNPQRSTUVWXYZ]{%d}" % CODE_LENGTH)


def generate_invite_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def is_valid_invite_code(code: str) -> bool:
    return isinstance(code, str) and _VALID.fullmatch(code) is not None

from __future__ import annotations

import hmac
import re

from werkzeug.security import check_password_hash, generate_password_hash

# werkzeug's "<method>$<salt>$<hash>" format, e.g. scrypt:32768:8:1$... or pbkdf2:sha256:600000$...
_WERKZEUG_HASH_RE = re.compile(r"^(?:scrypt|pbkdf2)(?::[A-Za-z0-9]+)*\$[^$]+\$[0-9a-f]+$")


def is_password_hash(value: str | None) -> bool:
    return bool(_WERKZEUG_HASH_RE.match(str(value or "")))


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Password is required")
    return generate_password_hash(plain)


def verify_password(plain: str | None, stored: str | None) -> bool:
    plain = str(plain or "")
    stored = str(stored or "")
    if not plain or not stored:
        return False

    if is_password_hash(stored):
        try:
            return check_password_hash(stored, plain)
        except ValueError:
            return False

    # Legacy rows keep the password in clear text until the next login.
    return hmac.compare_digest(plain.encode("utf-8"), stored.encode("utf-8"))


def needs_rehash(stored: str | None) -> bool:
    return not is_password_hash(stored)

"""Credentials for the node's HTTP basic authentication."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from noderelay.utils.exceptions import ConfigurationError, InvalidCookieFile


@dataclass(frozen=True, slots=True)
class Auth:
    """How to authenticate: nothing, an explicit user/password pair, or a cookie file.

    Usage::

        Auth.none()
        Auth.user_pass("rpcuser", "rpcpassword")
        Auth.cookie_file("~/.bitcoin/.cookie")
    """

    kind: str = "none"
    user: str | None = None
    password: str | None = None
    path: Path | None = None

    @classmethod
    def none(cls) -> "Auth":
        return cls()

    @classmethod
    def user_pass(cls, user: str, password: str) -> "Auth":
        return cls(kind="user_pass", user=user, password=password)

    @classmethod
    def cookie_file(cls, path: str | Path) -> "Auth":
        return cls(kind="cookie_file", path=Path(path).expanduser())

    def get_user_pass(self) -> tuple[str | None, str | None]:
        """Resolve the credentials pair."""
        if self.kind == "user_pass":
            return self.user, self.password
        if self.kind == "cookie_file":
            assert self.path is not None
            return read_cookie_file(self.path)
        return None, None

    def __repr__(self) -> str:
        if self.kind == "cookie_file":
            return f"Auth.cookie_file({str(self.path)!r})"
        if self.kind == "user_pass":
            return f"Auth.user_pass({self.user!r}, '***')"
        return "Auth.none()"


def read_cookie_file(path: Path) -> tuple[str, str]:
    """Read `user:pass` from the first line of a cookie file.

    Later lines and the trailing newline are ignored; the first colon splits
    user from password.
    """
    try:
        with open(path, encoding="utf-8") as f:
            line = f.readline()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"cannot read cookie file {path}: {exc}", details={"path": str(path)}) from exc
    line = line.rstrip("\r\n")
    user, sep, password = line.partition(":")
    if not sep:
        raise InvalidCookieFile(str(path))
    return user, password

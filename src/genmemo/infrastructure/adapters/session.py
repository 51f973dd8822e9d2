from genmemo.domain.interfaces import SessionProvider


class StaticSession(SessionProvider):
    """Session holding a token handed over by the authentication layer."""

    def __init__(self, token: str | None = None):
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    def login(self, token: str) -> None:
        self._token = token

    def logout(self) -> None:
        self._token = None

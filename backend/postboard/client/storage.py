import json
from pathlib import Path

DEFAULT_STORE_PATH = Path.home() / ".postboard" / "session.json"


class TokenStore:
    """Persists the session token between client runs."""

    def __init__(self, path: Path | str = DEFAULT_STORE_PATH):
        self.path = Path(path)

    def load(self) -> str | None:
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_text())
        except ValueError:
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token}))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

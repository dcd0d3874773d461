import itertools

from pydantic import BaseModel


class Notification(BaseModel):
    id: int
    level: str  # "success" | "error" | "info"
    message: str


class Notifier:
    """Transient, dismissible notifications shown on top of every screen."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.active: list[Notification] = []

    def push(self, level: str, message: str) -> Notification:
        note = Notification(id=next(self._ids), level=level, message=message)
        self.active.append(note)
        return note

    def success(self, message: str) -> Notification:
        return self.push("success", message)

    def error(self, message: str) -> Notification:
        return self.push("error", message)

    def info(self, message: str) -> Notification:
        return self.push("info", message)

    def dismiss(self, note_id: int) -> None:
        self.active = [n for n in self.active if n.id != note_id]

    def clear(self) -> None:
        self.active.clear()

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.active]

from dataclasses import dataclass


@dataclass(slots=True)
class Principal:
    subject: str
    email: str | None = None

    def owns(self, owner_id: str | None) -> bool:
        return bool(owner_id) and owner_id == self.subject

    def require_owner(self, owner_id: str | None) -> None:
        if not self.owns(owner_id):
            raise PermissionError("career page is owned by another user")

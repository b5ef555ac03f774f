"""
Contexto de identidad explícito.

Cada operación recibe el Viewer (quién actúa) como parámetro; no existe un
"usuario actual" global.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

from app.core.config import get_settings

_WHITESPACE = re.compile(r"\s+")

# Campos donde el proveedor de identidad puede traer la foto de perfil, por prioridad
AVATAR_FIELDS = (
    ("avatarImage", "url"),
    ("profileImage", "url"),
    ("avatar", "url"),
    ("imageUrl",),
    ("image", "url"),
    ("picture",),
    ("photoURL",),
)


def derive_user_id(display_name: str) -> str:
    """
    Deriva el user_id estable a partir del display name.

    >>> derive_user_id("Ana  María")
    'user_ana_maría'
    """
    normalized = _WHITESPACE.sub("_", display_name.strip().lower())
    if not normalized:
        raise ValueError("display_name vacío, no se puede derivar user_id")
    return f"user_{normalized}"


def derive_handle(display_name: str) -> str:
    return _WHITESPACE.sub("_", display_name.strip().lower()) or "user"


def fallback_avatar_url(display_name: Optional[str]) -> str:
    settings = get_settings()
    return settings.AVATAR_FALLBACK_URL.format(name=quote(display_name or "User"))


def _dig(data: Mapping[str, Any], path: tuple) -> Optional[Any]:
    current: Any = data
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def resolve_avatar_url(user_record: Optional[Mapping[str, Any]], display_name: Optional[str]) -> str:
    """Primera URL de avatar disponible en el registro del usuario, o una generada."""
    if user_record:
        for path in AVATAR_FIELDS:
            value = _dig(user_record, path)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback_avatar_url(display_name)


@dataclass(frozen=True)
class Viewer:
    user_id: str
    display_name: str
    avatar_url: Optional[str] = None

    @property
    def handle(self) -> str:
        return derive_handle(self.display_name)

    @classmethod
    def from_display_name(cls, display_name: str, avatar_url: Optional[str] = None) -> "Viewer":
        return cls(
            user_id=derive_user_id(display_name),
            display_name=display_name.strip(),
            avatar_url=avatar_url,
        )

    @classmethod
    def from_identity_record(cls, record: Mapping[str, Any]) -> "Viewer":
        """Construye el Viewer desde el registro crudo del proveedor de identidad."""
        display_name = (record.get("displayName") or record.get("display_name") or "").strip()
        return cls.from_display_name(display_name, resolve_avatar_url(record, display_name))

    def is_ignored_identity(self) -> bool:
        """Identidades de demo que nunca deben persistirse."""
        settings = get_settings()
        lowered = self.display_name.lower()
        if "mock" in lowered:
            return True
        return any(lowered == name.lower() for name in settings.ignored_display_names)

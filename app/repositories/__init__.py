# Inicializador del paquete repositories
from app.repositories.base import BaseRepository, dialect_insert
from app.repositories.user_profile import user_profile_repository
from app.repositories.feed_item import feed_item_repository
from app.repositories.follow import follow_repository
from app.repositories.shared_item import shared_item_repository

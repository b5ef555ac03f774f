"""
Servicios del motor de curación.

Los servicios implementan la lógica de negocio sobre los repositorios y
son los únicos que confirman transacciones.
"""

from app.services.user_directory import user_directory
from app.services.event_collector import event_collector
from app.services.social_graph import social_graph
from app.services.feed_curator import feed_curator
from app.services.share_vote_ledger import share_vote_ledger
from app.services.friends_feed import friends_feed

from .biome import Biome
from .card import Card
from .event_log import EventLog
from .game import Game
from .guess import Guess
from .pity_tracker import PityTracker
from .pokedex_entry import PokedexEntry
from .pokemon import Pokemon
from .pokemon_spawn import PokemonSpawn
from .user import User
from .user_card import UserCard

__all__ = [
    "Biome",
    "Card",
    "EventLog",
    "Game",
    "Guess",
    "PityTracker",
    "PokedexEntry",
    "Pokemon",
    "PokemonSpawn",
    "User",
    "UserCard",
]

"""
View-state module for catbreeds.

View models turn engine results into immutable states published through a
single-slot StateChannel.
"""

from catbreeds.state.channel import StateChannel
from catbreeds.state.models import BreedDetailsState, BreedListState, FavoritesState
from catbreeds.state.viewmodels import (
    BreedDetailsViewModel,
    BreedListViewModel,
    FavoritesViewModel,
)

__all__ = [
    "StateChannel",
    "BreedListState",
    "BreedDetailsState",
    "FavoritesState",
    "BreedListViewModel",
    "BreedDetailsViewModel",
    "FavoritesViewModel",
]

from genecars.evolution.selection.parent_selector import (
    ParentSelector,
    RankProportionalParentSelector,
    RouletteParentSelector,
    SelectionPolicy,
    TournamentParentSelector,
    build_parent_selector,
)

__all__ = [
    "ParentSelector",
    "RankProportionalParentSelector",
    "RouletteParentSelector",
    "SelectionPolicy",
    "TournamentParentSelector",
    "build_parent_selector",
]

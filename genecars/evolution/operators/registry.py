from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from genecars.evolution.operators.base import GeneticOperators
from genecars.evolution.operators.builtin import BuiltinOperators
from genecars.evolution.operators.script import ScriptOperators
from genecars.exceptions import OperatorLoadError

BUILTIN = "builtin"


@dataclass(frozen=True)
class OperatorBinding:
    """Operators chosen at startup, plus the load error if a script was rejected."""

    operators: GeneticOperators
    source: str
    load_error: OperatorLoadError | None = None

    @property
    def fell_back(self) -> bool:
        return self.load_error is not None


class OperatorRegistry:
    """Named operator implementations; ``builtin`` is always registered."""

    def __init__(self) -> None:
        self._operators: dict[str, GeneticOperators] = {BUILTIN: BuiltinOperators()}

    def register(self, name: str, operators: GeneticOperators) -> None:
        if name == BUILTIN:
            raise ValueError(f"'{BUILTIN}' is reserved")
        self._operators[name] = operators
        logger.debug("[OperatorRegistry] Registered {} ({})", name, type(operators).__name__)

    def get(self, name: str) -> GeneticOperators:
        try:
            return self._operators[name]
        except KeyError:
            raise KeyError(
                f"Unknown operators {name!r}; registered: {sorted(self._operators)}"
            ) from None

    @property
    def builtin(self) -> GeneticOperators:
        return self._operators[BUILTIN]

    def names(self) -> list[str]:
        return sorted(self._operators)

    def bind(self, ref: str | None) -> OperatorBinding:
        """Resolve *ref* to operators.

        *ref* may be a registered name, a dotted module path or a ``.py``
        file. A script that cannot be loaded is not fatal: the built-ins are
        bound instead and the error is returned for the caller to report.
        """
        if not ref or ref == BUILTIN:
            return OperatorBinding(self.builtin, BUILTIN)
        if ref in self._operators:
            return OperatorBinding(self._operators[ref], ref)

        try:
            operators = ScriptOperators.load(ref)
        except OperatorLoadError as exc:
            logger.warning(
                "[OperatorRegistry] {}; falling back to built-in operators", exc
            )
            return OperatorBinding(self.builtin, BUILTIN, load_error=exc)

        self._operators[ref] = operators
        return OperatorBinding(operators, ref)

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import math
from typing import Iterable

from loguru import logger

from genecars.evolution.engine.breeding import BreedingPlan, breed_offspring
from genecars.evolution.engine.config import EvolutionConfig
from genecars.evolution.engine.metrics import EngineMetrics
from genecars.evolution.listeners import EvolutionListener
from genecars.evolution.operators.base import GeneticOperators
from genecars.evolution.operators.builtin import BuiltinOperators
from genecars.evolution.operators.guard import OperatorGuard
from genecars.evolution.operators.registry import OperatorRegistry
from genecars.evolution.selection.parent_selector import (
    ParentSelector,
    build_parent_selector,
)
from genecars.evolution.storage.high_scores import HighScoreLedger
from genecars.evolution.storage.snapshot import RunSnapshot
from genecars.exceptions import (
    EvolutionError,
    FitnessReportError,
    IncompleteGeneration,
    InvalidGenomeLength,
    InvariantViolation,
    OperatorFailure,
)
from genecars.genome.decoder import VehicleDefinition, decode
from genecars.genome.genome import Genome
from genecars.genome.schema import DEFAULT_SCHEMA, GenomeSchema
from genecars.population.individual import Individual
from genecars.population.population import Population
from genecars.population.state import GenerationState, Origin, validate_transition
from genecars.utils.seed import StreamPurpose, parse_seed, stream

__all__ = ["GenerationManager"]


class GenerationManager:
    """
    Owns the current population and builds each next generation:
    - EVALUATING: the harness reports a fitness for every individual.
    - ADVANCING: ranking, champion bookkeeping and breeding of the next population.
    The generation counter only moves when a complete next population exists.
    """

    def __init__(
        self,
        config: EvolutionConfig,
        *,
        schema: GenomeSchema = DEFAULT_SCHEMA,
        operators: GeneticOperators | None = None,
        fallback_operators: GeneticOperators | None = None,
        parent_selector: ParentSelector | None = None,
        listeners: Iterable[EvolutionListener] = (),
        seed: str | int | None = None,
    ):
        self.config = config
        self.schema = schema
        fallback = fallback_operators or BuiltinOperators()
        self.operators = operators or fallback
        self.parent_selector = parent_selector or build_parent_selector(
            config.selection, config.tournament_size
        )
        self._guard = OperatorGuard(self.operators, schema.genome_length, fallback)
        self._listeners: list[EvolutionListener] = list(listeners)

        self.high_scores = HighScoreLedger(config.high_score_capacity)
        self.metrics = EngineMetrics()
        self._seed = 0
        self._epoch = 0
        self._state = GenerationState.EVALUATING
        self._population: Population = Population(1, [])

        logger.info(
            "[GenerationManager] Init | P={}, clones={}, random={}, crossover={}, flips={}, "
            "operators={}, selector={}, genome_bits={}",
            config.population_size,
            config.num_clones,
            config.num_random,
            config.crossover_rate,
            config.mutation_flip_count,
            self.operators.name,
            type(self.parent_selector).__name__,
            schema.genome_length,
        )
        self.reset(seed)

    @classmethod
    def from_config(
        cls,
        config: EvolutionConfig,
        *,
        registry: OperatorRegistry | None = None,
        listeners: Iterable[EvolutionListener] = (),
        seed: str | int | None = None,
        schema: GenomeSchema = DEFAULT_SCHEMA,
    ) -> GenerationManager:
        """Build a manager with operators bound from ``config.operator_script``.

        A script that fails to load leaves the built-ins in place and is
        reported to listeners as an operator warning.
        """
        registry = registry or OperatorRegistry()
        binding = registry.bind(config.operator_script)
        manager = cls(
            config,
            schema=schema,
            operators=binding.operators,
            fallback_operators=registry.builtin,
            listeners=listeners,
            seed=seed,
        )
        if binding.load_error is not None:
            manager._notify(
                "on_operator_warning",
                manager.generation,
                f"Operator script not loaded, using built-in operators: {binding.load_error}",
            )
        return manager

    # ------------------------------------------------------------------
    # read-only views

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def epoch(self) -> int:
        """Incremented by every reset and restore; identifies the current run."""
        return self._epoch

    @property
    def generation(self) -> int:
        return self._population.generation

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def population(self) -> Population:
        return self._population

    def current_population(self) -> list[Individual]:
        """Copies of the current individuals; fitness is only set via report_fitness."""
        return [ind.model_copy() for ind in self._population]

    def pending_ids(self) -> list[int]:
        return self._population.pending_ids()

    def phenotype(self, individual_id: int) -> VehicleDefinition:
        individual = self._population.get(individual_id)
        if individual is None:
            raise KeyError(f"No individual {individual_id} in generation {self.generation}")
        return decode(individual.genome, self.schema)

    def phenotypes(self) -> dict[int, VehicleDefinition]:
        """Decoded vehicle definition of every individual, keyed by id."""
        individuals = self._population.individuals
        if self.config.max_workers <= 1:
            definitions = [decode(ind.genome, self.schema) for ind in individuals]
        else:
            with ThreadPoolExecutor(
                max_workers=self.config.max_workers, thread_name_prefix="genecars-decode"
            ) as pool:
                definitions = list(
                    pool.map(lambda ind: decode(ind.genome, self.schema), individuals)
                )
        return {ind.id: d for ind, d in zip(individuals, definitions)}

    # ------------------------------------------------------------------
    # lifecycle

    def add_listener(self, listener: EvolutionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EvolutionListener) -> None:
        self._listeners.remove(listener)

    def reset(self, seed: str | int | None = None) -> Population:
        """Discard the run and start generation 1 from *seed*."""
        self._seed = parse_seed(seed)
        self._epoch += 1
        self.high_scores.reset()
        self.metrics = EngineMetrics()
        individuals = [
            self._random_individual(1, i, StreamPurpose.INITIAL)
            for i in range(self.config.population_size)
        ]
        self._population = Population(1, individuals)
        self._state = GenerationState.EVALUATING
        logger.info(
            "[GenerationManager] Reset | seed=0x{:016X}, population={}",
            self._seed,
            len(individuals),
        )
        return self._population

    def report_fitness(self, individual_id: int, value: float) -> None:
        """Attach the distance traveled by one individual of the current generation."""
        if self._state is not GenerationState.EVALUATING:
            raise FitnessReportError(
                f"Fitness reported while {self._state.value}; wait for generation to be assembled"
            )
        individual = self._population.get(individual_id)
        if individual is None:
            raise FitnessReportError(
                f"No individual {individual_id} in generation {self.generation}"
            )
        if individual.fitness is not None:
            raise FitnessReportError(
                f"Individual {individual_id} of generation {self.generation} already has fitness "
                f"{individual.fitness}"
            )
        fitness = float(value)
        if not math.isfinite(fitness):
            raise FitnessReportError(f"Fitness for individual {individual_id} is not finite: {value}")

        individual.fitness = fitness
        self.metrics.record_fitness(fitness)

    def advance(self) -> Population:
        """Rank the evaluated generation and replace it with the next one.

        Raises:
            IncompleteGeneration: some individuals still have no fitness.
            EvolutionError: breeding failed even with the fallback operators;
                the current generation stays in place.
            InvariantViolation: the assembled population is malformed.
        """
        if self._state is not GenerationState.EVALUATING:
            raise EvolutionError(f"Cannot advance while {self._state.value}")
        pending = self._population.pending_ids()
        if pending:
            raise IncompleteGeneration(pending)

        self._transition(GenerationState.ADVANCING)
        current = self._population
        ranked = current.ranked()

        try:
            next_population, failures = self._assemble(ranked)
        except OperatorFailure as exc:
            self.metrics.aborted_advances += 1
            self._transition(GenerationState.EVALUATING)
            logger.error(
                "[GenerationManager] Generation {} breeding aborted: {}", current.generation + 1, exc
            )
            raise EvolutionError(
                f"Generation {current.generation + 1} could not be bred: {exc}"
            ) from exc
        except InvariantViolation as exc:
            self.metrics.aborted_advances += 1
            self._transition(GenerationState.EVALUATING)
            logger.critical("[GenerationManager] Invariant violated: {}", exc)
            raise
        except Exception:
            # the current generation stays intact and can be advanced again
            self.metrics.aborted_advances += 1
            self._transition(GenerationState.EVALUATING)
            logger.exception(
                "[GenerationManager] Generation {} assembly failed", current.generation + 1
            )
            raise

        champion = ranked[0]
        entry = self.high_scores.record(current.generation, champion.id, champion.fitness)

        counts = next_population.origin_counts()
        self.metrics.record_advance(
            cloned=counts[Origin.CLONED],
            randomized=counts[Origin.RANDOM_INJECTION],
            bred=counts[Origin.BRED],
            operator_failures=failures,
        )
        self._population = next_population
        self._transition(GenerationState.EVALUATING)

        logger.info(
            "[GenerationManager] Generation {} -> {} | best={:.2f} (id {}), mean={:.2f}, "
            "operator_failures={}",
            current.generation,
            next_population.generation,
            champion.fitness,
            champion.id,
            sum(ind.fitness for ind in ranked) / len(ranked),
            failures,
        )

        if entry is not None:
            self.metrics.champions_recorded += 1
            self._notify("on_champion", entry.generation, entry.individual_id, entry.fitness)
        if failures >= self.config.operator_failure_warning_threshold:
            self._notify(
                "on_operator_warning",
                next_population.generation,
                f"{failures} operator failure(s) while breeding; built-in operators were used instead",
            )
        self._notify(
            "on_generation_advanced",
            next_population.generation,
            [ind.model_copy() for ind in next_population],
        )
        return next_population

    # ------------------------------------------------------------------
    # persistence

    def snapshot(self) -> RunSnapshot:
        return RunSnapshot(
            seed=self._seed,
            generation=self.generation,
            state=self._state,
            config=self.config.model_dump(),
            individuals=[ind.to_dict() for ind in self._population],
            high_scores=self.high_scores.to_list(),
        )

    def restore(self, snapshot: RunSnapshot) -> Population:
        """Resume from *snapshot*; reported fitness values are kept."""
        if snapshot.state is not GenerationState.EVALUATING:
            raise EvolutionError("Snapshots can only be restored at an evaluation boundary")
        individuals = [Individual.from_dict(d) for d in snapshot.individuals]
        for ind in individuals:
            if len(ind.genome) != self.schema.genome_length:
                raise InvalidGenomeLength(self.schema.genome_length, len(ind.genome))
        if len(individuals) != self.config.population_size:
            raise InvariantViolation(
                f"Snapshot holds {len(individuals)} individuals, "
                f"population_size is {self.config.population_size}"
            )

        self._seed = snapshot.seed
        self._epoch += 1
        self._population = Population(snapshot.generation, individuals)
        self.high_scores = HighScoreLedger.from_list(
            self.config.high_score_capacity, snapshot.high_scores
        )
        self.metrics = EngineMetrics()
        self._state = GenerationState.EVALUATING
        logger.info(
            "[GenerationManager] Restored generation {} ({} pending)",
            self.generation,
            len(self.pending_ids()),
        )
        return self._population

    def get_status(self) -> dict[str, object]:
        """Light, non-blocking status for UIs/health checks."""
        best = self.high_scores.best
        return {
            "state": self._state.value,
            "generation": self.generation,
            "seed": self._seed,
            "population_size": len(self._population),
            "pending": len(self.pending_ids()),
            "best_ever": best.fitness if best else None,
            **self.metrics.to_dict(),
        }

    # ------------------------------------------------------------------
    # internals

    def _assemble(self, ranked: list[Individual]) -> tuple[Population, int]:
        cfg = self.config
        next_generation = self.generation + 1
        individuals: list[Individual] = []

        for i in range(cfg.num_clones):
            source = ranked[i % len(ranked)]
            individuals.append(
                Individual(
                    id=i,
                    genome=source.genome,
                    origin=Origin.CLONED,
                    generation=next_generation,
                    parents=(source.id,),
                )
            )

        first_random = cfg.num_clones
        for i in range(first_random, first_random + cfg.num_random):
            individuals.append(
                self._random_individual(next_generation, i, StreamPurpose.RANDOM_INJECTION)
            )

        plan = BreedingPlan(
            seed=self._seed,
            generation=next_generation,
            crossover_rate=cfg.crossover_rate,
            flip_count=cfg.mutation_flip_count,
        )
        results = breed_offspring(
            range(len(individuals), cfg.population_size),
            ranked=ranked,
            plan=plan,
            selector=self.parent_selector,
            guard=self._guard,
            max_workers=cfg.max_workers,
        )
        individuals.extend(r.individual for r in results)
        failures = sum(r.operator_failures for r in results)

        if len(individuals) != cfg.population_size:
            raise InvariantViolation(
                f"Assembled {len(individuals)} individuals, expected {cfg.population_size}"
            )
        return Population(next_generation, individuals), failures

    def _random_individual(
        self, generation: int, index: int, purpose: StreamPurpose
    ) -> Individual:
        rng = stream(self._seed, generation, purpose, index)
        return Individual(
            id=index,
            genome=Genome.random(self.schema.genome_length, rng),
            origin=Origin.RANDOM_INJECTION,
            generation=generation,
        )

    def _transition(self, new: GenerationState) -> None:
        validate_transition(self._state, new)
        self._state = new

    def _notify(self, event: str, *args: object) -> None:
        for listener in self._listeners:
            try:
                getattr(listener, event)(*args)
            except Exception as exc:  # pylint: disable=broad-except
                logger.error(
                    "[GenerationManager] Listener {} failed in {}: {}",
                    type(listener).__name__,
                    event,
                    exc,
                )

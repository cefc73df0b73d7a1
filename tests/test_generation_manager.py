import numpy as np
import pytest

from genecars.evolution.engine.config import EvolutionConfig
from genecars.evolution.engine.core import GenerationManager
from genecars.evolution.listeners import EvolutionListener
from genecars.evolution.operators.base import GeneticOperators
from genecars.evolution.selection.parent_selector import ParentSelector, build_parent_selector
from genecars.exceptions import (
    EvolutionError,
    FitnessReportError,
    IncompleteGeneration,
)
from genecars.population.state import GenerationState, Origin


class RecordingListener(EvolutionListener):
    def __init__(self):
        self.advanced = []
        self.champions = []
        self.warnings = []

    def on_generation_advanced(self, generation, individuals):
        self.advanced.append((generation, len(individuals)))

    def on_champion(self, generation, individual_id, distance):
        self.champions.append((generation, individual_id, distance))

    def on_operator_warning(self, generation, message):
        self.warnings.append((generation, message))


class AlwaysFailing(GeneticOperators):
    name = "failing"

    def crossover(self, genome_a, genome_b, rate, rng):
        raise RuntimeError("crossover exploded")

    def mutate(self, genome, flip_count, rng):
        raise RuntimeError("mutate exploded")


def genomes(manager):
    return [ind.genome for ind in manager.current_population()]


def test_initial_generation(manager):
    population = manager.current_population()
    assert manager.generation == 1
    assert manager.state is GenerationState.EVALUATING
    assert [ind.id for ind in population] == list(range(20))
    assert all(ind.origin is Origin.RANDOM_INJECTION for ind in population)
    assert all(len(ind.genome) == 126 for ind in population)
    assert manager.pending_ids() == list(range(20))


def test_ranking_breaks_ties_by_lower_id():
    manager = GenerationManager(
        EvolutionConfig(population_size=4, num_clones=4, num_random=0), seed=1
    )
    for i, f in enumerate([10.0, 30.0, 30.0, 5.0]):
        manager.report_fitness(i, f)
    assert [ind.id for ind in manager.population.ranked()] == [1, 2, 0, 3]

    before = genomes(manager)
    manager.advance()
    # clones follow rank order
    assert genomes(manager) == [before[1], before[2], before[0], before[3]]


def test_quotas_are_conserved(manager, evaluate_all):
    for _ in range(3):
        evaluate_all(manager)
        population = manager.advance()
        counts = population.origin_counts()
        assert counts[Origin.CLONED] == 2
        assert counts[Origin.RANDOM_INJECTION] == 2
        assert counts[Origin.BRED] == 16
        assert [ind.id for ind in population] == list(range(20))
        # clones first, then random injections, then bred
        assert [ind.origin for ind in population][:4] == [
            Origin.CLONED,
            Origin.CLONED,
            Origin.RANDOM_INJECTION,
            Origin.RANDOM_INJECTION,
        ]
    assert manager.generation == 4


def test_more_clones_than_ranked_individuals_wrap_around(evaluate_all):
    manager = GenerationManager(
        EvolutionConfig(population_size=3, num_clones=3, num_random=0), seed=5
    )
    evaluate_all(manager)
    manager.advance()
    assert manager.population.origin_counts()[Origin.CLONED] == 3


def test_advance_requires_every_fitness(manager):
    for i in range(18):
        manager.report_fitness(i, 1.0)
    with pytest.raises(IncompleteGeneration) as exc_info:
        manager.advance()
    assert exc_info.value.pending == [18, 19]
    assert manager.generation == 1
    assert manager.state is GenerationState.EVALUATING


def test_fitness_reports_are_validated(manager):
    with pytest.raises(FitnessReportError):
        manager.report_fitness(20, 1.0)
    with pytest.raises(FitnessReportError):
        manager.report_fitness(-1, 1.0)
    with pytest.raises(FitnessReportError):
        manager.report_fitness(0, float("nan"))
    with pytest.raises(FitnessReportError):
        manager.report_fitness(0, float("inf"))

    manager.report_fitness(0, 12.5)
    with pytest.raises(FitnessReportError):
        manager.report_fitness(0, 13.0)
    assert manager.population[0].fitness == 12.5


def run_generations(config, seed, n, report):
    manager = GenerationManager(config, seed=seed)
    history = [genomes(manager)]
    for _ in range(n):
        report(manager, lambda ind: float(ind.genome.bits.sum()))
        manager.advance()
        history.append(genomes(manager))
    return history


def test_same_seed_gives_the_same_run(config, evaluate_all):
    hex_seeded = run_generations(config, "\\x2A", 4, evaluate_all)
    assert hex_seeded == run_generations(config, 42, 4, evaluate_all)
    assert run_generations(config, 43, 1, evaluate_all) != hex_seeded[:2]


def test_threaded_breeding_matches_sequential(config, evaluate_all):
    threaded = config.model_copy(update={"max_workers": 4})
    sequential = run_generations(config, 42, 3, evaluate_all)
    assert sequential == run_generations(threaded, 42, 3, evaluate_all)


def test_end_to_end_generation_two(manager):
    fitness = {i: float((i * 7) % 20) + i / 100.0 for i in range(20)}
    for i, f in fitness.items():
        manager.report_fitness(i, f)
    gen1 = manager.current_population()
    top_two = sorted(gen1, key=lambda ind: -fitness[ind.id])[:2]

    manager.advance()
    gen2 = manager.current_population()
    assert manager.generation == 2

    assert gen2[0].genome == top_two[0].genome
    assert gen2[1].genome == top_two[1].genome
    assert gen2[0].parents == (top_two[0].id,)

    gen1_genomes = [ind.genome for ind in gen1]
    for ind in gen2[2:4]:
        assert ind.origin is Origin.RANDOM_INJECTION
        assert all(ind.genome != g for g in gen1_genomes)

    for ind in gen2[4:]:
        assert ind.origin is Origin.BRED
        a, b = (gen1[p].genome.bits for p in ind.parents)
        unexplained = np.count_nonzero((ind.genome.bits != a) & (ind.genome.bits != b))
        assert unexplained <= 3


def test_champion_is_recorded_and_announced(manager, evaluate_all):
    listener = RecordingListener()
    manager.add_listener(listener)
    evaluate_all(manager)
    manager.advance()

    assert listener.champions == [(1, 19, 190.0)]
    assert listener.advanced == [(2, 20)]
    assert manager.high_scores.best.fitness == 190.0
    assert manager.get_status()["best_ever"] == 190.0


def test_failing_operator_script_falls_back_and_warns(tmp_path, config, evaluate_all):
    script = tmp_path / "bad_ops.py"
    script.write_text(
        "def crossover(genome_a, genome_b, rate, rng):\n"
        "    raise RuntimeError('nope')\n"
        "\n"
        "def mutate(genome, flip_count, rng):\n"
        "    return None\n"
    )
    listener = RecordingListener()
    manager = GenerationManager.from_config(
        config.model_copy(update={"operator_script": str(script)}),
        listeners=[listener],
        seed=42,
    )
    evaluate_all(manager)
    population = manager.advance()

    assert len(population) == 20
    assert manager.metrics.operator_failures == 32
    assert listener.warnings and listener.warnings[0][0] == 2


def test_unloadable_operator_script_is_reported(tmp_path, config):
    listener = RecordingListener()
    manager = GenerationManager.from_config(
        config.model_copy(update={"operator_script": str(tmp_path / "missing.py")}),
        listeners=[listener],
        seed=42,
    )
    assert manager.operators.name == "builtin"
    assert len(listener.warnings) == 1


def test_advance_aborts_when_fallback_fails_too(config, evaluate_all):
    failing = AlwaysFailing()
    manager = GenerationManager(
        config, operators=failing, fallback_operators=failing, seed=42
    )
    evaluate_all(manager)
    before = genomes(manager)
    with pytest.raises(EvolutionError):
        manager.advance()
    assert manager.generation == 1
    assert manager.state is GenerationState.EVALUATING
    assert genomes(manager) == before
    assert len(manager.high_scores) == 0
    assert manager.metrics.aborted_advances == 1


def test_listener_errors_do_not_break_the_engine(manager, evaluate_all):
    class Broken(EvolutionListener):
        def on_generation_advanced(self, generation, individuals):
            raise RuntimeError("display gone")

    manager.add_listener(Broken())
    evaluate_all(manager)
    manager.advance()
    assert manager.generation == 2


def test_reset_starts_over(manager, evaluate_all):
    first = genomes(manager)
    evaluate_all(manager)
    manager.advance()
    manager.reset(42)
    assert manager.generation == 1
    assert genomes(manager) == first
    assert len(manager.high_scores) == 0


def test_phenotypes_decode_every_individual(config):
    threaded = GenerationManager(config.model_copy(update={"max_workers": 3}), seed=42)
    sequential = GenerationManager(config, seed=42)
    assert threaded.phenotypes() == sequential.phenotypes()
    assert sequential.phenotype(5) == sequential.phenotypes()[5]
    with pytest.raises(KeyError):
        sequential.phenotype(99)


class BrokenSelector(ParentSelector):
    def _pick(self, ranked, candidates, rng):
        raise RuntimeError("no parents today")


@pytest.mark.parametrize("selection", ["rank", "tournament", "roulette"])
@pytest.mark.parametrize(
    "fitness_of",
    [
        lambda ind: 1e308 if ind.id % 2 else -1e308,
        lambda ind: -1000.0 * (ind.id + 1),
        lambda ind: 5.0,
        lambda ind: 0.0,
    ],
    ids=["extreme", "negative", "equal", "zero"],
)
def test_every_selection_policy_advances_on_unusual_fitness(
    config, evaluate_all, selection, fitness_of
):
    manager = GenerationManager(config.model_copy(update={"selection": selection}), seed=42)
    evaluate_all(manager, fitness_of)
    population = manager.advance()

    assert manager.generation == 2
    assert manager.state is GenerationState.EVALUATING
    assert population.origin_counts()[Origin.BRED] == 16
    assert all(len(ind.parents) == 2 for ind in population if ind.origin is Origin.BRED)


def test_failed_assembly_leaves_the_generation_advanceable(config, evaluate_all):
    manager = GenerationManager(config, parent_selector=BrokenSelector(), seed=42)
    evaluate_all(manager)
    with pytest.raises(RuntimeError):
        manager.advance()

    assert manager.state is GenerationState.EVALUATING
    assert manager.generation == 1
    assert manager.pending_ids() == []
    assert manager.metrics.aborted_advances == 1
    assert len(manager.high_scores) == 0

    manager.parent_selector = build_parent_selector("rank")
    manager.advance()
    assert manager.generation == 2


def test_current_population_hands_out_copies(manager):
    ind = manager.current_population()[0]
    ind.fitness = 99.0
    assert manager.pending_ids() == list(range(20))

    manager.report_fitness(0, 1.0)
    assert manager.current_population()[0].fitness == 1.0


def test_reset_and_restore_start_a_new_epoch(manager):
    first = manager.epoch
    manager.reset(42)
    assert manager.epoch == first + 1
    manager.restore(manager.snapshot())
    assert manager.epoch == first + 2

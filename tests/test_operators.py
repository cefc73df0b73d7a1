import numpy as np
import pytest

from genecars.evolution.operators.base import GeneticOperators
from genecars.evolution.operators.builtin import BuiltinOperators, do_crossover, flip_genome_bits
from genecars.evolution.operators.guard import OperatorGuard
from genecars.evolution.operators.registry import OperatorRegistry
from genecars.evolution.operators.script import ScriptOperators
from genecars.exceptions import OperatorFailure, OperatorLoadError
from genecars.genome.genome import Genome


class RaisingOperators(GeneticOperators):
    name = "raising"

    def crossover(self, genome_a, genome_b, rate, rng):
        raise RuntimeError("boom")

    def mutate(self, genome, flip_count, rng):
        raise RuntimeError("boom")


class TruncatingOperators(GeneticOperators):
    name = "truncating"

    def crossover(self, genome_a, genome_b, rate, rng):
        return Genome(genome_a.bits[:-1])

    def mutate(self, genome, flip_count, rng):
        return genome.to_bitstring()


def test_crossover_with_zero_rate_copies_first_parent(rng):
    a = Genome.random(126, rng)
    b = Genome.random(126, rng)
    assert do_crossover(a, b, 0.0, rng) == a


def test_crossover_of_identical_parents_is_identity(rng):
    a = Genome.random(126, rng)
    for rate in (0.0, 0.4, 1.0):
        assert do_crossover(a, a, rate, rng) == a


def test_crossover_with_full_rate_alternates_strands(rng):
    a = Genome.zeros(6)
    b = Genome.ones(6)
    assert do_crossover(a, b, 1.0, rng).to_bitstring() == "010101"


def test_crossover_bits_come_from_a_parent(rng):
    a = Genome.random(126, rng)
    b = Genome.random(126, rng)
    child = do_crossover(a, b, 0.4, rng)
    assert np.all((child.bits == a.bits) | (child.bits == b.bits))


def test_crossover_validates_inputs(rng):
    with pytest.raises(ValueError):
        do_crossover(Genome.zeros(4), Genome.zeros(5), 0.5, rng)
    with pytest.raises(ValueError):
        do_crossover(Genome.zeros(4), Genome.zeros(4), 1.5, rng)


@pytest.mark.parametrize("flips", [0, 1, 3, 126, 500])
def test_mutation_flips_exactly_min_k_len_bits(rng, flips):
    g = Genome.random(126, rng)
    mutated = flip_genome_bits(g, flips, rng)
    assert g.hamming_distance(mutated) == min(flips, 126)


def test_script_operators_load_from_file(tmp_path, rng):
    script = tmp_path / "flip_two.py"
    script.write_text(
        "from genecars.evolution.operators.builtin import do_crossover, flip_genome_bits\n"
        "\n"
        "def crossover(genome_a, genome_b, rate, rng):\n"
        "    return do_crossover(genome_a, genome_b, 0.0, rng)\n"
        "\n"
        "def mutate(genome, flip_count, rng):\n"
        "    return flip_genome_bits(genome, 2, rng)\n"
    )
    ops = ScriptOperators.load(str(script))
    a = Genome.random(126, rng)
    b = Genome.random(126, rng)
    assert ops.crossover(a, b, 0.9, rng) == a
    assert a.hamming_distance(ops.mutate(a, 10, rng)) == 2


def test_script_without_mutate_is_rejected(tmp_path):
    script = tmp_path / "half.py"
    script.write_text("def crossover(a, b, rate, rng):\n    return a\n")
    with pytest.raises(OperatorLoadError, match="mutate"):
        ScriptOperators.load(str(script))


def test_missing_script_is_rejected(tmp_path):
    with pytest.raises(OperatorLoadError):
        ScriptOperators.load(str(tmp_path / "nope.py"))
    with pytest.raises(OperatorLoadError):
        ScriptOperators.load("genecars_no_such_module")


def test_registry_falls_back_to_builtin_when_script_fails(tmp_path):
    script = tmp_path / "broken.py"
    script.write_text("raise ImportError('cannot load')\n")
    registry = OperatorRegistry()
    binding = registry.bind(str(script))
    assert binding.fell_back
    assert binding.operators is registry.builtin
    assert isinstance(binding.load_error, OperatorLoadError)


def test_registry_binds_builtin_and_registered_names():
    registry = OperatorRegistry()
    assert registry.bind(None).operators is registry.builtin
    assert registry.bind("builtin").source == "builtin"

    custom = BuiltinOperators()
    registry.register("mine", custom)
    assert registry.bind("mine").operators is custom
    assert registry.names() == ["builtin", "mine"]
    with pytest.raises(ValueError):
        registry.register("builtin", custom)


def test_guard_retries_with_fallback(rng):
    guard = OperatorGuard(RaisingOperators(), 126)
    a = Genome.random(126, rng)
    child, failed = guard.crossover(a, a, 0.4, rng)
    assert failed
    assert child == a

    mutated, failed = guard.mutate(a, 3, rng)
    assert failed
    assert a.hamming_distance(mutated) == 3


def test_guard_treats_malformed_results_as_failures(rng):
    guard = OperatorGuard(TruncatingOperators(), 126)
    a = Genome.random(126, rng)
    child, failed = guard.crossover(a, a, 0.4, rng)
    assert failed and len(child) == 126
    _, failed = guard.mutate(a, 1, rng)
    assert failed


def test_guard_passes_through_healthy_operators(rng):
    guard = OperatorGuard(BuiltinOperators(), 126)
    a = Genome.random(126, rng)
    _, failed = guard.mutate(a, 3, rng)
    assert not failed


def test_guard_raises_when_fallback_fails_too(rng):
    guard = OperatorGuard(RaisingOperators(), 126, fallback=TruncatingOperators())
    with pytest.raises(OperatorFailure):
        guard.crossover(Genome.zeros(126), Genome.zeros(126), 0.4, rng)

    same = RaisingOperators()
    with pytest.raises(OperatorFailure):
        OperatorGuard(same, 126, fallback=same).mutate(Genome.zeros(126), 1, rng)

"""
genecars - genetic evolution of procedurally generated vehicles.

Genomes are fixed-length bit vectors decoded into vehicle definitions; a
generation manager ranks individuals by the distance an external simulation
reports and breeds the next population from clones, random injections and
crossover/mutation offspring.
"""

__version__ = "0.1.0"

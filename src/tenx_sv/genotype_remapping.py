"""
Re-express a genotype against a rebuilt allele list.

Alleles are matched by role rather than by value: whatever allele held the reference role in the original record
maps to the reference allele of the new record, and likewise for the alternate. This keeps genotypes correct even
when the new REF base differs from the original one (e.g. 10x writes "N" as REF).
"""
from typing import Optional, Sequence, Text, Tuple

from tenx_sv.errors import MalformedRecordError
from tenx_sv.sv_records import AlleleRole, Genotype


class Default:
    ploidy = 2
    num_alleles = 2


def _remap_allele_index(
        original_alleles: Sequence[Text],
        allele_index: Optional[int]
) -> Optional[int]:
    if allele_index is None:
        return None
    if not 0 <= allele_index < len(original_alleles):
        raise MalformedRecordError(
            f"Genotype allele index {allele_index} is out of range for alleles {tuple(original_alleles)}"
        )
    # the new allele list is laid out by role too: reference at 0, alternate at 1
    return AlleleRole.of_index(allele_index).index


def remap_genotype(
        original_alleles: Sequence[Text],
        new_alleles: Sequence[Text],
        genotype: Genotype,
        phased: Optional[bool] = None
) -> Genotype:
    f"""
    Express genotype (indexing original_alleles) as indices into new_alleles
    Args:
        original_alleles: Sequence[str]
            Alleles of the input record, reference first
        new_alleles: Sequence[str]
            Alleles of the output record, reference first. Must have exactly {Default.num_alleles} alleles.
        genotype: Genotype
            Genotype of the single sample, indexing original_alleles
        phased: Optional[bool] (Default=None)
            Phase of the new genotype. If None, copy phase from genotype.
    Returns:
        remapped_genotype: Genotype
            Genotype indexing new_alleles
    """
    if genotype.ploidy != Default.ploidy:
        raise MalformedRecordError(f"Only diploid genotypes are supported, got {genotype}")
    if len(original_alleles) != Default.num_alleles or len(new_alleles) != Default.num_alleles:
        raise MalformedRecordError(
            f"Only biallelic records are supported, got {tuple(original_alleles)} -> {tuple(new_alleles)}"
        )
    return Genotype(
        allele_indices=tuple(
            _remap_allele_index(original_alleles, allele_index) for allele_index in genotype
        ),
        phased=genotype.phased if phased is None else phased
    )


def resolve_alleles(alleles: Sequence[Text], genotype: Genotype) -> Tuple[Optional[Text], ...]:
    """ allele values called by genotype, None for missing alleles """
    return tuple(None if allele_index is None else alleles[allele_index] for allele_index in genotype)

"""
In-memory representation of the records flowing through the normalizer. Input records are read-only snapshots of a
single-sample 10x SV VCF line; output records are the breakend (or passthrough) lines that will be written, already
carrying their final ID, alleles, genotype and annotations.
"""
import collections.abc
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Text


class VcfKeys:
    svtype = "SVTYPE"
    svtype2 = "SVTYPE2"
    svlen = "SVLEN"
    end = "END"
    cipos = "CIPOS"
    ciend = "CIEND"
    phase_set = "PS"
    pairs = "PAIRS"
    split = "SPLIT"
    inserted_sequence = "INSSEQ"
    gt = "GT"


class FormatKeys:
    """ per-sample annotations written on every output record """
    qual = "Qual"
    phase_set = "PS"
    pairs = "Pairs"
    split = "Split"
    filters = "FT"


BREAKEND_SVTYPE = "BND"
# INFO keys that describe the extent of a single-locus SV, meaningless once it is split into breakends
INTERVAL_INFO_KEYS = frozenset({VcfKeys.end, VcfKeys.svlen, VcfKeys.ciend})


class SvType(Enum):
    Breakend = "BND"
    Deletion = "DEL"
    Duplication = "DUP"
    Inversion = "INV"
    Unknown = "UNK"
    Unrecognized = None

    @classmethod
    def parse(cls, tag: Optional[Text]) -> "SvType":
        """
        Map a caller SVTYPE tag onto the closed set of handled types. Anything else (including a missing tag) is
        Unrecognized, so new caller tags never raise.
        """
        if tag is None:
            return cls.Unrecognized
        try:
            return cls(tag)
        except ValueError:
            return cls.Unrecognized

    def __str__(self):
        return "." if self.value is None else self.value


class AlleleRole(Enum):
    reference = 0
    alternate = 1

    @classmethod
    def of_index(cls, allele_index: int) -> "AlleleRole":
        return cls(allele_index)

    @property
    def index(self) -> int:
        return self.value


class Genotype(collections.abc.Iterable, collections.abc.Hashable):
    """
    Diploid genotype expressed as indices into the allele list of the record that owns it. Missing alleles (no-call)
    are None.
    """
    __slots__ = ("allele_indices", "phased")

    def __init__(
            self,
            allele_indices: Tuple[Optional[int], ...],
            phased: bool = False
    ):
        self.allele_indices = tuple(allele_indices)
        self.phased = phased

    @property
    def ploidy(self) -> int:
        return len(self.allele_indices)

    def __iter__(self) -> Iterator[Optional[int]]:
        yield from self.allele_indices

    def __eq__(self, other):
        return isinstance(other, Genotype) and self.allele_indices == other.allele_indices \
            and self.phased == other.phased

    def __hash__(self):
        return hash((self.allele_indices, self.phased))

    def __repr__(self):
        separator = '|' if self.phased else '/'
        return separator.join('.' if index is None else str(index) for index in self.allele_indices)


@dataclass(frozen=True)
class InputRecord:
    id: Text
    contig: Text
    start: int  # 1-based, inclusive
    end: int  # 1-based, inclusive
    sv_type: SvType
    alleles: Tuple[Text, ...]  # reference allele first
    genotype: Genotype
    info: Dict[Text, Any] = field(default_factory=dict)
    filters: Tuple[Text, ...] = ()
    qual: Optional[float] = None

    @property
    def alternate_alleles(self) -> Tuple[Text, ...]:
        return self.alleles[1:]

    @property
    def call_suffix(self) -> Text:
        """ last "_"-delimited token of the caller ID, e.g. "call_12_3" -> "3" """
        return self.id.rsplit('_', 1)[-1]

    @property
    def sv_type_tag(self) -> Optional[Text]:
        return self.info.get(VcfKeys.svtype)


@dataclass(frozen=True)
class OutputRecord:
    id: Text
    contig: Text
    pos: int  # 1-based anchor position
    stop: int
    alleles: Tuple[Text, ...]
    genotype: Genotype
    info: Dict[Text, Any] = field(default_factory=dict)
    sample_fields: Dict[Text, Any] = field(default_factory=dict)
    filters: Tuple[Text, ...] = ()
    qual: Optional[float] = None

    @property
    def inserted_sequence(self) -> Text:
        inserted_sequence = self.info.get(VcfKeys.inserted_sequence)
        if inserted_sequence is None:
            return ""
        elif isinstance(inserted_sequence, (tuple, list)):
            return ','.join(str(sequence) for sequence in inserted_sequence)
        else:
            return str(inserted_sequence)

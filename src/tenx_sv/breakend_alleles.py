"""
Build and read breakend ALT alleles in VCF junction notation.

With t the anchor reference base and p the mate locus "contig:pos", the four notations are:
    t[p[  the sequence extending right of p is joined after t
    t]p]  the reverse complement of the sequence extending left of p is joined after t
    ]p]t  the sequence extending left of p is joined before t
    [p[t  the reverse complement of the sequence extending right of p is joined before t
"""
import re
from typing import NamedTuple, Text


_BREAKEND_FORMATS = {
    # (join_after_anchor, mate_extends_right): format
    (True, True): "{base}[{mate}[",
    (True, False): "{base}]{mate}]",
    (False, True): "[{mate}[{base}",
    (False, False): "]{mate}]{base}",
}
_BREAKEND_REGEX = re.compile(
    r"^(?P<base_before>[^\[\]]*)(?P<bracket>[\[\]])(?P<contig>[^\[\]]+):(?P<pos>\d+)(?P=bracket)"
    r"(?P<base_after>[^\[\]]*)$"
)


class BreakendAllele(NamedTuple):
    anchor_bases: Text
    mate_contig: Text
    mate_pos: int
    join_after_anchor: bool
    mate_extends_right: bool


def make_breakend_allele(
        anchor_base: Text,
        mate_contig: Text,
        mate_pos: int,
        join_after_anchor: bool,
        mate_extends_right: bool
) -> Text:
    """
    Make breakend ALT allele string.
    Args:
        anchor_base: str
            Reference base(s) at the breakend's own position
        mate_contig: str
            Contig of the joined (mate) locus
        mate_pos: int
            1-based position of the joined locus
        join_after_anchor: bool
            If True, the anchor base is written first (t[p[ or t]p]), otherwise last ([p[t or ]p]t)
        mate_extends_right: bool
            If True, use forward brackets "[" (joined piece extends right of p), otherwise "]"
    Returns:
        allele: str
            ALT allele in junction notation
    """
    return _BREAKEND_FORMATS[(join_after_anchor, mate_extends_right)].format(
        base=anchor_base, mate=f"{mate_contig}:{mate_pos}"
    )


def parse_breakend_allele(allele: Text) -> BreakendAllele:
    """
    Inverse of make_breakend_allele
    Args:
        allele: str
            ALT allele in junction notation
    Returns:
        breakend_allele: BreakendAllele
            anchor bases, mate locus and orientation flags
    """
    match = _BREAKEND_REGEX.match(allele)
    if match is None or (match.group("base_before") and match.group("base_after")):
        raise ValueError(f"Not a breakend allele: {allele}")
    join_after_anchor = bool(match.group("base_before"))
    return BreakendAllele(
        anchor_bases=match.group("base_before") if join_after_anchor else match.group("base_after"),
        mate_contig=match.group("contig"),
        mate_pos=int(match.group("pos")),
        join_after_anchor=join_after_anchor,
        mate_extends_right=match.group("bracket") == '['
    )

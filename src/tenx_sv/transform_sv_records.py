"""
Convert 10x Long Ranger SV calls into breakend records.

Each input record is dispatched on its SVTYPE:
    BND: passed through with a new ID, REF replaced by the reference base
    DEL: split into a pair of facing breakends at POS and END
    DUP: split into a pair of breakends at POS and END, orientation flipped relative to DEL
    INV: split into the four breakends bounding the inverted segment, at POS, END, POS + 1 and END + 1
    UNK: passed through like BND, with an "_UNK" ID
Records of any other SVTYPE are skipped with a warning.
"""
import collections
import enum
import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Protocol, Text, Tuple

from tenx_sv.breakend_alleles import make_breakend_allele
from tenx_sv.genotype_remapping import remap_genotype
from tenx_sv.sv_records import (
    BREAKEND_SVTYPE, INTERVAL_INFO_KEYS, FormatKeys, InputRecord, OutputRecord, SvType, VcfKeys
)


class ReferenceBases(Protocol):
    def base_at(self, contig: Text, pos: int) -> Text:
        ...


class Locus(enum.Enum):
    start = enum.auto()
    end = enum.auto()
    after_start = enum.auto()
    after_end = enum.auto()

    def position(self, record: InputRecord) -> int:
        if self is Locus.start:
            return record.start
        elif self is Locus.end:
            return record.end
        elif self is Locus.after_start:
            return record.start + 1
        else:
            return record.end + 1


class Junction(NamedTuple):
    """ one breakend produced from a symbolic SV """
    anchor: Locus
    mate: Locus
    join_after_anchor: bool
    mate_extends_right: bool
    # INFO key whose interval becomes this breakend's CIPOS. None keeps the input CIPOS.
    cipos_source: Optional[Text] = None


JUNCTIONS = {
    SvType.Deletion: (
        Junction(Locus.start, Locus.end, join_after_anchor=True, mate_extends_right=True),
        Junction(Locus.end, Locus.start, join_after_anchor=False, mate_extends_right=False,
                 cipos_source=VcfKeys.ciend),
    ),
    SvType.Duplication: (
        Junction(Locus.start, Locus.end, join_after_anchor=False, mate_extends_right=False),
        Junction(Locus.end, Locus.start, join_after_anchor=True, mate_extends_right=True,
                 cipos_source=VcfKeys.ciend),
    ),
    SvType.Inversion: (
        Junction(Locus.start, Locus.end, join_after_anchor=True, mate_extends_right=False),
        Junction(Locus.end, Locus.start, join_after_anchor=True, mate_extends_right=False,
                 cipos_source=VcfKeys.ciend),
        Junction(Locus.after_start, Locus.after_end, join_after_anchor=False, mate_extends_right=True,
                 cipos_source=VcfKeys.cipos),
        Junction(Locus.after_end, Locus.after_start, join_after_anchor=False, mate_extends_right=True,
                 cipos_source=VcfKeys.ciend),
    ),
}


def _get_info_value(record: InputRecord, *keys: Text) -> Any:
    """ first non-missing INFO value among keys """
    for key in keys:
        value = record.info.get(key)
        if value is not None:
            return value
    return None


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (tuple, list)):
        return _as_int(value[0]) if value else None
    return int(round(value)) if isinstance(value, float) else int(value)


def get_sample_fields(record: InputRecord) -> Dict[Text, Any]:
    """
    Per-sample annotations carried to every output record: call quality, phase set, supporting pairs, supporting
    split reads, and the record's filters. Missing values are omitted.
    """
    sample_fields = {
        FormatKeys.qual: _as_int(record.qual),
        FormatKeys.phase_set: _as_int(_get_info_value(record, VcfKeys.phase_set)),
        FormatKeys.pairs: _as_int(_get_info_value(record, VcfKeys.pairs, FormatKeys.pairs)),
        FormatKeys.split: _as_int(_get_info_value(record, VcfKeys.split, FormatKeys.split)),
        # genotype filters are semicolon-separated, like FILTER
        FormatKeys.filters: ';'.join(record.filters) if record.filters else None,
    }
    return {key: value for key, value in sample_fields.items() if value is not None}


def _make_passthrough_record(
        record: InputRecord,
        new_id: Text,
        reference: ReferenceBases
) -> OutputRecord:
    alleles = (reference.base_at(record.contig, record.start),) + record.alternate_alleles
    return OutputRecord(
        id=new_id,
        contig=record.contig,
        pos=record.start,
        stop=record.end,
        alleles=alleles,
        # phase is not carried for passthrough records
        genotype=remap_genotype(record.alleles, alleles, record.genotype, phased=False),
        info=dict(record.info),
        sample_fields=get_sample_fields(record),
        filters=record.filters,
        qual=record.qual
    )


def _make_junction_record(
        record: InputRecord,
        junction: Junction,
        new_id: Text,
        reference: ReferenceBases
) -> OutputRecord:
    pos = junction.anchor.position(record)
    anchor_base = reference.base_at(record.contig, pos)
    alleles = (
        anchor_base,
        make_breakend_allele(
            anchor_base, record.contig, junction.mate.position(record),
            join_after_anchor=junction.join_after_anchor, mate_extends_right=junction.mate_extends_right
        )
    )
    info = {key: value for key, value in record.info.items() if key not in INTERVAL_INFO_KEYS}
    info[VcfKeys.svtype] = BREAKEND_SVTYPE
    info[VcfKeys.svtype2] = record.sv_type.value
    if junction.cipos_source is not None:
        cipos = record.info.get(junction.cipos_source)
        if cipos is None:
            info.pop(VcfKeys.cipos, None)
        else:
            info[VcfKeys.cipos] = cipos
    return OutputRecord(
        id=new_id,
        contig=record.contig,
        pos=pos,
        stop=pos,
        alleles=alleles,
        genotype=remap_genotype(record.alleles, alleles, record.genotype),
        info=info,
        sample_fields=get_sample_fields(record),
        filters=record.filters,
        qual=record.qual
    )


def transform_record(
        record: InputRecord,
        sample: Text,
        reference: ReferenceBases
) -> Tuple[OutputRecord, ...]:
    """
    Convert one input SV record into its output records
    Args:
        record: InputRecord
            Single-sample 10x SV call
        sample: str
            Name of the sample, used in output IDs
        reference: ReferenceBases
            Provides reference bases for REF alleles and breakend anchors
    Returns:
        output_records: Tuple[OutputRecord, ...]
            1 record for BND and UNK, 2 for DEL and DUP, 4 for INV, and none for unrecognized SVTYPEs
    """
    sv_type = record.sv_type
    if sv_type == SvType.Breakend:
        new_id = f"{record.id}_{sample}_{BREAKEND_SVTYPE}_{record.info.get(VcfKeys.svtype2)}_{record.call_suffix}"
        return _make_passthrough_record(record, new_id, reference),
    elif sv_type == SvType.Unknown:
        return _make_passthrough_record(record, f"{record.id}_{sample}_{sv_type.value}", reference),
    elif sv_type in JUNCTIONS:
        id_prefix = f"{record.id}_{sample}_{sv_type.value}"
        return tuple(
            _make_junction_record(record, junction, f"{id_prefix}_{number}", reference)
            for number, junction in enumerate(JUNCTIONS[sv_type], start=1)
        )
    else:
        logging.warning(f"Unknown variant type {record.sv_type_tag} for record {record.id} at "
                        f"{record.contig}:{record.start}, skipping")
        return ()


def accumulate_output_records(
        records: Iterable[InputRecord],
        sample: Text,
        reference: ReferenceBases,
        type_counts: Optional[collections.Counter] = None
) -> List[OutputRecord]:
    """
    Transform every input record and collect the results, in input order
    Args:
        records: Iterable[InputRecord]
            Input SV calls
        sample: str
            Name of the sample
        reference: ReferenceBases
            Provides reference bases
        type_counts: Optional[collections.Counter] (Default=None)
            If not None, incremented by the number of input records of each SV type
    Returns:
        output_records: List[OutputRecord]
            All output records, unsorted
    """
    output_records = []
    for record in records:
        transformed = transform_record(record, sample, reference)
        logging.debug(f"{record.id} -> {','.join(output_record.id for output_record in transformed)}")
        output_records.extend(transformed)
        if type_counts is not None:
            type_counts[record.sv_type] += 1
    return output_records

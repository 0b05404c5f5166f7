import collections
import logging
import pytest

from tenx_sv import transform_sv_records
from tenx_sv.breakend_alleles import parse_breakend_allele
from tenx_sv.errors import MalformedRecordError
from tenx_sv.sv_records import FormatKeys, Genotype, SvType, VcfKeys
from common_test_utils import SparseReference, make_input_record


class Default:
    sample = "HG002"
    info = {
        VcfKeys.svlen: 1000,
        VcfKeys.cipos: (-10, 10),
        VcfKeys.ciend: (-25, 5),
        VcfKeys.phase_set: 4041,
        VcfKeys.pairs: 12,
        VcfKeys.split: 3,
    }
    reference = {
        ("chr1", 1000): "A",
        ("chr1", 1001): "C",
        ("chr1", 2000): "T",
        ("chr1", 2001): "G",
    }


def _transform(sv_type, info=None, **kwargs):
    reference = SparseReference(Default.reference)
    record_info = dict(Default.info)
    if info is not None:
        record_info.update(info)
    record = make_input_record(sv_type, info=record_info, **kwargs)
    return record, transform_sv_records.transform_record(record, Default.sample, reference)


def _assert_interval_keys_removed(output_record):
    for key in (VcfKeys.end, VcfKeys.svlen, VcfKeys.ciend):
        assert key not in output_record.info


def test_deletion_makes_facing_breakend_pair():
    record, (bnd1, bnd2) = _transform("DEL", alleles=("N", "<DEL>"))

    assert (bnd1.contig, bnd1.pos, bnd1.stop) == ("chr1", 1000, 1000)
    assert bnd1.alleles == ("A", "A[chr1:2000[")
    assert (bnd2.contig, bnd2.pos, bnd2.stop) == ("chr1", 2000, 2000)
    assert bnd2.alleles == ("T", "]chr1:1000]T")
    assert [bnd.id for bnd in (bnd1, bnd2)] == ["call_17_HG002_DEL_1", "call_17_HG002_DEL_2"]

    # each junction points at the other's anchor, with opposite orientation
    mate1, mate2 = (parse_breakend_allele(bnd.alleles[1]) for bnd in (bnd1, bnd2))
    assert mate1.mate_pos == bnd2.pos and mate2.mate_pos == bnd1.pos
    assert mate1.join_after_anchor != mate2.join_after_anchor
    assert mate1.mate_extends_right != mate2.mate_extends_right

    for bnd in (bnd1, bnd2):
        assert bnd.info[VcfKeys.svtype] == "BND"
        assert bnd.info[VcfKeys.svtype2] == "DEL"
        _assert_interval_keys_removed(bnd)
        assert bnd.genotype == record.genotype
        assert bnd.filters == record.filters
        assert bnd.qual == record.qual
    assert bnd1.info[VcfKeys.cipos] == Default.info[VcfKeys.cipos]
    assert bnd2.info[VcfKeys.cipos] == Default.info[VcfKeys.ciend]


def test_duplication_flips_deletion_orientation():
    _, (del1, del2) = _transform("DEL")
    _, (dup1, dup2) = _transform("DUP", alleles=("N", "<DUP>"))

    assert dup1.alleles == ("A", "]chr1:2000]A")
    assert dup2.alleles == ("T", "T[chr1:1000[")
    assert [dup.id for dup in (dup1, dup2)] == ["call_17_HG002_DUP_1", "call_17_HG002_DUP_2"]
    for deletion, duplication in ((del1, dup1), (del2, dup2)):
        assert deletion.pos == duplication.pos
        del_junction = parse_breakend_allele(deletion.alleles[1])
        dup_junction = parse_breakend_allele(duplication.alleles[1])
        assert del_junction.join_after_anchor != dup_junction.join_after_anchor
        assert del_junction.mate_extends_right != dup_junction.mate_extends_right
        assert duplication.info[VcfKeys.svtype2] == "DUP"
        _assert_interval_keys_removed(duplication)
    assert dup2.info[VcfKeys.cipos] == Default.info[VcfKeys.ciend]


def test_inversion_makes_four_breakends():
    record, output_records = _transform("INV", alleles=("N", "<INV>"))
    assert len(output_records) == 4
    assert [bnd.pos for bnd in output_records] == [1000, 2000, 1001, 2001]
    assert [bnd.alleles for bnd in output_records] == [
        ("A", "A]chr1:2000]"),
        ("T", "T]chr1:1000]"),
        ("C", "[chr1:2001[C"),
        ("G", "[chr1:1001[G"),
    ]
    assert [bnd.id for bnd in output_records] == [f"call_17_HG002_INV_{number}" for number in range(1, 5)]
    assert [bnd.info[VcfKeys.cipos] for bnd in output_records] == [
        Default.info[VcfKeys.cipos], Default.info[VcfKeys.ciend], Default.info[VcfKeys.cipos],
        Default.info[VcfKeys.ciend]
    ]
    for bnd in output_records:
        assert bnd.info[VcfKeys.svtype] == "BND"
        assert bnd.info[VcfKeys.svtype2] == "INV"
        assert bnd.genotype.phased
        _assert_interval_keys_removed(bnd)


def test_missing_end_interval_drops_cipos():
    reference = SparseReference(Default.reference)
    record = make_input_record("DEL", info={VcfKeys.cipos: (-10, 10)})
    bnd1, bnd2 = transform_sv_records.transform_record(record, Default.sample, reference)
    assert bnd1.info[VcfKeys.cipos] == (-10, 10)
    assert VcfKeys.cipos not in bnd2.info


def test_breakend_passthrough():
    reference = SparseReference(Default.reference)
    record = make_input_record(
        "BND", start=1000, end=1000, record_id="call_55_3", alleles=("N", "]chr2:50]N"), phased=True,
        info={VcfKeys.svtype2: "TRANS", "Pairs": 9, "Split": 1, VcfKeys.phase_set: 7}
    )
    (output_record,) = transform_sv_records.transform_record(record, Default.sample, reference)
    assert output_record.id == "call_55_3_HG002_BND_TRANS_3"
    assert output_record.alleles == ("A", "]chr2:50]N")
    assert (output_record.pos, output_record.stop) == (1000, 1000)
    assert output_record.info == record.info
    assert output_record.genotype == Genotype(allele_indices=(0, 1), phased=False)
    assert output_record.sample_fields == {
        FormatKeys.qual: 42, FormatKeys.phase_set: 7, FormatKeys.pairs: 9, FormatKeys.split: 1,
        FormatKeys.filters: "PASS"
    }


def test_unknown_passthrough():
    reference = SparseReference(Default.reference)
    record = make_input_record("UNK", alleles=("N", "<UNK>"), allele_indices=(1, 1),
                               info=dict(Default.info), filters=("LOWQ", "PASS"))
    (output_record,) = transform_sv_records.transform_record(record, Default.sample, reference)
    assert output_record.id == "call_17_HG002_UNK"
    assert output_record.alleles == ("A", "<UNK>")
    assert (output_record.pos, output_record.stop) == (1000, 2000)
    assert output_record.genotype == Genotype(allele_indices=(1, 1), phased=False)
    assert output_record.sample_fields[FormatKeys.filters] == "LOWQ;PASS"
    assert output_record.info[VcfKeys.ciend] == Default.info[VcfKeys.ciend]


def test_sample_fields_on_expanded_records():
    _, output_records = _transform("INV", qual=37.6, filters=())
    for output_record in output_records:
        assert output_record.sample_fields == {
            FormatKeys.qual: 38, FormatKeys.phase_set: 4041, FormatKeys.pairs: 12, FormatKeys.split: 3
        }


def test_unrecognized_type_is_skipped(caplog):
    reference = SparseReference(Default.reference)
    records = [
        make_input_record("XYZ", record_id="call_1", alleles=("N", "<XYZ>")),
        make_input_record("DEL", record_id="call_2"),
    ]
    type_counts = collections.Counter()
    with caplog.at_level(logging.WARNING):
        output_records = transform_sv_records.accumulate_output_records(
            records, Default.sample, reference, type_counts=type_counts
        )
    assert records[0].sv_type == SvType.Unrecognized
    assert transform_sv_records.transform_record(records[0], Default.sample, reference) == ()
    assert "XYZ" in caplog.text and "call_1" in caplog.text
    assert [output_record.id for output_record in output_records] == ["call_2_HG002_DEL_1", "call_2_HG002_DEL_2"]
    assert type_counts == collections.Counter({SvType.Unrecognized: 1, SvType.Deletion: 1})


def test_missing_svtype_is_unrecognized():
    assert SvType.parse(None) == SvType.Unrecognized
    assert SvType.parse("DEL") == SvType.Deletion


@pytest.mark.parametrize("sv_type", ["DEL", "DUP", "INV", "BND", "UNK"])
def test_malformed_genotype_fails_fast(sv_type):
    reference = SparseReference(Default.reference)
    record = make_input_record(sv_type, end=1000 if sv_type == "BND" else 2000, allele_indices=(0, 2),
                               info={VcfKeys.svtype2: "TRANS"})
    with pytest.raises(MalformedRecordError):
        transform_sv_records.transform_record(record, Default.sample, reference)


def test_expected_record_counts():
    expected_counts = {"DEL": 2, "DUP": 2, "INV": 4, "UNK": 1, "BND": 1}
    for sv_type, expected_count in expected_counts.items():
        _, output_records = _transform(sv_type, info={VcfKeys.svtype2: "TRANS"})
        assert len(output_records) == expected_count, sv_type
        for output_record in output_records:
            assert len(output_record.alleles) == 2

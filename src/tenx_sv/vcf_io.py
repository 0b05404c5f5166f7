"""
Translate between pysam VCF objects and the normalizer's records, and build the output header.
"""
from typing import Dict, Iterable, Iterator, Text

import pysam

from tenx_sv.errors import ConfigurationError, MalformedRecordError
from tenx_sv.sv_records import FormatKeys, Genotype, InputRecord, OutputRecord, SvType, VcfKeys


# (id, number, type, description)
OUTPUT_INFO_LINES = (
    (VcfKeys.end, 1, "Integer", "End position of the variant described in this record"),
    (VcfKeys.svtype, 1, "String", "Type of structural variant"),
    (VcfKeys.svtype2, 1, "String", "Type of the structural variant a breakend was derived from"),
    (VcfKeys.cipos, 2, "Integer", "Confidence interval around POS"),
)
OUTPUT_FORMAT_LINES = (
    (FormatKeys.qual, 1, "Integer", "The quality of the call (number of supporting barcodes)"),
    (FormatKeys.phase_set, 1, "Integer", "Phase set for the breakend"),
    (FormatKeys.pairs, 1, "Integer", "Supporting pairs"),
    (FormatKeys.split, 1, "Integer", "Supporting split reads"),
    (FormatKeys.filters, '.', "String", "Filters"),
)


def get_single_sample(header: pysam.VariantHeader) -> Text:
    samples = list(header.samples)
    if len(samples) != 1:
        raise ConfigurationError(
            f"This tool requires a single-sample 10x Long Ranger SV VCF, but the input has {len(samples)} samples"
            + (f": {','.join(samples)}" if samples else "")
        )
    return samples[0]


def from_variant_record(record: pysam.VariantRecord, sample: Text) -> InputRecord:
    """
    Snapshot a pysam record as an InputRecord
    Args:
        record: pysam.VariantRecord
            Record from the input VCF
        sample: str
            Name of the single sample in the VCF
    Returns:
        input_record: InputRecord
    """
    if record.id is None:
        raise MalformedRecordError(f"Record at {record.chrom}:{record.pos} has no ID")
    sample_data = record.samples[sample]
    gt = sample_data.get(VcfKeys.gt)
    if gt is None:
        raise MalformedRecordError(f"Record {record.id} has no {VcfKeys.gt} for {sample}")
    info = {key: value for key, value in record.info.items() if key != VcfKeys.end}
    return InputRecord(
        id=record.id,
        contig=record.chrom,
        start=record.pos,
        end=record.stop,
        sv_type=SvType.parse(info.get(VcfKeys.svtype)),
        alleles=tuple(record.alleles),
        genotype=Genotype(allele_indices=gt, phased=sample_data.phased),
        info=info,
        filters=tuple(record.filter.keys()),
        qual=record.qual
    )


def iter_input_records(vcf: pysam.VariantFile, sample: Text) -> Iterator[InputRecord]:
    for record in vcf:
        yield from_variant_record(record, sample)


def make_output_header(input_header: pysam.VariantHeader, contig_lengths: Dict[Text, int]) -> pysam.VariantHeader:
    """
    Build the output header from the input header. The contig lines are replaced by the reference dictionary, in
    reference order, so the header agrees with the order records are written in. The fields written by the
    normalizer are added when missing.
    Args:
        input_header: pysam.VariantHeader
            Header of the input VCF
        contig_lengths: Dict[str, int]
            Reference contig names and lengths, in reference order
    Returns:
        output_header: pysam.VariantHeader
    """
    header = pysam.VariantHeader()
    for contig, length in contig_lengths.items():
        header.contigs.add(contig, length=length)
    for line in input_header.records:
        if line.type == 'CONTIG':
            continue
        header.add_line(str(line))
    for key, number, value_type, description in OUTPUT_INFO_LINES:
        if key not in header.info:
            header.info.add(key, number, value_type, description)
    for key, number, value_type, description in OUTPUT_FORMAT_LINES:
        if key not in header.formats:
            header.formats.add(key, number, value_type, description)
    for sample in input_header.samples:
        header.add_sample(sample)
    return header


def to_variant_record(record: OutputRecord, header: pysam.VariantHeader, sample: Text) -> pysam.VariantRecord:
    """
    Build a pysam record for writing
    Args:
        record: OutputRecord
            Normalized record
        header: pysam.VariantHeader
            Header of the output VariantFile
        sample: str
            Name of the single sample
    Returns:
        variant_record: pysam.VariantRecord
    """
    variant_record = header.new_record(
        contig=record.contig,
        start=record.pos - 1,
        stop=record.stop,
        alleles=record.alleles,
        id=record.id,
        qual=record.qual,
        filter=list(record.filters) if record.filters else None,
        info=record.info
    )
    sample_data = variant_record.samples[sample]
    sample_data[VcfKeys.gt] = record.genotype.allele_indices
    sample_data.phased = record.genotype.phased
    for key, value in record.sample_fields.items():
        sample_data[key] = value
    return variant_record


def write_records(records: Iterable[OutputRecord], vcf_out: pysam.VariantFile, sample: Text) -> int:
    num_written = 0
    for record in records:
        vcf_out.write(to_variant_record(record, vcf_out.header, sample))
        num_written += 1
    return num_written

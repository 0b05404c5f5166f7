#!/usr/bin/env python
"""
Normalize a single-sample 10x Long Ranger SV VCF into breakend records.

Symbolic DEL and DUP calls become pairs of BND records, INV calls become the four BND records bounding the inversion,
and BND / UNK calls are passed through with the reference base as REF. Support annotations are moved to per-sample
fields (Qual, PS, Pairs, Split, FT), and the output is sorted in reference order.
"""
import argparse
import collections
import logging
import os
import sys
import tempfile
from typing import List, Optional, Text

import pysam
from tqdm.auto import tqdm as tqdm

from tenx_sv import output_order, transform_sv_records, vcf_io
from tenx_sv.reference import ReferenceLookup
from tenx_sv.sv_records import OutputRecord

tqdm.monitor_interval = 0


class Default:
    log_level = "INFO"
    show_progress = False
    index_output_vcf = False
    num_threads = 1


def _open_input_vcf(input_vcf: Text) -> pysam.VariantFile:
    if input_vcf in '- stdin'.split():
        return pysam.VariantFile(sys.stdin)
    return pysam.VariantFile(input_vcf)


def _is_bgzipped(vcf_path: Text) -> bool:
    return vcf_path.endswith((".gz", ".bgz"))


def _write_output_vcf(
        records: List[OutputRecord],
        output_vcf: Text,
        output_header: pysam.VariantHeader,
        sample: Text,
        num_threads: int
) -> int:
    """ write into a temporary file beside output_vcf, moved into place only once every record is written """
    write_mode = 'wz' if _is_bgzipped(output_vcf) else 'w'
    with tempfile.TemporaryDirectory(dir=os.path.dirname(os.path.abspath(output_vcf))) as temp_dir:
        temp_vcf = os.path.join(temp_dir, os.path.basename(output_vcf))
        with pysam.VariantFile(temp_vcf, write_mode, header=output_header, threads=num_threads) as vcf_out:
            num_written = vcf_io.write_records(records, vcf_out, sample)
        os.replace(temp_vcf, output_vcf)
    return num_written


def normalize_vcf(
        input_vcf: Text,
        output_vcf: Text,
        reference_path: Text,
        reference_index: Optional[Text] = None,
        show_progress: bool = Default.show_progress,
        index_output_vcf: bool = Default.index_output_vcf,
        num_threads: int = Default.num_threads
) -> int:
    f"""
    Convert every SV call of a single-sample 10x VCF into breakend records and write them sorted.
    All records are transformed and sorted in memory, then written to a temporary file that replaces output_vcf
    only on success, so a failure never leaves a partially written output.
    Args:
        input_vcf: str
            Path to input VCF ("-" or "stdin" to read standard input)
        output_vcf: str
            Path to save normalized VCF
        reference_path: str
            Path to indexed reference FASTA
        reference_index: Optional[str] (default=None)
            Path to the FASTA index, if not next to the FASTA
        show_progress: bool (default={Default.show_progress})
            If True, display a progress bar while reading input records
        index_output_vcf: bool (default={Default.index_output_vcf})
            If True and output_vcf is bgzipped, create tabix index for output_vcf
        num_threads: int (default={Default.num_threads})
            Number of threads for compressing output vcf
    Returns:
        num_written: int
            Number of records written to output_vcf
    """
    with _open_input_vcf(input_vcf) as vcf_in:
        sample = vcf_io.get_single_sample(vcf_in.header)
        logging.info(f"Normalizing SV calls for sample {sample}")
        with ReferenceLookup(reference_path, reference_index=reference_index) as reference:
            type_counts = collections.Counter()
            output_records = transform_sv_records.accumulate_output_records(
                tqdm(vcf_io.iter_input_records(vcf_in, sample), desc="record", mininterval=0.5,
                     disable=not show_progress),
                sample=sample, reference=reference, type_counts=type_counts
            )
            logging.info(f"Read {sum(type_counts.values())} records")
            for sv_type, count in sorted(type_counts.items(), key=lambda item: str(item[0])):
                logging.info(f"  {sv_type}: {count}")

            logging.info(f"Sorting {len(output_records)} output records")
            sorted_records = output_order.order_records(output_records, reference.contigs)
            output_header = vcf_io.make_output_header(vcf_in.header, reference.contig_lengths)

            logging.info(f"Writing {output_vcf}")
            num_written = _write_output_vcf(sorted_records, output_vcf, output_header, sample, num_threads)

    if index_output_vcf:
        if _is_bgzipped(output_vcf):
            pysam.tabix_index(output_vcf, preset="vcf", force=True)
        else:
            logging.warning(f"Not indexing {output_vcf}: only bgzipped VCFs can be tabix-indexed")
    logging.info(f"Wrote {num_written} records")
    return num_written


def __parse_arguments(argv: List[Text]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a single-sample 10x Long Ranger SV VCF into sorted breakend records",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        prog=argv[0]
    )
    parser.add_argument("input_vcf", type=str, help="10x SV VCF to normalize (\"-\" for stdin)")
    parser.add_argument("output_vcf", type=str, help="normalized output VCF")
    parser.add_argument("--reference", "-R", type=str, required=True, help="indexed reference FASTA")
    parser.add_argument("--reference-index", type=str, default=None,
                        help="reference FASTA index, if not alongside the FASTA")
    parser.add_argument("--show-progress", action="store_true", default=Default.show_progress,
                        help="display progress bar while reading records")
    parser.add_argument("--index-output-vcf", action="store_true", default=Default.index_output_vcf,
                        help="create tabix index for bgzipped output vcf")
    parser.add_argument("--num-threads", "-@", type=int, default=Default.num_threads,
                        help="number of threads for compressing output vcf")
    parser.add_argument("--log-level", type=str, default=Default.log_level,
                        help="Specify level of logging information, ie. info, warning, error (not case-sensitive)")
    return parser.parse_args(argv[1:] if len(argv) > 1 else ["--help"])


def main(argv: Optional[List[Text]] = None):
    args = __parse_arguments(sys.argv if argv is None else argv)

    numeric_level = getattr(logging, args.log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError('Invalid log level: %s' % args.log_level)
    logging.basicConfig(level=numeric_level, format='%(levelname)s: %(message)s')

    normalize_vcf(input_vcf=args.input_vcf, output_vcf=args.output_vcf, reference_path=args.reference,
                  reference_index=args.reference_index, show_progress=args.show_progress,
                  index_output_vcf=args.index_output_vcf, num_threads=args.num_threads)


if __name__ == "__main__":
    main()

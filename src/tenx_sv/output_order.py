"""
Total order for output records: contig rank in the reference dictionary, then position, then stop, then inserted
sequence (INSSEQ, empty if absent). Records with equal keys keep their insertion order.
"""
from typing import Callable, Iterable, List, Sequence, Text, Tuple

from tenx_sv.errors import MalformedRecordError
from tenx_sv.sv_records import OutputRecord


def output_sort_key(contig_order: Sequence[Text]) -> Callable[[OutputRecord], Tuple[int, int, int, Text]]:
    """
    Make a sort key for OutputRecords
    Args:
        contig_order: Sequence[str]
            Contig names in the reference's declared order
    Returns:
        sort_key: Callable[[OutputRecord], Tuple[int, int, int, str]]
            Key function for sorted()
    """
    contig_ranks = {contig: rank for rank, contig in enumerate(contig_order)}

    def _sort_key(record: OutputRecord) -> Tuple[int, int, int, Text]:
        contig_rank = contig_ranks.get(record.contig)
        if contig_rank is None:
            raise MalformedRecordError(f"Record {record.id} is on contig {record.contig}, which is not in the "
                                       "reference dictionary")
        return contig_rank, record.pos, record.stop, record.inserted_sequence

    return _sort_key


def order_records(records: Iterable[OutputRecord], contig_order: Sequence[Text]) -> List[OutputRecord]:
    # sorted() is stable, so ties keep insertion order
    return sorted(records, key=output_sort_key(contig_order))

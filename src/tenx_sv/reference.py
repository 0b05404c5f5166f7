"""
Random access to reference bases backed by an indexed FASTA (pysam.FastaFile).

Breakend construction looks up single bases at and just after SV endpoints, which arrive in no particular order.
Bases are fetched in fixed-size chunks and the most recently used chunks are kept in memory.
"""
import collections
from typing import Dict, Optional, Text, Tuple

import pysam

from tenx_sv.errors import ReferenceAccessError


class Default:
    chunk_size = 8192
    max_cached_chunks = 64


class ReferenceLookup:
    __slots__ = ("reference_path", "_fasta", "_contig_lengths", "_chunks", "chunk_size", "max_cached_chunks")

    def __init__(
            self,
            reference_path: Text,
            reference_index: Optional[Text] = None,
            chunk_size: int = Default.chunk_size,
            max_cached_chunks: int = Default.max_cached_chunks
    ):
        self.reference_path = reference_path
        self.chunk_size = chunk_size
        self.max_cached_chunks = max_cached_chunks
        try:
            self._fasta = pysam.FastaFile(reference_path) if reference_index is None \
                else pysam.FastaFile(reference_path, filepath_index=reference_index)
        except (OSError, ValueError) as exception:
            raise ReferenceAccessError(f"Could not open reference {reference_path}: {exception}") from exception
        self._contig_lengths = dict(zip(self._fasta.references, self._fasta.lengths))
        self._chunks = collections.OrderedDict()

    @property
    def contigs(self) -> Tuple[Text, ...]:
        """ contig names in the order declared by the reference index """
        return tuple(self._contig_lengths.keys())

    @property
    def contig_lengths(self) -> Dict[Text, int]:
        return dict(self._contig_lengths)

    @property
    def is_open(self) -> bool:
        return self._fasta is not None

    def _get_chunk(self, contig: Text, chunk_index: int) -> Text:
        key = (contig, chunk_index)
        chunk = self._chunks.get(key)
        if chunk is not None:
            self._chunks.move_to_end(key)
            return chunk
        if not self.is_open:
            raise ReferenceAccessError(f"Reference {self.reference_path} is closed")
        chunk_start = chunk_index * self.chunk_size
        chunk_end = min(chunk_start + self.chunk_size, self._contig_lengths[contig])
        chunk = self._fasta.fetch(contig, chunk_start, chunk_end)
        self._chunks[key] = chunk
        if len(self._chunks) > self.max_cached_chunks:
            self._chunks.popitem(last=False)
        return chunk

    def bases_in_range(self, contig: Text, start: int, end: int) -> Text:
        """
        Get reference bases on a closed, 1-based interval
        Args:
            contig: str
                Name of contig
            start: int
                1-based first position
            end: int
                1-based last position (inclusive)
        Returns:
            bases: str
                Reference sequence, exactly end - start + 1 bases long
        """
        if contig not in self._contig_lengths:
            raise ReferenceAccessError(f"Contig {contig} is not in reference {self.reference_path}")
        contig_length = self._contig_lengths[contig]
        if start < 1 or end > contig_length or end < start:
            raise ReferenceAccessError(
                f"Interval {contig}:{start}-{end} is outside of {contig} (length={contig_length})"
            )
        first_chunk, last_chunk = (start - 1) // self.chunk_size, (end - 1) // self.chunk_size
        sequence = ''.join(self._get_chunk(contig, chunk_index) for chunk_index in range(first_chunk, last_chunk + 1))
        offset = start - 1 - first_chunk * self.chunk_size
        return sequence[offset:offset + end - start + 1]

    def base_at(self, contig: Text, pos: int) -> Text:
        """ reference base at 1-based position """
        return self.bases_in_range(contig, pos, pos)

    def close(self):
        if not self.is_open:
            return
        fasta, self._fasta = self._fasta, None
        self._chunks.clear()
        try:
            fasta.close()
        except (OSError, ValueError) as exception:
            raise ReferenceAccessError(f"Could not close reference {self.reference_path}: {exception}") \
                from exception

    def __enter__(self) -> "ReferenceLookup":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

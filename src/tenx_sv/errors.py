"""
Exceptions raised while normalizing a 10x SV VCF. All are fatal; records with an unrecognized SVTYPE are
skipped with a warning instead of raising.
"""


class TenxSvError(Exception):
    pass


class ConfigurationError(TenxSvError, ValueError):
    """ The input VCF cannot be processed at all, e.g. it does not declare exactly one sample """
    pass


class ReferenceAccessError(TenxSvError, OSError):
    """ The reference FASTA could not be opened, queried or closed """
    pass


class MalformedRecordError(TenxSvError, ValueError):
    """ A single input record violates the single-sample, biallelic, diploid assumptions """
    pass

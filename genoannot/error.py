

class GenoAnnotError(Exception):
    """
    base class for the errors raised by the genoannot package
    """
    pass


class ParseError(GenoAnnotError):
    """
    raised when an input line or field is malformed. Aborts the load it was raised from
    """

    def __init__(self, msg, line_number=None, line=None):
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            msg = 'line {}: {}'.format(line_number, msg)
        GenoAnnotError.__init__(self, msg)


class MismatchedReferenceError(GenoAnnotError):
    """
    raised when an operation requires two spans on the same reference
    """
    pass


class SequenceFetchError(GenoAnnotError):
    """
    raised when the sequence source cannot return the requested range
    """
    pass


class InvariantViolation(GenoAnnotError):
    """
    raised when the input breaks a structural assumption, for example a gene split across
    non-adjacent chromosome blocks or a complete CDS that is not a multiple of the codon length
    """
    pass


class VariantCallError(GenoAnnotError):
    """
    raised when a variant cannot be called against a given transcript
    """
    pass


class NotSpecifiedError(GenoAnnotError):
    """
    raised when information is required for a function but has not been given

    for example if strand was required but had been set to STRAND.NS then this
    error would be raised
    """
    pass

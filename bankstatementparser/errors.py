"""Error taxonomy for statement conversion.

Only ``ExtractionFailure`` is fatal. The other failures are reported on the
``ConversionResult`` instead of escaping the converter.
"""


class ConversionError(Exception):
  """Base class for every error raised by the converter."""


class ExtractionFailure(ConversionError):
  """The PDF could not be turned into positioned fragments (encrypted, corrupt, unreadable)."""


class NoHeaderDetected(ConversionError):
  """Neither a header row nor the data-driven fallback produced columns."""

  def __init__(self, message: str = "Could not detect a transaction table header in the document"):
    super().__init__(message)


class NoTransactionsFound(ConversionError):
  """Columns were established but no row survived assembly."""

  def __init__(self, message: str = "No transactions found in the document"):
    super().__init__(message)


class StateAlreadyEstablished(ConversionError):
  """Headers and columns of a document may only be written once."""

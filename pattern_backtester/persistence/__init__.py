"""Storage-boundary adapters."""

from .adapter import STORAGE_FIELDS, to_storage_record, results_to_frame, candidate_from_row

__all__ = ['STORAGE_FIELDS', 'to_storage_record', 'results_to_frame', 'candidate_from_row']

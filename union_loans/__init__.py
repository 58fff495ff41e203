"""Data-access client for the union loan-collection backends (ERP JSON-RPC or REST)."""

from union_loans.factory import UnionLoansClient, build_client
from union_loans.services.data_access import DataAccess
from union_loans.utils.formatting import format_currency, format_date

__all__ = ["DataAccess", "UnionLoansClient", "build_client", "format_currency", "format_date"]
